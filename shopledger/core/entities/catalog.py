"""Back-office entities: products, expenses, staff."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from shopledger.core.entities.shop import new_id, utcnow


class ExpenseType(str, Enum):
    """Expense categories."""

    SALARY = "salary"
    COMMISSION = "commission"
    UTILITY = "utility"
    SHOP_MAINTENANCE = "shop_maintenance"
    STOCK_PURCHASE = "stock_purchase"
    LOAN_SHOP = "loan_shop"
    OTHER = "other"


class StaffRole(str, Enum):
    """Staff roles."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    CASHIER = "cashier"
    WAREHOUSE = "warehouse"


class Product(BaseModel):
    """A sellable product.

    ``stock`` counts units received into the shop; units on hand are derived
    from the ledger as stock minus effective quantity sold.
    """

    id: str = Field(default_factory=new_id)
    shop_id: str
    name: str
    price: float = Field(default=0.0, ge=0)
    stock: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Expense(BaseModel):
    """A recorded shop expense."""

    id: str = Field(default_factory=new_id)
    shop_id: str
    type: ExpenseType
    amount: float = Field(..., ge=0)
    description: str | None = None
    expense_date: date
    created_at: datetime = Field(default_factory=utcnow)


class StaffMember(BaseModel):
    """A shop employee."""

    id: str = Field(default_factory=new_id)
    shop_id: str
    name: str
    role: StaffRole = StaffRole.EMPLOYEE
    created_at: datetime = Field(default_factory=utcnow)
