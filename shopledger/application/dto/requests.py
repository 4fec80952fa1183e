"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date

from pydantic import BaseModel, Field

from shopledger.core.entities.catalog import ExpenseType, StaffRole
from shopledger.core.entities.invoice import ModificationType, ReturnLine
from shopledger.core.services.reconciliation import ModificationDetails


class CreateShopRequest(BaseModel):
    """Register a new shop (tenant)."""

    name: str = Field(..., min_length=1, description="Shop display name")
    id: str | None = Field(
        default=None,
        min_length=1,
        description="Optional shop ID; generated when omitted",
        examples=["acme-downtown"],
    )


class CartLine(BaseModel):
    """One product in a checkout cart."""

    product_id: str = Field(..., min_length=1, description="Product ID")
    quantity: int = Field(..., description="Units to sell")


class CheckoutRequest(BaseModel):
    """Complete a sale and issue its invoice."""

    customer_name: str = Field(..., min_length=1, description="Customer name")
    customer_phone: str | None = Field(default=None, description="Customer phone")
    payment_method: str = Field(
        default="cash",
        description="Payment method",
        examples=["cash", "card", "transfer"],
    )
    items: list[CartLine] = Field(default=[], description="Cart lines")


class ReconcileInvoiceRequest(BaseModel):
    """Apply a price change, return or other correction to an invoice.

    ``new_amount`` is required for price and other corrections; ``items`` for
    returns. Supplying ``expected_last_modification_id`` (or
    ``require_unmodified``) rejects the change if someone else modified the
    invoice first.
    """

    modification_type: ModificationType = Field(..., description="price, return or other")
    reason: str = Field(..., description="Why the invoice is being changed")
    new_amount: float | None = Field(
        allow_inf_nan=False,
        default=None,
        description="New invoice amount (price / other)",
    )
    items: list[ReturnLine] = Field(default=[], description="Items to return (return)")
    expected_last_modification_id: str | None = Field(
        default=None,
        description="ID of the latest modification the caller has seen",
    )
    require_unmodified: bool = Field(
        default=False,
        description="Reject unless the invoice has never been modified",
    )

    def to_details(self) -> ModificationDetails:
        return ModificationDetails(new_amount=self.new_amount, items=self.items)


class CreateProductRequest(BaseModel):
    """Add a product to the shop's catalog."""

    name: str = Field(..., min_length=1, description="Product name")
    price: float = Field(default=0.0, ge=0, allow_inf_nan=False, description="Unit selling price")
    stock: int = Field(default=0, ge=0, description="Units received into the shop")


class UpdateProductRequest(BaseModel):
    """Partial product update. Omitted fields stay unchanged."""

    name: str | None = Field(default=None, min_length=1)
    price: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    stock: int | None = Field(default=None, ge=0)


class RecordExpenseRequest(BaseModel):
    """Record a shop expense."""

    type: ExpenseType = Field(..., description="Expense category")
    amount: float = Field(..., ge=0, allow_inf_nan=False, description="Amount spent")
    description: str | None = Field(default=None, description="Free-text note")
    expense_date: date | None = Field(
        default=None,
        description="Date of the expense (defaults to today, UTC)",
    )


class UpdateExpenseRequest(BaseModel):
    """Correct a recorded expense. Omitted fields stay unchanged."""

    type: ExpenseType | None = None
    amount: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    description: str | None = None
    expense_date: date | None = None


class AddStaffMemberRequest(BaseModel):
    """Add an employee to the shop."""

    name: str = Field(..., min_length=1, description="Staff member name")
    role: StaffRole = Field(default=StaffRole.EMPLOYEE, description="Staff role")
