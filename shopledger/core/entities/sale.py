"""Sale domain entities."""

from datetime import datetime

from pydantic import BaseModel, Field

from shopledger.core.entities.shop import new_id, utcnow

# Amounts are stored in major units; arithmetic results are rounded to cents
MONEY_DECIMALS = 2


def round_money(value: float) -> float:
    return round(value, MONEY_DECIMALS)


class SaleItem(BaseModel):
    """One line of a sale. Only returned_quantity ever changes."""

    id: str = Field(default_factory=new_id)
    sale_id: str | None = None
    product_id: str
    product_name: str = ""  # denormalized for the audit breakdown
    quantity: int = Field(..., gt=0)
    price_at_sale: float = Field(..., ge=0)  # unit price frozen at sale time
    returned_quantity: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def effective_quantity(self) -> int:
        """Units still sold after returns."""
        return self.quantity - self.returned_quantity

    @property
    def line_total(self) -> float:
        return round_money(self.quantity * self.price_at_sale)


class Sale(BaseModel):
    """An immutable completed transaction."""

    id: str = Field(default_factory=new_id)
    shop_id: str
    customer_name: str
    customer_phone: str | None = None
    total_amount: float = Field(default=0.0, ge=0)  # original, fixed at creation
    payment_method: str = "cash"
    employee_id: str | None = None
    items: list[SaleItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
