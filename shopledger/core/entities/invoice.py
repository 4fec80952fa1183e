"""Invoice and invoice modification domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from shopledger.core.entities.shop import new_id, utcnow


class ModificationType(str, Enum):
    """Categories of invoice reconciliation."""

    PRICE = "price"
    RETURN = "return"
    OTHER = "other"


class Invoice(BaseModel):
    """
    Customer-facing projection of exactly one sale.

    A mutable materialized view over the append-only modification log:
    new_total_amount always mirrors the latest modification's new_amount.
    """

    id: str = Field(default_factory=new_id)
    shop_id: str
    sale_id: str
    invoice_number: str
    customer_name: str
    customer_phone: str | None = None
    is_modified: bool = False
    new_total_amount: float | None = None
    modification_reason: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Sale's original total, joined in on reads
    sale_total_amount: float | None = None

    @property
    def effective_amount(self) -> float | None:
        """What the customer is charged now, if the sale total is known."""
        if self.is_modified and self.new_total_amount is not None:
            return self.new_total_amount
        return self.sale_total_amount


class InvoiceCreated(BaseModel):
    """Echo of a freshly numbered invoice."""

    id: str
    invoice_number: str
    customer_name: str
    customer_phone: str | None = None
    created_at: datetime


class ReturnLine(BaseModel):
    """Caller's selection of units to return for one sale item."""

    item_id: str = Field(..., min_length=1)
    quantity: int


class ReturnedItem(BaseModel):
    """Per-item breakdown recorded on a return modification."""

    item_id: str
    name: str
    quantity: int  # returned in this event
    remaining_quantity: int  # effective quantity after this event
    unit_price: float


class InvoiceModification(BaseModel):
    """Append-only audit entry. Never updated or deleted."""

    id: str = Field(default_factory=new_id)
    invoice_id: str
    shop_id: str
    modification_type: ModificationType
    new_amount: float
    reason: str
    modified_by: str
    returned_items: list[ReturnedItem] | None = None
    created_at: datetime = Field(default_factory=utcnow)
