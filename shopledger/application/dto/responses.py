"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
"""

from datetime import UTC, date, datetime
from typing import Any

from pydantic import BaseModel, Field

from shopledger.core.entities.catalog import ExpenseType, StaffRole
from shopledger.core.entities.invoice import ModificationType, ReturnedItem
from shopledger.core.entities.reporting import (
    BestSeller,
    FinancialDay,
    InventoryLine,
    RecentOrder,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ShopResponse(BaseModel):
    id: str = Field(..., description="Shop ID")
    name: str = Field(..., description="Shop name")
    created_at: datetime


class SaleItemResponse(BaseModel):
    """Sale line with its return state."""

    id: str = Field(..., description="Sale item ID")
    product_id: str
    product_name: str
    quantity: int = Field(..., description="Units originally sold")
    price_at_sale: float = Field(..., description="Unit price at sale time")
    returned_quantity: int = Field(..., description="Units returned so far")
    remaining_quantity: int = Field(..., description="Units still sold")


class SaleResponse(BaseModel):
    id: str = Field(..., description="Sale ID")
    customer_name: str
    customer_phone: str | None = None
    total_amount: float = Field(..., description="Original sale total")
    payment_method: str
    employee_id: str | None = None
    items: list[SaleItemResponse] = Field(default=[])
    created_at: datetime


class InvoiceCreatedResponse(BaseModel):
    """Echo of a numbered invoice."""

    id: str = Field(..., description="Invoice ID")
    invoice_number: str = Field(..., description="Per-shop unique invoice number")
    customer_name: str
    customer_phone: str | None = None
    created_at: datetime


class CheckoutResponse(BaseModel):
    """A committed sale and its invoice."""

    sale: SaleResponse
    invoice: InvoiceCreatedResponse


class InvoiceResponse(BaseModel):
    """Invoice with its original and effective amounts."""

    id: str = Field(..., description="Invoice ID")
    sale_id: str
    invoice_number: str
    customer_name: str
    customer_phone: str | None = None
    original_amount: float | None = Field(default=None, description="Sale total at checkout")
    effective_amount: float | None = Field(
        default=None, description="Amount currently charged"
    )
    is_modified: bool
    modification_reason: str | None = Field(
        default=None, description="Reason of the latest modification"
    )
    created_at: datetime
    updated_at: datetime


class InvoiceDetailResponse(InvoiceResponse):
    """Invoice plus the sale lines it covers."""

    items: list[SaleItemResponse] = Field(default=[])
    last_modification_id: str | None = Field(
        default=None,
        description="Pass back as expected_last_modification_id to detect concurrent edits",
    )


class InvoiceListResponse(BaseModel):
    invoices: list[InvoiceResponse] = Field(default=[])
    total: int = Field(..., ge=0)


class ReconcileResponse(BaseModel):
    """Outcome of a committed invoice modification."""

    invoice_id: str
    new_amount: float = Field(..., description="New effective invoice amount")
    modification_id: str = Field(..., description="ID of the audit entry")
    modification_type: ModificationType
    returned_items: list[ReturnedItem] | None = None


class ModificationResponse(BaseModel):
    """One audit entry."""

    id: str
    modification_type: ModificationType
    new_amount: float
    reason: str
    modified_by: str
    returned_items: list[ReturnedItem] | None = None
    created_at: datetime


class ModificationListResponse(BaseModel):
    """Full audit trail of an invoice, oldest first."""

    invoice_id: str
    modifications: list[ModificationResponse] = Field(default=[])
    total: int = Field(..., ge=0)


class ProductResponse(BaseModel):
    id: str
    name: str
    price: float
    stock: int = Field(..., description="Units received")
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    products: list[ProductResponse] = Field(default=[])
    total: int = Field(..., ge=0)


class ExpenseResponse(BaseModel):
    id: str
    type: ExpenseType
    amount: float
    description: str | None = None
    expense_date: date
    created_at: datetime


class ExpenseListResponse(BaseModel):
    expenses: list[ExpenseResponse] = Field(default=[])
    total: int = Field(..., ge=0)


class StaffMemberResponse(BaseModel):
    id: str
    name: str
    role: StaffRole
    created_at: datetime


class StaffListResponse(BaseModel):
    staff: list[StaffMemberResponse] = Field(default=[])
    total: int = Field(..., ge=0)


# =============================================================================
# Reports
# =============================================================================


class DashboardResponse(BaseModel):
    """Dashboard cards for a period."""

    products: int
    sales: float = Field(..., description="Effective sales total")
    staff: int
    expenses_total: float
    expenses_stock: float = Field(..., description="Stock purchase expenses")
    profit: float


class RecentOrdersResponse(BaseModel):
    orders: list[RecentOrder] = Field(default=[])


class BestSellersResponse(BaseModel):
    products: list[BestSeller] = Field(default=[])


class StockSummaryResponse(BaseModel):
    total_income: float
    total_expenses: float
    stock_in_value: float
    stock_out_units: int
    profit: float


class InventoryReportResponse(BaseModel):
    products: list[InventoryLine] = Field(default=[])
    out_of_stock: int = Field(..., ge=0)
    low_stock: int = Field(..., ge=0)


class FinancialReportResponse(BaseModel):
    days: list[FinancialDay] = Field(default=[])
    total_income: float
    total_expenses: float
    net: float


# =============================================================================
# Health and errors
# =============================================================================


class ComponentHealthResponse(BaseModel):
    """Health of one dependency."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. OVER_RETURN)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] | None = Field(
        default=None, description="Structured context, e.g. the sale_id to retry"
    )
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=_utcnow)
