"""Data transfer objects for the API boundary."""

from shopledger.application.dto.requests import (
    AddStaffMemberRequest,
    CartLine,
    CheckoutRequest,
    CreateProductRequest,
    CreateShopRequest,
    ReconcileInvoiceRequest,
    RecordExpenseRequest,
    UpdateExpenseRequest,
    UpdateProductRequest,
)
from shopledger.application.dto.responses import (
    BestSellersResponse,
    CheckoutResponse,
    ComponentHealthResponse,
    DashboardResponse,
    ErrorResponse,
    ExpenseListResponse,
    ExpenseResponse,
    FinancialReportResponse,
    HealthResponse,
    InventoryReportResponse,
    InvoiceCreatedResponse,
    InvoiceDetailResponse,
    InvoiceListResponse,
    InvoiceResponse,
    ModificationListResponse,
    ModificationResponse,
    ProductListResponse,
    ProductResponse,
    RecentOrdersResponse,
    ReconcileResponse,
    SaleItemResponse,
    SaleResponse,
    ShopResponse,
    StaffListResponse,
    StaffMemberResponse,
    StockSummaryResponse,
)

__all__ = [
    # Requests
    "CreateShopRequest",
    "CartLine",
    "CheckoutRequest",
    "ReconcileInvoiceRequest",
    "CreateProductRequest",
    "UpdateProductRequest",
    "RecordExpenseRequest",
    "UpdateExpenseRequest",
    "AddStaffMemberRequest",
    # Responses
    "ShopResponse",
    "SaleResponse",
    "SaleItemResponse",
    "CheckoutResponse",
    "InvoiceCreatedResponse",
    "InvoiceResponse",
    "InvoiceDetailResponse",
    "InvoiceListResponse",
    "ReconcileResponse",
    "ModificationResponse",
    "ModificationListResponse",
    "ProductResponse",
    "ProductListResponse",
    "ExpenseResponse",
    "ExpenseListResponse",
    "StaffMemberResponse",
    "StaffListResponse",
    "DashboardResponse",
    "RecentOrdersResponse",
    "BestSellersResponse",
    "StockSummaryResponse",
    "InventoryReportResponse",
    "FinancialReportResponse",
    "HealthResponse",
    "ComponentHealthResponse",
    "ErrorResponse",
]
