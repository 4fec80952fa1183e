"""Core domain entities."""

from shopledger.core.entities.catalog import (
    Expense,
    ExpenseType,
    Product,
    StaffMember,
    StaffRole,
)
from shopledger.core.entities.events import ChangeEvent, EntityType, EventType
from shopledger.core.entities.invoice import (
    Invoice,
    InvoiceCreated,
    InvoiceModification,
    ModificationType,
    ReturnedItem,
    ReturnLine,
)
from shopledger.core.entities.reporting import (
    BestSeller,
    DashboardStats,
    DateFilter,
    FinancialDay,
    FinancialReport,
    InventoryLine,
    Period,
    RecentOrder,
    StockStatus,
    StockSummary,
    resolve_period,
)
from shopledger.core.entities.sale import Sale, SaleItem, round_money
from shopledger.core.entities.shop import Shop, TenantContext, new_id, utcnow

__all__ = [
    # Tenancy
    "Shop",
    "TenantContext",
    "new_id",
    "utcnow",
    # Ledger entities
    "Sale",
    "SaleItem",
    "round_money",
    "Invoice",
    "InvoiceCreated",
    "InvoiceModification",
    "ModificationType",
    "ReturnLine",
    "ReturnedItem",
    # Back-office entities
    "Product",
    "Expense",
    "ExpenseType",
    "StaffMember",
    "StaffRole",
    # Events
    "ChangeEvent",
    "EntityType",
    "EventType",
    # Reporting
    "DateFilter",
    "Period",
    "resolve_period",
    "DashboardStats",
    "RecentOrder",
    "BestSeller",
    "StockSummary",
    "StockStatus",
    "InventoryLine",
    "FinancialDay",
    "FinancialReport",
]
