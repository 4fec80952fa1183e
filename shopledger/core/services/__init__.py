"""Core domain services."""

from shopledger.core.services.change_fanout import (
    ChangeFanout,
    ChangeHandler,
    Subscription,
)
from shopledger.core.services.invoice_numbering import (
    InvoiceNumberingService,
    generate_invoice_number,
    shop_prefix,
)
from shopledger.core.services.projections import (
    BestSellersProjection,
    DashboardStatsProjection,
    FinancialReportProjection,
    InventoryReportProjection,
    Projection,
    ProjectionRegistry,
    RecentOrdersProjection,
    StockSummaryProjection,
)
from shopledger.core.services.reconciliation import (
    ModificationDetails,
    ReconcileResult,
    ReconciliationEngine,
    baseline_amount,
    compute_new_amount,
    effective_amount,
    plan_return,
    replay_modifications,
    validate_details,
    validate_reason,
)
from shopledger.core.services.retry import RetryPolicy

__all__ = [
    # Reconciliation
    "ReconciliationEngine",
    "ModificationDetails",
    "ReconcileResult",
    "baseline_amount",
    "compute_new_amount",
    "effective_amount",
    "plan_return",
    "replay_modifications",
    "validate_details",
    "validate_reason",
    # Invoice numbering
    "InvoiceNumberingService",
    "generate_invoice_number",
    "shop_prefix",
    "RetryPolicy",
    # Notifications
    "ChangeFanout",
    "ChangeHandler",
    "Subscription",
    # Projections
    "Projection",
    "ProjectionRegistry",
    "DashboardStatsProjection",
    "RecentOrdersProjection",
    "BestSellersProjection",
    "StockSummaryProjection",
    "InventoryReportProjection",
    "FinancialReportProjection",
]
