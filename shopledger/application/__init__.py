"""
Application layer.

Route handlers talk only to the use cases exported here. The service
factories hand out the process-wide fanout, projections, numbering and
reconciliation engine; reset_services() drops them between tests.
"""

from shopledger.application.services import (
    get_change_fanout,
    get_invoice_numbering_service,
    get_projection_registry,
    get_reconciliation_engine,
    reset_services,
)
from shopledger.application.use_cases import (
    CheckoutUseCase,
    CreateInvoiceUseCase,
    ListModificationsUseCase,
    ReconcileInvoiceUseCase,
    ReportsUseCase,
)

__all__ = [
    # Use Cases
    "CheckoutUseCase",
    "CreateInvoiceUseCase",
    "ReconcileInvoiceUseCase",
    "ListModificationsUseCase",
    "ReportsUseCase",
    # Service factories
    "get_change_fanout",
    "get_projection_registry",
    "get_invoice_numbering_service",
    "get_reconciliation_engine",
    "reset_services",
]
