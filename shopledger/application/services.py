"""
Service factory functions for dependency injection.

This module wires the SQLite stores, the change fanout and the projections
to the core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from shopledger.config import get_settings
from shopledger.core.services import (
    ChangeFanout,
    InvoiceNumberingService,
    ProjectionRegistry,
    ReconciliationEngine,
    RetryPolicy,
)

if TYPE_CHECKING:
    from shopledger.core.interfaces import (
        IChangePublisher,
        ILedgerStore,
        IReportingStore,
    )


# Singleton service instances
_change_fanout: ChangeFanout | None = None
_projection_registry: ProjectionRegistry | None = None
_invoice_numbering_service: InvoiceNumberingService | None = None
_reconciliation_engine: ReconciliationEngine | None = None


def get_change_fanout() -> ChangeFanout:
    """Get the process-wide change fanout."""
    global _change_fanout
    if _change_fanout is None:
        _change_fanout = ChangeFanout()
    return _change_fanout


def get_projection_registry(
    reporting_store: "IReportingStore | None" = None,
) -> ProjectionRegistry:
    """
    Get or create the projection registry.

    A newly created registry is subscribed to the change fanout so ledger
    writes invalidate its cached read models.
    """
    global _projection_registry

    if _projection_registry is not None and reporting_store is None:
        return _projection_registry

    if reporting_store is None:
        from shopledger.infrastructure.storage.sqlite import SQLiteReportingStore

        reporting_store = SQLiteReportingStore()

    registry = ProjectionRegistry.from_settings(
        reporting_store, get_settings().projections
    )
    registry.attach(get_change_fanout())

    _projection_registry = registry
    return registry


def get_invoice_numbering_service(
    ledger_store: "ILedgerStore | None" = None,
    publisher: "IChangePublisher | None" = None,
) -> InvoiceNumberingService:
    """
    Get or create InvoiceNumberingService instance.

    Args:
        ledger_store: Optional ledger store override
        publisher: Optional change publisher override

    Returns:
        Configured InvoiceNumberingService
    """
    global _invoice_numbering_service

    if (
        _invoice_numbering_service is not None
        and ledger_store is None
        and publisher is None
    ):
        return _invoice_numbering_service

    if ledger_store is None:
        from shopledger.infrastructure.storage.sqlite import SQLiteLedgerStore

        ledger_store = SQLiteLedgerStore()

    settings = get_settings().ledger
    service = InvoiceNumberingService(
        ledger_store=ledger_store,
        publisher=publisher or get_change_fanout(),
        retry_policy=RetryPolicy.from_settings(settings),
        prefix_length=settings.shop_prefix_length,
        sequence_width=settings.sequence_width,
    )

    _invoice_numbering_service = service
    return service


def get_reconciliation_engine(
    ledger_store: "ILedgerStore | None" = None,
    publisher: "IChangePublisher | None" = None,
) -> ReconciliationEngine:
    """Get or create ReconciliationEngine instance."""
    global _reconciliation_engine

    if _reconciliation_engine is not None and ledger_store is None and publisher is None:
        return _reconciliation_engine

    if ledger_store is None:
        from shopledger.infrastructure.storage.sqlite import SQLiteLedgerStore

        ledger_store = SQLiteLedgerStore()

    engine = ReconciliationEngine(
        ledger_store=ledger_store,
        publisher=publisher or get_change_fanout(),
    )

    _reconciliation_engine = engine
    return engine


def reset_services() -> None:
    """Reset all service singletons (for testing)."""
    global _change_fanout, _projection_registry
    global _invoice_numbering_service, _reconciliation_engine

    _change_fanout = None
    _projection_registry = None
    _invoice_numbering_service = None
    _reconciliation_engine = None
