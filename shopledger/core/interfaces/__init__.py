"""Core interfaces (ports) for dependency injection."""

from shopledger.core.interfaces.ledger_store import (
    ILedgerSession,
    ILedgerStore,
    InvoiceNumberFactory,
)
from shopledger.core.interfaces.publisher import IChangePublisher
from shopledger.core.interfaces.reporting_store import IReportingStore
from shopledger.core.interfaces.shop_store import IShopStore

__all__ = [
    # Storage interfaces
    "ILedgerStore",
    "ILedgerSession",
    "InvoiceNumberFactory",
    "IShopStore",
    "IReportingStore",
    # Notification interfaces
    "IChangePublisher",
]
