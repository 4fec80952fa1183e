"""SQLite storage implementations."""

from shopledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from shopledger.infrastructure.storage.sqlite.ledger_store import (
    SQLiteLedgerSession,
    SQLiteLedgerStore,
)
from shopledger.infrastructure.storage.sqlite.reporting_store import SQLiteReportingStore
from shopledger.infrastructure.storage.sqlite.shop_store import SQLiteShopStore

# Singleton instances
_ledger_store: SQLiteLedgerStore | None = None
_shop_store: SQLiteShopStore | None = None
_reporting_store: SQLiteReportingStore | None = None


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


async def get_shop_store() -> SQLiteShopStore:
    """Get singleton shop store instance."""
    global _shop_store
    if _shop_store is None:
        _shop_store = SQLiteShopStore()
    return _shop_store


async def get_reporting_store() -> SQLiteReportingStore:
    """Get singleton reporting store instance."""
    global _reporting_store
    if _reporting_store is None:
        _reporting_store = SQLiteReportingStore()
    return _reporting_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteLedgerStore",
    "SQLiteLedgerSession",
    "SQLiteShopStore",
    "SQLiteReportingStore",
    # Factory functions
    "get_ledger_store",
    "get_shop_store",
    "get_reporting_store",
]
