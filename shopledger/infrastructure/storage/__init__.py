"""Storage infrastructure implementations."""

from shopledger.infrastructure.storage.sqlite import (
    SQLiteLedgerStore,
    SQLiteReportingStore,
    SQLiteShopStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteLedgerStore",
    "SQLiteShopStore",
    "SQLiteReportingStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
