"""Multi-tenant point-of-sale ledger with invoice reconciliation."""

__version__ = "1.0.0"
