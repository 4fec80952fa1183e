"""HTTP API for the shop ledger."""
