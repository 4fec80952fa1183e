"""Infrastructure layer implementations."""

from shopledger.infrastructure import storage

__all__ = ["storage"]
