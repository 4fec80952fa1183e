"""API middleware."""

from shopledger.api.middleware.error_handler import ErrorHandlerMiddleware
from shopledger.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
