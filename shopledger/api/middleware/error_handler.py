"""
Error responses.

Domain errors carry their own code and details; this module only picks the
HTTP status and a recovery hint, and renders the shared ErrorResponse body.
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from shopledger.application.dto.responses import ErrorResponse
from shopledger.config import get_logger
from shopledger.core.exceptions import (
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ShopLedgerError,
    StoreError,
    ValidationError,
)

logger = get_logger(__name__)

EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

HINT_MAP: dict[str, str] = {
    "VALIDATION_ERROR": "Check the request body and headers against the API schema.",
    "SHOP_MISMATCH": "The resource belongs to another shop. Check the X-Shop-Id header.",
    "SHOP_NOT_FOUND": "Register the shop with POST /api/shops or fix the X-Shop-Id header.",
    "INVOICE_NOT_FOUND": "List the shop's invoices with GET /api/invoices.",
    "SALE_NOT_FOUND": "Use the sale id returned by POST /api/checkout.",
    "SALE_ITEM_NOT_FOUND": "Use item ids from GET /api/invoices/{id}; they must belong to that sale.",
    "PRODUCT_NOT_FOUND": "List the shop's products with GET /api/products.",
    "EXPENSE_NOT_FOUND": "List the shop's expenses with GET /api/expenses.",
    "OVER_RETURN": "Re-fetch the invoice; fewer units remain than requested.",
    "STALE_MODIFICATION": "The invoice was modified since you read it. Re-fetch and reapply.",
    "INSUFFICIENT_STOCK": "Sell fewer units or record received stock on the product first.",
    "DUPLICATE_INVOICE": "Retry; the shop's invoice sequence has moved on.",
    "DUPLICATE_SHOP": "Pick another shop id.",
    "LEDGER_CONSTRAINT": "The ledger refused the write. Re-fetch the record and check the values sent.",
    "DATABASE_ERROR": "The ledger database is busy or unavailable. Retry shortly.",
    "INVOICE_CREATION_FAILED": (
        "The sale was recorded. Issue its invoice with "
        "POST /api/sales/{sale_id}/invoice using details.sale_id."
    ),
}

STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    403: "This shop may not act on the resource.",
    404: "Verify the id in the path.",
    405: "Check the HTTP method for this path.",
    409: "The ledger changed underneath the request. Re-fetch and retry.",
    500: "Unexpected server error. See server logs.",
    503: "Temporarily unavailable. Retry shortly.",
}

# Seconds a client should wait before retrying a recoverable store failure
RETRY_AFTER_SECONDS = 1


def status_for(exc: Exception) -> int:
    """HTTP status of the closest mapped base class."""
    for klass in type(exc).__mro__:
        if klass in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[klass]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def hint_for(error_code: str, status_code: int) -> str:
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def render_error(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    *,
    detail: str | None = None,
    details: dict | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=hint_for(error_code, status_code),
        detail=detail,
        details=details,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log an exception once and turn it into an ErrorResponse."""
    status_code = status_for(exc)
    server_side = status_code >= 500

    if isinstance(exc, ShopLedgerError):
        error_code, message, details = exc.code, exc.message, exc.details or None
    else:
        error_code = type(exc).__name__
        message = "Internal server error" if server_side else str(exc)
        details = None

    (logger.error if server_side else logger.warning)(
        "request_error",
        path=request.url.path,
        status=status_code,
        error_code=error_code,
        error=str(exc),
        traceback=traceback.format_exc() if server_side and not isinstance(exc, StoreError) else None,
    )

    headers = None
    if isinstance(exc, StoreError) and exc.recoverable:
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}

    return render_error(
        request, status_code, error_code, message, details=details, headers=headers
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last line of defence for exceptions no handler claimed."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


async def _ledger_error(request: Request, exc: ShopLedgerError) -> JSONResponse:
    return build_error_response(request, exc)


async def _request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    logger.info("request_rejected", path=request.url.path, problems=problems)
    return render_error(
        request,
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Request validation failed",
        detail="; ".join(problems),
    )


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    error_code = {
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
    }.get(exc.status_code, "HTTP_ERROR")
    return render_error(
        request,
        exc.status_code,
        error_code,
        str(exc.detail) if exc.detail else "Request failed",
        headers=getattr(exc, "headers", None),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopLedgerError, _ledger_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(HTTPException, _http_error)
