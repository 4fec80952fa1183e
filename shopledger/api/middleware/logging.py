"""
Request logging.

Every log line written while a request is handled carries its request id and
the tenant headers, so a reconcile can be traced from HTTP to the ledger.
"""

import time
import uuid
from collections.abc import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from shopledger.config import get_logger

logger = get_logger(__name__)

# Polled by load balancers; logged only when they fail
QUIET_PATHS = frozenset({"/health", "/api/health"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Bind request context, time the request and echo X-Request-ID."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        path = request.url.path
        quiet = path in QUIET_PATHS

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            shop_id=request.headers.get("X-Shop-Id"),
            actor_id=request.headers.get("X-Actor-Id"),
        ):
            if not quiet:
                logger.info("request_started", method=request.method, path=path)

            start = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "request_failed",
                    method=request.method,
                    path=path,
                    error=str(e),
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
                raise
            duration_ms = (time.perf_counter() - start) * 1000

            if not quiet or response.status_code >= 500:
                log = logger.warning if response.status_code >= 400 else logger.info
                log(
                    "request_completed",
                    method=request.method,
                    path=path,
                    status=response.status_code,
                    duration_ms=round(duration_ms, 2),
                )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
