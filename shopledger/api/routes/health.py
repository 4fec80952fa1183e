"""Liveness and ledger database health."""

import time

from fastapi import APIRouter

from shopledger import __version__
from shopledger.application.dto.responses import ComponentHealthResponse, HealthResponse
from shopledger.config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

_started_at = time.monotonic()


def _uptime() -> float:
    return round(time.monotonic() - _started_at, 3)


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Process is up. Does not touch the database."""
    return HealthResponse(status="healthy", version=__version__, uptime_seconds=_uptime())


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Round-trip a query through the ledger pool.

    Reports ``degraded`` rather than failing, so the API stays reachable
    while SQLite is locked or missing.
    """
    from shopledger.infrastructure.storage.sqlite import get_pool

    started = time.perf_counter()
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM schema_migrations")
            await cursor.fetchone()
    except Exception as e:
        logger.warning("ledger_health_check_failed", error=str(e))
        database = ComponentHealthResponse(name="sqlite", available=False, error=str(e))
    else:
        database = ComponentHealthResponse(
            name="sqlite",
            available=True,
            latency_ms=round((time.perf_counter() - started) * 1000, 3),
        )

    return HealthResponse(
        status="healthy" if database.available else "degraded",
        version=__version__,
        uptime_seconds=_uptime(),
        database=database,
    )
