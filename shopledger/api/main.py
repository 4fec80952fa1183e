"""
Shop ledger HTTP application.

``create_app()`` builds the FastAPI instance; ``app`` is what uvicorn serves.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopledger import __version__
from shopledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from shopledger.api.middleware.error_handler import setup_exception_handlers
from shopledger.api.routes import (
    expenses_router,
    health_router,
    invoices_router,
    products_router,
    reports_router,
    sales_router,
    shops_router,
    staff_router,
)
from shopledger.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)

ROUTERS = (
    health_router,
    shops_router,
    sales_router,
    invoices_router,
    products_router,
    expenses_router,
    staff_router,
    reports_router,
)


async def open_ledger() -> None:
    """Migrate the ledger, open the pool and subscribe the projections."""
    from shopledger.application.services import get_projection_registry
    from shopledger.infrastructure.storage.sqlite import get_pool
    from shopledger.infrastructure.storage.sqlite.migrations.migrator import (
        run_migrations,
    )

    applied = await run_migrations()
    failed = [r.version for r in applied if not r.success]
    if failed:
        raise RuntimeError(f"ledger migrations failed: {failed}")
    logger.info("ledger_migrated", applied=[r.version for r in applied])

    pool = await get_pool()
    logger.info("ledger_pool_ready", pool_size=pool.pool_size)

    registry = get_projection_registry()
    logger.info("projections_ready", projections=[p.name for p in registry])


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging()
    logger.info(
        "application_starting",
        environment=settings.environment,
        db_path=str(settings.storage.db_path),
    )

    try:
        await open_ledger()
    except Exception as e:
        logger.error("ledger_startup_failed", error=str(e))
        raise

    yield

    from shopledger.infrastructure.storage.sqlite import close_pool

    try:
        await close_pool()
    except Exception as e:
        logger.warning("ledger_pool_close_failed", error=str(e))
    logger.info("application_stopped")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Shop Ledger API",
        description="Multi-tenant sales ledger with invoice reconciliation and reports",
        version=__version__,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Starlette runs the last-added middleware first
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["GET", "POST", "PATCH", "DELETE"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Response-Time", "Retry-After"],
        )

    setup_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    api = get_settings().api
    uvicorn.run("shopledger.api.main:app", host=api.host, port=api.port, reload=api.debug)
