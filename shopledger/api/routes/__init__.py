"""API route modules."""

from shopledger.api.routes.expenses import router as expenses_router
from shopledger.api.routes.health import router as health_router
from shopledger.api.routes.invoices import router as invoices_router
from shopledger.api.routes.products import router as products_router
from shopledger.api.routes.reports import router as reports_router
from shopledger.api.routes.sales import router as sales_router
from shopledger.api.routes.shops import router as shops_router
from shopledger.api.routes.staff import router as staff_router

__all__ = [
    "health_router",
    "shops_router",
    "sales_router",
    "invoices_router",
    "products_router",
    "expenses_router",
    "staff_router",
    "reports_router",
]
