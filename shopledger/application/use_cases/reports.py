"""Report queries served from the cached projections."""

from shopledger.application.dto.responses import (
    BestSellersResponse,
    DashboardResponse,
    FinancialReportResponse,
    InventoryReportResponse,
    RecentOrdersResponse,
    StockSummaryResponse,
)
from shopledger.config import get_settings
from shopledger.core.entities.reporting import Period, StockStatus
from shopledger.core.entities.shop import TenantContext
from shopledger.core.services.projections import ProjectionRegistry


class ReportsUseCase:
    """
    Read-only report queries.

    Every figure comes from a projection, which recomputes from the ledger
    when a relevant change was published since it was cached.
    """

    def __init__(self, registry: ProjectionRegistry | None = None):
        self._registry = registry

    def _get_registry(self) -> ProjectionRegistry:
        if self._registry is None:
            from shopledger.application.services import get_projection_registry

            self._registry = get_projection_registry()
        return self._registry

    async def dashboard(self, tenant: TenantContext, period: Period) -> DashboardResponse:
        stats = await self._get_registry()["dashboard_stats"].get(
            tenant.shop_id, period=period
        )
        return DashboardResponse(
            products=stats.products,
            sales=stats.sales,
            staff=stats.staff,
            expenses_total=stats.expenses_total,
            expenses_stock=stats.expenses_stock,
            profit=stats.profit,
        )

    async def recent_orders(
        self, tenant: TenantContext, limit: int | None = None
    ) -> RecentOrdersResponse:
        limit = limit or get_settings().projections.recent_orders_limit
        orders = await self._get_registry()["recent_orders"].get(
            tenant.shop_id, limit=limit
        )
        return RecentOrdersResponse(orders=orders)

    async def best_sellers(
        self, tenant: TenantContext, period: Period, limit: int | None = None
    ) -> BestSellersResponse:
        limit = limit or get_settings().projections.best_sellers_limit
        products = await self._get_registry()["best_sellers"].get(
            tenant.shop_id, period=period, limit=limit
        )
        return BestSellersResponse(products=products)

    async def stock_summary(
        self, tenant: TenantContext, period: Period
    ) -> StockSummaryResponse:
        summary = await self._get_registry()["stock_summary"].get(
            tenant.shop_id, period=period
        )
        return StockSummaryResponse(
            total_income=summary.total_income,
            total_expenses=summary.total_expenses,
            stock_in_value=summary.stock_in_value,
            stock_out_units=summary.stock_out_units,
            profit=summary.profit,
        )

    async def inventory(self, tenant: TenantContext) -> InventoryReportResponse:
        lines = await self._get_registry()["inventory"].get(tenant.shop_id)
        return InventoryReportResponse(
            products=lines,
            out_of_stock=sum(1 for line in lines if line.status == StockStatus.OUT),
            low_stock=sum(1 for line in lines if line.status == StockStatus.LOW),
        )

    async def financial(
        self, tenant: TenantContext, period: Period
    ) -> FinancialReportResponse:
        report = await self._get_registry()["financial"].get(
            tenant.shop_id, period=period
        )
        return FinancialReportResponse(
            days=report.days,
            total_income=report.total_income,
            total_expenses=report.total_expenses,
            net=report.total_income - report.total_expenses,
        )
