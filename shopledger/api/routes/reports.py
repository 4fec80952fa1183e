"""
Report endpoints.

All figures are served from cached projections that are invalidated by
ledger writes, so a report read right after a write reflects it.
"""

from fastapi import APIRouter, Depends, Query

from shopledger.api.dependencies import get_report_period, get_reports_use_case, get_tenant
from shopledger.application.dto.responses import (
    BestSellersResponse,
    DashboardResponse,
    ErrorResponse,
    FinancialReportResponse,
    InventoryReportResponse,
    RecentOrdersResponse,
    StockSummaryResponse,
)
from shopledger.application.use_cases.reports import ReportsUseCase
from shopledger.core.entities.reporting import Period
from shopledger.core.entities.shop import TenantContext

router = APIRouter(
    prefix="/api/reports",
    tags=["reports"],
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    period: Period = Depends(get_report_period),
    tenant: TenantContext = Depends(get_tenant),
    use_case: ReportsUseCase = Depends(get_reports_use_case),
) -> DashboardResponse:
    """Dashboard cards: products, effective sales, staff, expenses and profit."""
    return await use_case.dashboard(tenant, period)


@router.get("/recent-orders", response_model=RecentOrdersResponse)
async def recent_orders(
    limit: int | None = Query(default=None, ge=1, le=100),
    tenant: TenantContext = Depends(get_tenant),
    use_case: ReportsUseCase = Depends(get_reports_use_case),
) -> RecentOrdersResponse:
    """Latest invoices with their effective amounts."""
    return await use_case.recent_orders(tenant, limit)


@router.get("/best-sellers", response_model=BestSellersResponse)
async def best_sellers(
    period: Period = Depends(get_report_period),
    limit: int | None = Query(default=None, ge=1, le=100),
    tenant: TenantContext = Depends(get_tenant),
    use_case: ReportsUseCase = Depends(get_reports_use_case),
) -> BestSellersResponse:
    """Products ranked by units sold net of returns."""
    return await use_case.best_sellers(tenant, period, limit)


@router.get("/stock-summary", response_model=StockSummaryResponse)
async def stock_summary(
    period: Period = Depends(get_report_period),
    tenant: TenantContext = Depends(get_tenant),
    use_case: ReportsUseCase = Depends(get_reports_use_case),
) -> StockSummaryResponse:
    return await use_case.stock_summary(tenant, period)


@router.get("/inventory", response_model=InventoryReportResponse)
async def inventory(
    tenant: TenantContext = Depends(get_tenant),
    use_case: ReportsUseCase = Depends(get_reports_use_case),
) -> InventoryReportResponse:
    """Units on hand per product with an out/low/in stock status."""
    return await use_case.inventory(tenant)


@router.get("/financial", response_model=FinancialReportResponse)
async def financial(
    period: Period = Depends(get_report_period),
    tenant: TenantContext = Depends(get_tenant),
    use_case: ReportsUseCase = Depends(get_reports_use_case),
) -> FinancialReportResponse:
    """Daily income against expenses."""
    return await use_case.financial(tenant, period)
