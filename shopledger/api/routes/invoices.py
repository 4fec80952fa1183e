"""Invoice read and reconciliation endpoints."""

from fastapi import APIRouter, Depends, Query, status

from shopledger.api.dependencies import (
    get_get_invoice_use_case,
    get_list_invoices_use_case,
    get_list_modifications_use_case,
    get_reconcile_invoice_use_case,
    get_report_period,
    get_tenant,
)
from shopledger.application.dto.requests import ReconcileInvoiceRequest
from shopledger.application.dto.responses import (
    ErrorResponse,
    InvoiceDetailResponse,
    InvoiceListResponse,
    ModificationListResponse,
    ReconcileResponse,
)
from shopledger.application.use_cases.invoices import (
    GetInvoiceUseCase,
    ListInvoicesUseCase,
)
from shopledger.application.use_cases.reconcile_invoice import (
    ListModificationsUseCase,
    ReconcileInvoiceUseCase,
)
from shopledger.core.entities.reporting import Period
from shopledger.core.entities.shop import TenantContext

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    period: Period = Depends(get_report_period),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    tenant: TenantContext = Depends(get_tenant),
    use_case: ListInvoicesUseCase = Depends(get_list_invoices_use_case),
) -> InvoiceListResponse:
    """List the shop's invoices, newest first."""
    result = await use_case.execute(tenant, period, limit, offset)
    return use_case.to_response(result)


@router.get(
    "/{invoice_id}",
    response_model=InvoiceDetailResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def get_invoice(
    invoice_id: str,
    tenant: TenantContext = Depends(get_tenant),
    use_case: GetInvoiceUseCase = Depends(get_get_invoice_use_case),
) -> InvoiceDetailResponse:
    """Get an invoice with its sale lines and remaining quantities."""
    result = await use_case.execute(tenant, invoice_id)
    return use_case.to_response(result)


@router.post(
    "/{invoice_id}/modifications",
    response_model=ReconcileResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def reconcile_invoice(
    invoice_id: str,
    request: ReconcileInvoiceRequest,
    tenant: TenantContext = Depends(get_tenant),
    use_case: ReconcileInvoiceUseCase = Depends(get_reconcile_invoice_use_case),
) -> ReconcileResponse:
    """
    Modify an invoice with a price change, return or other correction.

    The audit entry, the new effective amount and any returned quantities are
    committed together or not at all.
    """
    result = await use_case.execute(tenant, invoice_id, request)
    return use_case.to_response(invoice_id, result)


@router.get(
    "/{invoice_id}/modifications",
    response_model=ModificationListResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def list_modifications(
    invoice_id: str,
    tenant: TenantContext = Depends(get_tenant),
    use_case: ListModificationsUseCase = Depends(get_list_modifications_use_case),
) -> ModificationListResponse:
    """Audit trail of an invoice, oldest first."""
    result = await use_case.execute(tenant, invoice_id)
    return use_case.to_response(invoice_id, result)
