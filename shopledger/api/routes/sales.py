"""Checkout and invoice issuing endpoints."""

from fastapi import APIRouter, Depends, status

from shopledger.api.dependencies import (
    get_checkout_use_case,
    get_create_invoice_use_case,
    get_tenant,
)
from shopledger.application.dto.requests import CheckoutRequest
from shopledger.application.dto.responses import (
    CheckoutResponse,
    ErrorResponse,
    InvoiceCreatedResponse,
)
from shopledger.application.use_cases.checkout import CheckoutUseCase
from shopledger.application.use_cases.invoices import CreateInvoiceUseCase
from shopledger.core.entities.shop import TenantContext

router = APIRouter(prefix="/api", tags=["sales"])


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def checkout(
    request: CheckoutRequest,
    tenant: TenantContext = Depends(get_tenant),
    use_case: CheckoutUseCase = Depends(get_checkout_use_case),
) -> CheckoutResponse:
    """
    Record a sale and issue its invoice.

    A 503 with INVOICE_CREATION_FAILED means the sale was committed but the
    invoice was not; retry with POST /api/sales/{sale_id}/invoice.
    """
    result = await use_case.execute(tenant, request)
    return use_case.to_response(result)


@router.post(
    "/sales/{sale_id}/invoice",
    response_model=InvoiceCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def create_invoice(
    sale_id: str,
    tenant: TenantContext = Depends(get_tenant),
    use_case: CreateInvoiceUseCase = Depends(get_create_invoice_use_case),
) -> InvoiceCreatedResponse:
    """Issue the invoice for a committed sale. Returns the existing one if present."""
    result = await use_case.execute(tenant, sale_id)
    return use_case.to_response(result)
