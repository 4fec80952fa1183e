"""Invoice use cases: create for a committed sale, read, list."""

from dataclasses import dataclass

from shopledger.application.dto.responses import (
    InvoiceCreatedResponse,
    InvoiceDetailResponse,
    InvoiceListResponse,
    InvoiceResponse,
)
from shopledger.application.use_cases.checkout import sale_item_to_response
from shopledger.config import get_logger
from shopledger.core.entities.invoice import Invoice, InvoiceCreated
from shopledger.core.entities.reporting import Period
from shopledger.core.entities.sale import Sale
from shopledger.core.entities.shop import TenantContext
from shopledger.core.exceptions import (
    AuthorizationError,
    InvoiceNotFoundError,
    SaleNotFoundError,
)
from shopledger.core.interfaces.ledger_store import ILedgerStore
from shopledger.core.services.invoice_numbering import InvoiceNumberingService

logger = get_logger(__name__)


def invoice_to_response(invoice: Invoice) -> InvoiceResponse:
    return InvoiceResponse(
        id=invoice.id,
        sale_id=invoice.sale_id,
        invoice_number=invoice.invoice_number,
        customer_name=invoice.customer_name,
        customer_phone=invoice.customer_phone,
        original_amount=invoice.sale_total_amount,
        effective_amount=invoice.effective_amount,
        is_modified=invoice.is_modified,
        modification_reason=invoice.modification_reason,
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
    )


class LedgerUseCaseBase:
    """Shared store resolution and ownership check for ledger reads."""

    def __init__(self, ledger_store: ILedgerStore | None = None):
        self._ledger_store = ledger_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from shopledger.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_owned_invoice(self, tenant: TenantContext, invoice_id: str) -> Invoice:
        invoice = await (await self._get_ledger_store()).get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        if invoice.shop_id != tenant.shop_id:
            raise AuthorizationError("invoice", invoice_id, tenant.shop_id)
        return invoice


class CreateInvoiceUseCase(LedgerUseCaseBase):
    """Create (or fetch) the invoice of an already-committed sale.

    Used to recover after checkout raised InvoiceCreationFailedError.
    """

    def __init__(
        self,
        ledger_store: ILedgerStore | None = None,
        numbering_service: InvoiceNumberingService | None = None,
    ):
        super().__init__(ledger_store)
        self._numbering_service = numbering_service

    def _get_numbering_service(self) -> InvoiceNumberingService:
        if self._numbering_service is None:
            from shopledger.application.services import get_invoice_numbering_service

            self._numbering_service = get_invoice_numbering_service()
        return self._numbering_service

    async def execute(self, tenant: TenantContext, sale_id: str) -> InvoiceCreated:
        sale = await (await self._get_ledger_store()).get_sale(sale_id)
        if sale is None:
            raise SaleNotFoundError(sale_id)
        if sale.shop_id != tenant.shop_id:
            raise AuthorizationError("sale", sale_id, tenant.shop_id)

        return await self._get_numbering_service().create_invoice(
            sale.shop_id,
            sale.id,
            sale.customer_name,
            sale.customer_phone,
        )

    def to_response(self, result: InvoiceCreated) -> InvoiceCreatedResponse:
        return InvoiceCreatedResponse(**result.model_dump())


@dataclass
class InvoiceDetail:
    invoice: Invoice
    sale: Sale
    last_modification_id: str | None


class GetInvoiceUseCase(LedgerUseCaseBase):
    """Invoice with its sale lines and the id of its latest modification."""

    async def execute(self, tenant: TenantContext, invoice_id: str) -> InvoiceDetail:
        invoice = await self._get_owned_invoice(tenant, invoice_id)
        store = await self._get_ledger_store()

        sale = await store.get_sale(invoice.sale_id)
        if sale is None:
            raise SaleNotFoundError(invoice.sale_id)

        modifications = await store.list_modifications(invoice_id)
        return InvoiceDetail(
            invoice=invoice,
            sale=sale,
            last_modification_id=modifications[-1].id if modifications else None,
        )

    def to_response(self, result: InvoiceDetail) -> InvoiceDetailResponse:
        summary = invoice_to_response(result.invoice)
        return InvoiceDetailResponse(
            **summary.model_dump(),
            items=[sale_item_to_response(item) for item in result.sale.items],
            last_modification_id=result.last_modification_id,
        )


class ListInvoicesUseCase(LedgerUseCaseBase):
    """A shop's invoices, newest first."""

    async def execute(
        self,
        tenant: TenantContext,
        period: Period | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Invoice]:
        store = await self._get_ledger_store()
        return await store.list_invoices(tenant.shop_id, period, limit, offset)

    def to_response(self, result: list[Invoice]) -> InvoiceListResponse:
        return InvoiceListResponse(
            invoices=[invoice_to_response(invoice) for invoice in result],
            total=len(result),
        )
