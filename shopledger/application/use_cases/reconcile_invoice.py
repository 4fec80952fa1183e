"""Reconcile Invoice Use Case and the audit trail listing."""

from shopledger.application.dto.requests import ReconcileInvoiceRequest
from shopledger.application.dto.responses import (
    ModificationListResponse,
    ModificationResponse,
    ReconcileResponse,
)
from shopledger.application.use_cases.invoices import LedgerUseCaseBase
from shopledger.config import get_logger
from shopledger.core.entities.invoice import InvoiceModification
from shopledger.core.entities.shop import TenantContext
from shopledger.core.services.reconciliation import (
    ReconcileResult,
    ReconciliationEngine,
)

logger = get_logger(__name__)


class ReconcileInvoiceUseCase:
    """Apply a price change, return or other correction to an invoice."""

    def __init__(self, engine: ReconciliationEngine | None = None):
        self._engine = engine

    def _get_engine(self) -> ReconciliationEngine:
        if self._engine is None:
            from shopledger.application.services import get_reconciliation_engine

            self._engine = get_reconciliation_engine()
        return self._engine

    async def execute(
        self,
        tenant: TenantContext,
        invoice_id: str,
        request: ReconcileInvoiceRequest,
    ) -> ReconcileResult:
        """Execute reconcile invoice use case."""
        logger.info(
            "reconcile_invoice_started",
            shop_id=tenant.shop_id,
            invoice_id=invoice_id,
            modification_type=request.modification_type.value,
        )
        return await self._get_engine().reconcile(
            tenant,
            invoice_id,
            request.modification_type,
            request.reason,
            request.to_details(),
            expected_last_modification_id=request.expected_last_modification_id,
            require_unmodified=request.require_unmodified,
        )

    def to_response(self, invoice_id: str, result: ReconcileResult) -> ReconcileResponse:
        return ReconcileResponse(
            invoice_id=invoice_id,
            new_amount=result.new_amount,
            modification_id=result.modification_id,
            modification_type=result.modification.modification_type,
            returned_items=result.modification.returned_items,
        )


class ListModificationsUseCase(LedgerUseCaseBase):
    """Ordered audit trail of one invoice."""

    async def execute(
        self, tenant: TenantContext, invoice_id: str
    ) -> list[InvoiceModification]:
        await self._get_owned_invoice(tenant, invoice_id)
        store = await self._get_ledger_store()
        return await store.list_modifications(invoice_id)

    def to_response(
        self, invoice_id: str, result: list[InvoiceModification]
    ) -> ModificationListResponse:
        return ModificationListResponse(
            invoice_id=invoice_id,
            modifications=[
                ModificationResponse(
                    id=m.id,
                    modification_type=m.modification_type,
                    new_amount=m.new_amount,
                    reason=m.reason,
                    modified_by=m.modified_by,
                    returned_items=m.returned_items,
                    created_at=m.created_at,
                )
                for m in result
            ],
            total=len(result),
        )
