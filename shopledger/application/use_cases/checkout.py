"""Checkout Use Case: commits a sale, then numbers its invoice."""

from dataclasses import dataclass

from shopledger.application.dto.requests import CheckoutRequest
from shopledger.application.dto.responses import (
    CheckoutResponse,
    InvoiceCreatedResponse,
    SaleItemResponse,
    SaleResponse,
)
from shopledger.config import get_logger
from shopledger.core.entities.events import ChangeEvent, EntityType, EventType
from shopledger.core.entities.invoice import InvoiceCreated
from shopledger.core.entities.sale import Sale, SaleItem, round_money
from shopledger.core.entities.shop import TenantContext
from shopledger.core.exceptions import (
    AuthorizationError,
    ProductNotFoundError,
    ValidationError,
)
from shopledger.core.interfaces.ledger_store import ILedgerStore
from shopledger.core.interfaces.publisher import IChangePublisher
from shopledger.core.interfaces.shop_store import IShopStore
from shopledger.core.services.invoice_numbering import InvoiceNumberingService

logger = get_logger(__name__)


def sale_to_response(sale: Sale) -> SaleResponse:
    return SaleResponse(
        id=sale.id,
        customer_name=sale.customer_name,
        customer_phone=sale.customer_phone,
        total_amount=sale.total_amount,
        payment_method=sale.payment_method,
        employee_id=sale.employee_id,
        items=[sale_item_to_response(item) for item in sale.items],
        created_at=sale.created_at,
    )


def sale_item_to_response(item: SaleItem) -> SaleItemResponse:
    return SaleItemResponse(
        id=item.id,
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity,
        price_at_sale=item.price_at_sale,
        returned_quantity=item.returned_quantity,
        remaining_quantity=item.effective_quantity,
    )


@dataclass
class CheckoutResult:
    """Committed sale and its invoice."""

    sale: Sale
    invoice: InvoiceCreated


class CheckoutUseCase:
    """
    Sell a cart.

    The sale and its items commit first, in one transaction that also checks
    units on hand. The invoice is numbered afterwards; if that fails the sale
    stays recorded and InvoiceCreationFailedError carries its id so the
    invoice can be created later.
    """

    def __init__(
        self,
        shop_store: IShopStore | None = None,
        ledger_store: ILedgerStore | None = None,
        numbering_service: InvoiceNumberingService | None = None,
        publisher: IChangePublisher | None = None,
    ):
        self._shop_store = shop_store
        self._ledger_store = ledger_store
        self._numbering_service = numbering_service
        self._publisher = publisher

    async def _get_shop_store(self) -> IShopStore:
        if self._shop_store is None:
            from shopledger.infrastructure.storage.sqlite import get_shop_store

            self._shop_store = await get_shop_store()
        return self._shop_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from shopledger.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    def _get_numbering_service(self) -> InvoiceNumberingService:
        if self._numbering_service is None:
            from shopledger.application.services import get_invoice_numbering_service

            self._numbering_service = get_invoice_numbering_service()
        return self._numbering_service

    def _get_publisher(self) -> IChangePublisher:
        if self._publisher is None:
            from shopledger.application.services import get_change_fanout

            self._publisher = get_change_fanout()
        return self._publisher

    async def execute(
        self, tenant: TenantContext, request: CheckoutRequest
    ) -> CheckoutResult:
        """Execute checkout use case."""
        if not request.items:
            raise ValidationError("items", "Cart is empty")
        for line in request.items:
            if line.quantity <= 0:
                raise ValidationError(
                    "quantity", "Quantity must be positive", line.quantity
                )

        logger.info(
            "checkout_started",
            shop_id=tenant.shop_id,
            items=len(request.items),
        )

        shop_store = await self._get_shop_store()
        ledger_store = await self._get_ledger_store()

        items: list[SaleItem] = []
        for line in request.items:
            product = await shop_store.get_product(line.product_id)
            if product is None:
                raise ProductNotFoundError(line.product_id)
            if product.shop_id != tenant.shop_id:
                raise AuthorizationError("product", line.product_id, tenant.shop_id)
            items.append(
                SaleItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=line.quantity,
                    price_at_sale=product.price,
                )
            )

        sale = Sale(
            shop_id=tenant.shop_id,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            total_amount=round_money(sum(item.line_total for item in items)),
            payment_method=request.payment_method,
            employee_id=tenant.actor_id,
            items=items,
        )
        sale = await ledger_store.create_sale(sale)

        events = [
            ChangeEvent(
                shop_id=sale.shop_id,
                entity_type=EntityType.SALES,
                entity_id=sale.id,
                event_type=EventType.INSERT,
            )
        ]
        events.extend(
            ChangeEvent(
                shop_id=sale.shop_id,
                entity_type=EntityType.SALE_ITEMS,
                entity_id=item.id,
                event_type=EventType.INSERT,
            )
            for item in sale.items
        )
        await self._get_publisher().publish_many(events)

        invoice = await self._get_numbering_service().create_invoice(
            sale.shop_id,
            sale.id,
            sale.customer_name,
            sale.customer_phone,
        )

        logger.info(
            "checkout_completed",
            shop_id=tenant.shop_id,
            sale_id=sale.id,
            invoice_number=invoice.invoice_number,
            total=sale.total_amount,
        )

        return CheckoutResult(sale=sale, invoice=invoice)

    def to_response(self, result: CheckoutResult) -> CheckoutResponse:
        """Convert result to API response DTO."""
        return CheckoutResponse(
            sale=sale_to_response(result.sale),
            invoice=InvoiceCreatedResponse(**result.invoice.model_dump()),
        )
