"""
Invoice reconciliation engine.

Applies post-sale changes (price adjustments, item returns, other corrections)
to an invoice. Each change appends one audit entry, updates the invoice's
display amount and, for returns, bumps the returned quantity of the affected
sale items. All of it commits together or not at all.

The amount rules live in plain functions so they can be checked without a
database; ``ReconciliationEngine`` wires them to the store.
"""

import math
from collections.abc import Callable, Iterable
from datetime import datetime

from pydantic import BaseModel, Field

from shopledger.config import get_logger
from shopledger.core.entities.events import ChangeEvent, EntityType, EventType
from shopledger.core.entities.invoice import (
    Invoice,
    InvoiceModification,
    ModificationType,
    ReturnedItem,
    ReturnLine,
)
from shopledger.core.entities.sale import Sale, round_money
from shopledger.core.entities.shop import TenantContext, utcnow
from shopledger.core.exceptions import (
    AuthorizationError,
    InvoiceNotFoundError,
    OverReturnError,
    SaleItemNotFoundError,
    SaleNotFoundError,
    StaleModificationError,
    ValidationError,
)
from shopledger.core.interfaces.ledger_store import ILedgerStore
from shopledger.core.interfaces.publisher import IChangePublisher

logger = get_logger(__name__)


class ModificationDetails(BaseModel):
    """Type-specific payload of a reconcile request."""

    new_amount: float | None = None  # price / other
    items: list[ReturnLine] = Field(default_factory=list)  # return


class ReconcileResult(BaseModel):
    """Outcome of a committed reconciliation."""

    new_amount: float
    modification_id: str
    modification: InvoiceModification


# =============================================================================
# Amount rules
# =============================================================================


def effective_amount(invoice: Invoice, sale_total: float) -> float:
    """Amount the customer is currently charged."""
    if invoice.is_modified and invoice.new_total_amount is not None:
        return invoice.new_total_amount
    return sale_total


def baseline_amount(invoice: Invoice, sale: Sale) -> float:
    """Amount a new modification composes on."""
    return effective_amount(invoice, sale.total_amount)


def validate_reason(reason: str | None) -> str:
    if reason is None or not reason.strip():
        raise ValidationError("reason", "A reason is required", reason)
    return reason.strip()


def validate_details(
    modification_type: ModificationType,
    details: ModificationDetails | None,
) -> ModificationDetails:
    """Shape checks that need no ledger state."""
    details = details or ModificationDetails()

    if modification_type == ModificationType.RETURN:
        if not details.items:
            raise ValidationError("items", "Select at least one item to return")
        seen: set[str] = set()
        for line in details.items:
            if line.item_id in seen:
                raise ValidationError("items", "Duplicate item in return", line.item_id)
            seen.add(line.item_id)
            if line.quantity <= 0:
                raise ValidationError(
                    "quantity", "Return quantity must be positive", line.quantity
                )
        return details

    if details.new_amount is None:
        raise ValidationError("new_amount", "A new amount is required")
    if not math.isfinite(details.new_amount):
        raise ValidationError(
            "new_amount", "Amount must be a finite number", details.new_amount
        )
    if details.new_amount < 0:
        raise ValidationError(
            "new_amount", "Amount cannot be negative", details.new_amount
        )
    return details


def plan_return(sale: Sale, lines: Iterable[ReturnLine]) -> tuple[float, list[ReturnedItem]]:
    """
    Check a return against the sale's items and price it.

    Returns the value of the returned units at their sale-time price and the
    per-item breakdown recorded on the audit entry.
    """
    items = {item.id: item for item in sale.items}
    returned_value = 0.0
    breakdown: list[ReturnedItem] = []

    for line in lines:
        item = items.get(line.item_id)
        if item is None:
            raise SaleItemNotFoundError(line.item_id, sale.id)
        remaining = item.effective_quantity
        if line.quantity > remaining:
            raise OverReturnError(item.id, line.quantity, remaining)

        returned_value += round_money(line.quantity * item.price_at_sale)
        breakdown.append(
            ReturnedItem(
                item_id=item.id,
                name=item.product_name,
                quantity=line.quantity,
                remaining_quantity=remaining - line.quantity,
                unit_price=item.price_at_sale,
            )
        )

    return round_money(returned_value), breakdown


def compute_new_amount(
    modification_type: ModificationType,
    current: float,
    new_amount: float | None = None,
    returned_value: float = 0.0,
) -> float:
    """
    New display amount of an invoice.

    Price and other corrections replace the amount outright; returns subtract
    the value of the returned units, never going below zero. The result is
    rounded to cents so a full return lands exactly on zero.
    """
    if modification_type == ModificationType.RETURN:
        return max(0.0, round_money(current - returned_value))
    if new_amount is None:
        raise ValidationError("new_amount", "A new amount is required")
    return round_money(new_amount)


def replay_modifications(
    original_total: float,
    modifications: Iterable[InvoiceModification],
) -> float:
    """Rebuild the display amount from the audit log, oldest entry first."""
    amount = original_total
    for modification in modifications:
        if modification.modification_type == ModificationType.RETURN:
            returned_value = round_money(
                sum(
                    round_money(item.quantity * item.unit_price)
                    for item in modification.returned_items or []
                )
            )
            amount = compute_new_amount(
                ModificationType.RETURN, amount, returned_value=returned_value
            )
        else:
            amount = compute_new_amount(
                modification.modification_type, amount, modification.new_amount
            )
    return amount


# =============================================================================
# Engine
# =============================================================================


class ReconciliationEngine:
    """Commits invoice modifications against the ledger store."""

    def __init__(
        self,
        ledger_store: ILedgerStore,
        publisher: IChangePublisher | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._ledger = ledger_store
        self._publisher = publisher
        self._clock = clock

    async def reconcile(
        self,
        tenant: TenantContext,
        invoice_id: str,
        modification_type: ModificationType,
        reason: str,
        details: ModificationDetails | None = None,
        expected_last_modification_id: str | None = None,
        require_unmodified: bool = False,
    ) -> ReconcileResult:
        """
        Apply one modification to an invoice.

        The invoice, its sale and the previous modification are read inside
        the same write transaction that records the change, so concurrent
        reconciles of one invoice serialize and each builds on the last
        committed amount. Passing ``expected_last_modification_id`` (or
        ``require_unmodified``) turns a lost race into StaleModificationError.

        Raises:
            ValidationError: Malformed request.
            InvoiceNotFoundError: Unknown invoice.
            AuthorizationError: Invoice belongs to another shop.
            SaleItemNotFoundError: Return names an item not on the sale.
            OverReturnError: Return exceeds the units still sold.
        """
        reason = validate_reason(reason)
        details = validate_details(modification_type, details)
        check_token = require_unmodified or expected_last_modification_id is not None

        async with self._ledger.reconciliation_session() as session:
            invoice = await session.get_invoice(invoice_id)
            if invoice is None:
                raise InvoiceNotFoundError(invoice_id)
            if invoice.shop_id != tenant.shop_id:
                raise AuthorizationError("invoice", invoice_id, tenant.shop_id)

            if check_token:
                actual = await session.get_last_modification_id(invoice_id)
                if actual != expected_last_modification_id:
                    raise StaleModificationError(
                        invoice_id, expected_last_modification_id, actual
                    )

            sale = await session.get_sale(invoice.sale_id)
            if sale is None:
                raise SaleNotFoundError(invoice.sale_id)

            current = baseline_amount(invoice, sale)
            returned_items: list[ReturnedItem] | None = None
            if modification_type == ModificationType.RETURN:
                returned_value, returned_items = plan_return(sale, details.items)
                new_amount = compute_new_amount(
                    modification_type, current, returned_value=returned_value
                )
            else:
                new_amount = compute_new_amount(
                    modification_type, current, details.new_amount
                )

            now = self._clock()
            modification = await session.append_modification(
                InvoiceModification(
                    invoice_id=invoice.id,
                    shop_id=invoice.shop_id,
                    modification_type=modification_type,
                    new_amount=new_amount,
                    reason=reason,
                    modified_by=tenant.actor_id,
                    returned_items=returned_items,
                    created_at=now,
                )
            )
            await session.update_invoice_amount(invoice.id, new_amount, reason, now)

            for item in returned_items or []:
                await session.increment_returned_quantity(
                    item.item_id, sale.id, item.quantity
                )

        logger.info(
            "invoice_reconciled",
            shop_id=tenant.shop_id,
            invoice_id=invoice_id,
            modification_id=modification.id,
            modification_type=modification_type.value,
            previous_amount=current,
            new_amount=new_amount,
            actor_id=tenant.actor_id,
        )

        await self._publish(invoice, sale, modification, returned_items)

        return ReconcileResult(
            new_amount=new_amount,
            modification_id=modification.id,
            modification=modification,
        )

    async def _publish(
        self,
        invoice: Invoice,
        sale: Sale,
        modification: InvoiceModification,
        returned_items: list[ReturnedItem] | None,
    ) -> None:
        if self._publisher is None:
            return

        events = [
            ChangeEvent(
                shop_id=invoice.shop_id,
                entity_type=EntityType.INVOICES,
                entity_id=invoice.id,
                event_type=EventType.UPDATE,
            ),
            ChangeEvent(
                shop_id=invoice.shop_id,
                entity_type=EntityType.INVOICE_MODIFICATIONS,
                entity_id=modification.id,
                event_type=EventType.INSERT,
            ),
            ChangeEvent(
                shop_id=invoice.shop_id,
                entity_type=EntityType.SALES,
                entity_id=sale.id,
                event_type=EventType.UPDATE,
            ),
        ]
        for item in returned_items or []:
            events.append(
                ChangeEvent(
                    shop_id=invoice.shop_id,
                    entity_type=EntityType.SALE_ITEMS,
                    entity_id=item.item_id,
                    event_type=EventType.UPDATE,
                )
            )
        await self._publisher.publish_many(events)
