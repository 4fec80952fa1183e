"""
Invoice numbering service.

Creates exactly one invoice per committed sale. The number comes from a
per-shop sequence advanced by the store inside the same transaction that
inserts the invoice, so two concurrent checkouts can never share a number.
"""

import re
from collections.abc import Callable
from datetime import datetime

from shopledger.config import get_logger
from shopledger.core.entities.events import ChangeEvent, EntityType, EventType
from shopledger.core.entities.invoice import InvoiceCreated
from shopledger.core.entities.shop import utcnow
from shopledger.core.exceptions import (
    InvoiceCreationFailedError,
    StoreError,
    ValidationError,
)
from shopledger.core.interfaces.ledger_store import ILedgerStore
from shopledger.core.interfaces.publisher import IChangePublisher
from shopledger.core.services.retry import RetryPolicy

logger = get_logger(__name__)

_NON_ALNUM = re.compile(r"[^0-9A-Za-z]")


def shop_prefix(shop_id: str, length: int = 4) -> str:
    """Upper-cased leading alphanumerics of the shop id."""
    return _NON_ALNUM.sub("", shop_id)[:length].upper() or "SHOP"


def generate_invoice_number(
    shop_id: str,
    sequence: int,
    when: datetime,
    prefix_length: int = 4,
    width: int = 6,
) -> str:
    """
    Format an invoice number as ``YYMMDD-PREF-NNNNNN``.

    Uniqueness comes from ``sequence`` alone, which the store never repeats for
    a shop; the date and prefix only make the number legible.
    """
    if sequence < 1:
        raise ValueError(f"Invoice sequence must be positive, got {sequence}")
    prefix = shop_prefix(shop_id, prefix_length)
    return f"{when:%y%m%d}-{prefix}-{sequence:0{width}d}"


class InvoiceNumberingService:
    """Assigns invoice numbers and persists invoices for committed sales."""

    def __init__(
        self,
        ledger_store: ILedgerStore,
        publisher: IChangePublisher | None = None,
        retry_policy: RetryPolicy | None = None,
        prefix_length: int = 4,
        sequence_width: int = 6,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._ledger = ledger_store
        self._publisher = publisher
        self._retry = retry_policy or RetryPolicy()
        self._prefix_length = prefix_length
        self._sequence_width = sequence_width
        self._clock = clock

    async def create_invoice(
        self,
        shop_id: str,
        sale_id: str,
        customer_name: str,
        customer_phone: str | None = None,
    ) -> InvoiceCreated:
        """
        Create the invoice for an already-committed sale.

        Safe to call again for the same sale: an existing invoice is returned
        as-is. Transient store failures are retried by the policy; when they
        persist an InvoiceCreationFailedError carrying the sale id is raised
        and the sale itself stays committed.
        """
        if not shop_id or not shop_id.strip():
            raise ValidationError("shop_id", "Shop id is required", shop_id)
        if not sale_id:
            raise ValidationError("sale_id", "Sale id is required", sale_id)

        def number_factory(sequence: int) -> str:
            return generate_invoice_number(
                shop_id,
                sequence,
                self._clock(),
                prefix_length=self._prefix_length,
                width=self._sequence_width,
            )

        try:
            invoice, created = await self._retry.run(
                self._ledger.create_invoice_atomic,
                shop_id,
                sale_id,
                customer_name,
                customer_phone,
                number_factory,
            )
        except StoreError as e:
            logger.error(
                "invoice_creation_failed",
                shop_id=shop_id,
                sale_id=sale_id,
                error=str(e),
            )
            raise InvoiceCreationFailedError(
                sale_id, e.message, attempts=self._retry.max_attempts
            ) from e

        if created:
            logger.info(
                "invoice_created",
                shop_id=shop_id,
                sale_id=sale_id,
                invoice_id=invoice.id,
                invoice_number=invoice.invoice_number,
            )
            if self._publisher is not None:
                await self._publisher.publish(
                    ChangeEvent(
                        shop_id=shop_id,
                        entity_type=EntityType.INVOICES,
                        entity_id=invoice.id,
                        event_type=EventType.INSERT,
                    )
                )
        else:
            logger.info(
                "invoice_already_exists",
                sale_id=sale_id,
                invoice_id=invoice.id,
            )

        return InvoiceCreated(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            customer_name=invoice.customer_name,
            customer_phone=invoice.customer_phone,
            created_at=invoice.created_at,
        )
