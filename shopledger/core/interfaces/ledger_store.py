"""Abstract interfaces for the ledger (sales, invoices, modification log)."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime

from shopledger.core.entities.invoice import Invoice, InvoiceModification
from shopledger.core.entities.reporting import Period
from shopledger.core.entities.sale import Sale

# Maps the next per-shop sequence value to a formatted invoice number.
InvoiceNumberFactory = Callable[[int], str]


class ILedgerSession(ABC):
    """
    Ledger operations bound to one atomic commit.

    Everything done through a session is committed together when the
    session's context exits cleanly, and rolled back on any exception.
    """

    @abstractmethod
    async def get_invoice(self, invoice_id: str) -> Invoice | None:
        """Read an invoice inside the commit."""
        pass

    @abstractmethod
    async def get_sale(self, sale_id: str) -> Sale | None:
        """Read a sale with its items inside the commit."""
        pass

    @abstractmethod
    async def get_last_modification_id(self, invoice_id: str) -> str | None:
        """Id of the latest modification of an invoice, if any."""
        pass

    @abstractmethod
    async def append_modification(
        self, modification: InvoiceModification
    ) -> InvoiceModification:
        """Append an audit entry."""
        pass

    @abstractmethod
    async def update_invoice_amount(
        self,
        invoice_id: str,
        new_amount: float,
        reason: str,
        updated_at: datetime,
    ) -> None:
        """Set the invoice's authoritative display amount."""
        pass

    @abstractmethod
    async def increment_returned_quantity(
        self, item_id: str, sale_id: str, quantity: int
    ) -> int:
        """
        Add returned units to a sale item and return the new cumulative value.

        Raises OverReturnError when the item would exceed its original quantity.
        """
        pass


class ILedgerStore(ABC):
    """Interface for ledger persistence."""

    @abstractmethod
    def reconciliation_session(self) -> AbstractAsyncContextManager[ILedgerSession]:
        """Open an atomic commit scope for invoice reconciliation."""
        pass

    @abstractmethod
    async def create_sale(self, sale: Sale) -> Sale:
        """Persist a sale and its items atomically, checking stock on hand."""
        pass

    @abstractmethod
    async def get_sale(self, sale_id: str) -> Sale | None:
        """Get sale by ID with items."""
        pass

    @abstractmethod
    async def create_invoice_atomic(
        self,
        shop_id: str,
        sale_id: str,
        customer_name: str,
        customer_phone: str | None,
        number_factory: InvoiceNumberFactory,
    ) -> tuple[Invoice, bool]:
        """
        Number and insert the invoice for a committed sale.

        Returns the invoice and whether it was created by this call (False
        when the sale already had one).
        """
        pass

    @abstractmethod
    async def get_invoice(self, invoice_id: str) -> Invoice | None:
        """Get invoice by ID."""
        pass

    @abstractmethod
    async def get_invoice_by_sale(self, sale_id: str) -> Invoice | None:
        """Get the invoice owned by a sale."""
        pass

    @abstractmethod
    async def list_invoices(
        self,
        shop_id: str,
        period: Period | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Invoice]:
        """List a shop's invoices, newest first."""
        pass

    @abstractmethod
    async def list_modifications(self, invoice_id: str) -> list[InvoiceModification]:
        """Full audit trail of an invoice, oldest first."""
        pass
