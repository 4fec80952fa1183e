"""SQLite implementation of the ledger: sales, invoices and the modification log."""

import json
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

import aiosqlite

from shopledger.config import get_logger
from shopledger.core.entities.invoice import (
    Invoice,
    InvoiceModification,
    ModificationType,
    ReturnedItem,
)
from shopledger.core.entities.reporting import Period
from shopledger.core.entities.sale import Sale, SaleItem
from shopledger.core.entities.shop import utcnow
from shopledger.core.exceptions import (
    AuthorizationError,
    DuplicateInvoiceError,
    InsufficientStockError,
    OverReturnError,
    ProductNotFoundError,
    SaleItemNotFoundError,
    SaleNotFoundError,
)
from shopledger.core.interfaces.ledger_store import (
    ILedgerSession,
    ILedgerStore,
    InvoiceNumberFactory,
)
from shopledger.infrastructure.storage.sqlite.connection import (
    from_db_timestamp,
    get_connection,
    get_transaction,
    to_db_timestamp,
    translate_errors,
)

logger = get_logger(__name__)

_INVOICE_SELECT = """
    SELECT i.*, s.total_amount AS sale_total_amount
    FROM invoices i
    JOIN sales s ON s.id = i.sale_id
"""


async def _fetch_invoice(
    conn: aiosqlite.Connection, where: str, params: tuple
) -> Invoice | None:
    cursor = await conn.execute(f"{_INVOICE_SELECT} WHERE {where}", params)
    row = await cursor.fetchone()
    return _row_to_invoice(row) if row else None


async def _fetch_sale(conn: aiosqlite.Connection, sale_id: str) -> Sale | None:
    cursor = await conn.execute("SELECT * FROM sales WHERE id = ?", (sale_id,))
    row = await cursor.fetchone()
    if row is None:
        return None

    items_cursor = await conn.execute(
        "SELECT * FROM sale_items WHERE sale_id = ? ORDER BY rowid",
        (sale_id,),
    )
    items = [_row_to_sale_item(r) for r in await items_cursor.fetchall()]
    return _row_to_sale(row, items)


class SQLiteLedgerSession(ILedgerSession):
    """Ledger operations on one open BEGIN IMMEDIATE transaction."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def get_invoice(self, invoice_id: str) -> Invoice | None:
        return await _fetch_invoice(self._conn, "i.id = ?", (invoice_id,))

    async def get_sale(self, sale_id: str) -> Sale | None:
        return await _fetch_sale(self._conn, sale_id)

    async def get_last_modification_id(self, invoice_id: str) -> str | None:
        cursor = await self._conn.execute(
            """
            SELECT id FROM invoice_modifications
            WHERE invoice_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT 1
            """,
            (invoice_id,),
        )
        row = await cursor.fetchone()
        return row["id"] if row else None

    async def append_modification(
        self, modification: InvoiceModification
    ) -> InvoiceModification:
        returned_items = None
        if modification.returned_items is not None:
            returned_items = json.dumps(
                [item.model_dump() for item in modification.returned_items]
            )

        await self._conn.execute(
            """
            INSERT INTO invoice_modifications (
                id, invoice_id, shop_id, modification_type, new_amount,
                reason, modified_by, returned_items, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                modification.id,
                modification.invoice_id,
                modification.shop_id,
                modification.modification_type.value,
                modification.new_amount,
                modification.reason,
                modification.modified_by,
                returned_items,
                to_db_timestamp(modification.created_at),
            ),
        )
        return modification

    async def update_invoice_amount(
        self,
        invoice_id: str,
        new_amount: float,
        reason: str,
        updated_at: datetime,
    ) -> None:
        await self._conn.execute(
            """
            UPDATE invoices
            SET is_modified = 1,
                new_total_amount = ?,
                modification_reason = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (new_amount, reason, to_db_timestamp(updated_at), invoice_id),
        )

    async def increment_returned_quantity(
        self, item_id: str, sale_id: str, quantity: int
    ) -> int:
        # Guarded update: re-checks the remaining units at commit time
        cursor = await self._conn.execute(
            """
            UPDATE sale_items
            SET returned_quantity = returned_quantity + ?
            WHERE id = ? AND sale_id = ? AND returned_quantity + ? <= quantity
            """,
            (quantity, item_id, sale_id, quantity),
        )
        updated = cursor.rowcount

        cursor = await self._conn.execute(
            "SELECT quantity, returned_quantity FROM sale_items WHERE id = ? AND sale_id = ?",
            (item_id, sale_id),
        )
        row = await cursor.fetchone()
        if row is None:
            raise SaleItemNotFoundError(item_id, sale_id)
        if updated == 0:
            raise OverReturnError(
                item_id, quantity, row["quantity"] - row["returned_quantity"]
            )
        return row["returned_quantity"]


class SQLiteLedgerStore(ILedgerStore):
    """SQLite implementation of ledger storage."""

    @asynccontextmanager
    async def reconciliation_session(self) -> AsyncIterator[SQLiteLedgerSession]:
        async with translate_errors("reconcile_invoice"):
            async with get_transaction(immediate=True) as conn:
                yield SQLiteLedgerSession(conn)

    async def create_sale(self, sale: Sale) -> Sale:
        """
        Persist a sale and its items in one transaction.

        Units on hand are checked under the write lock: received stock minus
        the effective quantity already sold must cover the cart.
        """
        requested: dict[str, int] = defaultdict(int)
        for item in sale.items:
            requested[item.product_id] += item.quantity

        async with translate_errors("create_sale"):
            async with get_transaction(immediate=True) as conn:
                for product_id, quantity in requested.items():
                    cursor = await conn.execute(
                        """
                        SELECT p.shop_id, p.stock - COALESCE(
                            (SELECT SUM(si.quantity - si.returned_quantity)
                             FROM sale_items si WHERE si.product_id = p.id), 0
                        ) AS on_hand
                        FROM products p WHERE p.id = ?
                        """,
                        (product_id,),
                    )
                    row = await cursor.fetchone()
                    if row is None:
                        raise ProductNotFoundError(product_id)
                    if row["shop_id"] != sale.shop_id:
                        raise AuthorizationError("product", product_id, sale.shop_id)
                    if row["on_hand"] < quantity:
                        raise InsufficientStockError(product_id, quantity, row["on_hand"])

                await conn.execute(
                    """
                    INSERT INTO sales (
                        id, shop_id, customer_name, customer_phone,
                        total_amount, payment_method, employee_id, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        sale.id,
                        sale.shop_id,
                        sale.customer_name,
                        sale.customer_phone,
                        sale.total_amount,
                        sale.payment_method,
                        sale.employee_id,
                        to_db_timestamp(sale.created_at),
                    ),
                )

                for item in sale.items:
                    item.sale_id = sale.id
                    await conn.execute(
                        """
                        INSERT INTO sale_items (
                            id, sale_id, product_id, product_name, quantity,
                            price_at_sale, returned_quantity, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?, 0, ?)
                        """,
                        (
                            item.id,
                            item.sale_id,
                            item.product_id,
                            item.product_name,
                            item.quantity,
                            item.price_at_sale,
                            to_db_timestamp(item.created_at),
                        ),
                    )

        logger.info(
            "sale_created",
            sale_id=sale.id,
            shop_id=sale.shop_id,
            items=len(sale.items),
            total=sale.total_amount,
        )
        return sale

    async def get_sale(self, sale_id: str) -> Sale | None:
        async with translate_errors("get_sale"):
            async with get_connection() as conn:
                return await _fetch_sale(conn, sale_id)

    async def create_invoice_atomic(
        self,
        shop_id: str,
        sale_id: str,
        customer_name: str,
        customer_phone: str | None,
        number_factory: InvoiceNumberFactory,
    ) -> tuple[Invoice, bool]:
        """
        Advance the shop's sequence and insert the invoice in one transaction.

        A sale that already has an invoice gets it back unchanged.
        """
        async with translate_errors("create_invoice"):
            async with get_transaction(immediate=True) as conn:
                existing = await _fetch_invoice(conn, "i.sale_id = ?", (sale_id,))
                if existing is not None:
                    if existing.shop_id != shop_id:
                        raise AuthorizationError("sale", sale_id, shop_id)
                    return existing, False

                cursor = await conn.execute(
                    "SELECT shop_id, total_amount FROM sales WHERE id = ?", (sale_id,)
                )
                sale_row = await cursor.fetchone()
                if sale_row is None:
                    raise SaleNotFoundError(sale_id)
                if sale_row["shop_id"] != shop_id:
                    raise AuthorizationError("sale", sale_id, shop_id)

                await conn.execute(
                    """
                    INSERT INTO invoice_sequences (shop_id, last_value) VALUES (?, 1)
                    ON CONFLICT(shop_id) DO UPDATE SET last_value = last_value + 1
                    """,
                    (shop_id,),
                )
                cursor = await conn.execute(
                    "SELECT last_value FROM invoice_sequences WHERE shop_id = ?",
                    (shop_id,),
                )
                sequence = (await cursor.fetchone())["last_value"]

                now = utcnow()
                invoice = Invoice(
                    shop_id=shop_id,
                    sale_id=sale_id,
                    invoice_number=number_factory(sequence),
                    customer_name=customer_name,
                    customer_phone=customer_phone,
                    created_at=now,
                    updated_at=now,
                    sale_total_amount=float(sale_row["total_amount"]),
                )
                try:
                    await conn.execute(
                        """
                        INSERT INTO invoices (
                            id, shop_id, sale_id, invoice_number,
                            customer_name, customer_phone, is_modified,
                            created_at, updated_at
                        ) VALUES (?, ?, ?, ?, ?, ?, 0, ?, ?)
                        """,
                        (
                            invoice.id,
                            invoice.shop_id,
                            invoice.sale_id,
                            invoice.invoice_number,
                            invoice.customer_name,
                            invoice.customer_phone,
                            to_db_timestamp(invoice.created_at),
                            to_db_timestamp(invoice.updated_at),
                        ),
                    )
                except aiosqlite.IntegrityError as e:
                    raise DuplicateInvoiceError(shop_id, str(e)) from e

        return invoice, True

    async def get_invoice(self, invoice_id: str) -> Invoice | None:
        async with translate_errors("get_invoice"):
            async with get_connection() as conn:
                return await _fetch_invoice(conn, "i.id = ?", (invoice_id,))

    async def get_invoice_by_sale(self, sale_id: str) -> Invoice | None:
        async with translate_errors("get_invoice"):
            async with get_connection() as conn:
                return await _fetch_invoice(conn, "i.sale_id = ?", (sale_id,))

    async def list_invoices(
        self,
        shop_id: str,
        period: Period | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Invoice]:
        conditions = ["i.shop_id = ?"]
        params: list = [shop_id]
        if period and period.start:
            conditions.append("i.created_at >= ?")
            params.append(to_db_timestamp(period.start))
        if period and period.end:
            conditions.append("i.created_at < ?")
            params.append(to_db_timestamp(period.end))
        params.extend([limit, offset])

        async with translate_errors("list_invoices"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    {_INVOICE_SELECT}
                    WHERE {" AND ".join(conditions)}
                    ORDER BY i.created_at DESC, i.rowid DESC
                    LIMIT ? OFFSET ?
                    """,
                    params,
                )
                rows = await cursor.fetchall()
                return [_row_to_invoice(r) for r in rows]

    async def list_modifications(self, invoice_id: str) -> list[InvoiceModification]:
        async with translate_errors("list_modifications"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM invoice_modifications
                    WHERE invoice_id = ?
                    ORDER BY created_at, rowid
                    """,
                    (invoice_id,),
                )
                rows = await cursor.fetchall()
                return [_row_to_modification(r) for r in rows]


def _row_to_invoice(row: aiosqlite.Row) -> Invoice:
    """Convert a database row to an Invoice entity."""
    return Invoice(
        id=row["id"],
        shop_id=row["shop_id"],
        sale_id=row["sale_id"],
        invoice_number=row["invoice_number"],
        customer_name=row["customer_name"],
        customer_phone=row["customer_phone"],
        is_modified=bool(row["is_modified"]),
        new_total_amount=row["new_total_amount"],
        modification_reason=row["modification_reason"],
        created_at=from_db_timestamp(row["created_at"]),
        updated_at=from_db_timestamp(row["updated_at"]),
        sale_total_amount=row["sale_total_amount"],
    )


def _row_to_sale(row: aiosqlite.Row, items: list[SaleItem]) -> Sale:
    return Sale(
        id=row["id"],
        shop_id=row["shop_id"],
        customer_name=row["customer_name"],
        customer_phone=row["customer_phone"],
        total_amount=float(row["total_amount"]),
        payment_method=row["payment_method"],
        employee_id=row["employee_id"],
        items=items,
        created_at=from_db_timestamp(row["created_at"]),
    )


def _row_to_sale_item(row: aiosqlite.Row) -> SaleItem:
    return SaleItem(
        id=row["id"],
        sale_id=row["sale_id"],
        product_id=row["product_id"],
        product_name=row["product_name"],
        quantity=row["quantity"],
        price_at_sale=float(row["price_at_sale"]),
        returned_quantity=row["returned_quantity"],
        created_at=from_db_timestamp(row["created_at"]),
    )


def _row_to_modification(row: aiosqlite.Row) -> InvoiceModification:
    returned_items = None
    if row["returned_items"]:
        returned_items = [ReturnedItem(**item) for item in json.loads(row["returned_items"])]

    return InvoiceModification(
        id=row["id"],
        invoice_id=row["invoice_id"],
        shop_id=row["shop_id"],
        modification_type=ModificationType(row["modification_type"]),
        new_amount=float(row["new_amount"]),
        reason=row["reason"],
        modified_by=row["modified_by"],
        returned_items=returned_items,
        created_at=from_db_timestamp(row["created_at"]),
    )
