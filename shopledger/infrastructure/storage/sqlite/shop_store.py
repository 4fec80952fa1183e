"""SQLite implementation of shop, product, expense and staff storage."""

from datetime import date

import aiosqlite

from shopledger.config import get_logger
from shopledger.core.entities.catalog import (
    Expense,
    ExpenseType,
    Product,
    StaffMember,
    StaffRole,
)
from shopledger.core.entities.shop import Shop, utcnow
from shopledger.core.exceptions import (
    ConflictError,
    ExpenseNotFoundError,
    ProductNotFoundError,
)
from shopledger.core.interfaces.shop_store import IShopStore
from shopledger.infrastructure.storage.sqlite.connection import (
    from_db_timestamp,
    get_connection,
    get_transaction,
    to_db_timestamp,
    translate_errors,
)

logger = get_logger(__name__)


class SQLiteShopStore(IShopStore):
    """SQLite implementation of back-office storage."""

    async def create_shop(self, shop: Shop) -> Shop:
        async with translate_errors("create_shop"):
            async with get_transaction() as conn:
                try:
                    await conn.execute(
                        "INSERT INTO shops (id, name, created_at) VALUES (?, ?, ?)",
                        (shop.id, shop.name, to_db_timestamp(shop.created_at)),
                    )
                except aiosqlite.IntegrityError as e:
                    raise ConflictError(
                        f"Shop already exists: {shop.id}",
                        code="DUPLICATE_SHOP",
                        details={"shop_id": shop.id},
                    ) from e
        logger.info("shop_created", shop_id=shop.id)
        return shop

    async def get_shop(self, shop_id: str) -> Shop | None:
        async with translate_errors("get_shop"):
            async with get_connection() as conn:
                cursor = await conn.execute("SELECT * FROM shops WHERE id = ?", (shop_id,))
                row = await cursor.fetchone()
                if row is None:
                    return None
                return Shop(
                    id=row["id"],
                    name=row["name"],
                    created_at=from_db_timestamp(row["created_at"]),
                )

    # =========================================================================
    # Products
    # =========================================================================

    async def create_product(self, product: Product) -> Product:
        async with translate_errors("create_product"):
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO products (
                        id, shop_id, name, price, stock, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        product.id,
                        product.shop_id,
                        product.name,
                        product.price,
                        product.stock,
                        to_db_timestamp(product.created_at),
                        to_db_timestamp(product.updated_at),
                    ),
                )
        logger.info("product_created", product_id=product.id, shop_id=product.shop_id)
        return product

    async def get_product(self, product_id: str) -> Product | None:
        async with translate_errors("get_product"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM products WHERE id = ?", (product_id,)
                )
                row = await cursor.fetchone()
                return self._row_to_product(row) if row else None

    async def update_product(self, product: Product) -> Product:
        product.updated_at = utcnow()
        async with translate_errors("update_product"):
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE products
                    SET name = ?, price = ?, stock = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        product.name,
                        product.price,
                        product.stock,
                        to_db_timestamp(product.updated_at),
                        product.id,
                    ),
                )
                if cursor.rowcount == 0:
                    raise ProductNotFoundError(product.id)
        return product

    async def list_products(self, shop_id: str) -> list[Product]:
        async with translate_errors("list_products"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM products WHERE shop_id = ? ORDER BY name",
                    (shop_id,),
                )
                rows = await cursor.fetchall()
                return [self._row_to_product(r) for r in rows]

    # =========================================================================
    # Expenses and staff
    # =========================================================================

    async def create_expense(self, expense: Expense) -> Expense:
        async with translate_errors("create_expense"):
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO expenses (
                        id, shop_id, type, amount, description, expense_date, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        expense.id,
                        expense.shop_id,
                        expense.type.value,
                        expense.amount,
                        expense.description,
                        expense.expense_date.isoformat(),
                        to_db_timestamp(expense.created_at),
                    ),
                )
        logger.info(
            "expense_recorded",
            expense_id=expense.id,
            shop_id=expense.shop_id,
            type=expense.type.value,
            amount=expense.amount,
        )
        return expense

    async def get_expense(self, expense_id: str) -> Expense | None:
        async with translate_errors("get_expense"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM expenses WHERE id = ?", (expense_id,)
                )
                row = await cursor.fetchone()
                return self._row_to_expense(row) if row else None

    async def update_expense(self, expense: Expense) -> Expense:
        async with translate_errors("update_expense"):
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE expenses
                    SET type = ?, amount = ?, description = ?, expense_date = ?
                    WHERE id = ?
                    """,
                    (
                        expense.type.value,
                        expense.amount,
                        expense.description,
                        expense.expense_date.isoformat(),
                        expense.id,
                    ),
                )
                if cursor.rowcount == 0:
                    raise ExpenseNotFoundError(expense.id)
        return expense

    async def delete_expense(self, expense_id: str) -> None:
        async with translate_errors("delete_expense"):
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    "DELETE FROM expenses WHERE id = ?", (expense_id,)
                )
                if cursor.rowcount == 0:
                    raise ExpenseNotFoundError(expense_id)
        logger.info("expense_deleted", expense_id=expense_id)

    async def list_expenses(self, shop_id: str) -> list[Expense]:
        async with translate_errors("list_expenses"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM expenses WHERE shop_id = ?
                    ORDER BY expense_date DESC, created_at DESC
                    """,
                    (shop_id,),
                )
                return [self._row_to_expense(r) for r in await cursor.fetchall()]

    async def create_staff_member(self, member: StaffMember) -> StaffMember:
        async with translate_errors("create_staff_member"):
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO staff (id, shop_id, name, role, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        member.id,
                        member.shop_id,
                        member.name,
                        member.role.value,
                        to_db_timestamp(member.created_at),
                    ),
                )
        logger.info("staff_member_added", staff_id=member.id, shop_id=member.shop_id)
        return member

    async def list_staff(self, shop_id: str) -> list[StaffMember]:
        async with translate_errors("list_staff"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM staff WHERE shop_id = ? ORDER BY name",
                    (shop_id,),
                )
                return [
                    StaffMember(
                        id=row["id"],
                        shop_id=row["shop_id"],
                        name=row["name"],
                        role=StaffRole(row["role"]),
                        created_at=from_db_timestamp(row["created_at"]),
                    )
                    for row in await cursor.fetchall()
                ]

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        """Convert a database row to a Product entity."""
        return Product(
            id=row["id"],
            shop_id=row["shop_id"],
            name=row["name"],
            price=float(row["price"]),
            stock=row["stock"],
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )

    @staticmethod
    def _row_to_expense(row: aiosqlite.Row) -> Expense:
        return Expense(
            id=row["id"],
            shop_id=row["shop_id"],
            type=ExpenseType(row["type"]),
            amount=float(row["amount"]),
            description=row["description"],
            expense_date=date.fromisoformat(row["expense_date"]),
            created_at=from_db_timestamp(row["created_at"]),
        )
