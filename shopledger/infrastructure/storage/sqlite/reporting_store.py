"""
SQLite aggregation queries for the read models.

All money figures use the effective amount of a sale (the invoice's
new_total_amount once modified, the sale's original total otherwise) and all
unit figures use the effective quantity (quantity minus returned_quantity).
"""

from datetime import date

from shopledger.config import get_logger
from shopledger.core.entities.catalog import ExpenseType
from shopledger.core.entities.reporting import BestSeller, Period, RecentOrder
from shopledger.core.interfaces.reporting_store import IReportingStore
from shopledger.infrastructure.storage.sqlite.connection import (
    from_db_timestamp,
    get_connection,
    to_db_timestamp,
    translate_errors,
)

logger = get_logger(__name__)

EFFECTIVE_AMOUNT = """
    CASE WHEN i.is_modified = 1 AND i.new_total_amount IS NOT NULL
         THEN i.new_total_amount
         ELSE s.total_amount
    END
"""

EFFECTIVE_QUANTITY = "(si.quantity - si.returned_quantity)"


def _timestamp_range(column: str, period: Period, params: list) -> str:
    clauses = []
    if period.start:
        clauses.append(f"{column} >= ?")
        params.append(to_db_timestamp(period.start))
    if period.end:
        clauses.append(f"{column} < ?")
        params.append(to_db_timestamp(period.end))
    return "".join(f" AND {c}" for c in clauses)


def _date_range(column: str, period: Period, params: list) -> str:
    # Period bounds fall on UTC midnights, so comparing dates is exact
    clauses = []
    if period.start:
        clauses.append(f"{column} >= ?")
        params.append(period.start.date().isoformat())
    if period.end:
        clauses.append(f"{column} < ?")
        params.append(period.end.date().isoformat())
    return "".join(f" AND {c}" for c in clauses)


class SQLiteReportingStore(IReportingStore):
    """Read-only SQLite queries backing the projections."""

    async def _scalar(self, operation: str, sql: str, params: list):
        async with translate_errors(operation):
            async with get_connection() as conn:
                cursor = await conn.execute(sql, params)
                row = await cursor.fetchone()
                return row[0] if row else None

    async def count_products(self, shop_id: str) -> int:
        return await self._scalar(
            "count_products",
            "SELECT COUNT(*) FROM products WHERE shop_id = ?",
            [shop_id],
        )

    async def count_staff(self, shop_id: str) -> int:
        return await self._scalar(
            "count_staff",
            "SELECT COUNT(*) FROM staff WHERE shop_id = ?",
            [shop_id],
        )

    async def sum_effective_sales(self, shop_id: str, period: Period) -> float:
        params: list = [shop_id]
        where = _timestamp_range("s.created_at", period, params)
        total = await self._scalar(
            "sum_effective_sales",
            f"""
            SELECT COALESCE(SUM({EFFECTIVE_AMOUNT}), 0)
            FROM sales s
            LEFT JOIN invoices i ON i.sale_id = s.id
            WHERE s.shop_id = ?{where}
            """,
            params,
        )
        return float(total)

    async def sum_expenses(
        self,
        shop_id: str,
        period: Period,
        expense_type: ExpenseType | None = None,
    ) -> float:
        params: list = [shop_id]
        where = _date_range("expense_date", period, params)
        if expense_type is not None:
            where += " AND type = ?"
            params.append(expense_type.value)
        total = await self._scalar(
            "sum_expenses",
            f"SELECT COALESCE(SUM(amount), 0) FROM expenses WHERE shop_id = ?{where}",
            params,
        )
        return float(total)

    async def recent_orders(self, shop_id: str, limit: int) -> list[RecentOrder]:
        async with translate_errors("recent_orders"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT i.id, i.invoice_number, i.customer_name, i.is_modified,
                           i.created_at, {EFFECTIVE_AMOUNT} AS amount
                    FROM invoices i
                    JOIN sales s ON s.id = i.sale_id
                    WHERE i.shop_id = ?
                    ORDER BY i.created_at DESC, i.rowid DESC
                    LIMIT ?
                    """,
                    (shop_id, limit),
                )
                return [
                    RecentOrder(
                        invoice_id=row["id"],
                        invoice_number=row["invoice_number"],
                        customer_name=row["customer_name"],
                        amount=float(row["amount"]),
                        is_modified=bool(row["is_modified"]),
                        created_at=from_db_timestamp(row["created_at"]),
                    )
                    for row in await cursor.fetchall()
                ]

    async def best_sellers(
        self, shop_id: str, period: Period, limit: int
    ) -> list[BestSeller]:
        params: list = [shop_id]
        where = _timestamp_range("s.created_at", period, params)
        params.append(limit)
        async with translate_errors("best_sellers"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT si.product_id,
                           COALESCE(p.name, MAX(si.product_name)) AS product_name,
                           SUM({EFFECTIVE_QUANTITY}) AS total_quantity,
                           SUM({EFFECTIVE_QUANTITY} * si.price_at_sale) AS total_revenue
                    FROM sale_items si
                    JOIN sales s ON s.id = si.sale_id
                    LEFT JOIN products p ON p.id = si.product_id
                    WHERE s.shop_id = ?{where}
                    GROUP BY si.product_id
                    HAVING total_quantity > 0
                    ORDER BY total_quantity DESC, total_revenue DESC
                    LIMIT ?
                    """,
                    params,
                )
                return [
                    BestSeller(
                        product_id=row["product_id"],
                        product_name=row["product_name"],
                        total_quantity=row["total_quantity"],
                        total_revenue=float(row["total_revenue"]),
                    )
                    for row in await cursor.fetchall()
                ]

    async def effective_units_sold(self, shop_id: str, period: Period) -> int:
        params: list = [shop_id]
        where = _timestamp_range("s.created_at", period, params)
        return await self._scalar(
            "effective_units_sold",
            f"""
            SELECT COALESCE(SUM({EFFECTIVE_QUANTITY}), 0)
            FROM sale_items si
            JOIN sales s ON s.id = si.sale_id
            WHERE s.shop_id = ?{where}
            """,
            params,
        )

    async def stock_positions(self, shop_id: str) -> list[dict]:
        async with translate_errors("stock_positions"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT p.id AS product_id, p.name, p.price, p.stock AS received,
                           COALESCE(SUM({EFFECTIVE_QUANTITY}), 0) AS sold
                    FROM products p
                    LEFT JOIN sale_items si ON si.product_id = p.id
                    WHERE p.shop_id = ?
                    GROUP BY p.id
                    ORDER BY p.name
                    """,
                    (shop_id,),
                )
                return [dict(row) for row in await cursor.fetchall()]

    async def daily_income(self, shop_id: str, period: Period) -> dict[date, float]:
        params: list = [shop_id]
        where = _timestamp_range("s.created_at", period, params)
        async with translate_errors("daily_income"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT substr(s.created_at, 1, 10) AS day,
                           SUM({EFFECTIVE_AMOUNT}) AS income
                    FROM sales s
                    LEFT JOIN invoices i ON i.sale_id = s.id
                    WHERE s.shop_id = ?{where}
                    GROUP BY day
                    """,
                    params,
                )
                return {
                    date.fromisoformat(row["day"]): float(row["income"])
                    for row in await cursor.fetchall()
                }

    async def daily_expenses(self, shop_id: str, period: Period) -> dict[date, float]:
        params: list = [shop_id]
        where = _date_range("expense_date", period, params)
        async with translate_errors("daily_expenses"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    SELECT expense_date AS day, SUM(amount) AS total
                    FROM expenses
                    WHERE shop_id = ?{where}
                    GROUP BY expense_date
                    """,
                    params,
                )
                return {
                    date.fromisoformat(row["day"]): float(row["total"])
                    for row in await cursor.fetchall()
                }
