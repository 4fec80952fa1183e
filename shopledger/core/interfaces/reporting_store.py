"""Abstract interface for read-only aggregation queries.

Every method re-derives its numbers from the ledger. Implementations apply the
effective amount rule (modified invoices count at new_total_amount, others at
the sale's original total) and the effective quantity rule (quantity minus
returned_quantity) themselves.
"""

from abc import ABC, abstractmethod
from datetime import date

from shopledger.core.entities.catalog import ExpenseType
from shopledger.core.entities.reporting import BestSeller, Period, RecentOrder


class IReportingStore(ABC):
    """Read-only queries backing the query projections."""

    @abstractmethod
    async def count_products(self, shop_id: str) -> int:
        pass

    @abstractmethod
    async def count_staff(self, shop_id: str) -> int:
        pass

    @abstractmethod
    async def sum_effective_sales(self, shop_id: str, period: Period) -> float:
        """Sum of effective invoice amounts created in the period."""
        pass

    @abstractmethod
    async def sum_expenses(
        self,
        shop_id: str,
        period: Period,
        expense_type: ExpenseType | None = None,
    ) -> float:
        pass

    @abstractmethod
    async def recent_orders(self, shop_id: str, limit: int) -> list[RecentOrder]:
        pass

    @abstractmethod
    async def best_sellers(
        self, shop_id: str, period: Period, limit: int
    ) -> list[BestSeller]:
        pass

    @abstractmethod
    async def effective_units_sold(self, shop_id: str, period: Period) -> int:
        pass

    @abstractmethod
    async def stock_positions(self, shop_id: str) -> list[dict]:
        """Rows of product_id, name, price, received, sold (effective)."""
        pass

    @abstractmethod
    async def daily_income(self, shop_id: str, period: Period) -> dict[date, float]:
        pass

    @abstractmethod
    async def daily_expenses(self, shop_id: str, period: Period) -> dict[date, float]:
        pass
