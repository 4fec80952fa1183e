"""
Query projections: cached read models derived from the ledger.

Each projection declares which entity types it depends on. A change event for
one of them marks that shop's cached results stale; the next read recomputes
from the ledger. Nothing is updated incrementally.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, ClassVar, Generic, TypeVar

from shopledger.config import get_logger
from shopledger.config.settings import ProjectionSettings
from shopledger.core.entities.catalog import ExpenseType
from shopledger.core.entities.events import ChangeEvent, EntityType
from shopledger.core.entities.reporting import (
    BestSeller,
    DashboardStats,
    FinancialDay,
    FinancialReport,
    InventoryLine,
    Period,
    RecentOrder,
    StockStatus,
    StockSummary,
)
from shopledger.core.exceptions import StoreError
from shopledger.core.interfaces.reporting_store import IReportingStore

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class _CacheEntry(Generic[T]):
    value: T
    computed_at: float
    stale: bool = False


def _freeze(value: Any) -> Any:
    if isinstance(value, Period):
        return value.cache_key()
    if isinstance(value, list | tuple):
        return tuple(_freeze(v) for v in value)
    return value


class Projection(ABC, Generic[T]):
    """
    Base class for a cached read model.

    Subclasses set ``name`` and ``depends_on`` and implement ``compute``.
    Results are cached per shop and per call parameters, at most
    ``max_entries`` parameter sets per shop.
    """

    name: ClassVar[str]
    depends_on: ClassVar[frozenset[EntityType]]

    def __init__(
        self,
        store: IReportingStore,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 32,
    ):
        self._store = store
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._cache: dict[str, dict[tuple, _CacheEntry[T]]] = {}
        # Bumped by every invalidation of a shop
        self._generations: dict[str, int] = {}

    @abstractmethod
    async def compute(self, shop_id: str, **params: Any) -> T:
        """Derive the read model from the ledger."""
        pass

    async def get(self, shop_id: str, **params: Any) -> T:
        """
        Return the cached value, recomputing it when stale or expired.

        If a recompute fails with a store error the previous value is served
        and stays stale, so the next read retries. Without a previous value
        the error propagates. A result whose shop was invalidated while it
        was being computed is returned but cached as stale.
        """
        key = tuple(sorted((k, _freeze(v)) for k, v in params.items()))
        entries = self._cache.setdefault(shop_id, {})
        entry = entries.get(key)

        if entry is not None and self._is_fresh(entry):
            return entry.value

        generation = self._generations.get(shop_id, 0)
        try:
            value = await self.compute(shop_id, **params)
        except StoreError as e:
            logger.warning(
                "projection_recompute_failed",
                projection=self.name,
                shop_id=shop_id,
                error=str(e),
                serving_stale=entry is not None,
            )
            if entry is None:
                raise
            return entry.value

        entries[key] = _CacheEntry(
            value=value,
            computed_at=self._clock(),
            stale=self._generations.get(shop_id, 0) != generation,
        )
        self._evict(entries, keep=key)
        return value

    def invalidate(self, shop_id: str) -> None:
        """Mark every cached result of a shop stale."""
        self._generations[shop_id] = self._generations.get(shop_id, 0) + 1
        for entry in self._cache.get(shop_id, {}).values():
            entry.stale = True

    def handle_event(self, event: ChangeEvent) -> None:
        if event.entity_type in self.depends_on:
            self.invalidate(event.shop_id)

    def is_stale(self, shop_id: str, **params: Any) -> bool:
        key = tuple(sorted((k, _freeze(v)) for k, v in params.items()))
        entry = self._cache.get(shop_id, {}).get(key)
        return entry is None or not self._is_fresh(entry)

    def cached_entries(self, shop_id: str) -> int:
        return len(self._cache.get(shop_id, {}))

    def _is_fresh(self, entry: _CacheEntry[T]) -> bool:
        if entry.stale:
            return False
        return self._clock() - entry.computed_at < self.ttl_seconds

    def _evict(self, entries: dict[tuple, _CacheEntry[T]], keep: tuple) -> None:
        """Trim a shop's cache to max_entries, dropping unusable then oldest entries."""
        if len(entries) <= self.max_entries:
            return
        for key in [k for k, e in entries.items() if k != keep and not self._is_fresh(e)]:
            del entries[key]
        while len(entries) > self.max_entries:
            oldest = min(
                (k for k in entries if k != keep),
                key=lambda k: entries[k].computed_at,
            )
            del entries[oldest]


# =============================================================================
# Read models
# =============================================================================


class DashboardStatsProjection(Projection[DashboardStats]):
    """Headline counts and totals for the dashboard."""

    name = "dashboard_stats"
    depends_on = frozenset(
        {
            EntityType.INVOICES,
            EntityType.INVOICE_MODIFICATIONS,
            EntityType.SALES,
            EntityType.PRODUCTS,
            EntityType.EXPENSES,
            EntityType.STAFF,
        }
    )

    async def compute(self, shop_id: str, period: Period | None = None) -> DashboardStats:
        period = period or Period()
        return DashboardStats(
            products=await self._store.count_products(shop_id),
            sales=await self._store.sum_effective_sales(shop_id, period),
            staff=await self._store.count_staff(shop_id),
            expenses_total=await self._store.sum_expenses(shop_id, period),
            expenses_stock=await self._store.sum_expenses(
                shop_id, period, ExpenseType.STOCK_PURCHASE
            ),
        )


class RecentOrdersProjection(Projection[list[RecentOrder]]):
    name = "recent_orders"
    depends_on = frozenset(
        {EntityType.INVOICES, EntityType.INVOICE_MODIFICATIONS, EntityType.SALES}
    )

    async def compute(self, shop_id: str, limit: int = 5) -> list[RecentOrder]:
        return await self._store.recent_orders(shop_id, limit)


class BestSellersProjection(Projection[list[BestSeller]]):
    """Products ranked by effective units sold."""

    name = "best_sellers"
    depends_on = frozenset(
        {EntityType.SALES, EntityType.SALE_ITEMS, EntityType.PRODUCTS}
    )

    async def compute(
        self, shop_id: str, period: Period | None = None, limit: int = 10
    ) -> list[BestSeller]:
        return await self._store.best_sellers(shop_id, period or Period(), limit)


class StockSummaryProjection(Projection[StockSummary]):
    """Income, expenses and stock movement for a period."""

    name = "stock_summary"
    depends_on = frozenset(
        {
            EntityType.INVOICES,
            EntityType.INVOICE_MODIFICATIONS,
            EntityType.SALES,
            EntityType.SALE_ITEMS,
            EntityType.EXPENSES,
        }
    )

    async def compute(self, shop_id: str, period: Period | None = None) -> StockSummary:
        period = period or Period()
        return StockSummary(
            total_income=await self._store.sum_effective_sales(shop_id, period),
            total_expenses=await self._store.sum_expenses(shop_id, period),
            stock_in_value=await self._store.sum_expenses(
                shop_id, period, ExpenseType.STOCK_PURCHASE
            ),
            stock_out_units=await self._store.effective_units_sold(shop_id, period),
        )


class InventoryReportProjection(Projection[list[InventoryLine]]):
    """Per-product stock position and status."""

    name = "inventory"
    depends_on = frozenset(
        {EntityType.PRODUCTS, EntityType.SALES, EntityType.SALE_ITEMS}
    )

    def __init__(
        self,
        store: IReportingStore,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 32,
        low_stock_threshold: int = 10,
    ):
        super().__init__(store, ttl_seconds, clock, max_entries)
        self.low_stock_threshold = low_stock_threshold

    def stock_status(self, on_hand: int) -> StockStatus:
        if on_hand <= 0:
            return StockStatus.OUT
        if on_hand < self.low_stock_threshold:
            return StockStatus.LOW
        return StockStatus.IN_STOCK

    async def compute(self, shop_id: str) -> list[InventoryLine]:
        lines = []
        for row in await self._store.stock_positions(shop_id):
            on_hand = row["received"] - row["sold"]
            lines.append(
                InventoryLine(
                    product_id=row["product_id"],
                    name=row["name"],
                    price=row["price"],
                    received=row["received"],
                    sold=row["sold"],
                    on_hand=on_hand,
                    status=self.stock_status(on_hand),
                )
            )
        return lines


class FinancialReportProjection(Projection[FinancialReport]):
    """Daily income and expenses over a period."""

    name = "financial"
    depends_on = frozenset(
        {
            EntityType.EXPENSES,
            EntityType.INVOICES,
            EntityType.INVOICE_MODIFICATIONS,
            EntityType.SALES,
        }
    )

    async def compute(self, shop_id: str, period: Period | None = None) -> FinancialReport:
        period = period or Period()
        income = await self._store.daily_income(shop_id, period)
        expenses = await self._store.daily_expenses(shop_id, period)

        days = sorted(set(income) | set(expenses))
        # Fill gaps so bounded periods chart as a continuous series
        if period.start is not None and period.end is not None:
            day = period.start.date()
            last = (period.end - timedelta(microseconds=1)).date()
            days = []
            while day <= last:
                days.append(day)
                day += timedelta(days=1)

        return FinancialReport(
            days=[
                FinancialDay(
                    day=day,
                    income=income.get(day, 0.0),
                    expenses=expenses.get(day, 0.0),
                )
                for day in days
            ],
            total_income=sum(income.values()),
            total_expenses=sum(expenses.values()),
        )


# =============================================================================
# Registry
# =============================================================================


class ProjectionRegistry:
    """Owns the projections of one process and wires them to a fanout."""

    def __init__(self, projections: Iterable[Projection]):
        self._projections: dict[str, Projection] = {p.name: p for p in projections}

    @classmethod
    def from_settings(
        cls, store: IReportingStore, settings: ProjectionSettings
    ) -> "ProjectionRegistry":
        def build(projection_cls: type[Projection], **extra: Any) -> Projection:
            return projection_cls(
                store,
                settings.ttl_for(projection_cls.name),
                max_entries=settings.max_cached_entries,
                **extra,
            )

        return cls(
            [
                build(DashboardStatsProjection),
                build(RecentOrdersProjection),
                build(BestSellersProjection),
                build(StockSummaryProjection),
                build(
                    InventoryReportProjection,
                    low_stock_threshold=settings.low_stock_threshold,
                ),
                build(FinancialReportProjection),
            ]
        )

    def __getitem__(self, name: str) -> Projection:
        return self._projections[name]

    def __iter__(self):
        return iter(self._projections.values())

    def attach(self, fanout) -> list:
        """Subscribe every projection to the entity types it depends on."""
        return [
            fanout.subscribe(
                projection.depends_on,
                projection.handle_event,
                name=f"projection:{projection.name}",
            )
            for projection in self._projections.values()
        ]
