"""Read-model entities and reporting periods."""

from datetime import UTC, date, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field

from shopledger.core.exceptions import ValidationError


class DateFilter(str, Enum):
    """Named reporting windows used by the dashboard and reports."""

    DAILY = "daily"
    YESTERDAY = "yesterday"
    MONTHLY = "monthly"
    ALL = "all"


class Period(BaseModel):
    """Half-open UTC time range [start, end). Unbounded sides are None."""

    start: datetime | None = None
    end: datetime | None = None

    def cache_key(self) -> tuple[str | None, str | None]:
        return (
            self.start.isoformat() if self.start else None,
            self.end.isoformat() if self.end else None,
        )


def _start_of_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=UTC)


def resolve_period(
    date_filter: DateFilter = DateFilter.ALL,
    reference: date | None = None,
    start: date | None = None,
    end: date | None = None,
    max_days: int | None = None,
) -> Period:
    """
    Resolve a named filter (or an explicit inclusive date range) to a Period.

    An explicit start/end takes precedence over the named filter; ``end`` is
    inclusive of the whole day. A range ending before it starts, or spanning
    more than ``max_days`` days, raises ValidationError.
    """
    if start is not None or end is not None:
        if start is not None and end is not None:
            if end < start:
                raise ValidationError("end", "End date is before start date", end)
            span = (end - start).days + 1
            if max_days is not None and span > max_days:
                raise ValidationError(
                    "end", f"Date range is limited to {max_days} days", span
                )
        if end == date.max:
            raise ValidationError("end", "End date is out of range", end)
        return Period(
            start=_start_of_day(start) if start else None,
            end=_start_of_day(end) + timedelta(days=1) if end else None,
        )

    reference = reference or datetime.now(UTC).date()

    if date_filter == DateFilter.DAILY:
        day_start = _start_of_day(reference)
        return Period(start=day_start, end=day_start + timedelta(days=1))

    if date_filter == DateFilter.YESTERDAY:
        day_start = _start_of_day(reference - timedelta(days=1))
        return Period(start=day_start, end=day_start + timedelta(days=1))

    if date_filter == DateFilter.MONTHLY:
        month_start = _start_of_day(reference.replace(day=1))
        if reference.month == 12:
            next_month = reference.replace(year=reference.year + 1, month=1, day=1)
        else:
            next_month = reference.replace(month=reference.month + 1, day=1)
        return Period(start=month_start, end=_start_of_day(next_month))

    return Period()


class DashboardStats(BaseModel):
    """Headline numbers for the dashboard cards."""

    products: int = 0
    sales: float = 0.0  # effective invoice totals
    staff: int = 0
    expenses_total: float = 0.0
    expenses_stock: float = 0.0

    @property
    def profit(self) -> float:
        return self.sales - self.expenses_total


class RecentOrder(BaseModel):
    """An invoice as shown in the recent orders list."""

    invoice_id: str
    invoice_number: str
    customer_name: str
    amount: float  # effective amount
    is_modified: bool
    created_at: datetime


class BestSeller(BaseModel):
    """Effective units and revenue for one product."""

    product_id: str
    product_name: str
    total_quantity: int
    total_revenue: float


class StockSummary(BaseModel):
    """Income, expenses and stock flow for a period."""

    total_income: float = 0.0
    total_expenses: float = 0.0
    stock_in_value: float = 0.0
    stock_out_units: int = 0

    @property
    def profit(self) -> float:
        return self.total_income - self.total_expenses


class StockStatus(str, Enum):
    OUT = "out"
    LOW = "low"
    IN_STOCK = "in_stock"


class InventoryLine(BaseModel):
    """Stock position of one product."""

    product_id: str
    name: str
    price: float
    received: int
    sold: int  # effective units sold
    on_hand: int
    status: StockStatus


class FinancialDay(BaseModel):
    """Per-day income and expenses."""

    day: date
    income: float = 0.0
    expenses: float = 0.0


class FinancialReport(BaseModel):
    """Daily series plus totals for a period."""

    days: list[FinancialDay] = Field(default_factory=list)
    total_income: float = 0.0
    total_expenses: float = 0.0
