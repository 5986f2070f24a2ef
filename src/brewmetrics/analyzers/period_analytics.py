"""
Period Analytics — time-bucketed revenue, period comparisons and rankings.

Implements the sales-trend views of the shop dashboard:
- Date range filtering (inclusive on both ends)
- Sales-history search by date, time of day, category and keyword
- Weekday and hourly revenue profiles with peak/low detection
- Previous-period comparison over an equal-length window
- Month / year / quarter period selection shared by every comparison
- Category breakdowns, item rankings and ticket summaries
- Daily, weekly, monthly, quarterly and yearly revenue series

Every function is a pure transformation of the ledger it is given.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, time, timedelta
from enum import Enum
from typing import Union

from brewmetrics.config import AnalyticsConfig
from brewmetrics.models.records import WEEKDAY_ORDER, SaleRecord

logger = logging.getLogger("brewmetrics.analyzers.period_analytics")

DateLike = Union[date, str]
TimeLike = Union[time, str]

# Category filter value that matches every category
ALL_CATEGORIES = "All"


def _as_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _as_minute(value: TimeLike) -> time:
    if isinstance(value, str):
        value = time.fromisoformat(value)
    return value.replace(second=0, microsecond=0)


class PeriodMode(str, Enum):
    """How a comparison period is selected."""

    MONTH = "month"  # YYYY-MM
    YEAR = "year"  # YYYY
    QUARTER = "quarter"  # YYYY-Qn


class Granularity(str, Enum):
    """Revenue series bucket size."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


_QUARTER_RE = re.compile(r"^(\d{4})-Q?([1-4])$", re.IGNORECASE)
_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
_YEAR_RE = re.compile(r"^\d{4}$")


@dataclass(frozen=True)
class PeriodSelector:
    """A calendar month, year or quarter.

    ``matches`` is the single membership predicate used by every period-based
    breakdown, so category and top-item comparisons always agree.
    """

    mode: PeriodMode
    value: str

    @classmethod
    def parse(cls, mode: PeriodMode | str, value: str) -> PeriodSelector:
        """Validate and build a selector.

        Raises:
            ValueError: if the mode is unknown or ``value`` does not fit it.
        """
        mode = PeriodMode(mode)
        value = value.strip()
        if mode == PeriodMode.MONTH and not _MONTH_RE.match(value):
            raise ValueError(f"Month period must be YYYY-MM, got {value!r}")
        if mode == PeriodMode.YEAR and not _YEAR_RE.match(value):
            raise ValueError(f"Year period must be YYYY, got {value!r}")
        if mode == PeriodMode.QUARTER:
            m = _QUARTER_RE.match(value)
            if not m:
                raise ValueError(f"Quarter period must be YYYY-Qn, got {value!r}")
            value = f"{m.group(1)}-Q{m.group(2)}"
        return cls(mode=mode, value=value)

    @property
    def label(self) -> str:
        return self.value

    def matches(self, day: date) -> bool:
        if self.mode == PeriodMode.QUARTER:
            year, quarter = self.value.split("-Q")
            if day.year != int(year):
                return False
            first_month = (int(quarter) - 1) * 3 + 1
            return first_month <= day.month <= first_month + 2
        return day.isoformat().startswith(self.value)


@dataclass
class WeekdayRevenue:
    """Revenue for one weekday bucket."""

    day: str
    revenue: float = 0.0
    is_weekend: bool = False


@dataclass
class HourlyRevenue:
    hour: int
    revenue: float = 0.0


@dataclass
class HourlyProfile:
    """Hourly revenue over an opening-hours window."""

    buckets: list[HourlyRevenue] = field(default_factory=list)
    peak_hour: int | None = None
    low_hour: int | None = None

    def revenue_at(self, hour: int) -> float | None:
        for bucket in self.buckets:
            if bucket.hour == hour:
                return bucket.revenue
        return None


@dataclass
class PeriodComparison:
    """Current window against the equal-length window right before it."""

    current_start: date
    current_end: date
    previous_start: date
    previous_end: date
    diff_days: int
    current_revenue: float
    previous_revenue: float
    revenue_diff: float
    percentage_change: float

    @property
    def increased(self) -> bool:
        return self.revenue_diff >= 0


@dataclass
class SalesSummary:
    revenue: float = 0.0
    count: int = 0
    avg_ticket: int = 0


@dataclass
class ItemQuantity:
    name: str
    quantity: int


@dataclass
class ItemRevenue:
    name: str
    revenue: float


@dataclass
class RevenueBucket:
    """One bucket of a revenue series."""

    key: str
    revenue: float = 0.0
    count: int = 0


@dataclass
class CategoryComparison:
    category: str
    revenue_a: float
    revenue_b: float

    @property
    def diff(self) -> float:
        return self.revenue_b - self.revenue_a


@dataclass
class PeriodCompareResult:
    """Side-by-side view of two calendar periods."""

    period_a: PeriodSelector
    period_b: PeriodSelector
    summary_a: SalesSummary
    summary_b: SalesSummary
    categories: list[CategoryComparison] = field(default_factory=list)
    top_items_a: list[ItemQuantity] = field(default_factory=list)
    top_items_b: list[ItemQuantity] = field(default_factory=list)


def _total_revenue(sales: Iterable[SaleRecord]) -> float:
    return sum((s.revenue for s in sales), 0.0)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _bucket_key(day: date, granularity: Granularity) -> str:
    if granularity == Granularity.DAILY:
        return day.isoformat()
    if granularity == Granularity.WEEKLY:
        return (day - timedelta(days=day.weekday())).isoformat()
    if granularity == Granularity.MONTHLY:
        return f"{day.year:04d}-{day.month:02d}"
    if granularity == Granularity.QUARTERLY:
        return f"{day.year:04d}-Q{(day.month - 1) // 3 + 1}"
    return f"{day.year:04d}"


class PeriodAnalyticsEngine:
    """Aggregate a sales ledger into trend and comparison metrics.

    Usage::

        engine = PeriodAnalyticsEngine()
        window = engine.filter_by_date_range(sales, "2025-11-01", "2025-11-24")
        profile = engine.aggregate_by_hour(window, 8, 22)
        comparison = engine.compute_period_comparison(sales, "2025-11-01", "2025-11-24")
    """

    def __init__(self, config: AnalyticsConfig | None = None) -> None:
        self.config = config or AnalyticsConfig()

    @staticmethod
    def filter_by_date_range(
        sales: Iterable[SaleRecord],
        start_date: DateLike,
        end_date: DateLike,
    ) -> list[SaleRecord]:
        """Sales with ``start_date <= date <= end_date``, as a new list."""
        start, end = _as_date(start_date), _as_date(end_date)
        return [s for s in sales if start <= s.date <= end]

    @staticmethod
    def search_sales(
        sales: Iterable[SaleRecord],
        start_date: DateLike | None = None,
        end_date: DateLike | None = None,
        start_time: TimeLike | None = None,
        end_time: TimeLike | None = None,
        category: str | None = None,
        keyword: str | None = None,
    ) -> list[SaleRecord]:
        """Sales-history query, newest first.

        Every bound is optional and inclusive. Times compare at minute
        precision, so ``end_time="14:00"`` keeps a 14:00:59 sale. A category
        of ``"All"`` matches any category; ``keyword`` is a case-insensitive
        substring of the item name.
        """
        start = _as_date(start_date) if start_date else None
        end = _as_date(end_date) if end_date else None
        from_time = _as_minute(start_time) if start_time else None
        to_time = _as_minute(end_time) if end_time else None
        needle = keyword.casefold() if keyword else None
        any_category = category is None or category == ALL_CATEGORIES

        matched: list[SaleRecord] = []
        for sale in sales:
            if start is not None and sale.date < start:
                continue
            if end is not None and sale.date > end:
                continue
            minute = _as_minute(sale.time)
            if from_time is not None and minute < from_time:
                continue
            if to_time is not None and minute > to_time:
                continue
            if not any_category and sale.category != category:
                continue
            if needle is not None and needle not in sale.item_name.casefold():
                continue
            matched.append(sale)

        matched.sort(key=lambda s: (s.date, s.time), reverse=True)
        return matched


    def aggregate_by_weekday(
        self,
        sales: Iterable[SaleRecord],
        friday_is_weekend: bool | None = None,
    ) -> list[WeekdayRevenue]:
        """Revenue per weekday, always seven buckets in Mon..Sun order."""
        if friday_is_weekend is None:
            friday_is_weekend = self.config.friday_is_weekend
        weekend = {"Sat", "Sun", "Fri"} if friday_is_weekend else {"Sat", "Sun"}

        buckets = {day: WeekdayRevenue(day=day, is_weekend=day in weekend) for day in WEEKDAY_ORDER}
        for sale in sales:
            buckets[sale.weekday].revenue += sale.revenue
        return list(buckets.values())

    @staticmethod
    def aggregate_by_hour(
        sales: Iterable[SaleRecord],
        start_hour: int = 0,
        end_hour: int = 23,
    ) -> HourlyProfile:
        """Hourly revenue limited to ``start_hour..end_hour`` inclusive.

        Peak and low are the first hour (ascending) holding the max / min.
        """
        if not (0 <= start_hour <= 23 and 0 <= end_hour <= 23):
            raise ValueError(f"Hours must be within 0..23, got {start_hour}..{end_hour}")

        buckets = [HourlyRevenue(hour=h) for h in range(24)]
        for sale in sales:
            buckets[sale.hour].revenue += sale.revenue

        window = [b for b in buckets if start_hour <= b.hour <= end_hour]
        profile = HourlyProfile(buckets=window)
        for bucket in window:
            if profile.peak_hour is None or bucket.revenue > buckets[profile.peak_hour].revenue:
                profile.peak_hour = bucket.hour
            if profile.low_hour is None or bucket.revenue < buckets[profile.low_hour].revenue:
                profile.low_hour = bucket.hour
        return profile

    def compute_period_comparison(
        self,
        sales: Sequence[SaleRecord],
        current_start: DateLike,
        current_end: DateLike,
    ) -> PeriodComparison:
        """Compare a window with the same number of days immediately before it.

        Raises:
            ValueError: if ``current_end`` is before ``current_start``.
        """
        start, end = _as_date(current_start), _as_date(current_end)
        if end < start:
            raise ValueError(f"Range end {end} is before start {start}")

        diff_days = (end - start).days + 1
        prev_end = start - timedelta(days=1)
        prev_start = prev_end - timedelta(days=diff_days - 1)

        current = _total_revenue(self.filter_by_date_range(sales, start, end))
        previous = _total_revenue(self.filter_by_date_range(sales, prev_start, prev_end))
        revenue_diff = current - previous
        pct = revenue_diff / previous * 100 if previous != 0 else 0.0

        logger.debug(
            "Period %s..%s (%d days) vs %s..%s: %.0f -> %.0f",
            start, end, diff_days, prev_start, prev_end, previous, current,
        )

        return PeriodComparison(
            current_start=start,
            current_end=end,
            previous_start=prev_start,
            previous_end=prev_end,
            diff_days=diff_days,
            current_revenue=current,
            previous_revenue=previous,
            revenue_diff=revenue_diff,
            percentage_change=pct,
        )

    @staticmethod
    def select_period(sales: Iterable[SaleRecord], selector: PeriodSelector) -> list[SaleRecord]:
        return [s for s in sales if selector.matches(s.date)]

    def aggregate_by_category_for_period(
        self,
        sales: Iterable[SaleRecord],
        selector: PeriodSelector,
    ) -> dict[str, float]:
        """Revenue per category within the selected period, first-seen order."""
        totals: dict[str, float] = {}
        for sale in self.select_period(sales, selector):
            totals[sale.category] = totals.get(sale.category, 0.0) + sale.revenue
        return totals

    def top_items_by_quantity(
        self,
        sales: Iterable[SaleRecord],
        limit: int | None = None,
    ) -> list[ItemQuantity]:
        """Best sellers by summed quantity. Ties keep first-seen order."""
        limit = self.config.top_items_limit if limit is None else limit
        totals: dict[str, int] = {}
        for sale in sales:
            totals[sale.item_name] = totals.get(sale.item_name, 0) + sale.quantity
        ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
        return [ItemQuantity(name=name, quantity=qty) for name, qty in ranked[:limit]]

    @staticmethod
    def revenue_by_item(sales: Iterable[SaleRecord]) -> list[ItemRevenue]:
        """Revenue per item, highest first. Ties keep first-seen order."""
        totals: dict[str, float] = {}
        for sale in sales:
            totals[sale.item_name] = totals.get(sale.item_name, 0.0) + sale.revenue
        ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
        return [ItemRevenue(name=name, revenue=rev) for name, rev in ranked]

    @staticmethod
    def compute_summary(sales: Sequence[SaleRecord]) -> SalesSummary:
        revenue = _total_revenue(sales)
        count = len(sales)
        avg_ticket = _round_half_up(revenue / count) if count > 0 else 0
        return SalesSummary(revenue=revenue, count=count, avg_ticket=avg_ticket)

    @staticmethod
    def revenue_series(
        sales: Iterable[SaleRecord],
        granularity: Granularity | str = Granularity.DAILY,
    ) -> list[RevenueBucket]:
        """Revenue grouped into calendar buckets, sorted by bucket key.

        Only buckets containing sales are returned.
        """
        granularity = Granularity(granularity)
        buckets: dict[str, RevenueBucket] = {}
        for sale in sales:
            key = _bucket_key(sale.date, granularity)
            bucket = buckets.setdefault(key, RevenueBucket(key=key))
            bucket.revenue += sale.revenue
            bucket.count += 1
        return [buckets[k] for k in sorted(buckets)]

    def compare_periods(
        self,
        sales: Sequence[SaleRecord],
        period_a: PeriodSelector,
        period_b: PeriodSelector,
        category: str | None = None,
    ) -> PeriodCompareResult:
        """Summaries, category revenue and top items for two periods.

        ``category`` narrows both periods to a single category.
        """
        if category is not None:
            sales = [s for s in sales if s.category == category]

        sales_a = self.select_period(sales, period_a)
        sales_b = self.select_period(sales, period_b)

        by_cat_a = self.aggregate_by_category_for_period(sales_a, period_a)
        by_cat_b = self.aggregate_by_category_for_period(sales_b, period_b)
        categories = list(dict.fromkeys([*by_cat_a, *by_cat_b]))

        return PeriodCompareResult(
            period_a=period_a,
            period_b=period_b,
            summary_a=self.compute_summary(sales_a),
            summary_b=self.compute_summary(sales_b),
            categories=[
                CategoryComparison(
                    category=cat,
                    revenue_a=by_cat_a.get(cat, 0.0),
                    revenue_b=by_cat_b.get(cat, 0.0),
                )
                for cat in categories
            ],
            top_items_a=self.top_items_by_quantity(sales_a),
            top_items_b=self.top_items_by_quantity(sales_b),
        )
