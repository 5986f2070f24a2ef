"""
Financials — month-to-date profit and loss, utilities and expenditures.

The dashboard estimates ingredient cost as a fixed share of revenue and adds
the month's utility bills on top. Expenditures are split by whether their
proof document qualifies for a tax deduction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from brewmetrics.config import FinancialsConfig
from brewmetrics.models.records import (
    ExpenditureRecord,
    ProofType,
    SaleRecord,
    UtilityExpense,
    UtilityKind,
)

logger = logging.getLogger("brewmetrics.analyzers.financials")


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date
    days: int

    @property
    def empty(self) -> bool:
        return self.days == 0


@dataclass
class FinancialMetrics:
    """Profit and loss over a date range."""

    total_revenue: float = 0.0
    estimated_cogs: float = 0.0
    total_utilities: float = 0.0
    total_cost: float = 0.0
    net_profit: float = 0.0
    profit_margin: float = 0.0
    cost_ratio: float = 0.0
    avg_daily_revenue: float = 0.0
    avg_daily_cost: float = 0.0


@dataclass
class ExpenditureSummary:
    total: float = 0.0
    deductible_total: float = 0.0
    non_deductible_total: float = 0.0
    by_proof_type: dict[str, float] = field(default_factory=dict)
    count: int = 0


def month_to_date_range(today: date) -> DateRange:
    """First of the month through yesterday.

    On the first of a month nothing has elapsed yet, so the range is empty
    (``days == 0``).
    """
    start = today.replace(day=1)
    end = today - timedelta(days=1)
    if end < start:
        return DateRange(start=start, end=start, days=0)
    return DateRange(start=start, end=end, days=(end - start).days + 1)


def compute_financial_metrics(
    sales: Iterable[SaleRecord],
    utilities: Iterable[UtilityExpense],
    date_range: DateRange,
    config: FinancialsConfig | None = None,
) -> FinancialMetrics:
    """Revenue, estimated cost and profit over ``date_range``.

    Utilities are those billed for the month ``date_range.start`` falls in.
    Every ratio and daily average is zero-guarded.
    """
    config = config or FinancialsConfig()

    if date_range.empty:
        period_sales: list[SaleRecord] = []
    else:
        period_sales = [s for s in sales if date_range.start <= s.date <= date_range.end]
    revenue = sum((s.revenue for s in period_sales), 0.0)
    estimated_cogs = revenue * config.estimated_cogs_ratio

    month_key = f"{date_range.start.year:04d}-{date_range.start.month:02d}"
    total_utilities = sum((u.amount for u in utilities if u.month == month_key), 0.0)

    total_cost = estimated_cogs + (total_utilities if config.include_utilities else 0.0)
    net_profit = revenue - total_cost
    days = date_range.days or 1

    return FinancialMetrics(
        total_revenue=revenue,
        estimated_cogs=estimated_cogs,
        total_utilities=total_utilities,
        total_cost=total_cost,
        net_profit=net_profit,
        profit_margin=net_profit / revenue * 100 if revenue > 0 else 0.0,
        cost_ratio=total_cost / revenue * 100 if revenue > 0 else 0.0,
        avg_daily_revenue=revenue / days,
        avg_daily_cost=total_cost / days,
    )


def carry_over_recurring(
    previous_items: Sequence[UtilityExpense],
    month: str,
    id_factory: Callable[[], str],
) -> list[UtilityExpense]:
    """Copy last month's recurring utilities into ``month`` with new ids."""
    carried = [
        UtilityExpense.model_validate({**item.model_dump(), "id": id_factory(), "month": month})
        for item in previous_items
        if item.kind == UtilityKind.RECURRING
    ]
    logger.debug("Carried %d recurring utilities into %s", len(carried), month)
    return carried


def summarize_expenditures(
    records: Iterable[ExpenditureRecord],
    start: date | None = None,
    end: date | None = None,
) -> ExpenditureSummary:
    """Totals by proof type and by deductibility, optionally date-bounded."""
    summary = ExpenditureSummary(by_proof_type={p.value: 0.0 for p in ProofType})
    for record in records:
        if start is not None and record.date < start:
            continue
        if end is not None and record.date > end:
            continue
        summary.count += 1
        summary.total += record.amount
        summary.by_proof_type[record.proof_type.value] += record.amount
        if record.deductible:
            summary.deductible_total += record.amount
        else:
            summary.non_deductible_total += record.amount
    return summary
