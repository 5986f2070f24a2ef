"""
BrewMetrics analyzers — pure computation modules.

Each engine takes plain records and returns plain computed records. None of
them performs I/O or keeps state between calls.
"""

from brewmetrics.analyzers.financials import (
    DateRange,
    ExpenditureSummary,
    FinancialMetrics,
    carry_over_recurring,
    compute_financial_metrics,
    month_to_date_range,
    summarize_expenditures,
)
from brewmetrics.analyzers.inventory_health import (
    InventoryHealthEngine,
    ReorderPoint,
    StockHealth,
    StockStatus,
)
from brewmetrics.analyzers.period_analytics import (
    Granularity,
    HourlyProfile,
    PeriodAnalyticsEngine,
    PeriodComparison,
    PeriodCompareResult,
    PeriodMode,
    PeriodSelector,
    SalesSummary,
)
from brewmetrics.analyzers.recipe_costing import (
    CogsStatus,
    RecipeCostAnalysis,
    RecipeCostEngine,
)

__all__ = [
    "CogsStatus",
    "DateRange",
    "ExpenditureSummary",
    "FinancialMetrics",
    "Granularity",
    "HourlyProfile",
    "InventoryHealthEngine",
    "PeriodAnalyticsEngine",
    "PeriodComparison",
    "PeriodCompareResult",
    "PeriodMode",
    "PeriodSelector",
    "RecipeCostAnalysis",
    "RecipeCostEngine",
    "ReorderPoint",
    "SalesSummary",
    "StockHealth",
    "StockStatus",
    "carry_over_recurring",
    "compute_financial_metrics",
    "month_to_date_range",
    "summarize_expenditures",
]
