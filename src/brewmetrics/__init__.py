"""
BrewMetrics — cost, margin and sales analytics for coffee shops.

Recipe costing, stock coverage and period-over-period revenue analysis
over plain sales, inventory and recipe records.
"""

__version__ = "0.1.0"
__all__ = [
    "InventoryHealthEngine",
    "PeriodAnalyticsEngine",
    "RecipeCostEngine",
]

from brewmetrics.analyzers.inventory_health import InventoryHealthEngine  # noqa: E402
from brewmetrics.analyzers.period_analytics import PeriodAnalyticsEngine  # noqa: E402
from brewmetrics.analyzers.recipe_costing import RecipeCostEngine  # noqa: E402
