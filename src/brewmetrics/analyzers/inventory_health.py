"""
Inventory Health — stock coverage, status and reorder timing.

Provides:
- Days of cover from current stock and average daily usage
- Critical / warning / sufficient classification against lead time
- Reorder point as a structured value (no display formatting)
- Average daily usage estimated from sales and recipe BOMs
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum

from brewmetrics.config import InventoryConfig
from brewmetrics.models.records import InventoryItem, MenuRecipe, SaleRecord

logger = logging.getLogger("brewmetrics.analyzers.inventory_health")


class StockStatus(str, Enum):
    """Stock coverage status relative to supplier lead time."""

    CRITICAL = "critical"  # runs out before a new order can arrive
    WARNING = "warning"  # within the early-warning buffer past lead time
    SUFFICIENT = "sufficient"


@dataclass(frozen=True)
class ReorderPoint:
    """When to place the next order.

    ``lead_time_days`` is the number of days before stock-out the order must
    go out. The dates are only known when coverage is finite.
    """

    lead_time_days: int
    stockout_date: date | None = None
    order_by: date | None = None

    def is_due(self, today: date) -> bool:
        """True once ``today`` has reached the order-by date."""
        return self.order_by is not None and today >= self.order_by


@dataclass
class StockHealth:
    """Assessment row for one inventory item."""

    item_id: str
    item_name: str
    current_stock: Decimal
    avg_daily_usage: Decimal | None
    days_cover: float | None  # None means infinite cover
    status: StockStatus
    reorder_point: ReorderPoint
    below_safety_stock: bool
    over_max_stock: bool

    @property
    def d_day(self) -> int | None:
        """Whole days until stock-out, or None for infinite cover."""
        if self.days_cover is None:
            return None
        return math.floor(self.days_cover)


class InventoryHealthEngine:
    """Compute stock coverage and reorder status.

    Usage::

        engine = InventoryHealthEngine()
        cover = engine.compute_days_cover(5000, 1000)  # 5.0
        engine.classify_stock_status(cover, lead_time_days=3)  # StockStatus.WARNING
    """

    def __init__(self, config: InventoryConfig | None = None) -> None:
        self.config = config or InventoryConfig()

    @staticmethod
    def compute_days_cover(
        current_stock: Decimal | float,
        avg_daily_usage: Decimal | float | None,
    ) -> float | None:
        """Days the stock lasts at the given usage; None when usage is not positive.

        Negative stock yields a negative cover, it is not clamped.
        """
        if avg_daily_usage is None or avg_daily_usage <= 0:
            return None
        return float(Decimal(str(current_stock)) / Decimal(str(avg_daily_usage)))

    def classify_stock_status(self, days_cover: float | None, lead_time_days: float) -> StockStatus:
        if days_cover is None:
            return StockStatus.SUFFICIENT
        if days_cover < lead_time_days:
            return StockStatus.CRITICAL
        if days_cover < lead_time_days + self.config.warning_buffer_days:
            return StockStatus.WARNING
        return StockStatus.SUFFICIENT

    @staticmethod
    def reorder_point(
        today: date,
        lead_time_days: int,
        days_cover: float | None = None,
    ) -> ReorderPoint:
        """Reorder timing: order ``lead_time_days`` before the projected stock-out."""
        if days_cover is None:
            return ReorderPoint(lead_time_days=lead_time_days)
        stockout = today + timedelta(days=math.floor(days_cover))
        return ReorderPoint(
            lead_time_days=lead_time_days,
            stockout_date=stockout,
            order_by=stockout - timedelta(days=lead_time_days),
        )

    def assess_item(self, item: InventoryItem, today: date) -> StockHealth:
        cover = self.compute_days_cover(item.current_stock, item.avg_daily_usage)
        if item.current_stock < 0:
            logger.debug("Negative stock for %s: %s", item.id, item.current_stock)
        return StockHealth(
            item_id=item.id,
            item_name=item.name,
            current_stock=item.current_stock,
            avg_daily_usage=item.avg_daily_usage,
            days_cover=cover,
            status=self.classify_stock_status(cover, item.lead_time_days),
            reorder_point=self.reorder_point(today, item.lead_time_days, cover),
            below_safety_stock=item.current_stock < item.safety_stock,
            over_max_stock=item.max_stock is not None and item.current_stock > item.max_stock,
        )

    def assess_inventory(self, items: Iterable[InventoryItem], today: date) -> list[StockHealth]:
        """Assess every item, keeping input order."""
        return [self.assess_item(item, today) for item in items]

    @staticmethod
    def estimate_daily_usage(
        sales: Iterable[SaleRecord],
        recipes: Mapping[str, MenuRecipe],
        days: int,
    ) -> dict[str, Decimal]:
        """Average daily consumption per material id.

        Args:
            sales: Sales over the observation window.
            recipes: Recipes keyed by the menu item name used on sales.
            days: Length of the observation window.

        Returns:
            Dict of material_id -> average units used per day. Empty when
            ``days`` is not positive.
        """
        if days <= 0:
            return {}

        totals: dict[str, Decimal] = {}
        unmatched: set[str] = set()
        for sale in sales:
            recipe = recipes.get(sale.item_name)
            if recipe is None:
                unmatched.add(sale.item_name)
                continue
            for ingredient in recipe.ingredients:
                used = ingredient.quantity_used * sale.quantity
                totals[ingredient.material_id] = totals.get(ingredient.material_id, Decimal("0")) + used

        if unmatched:
            logger.debug("No recipe for %d sold items: %s", len(unmatched), sorted(unmatched))

        return {material_id: total / days for material_id, total in totals.items()}
