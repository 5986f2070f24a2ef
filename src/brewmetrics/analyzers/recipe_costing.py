"""
Recipe Costing — ingredient cost, plate cost and COGS ratio for menu items.

Provides:
- Unit price per purchase lot
- Recipe (bill of materials) cost with optional waste gross-up
- COGS ratio and three-band classification
- Per-recipe breakdowns and menu-wide sorting
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Union

from brewmetrics.config import CostingConfig
from brewmetrics.models.records import MenuRecipe, RawMaterial, RecipeIngredient

logger = logging.getLogger("brewmetrics.analyzers.recipe_costing")

MaterialLookup = Union[Mapping[str, RawMaterial], Iterable[RawMaterial]]


class CogsStatus(str, Enum):
    """COGS ratio band."""

    HEALTHY = "healthy"  # below 20%
    WATCH = "watch"  # 20% up to 30%
    CRITICAL = "critical"  # 30% and above


@dataclass
class IngredientCostLine:
    """Cost of one recipe line."""

    material_id: str
    material_name: str | None
    quantity_used: Decimal
    unit_price: Decimal
    cost: Decimal
    resolved: bool


@dataclass
class RecipeCostAnalysis:
    """Detailed cost analysis for a recipe."""

    recipe_id: str
    recipe_name: str
    category: str
    sale_price: Decimal
    total_cost: Decimal
    cogs_ratio: float
    status: CogsStatus
    lines: list[IngredientCostLine] = field(default_factory=list)

    @property
    def gross_profit(self) -> Decimal:
        return self.sale_price - self.total_cost

    @property
    def unresolved_materials(self) -> list[str]:
        """Material ids the recipe references that no longer exist."""
        return [line.material_id for line in self.lines if not line.resolved]


def _index_materials(materials: MaterialLookup) -> Mapping[str, RawMaterial]:
    if isinstance(materials, Mapping):
        return materials
    return {m.id: m for m in materials}


class RecipeCostEngine:
    """Compute recipe costs and COGS ratios.

    The engine holds only its banding configuration, so one instance can be
    shared freely. All divisions are zero-guarded.

    Usage::

        engine = RecipeCostEngine()
        bean = RawMaterial(id="bean", name="Bean", purchase_price=15000, purchase_unit_qty=1000)
        cost = engine.compute_recipe_cost(
            [RecipeIngredient(material_id="bean", quantity_used=20)], [bean]
        )
        ratio = engine.compute_cogs_ratio(cost, 4000)  # 7.5
        engine.classify_cogs_ratio(ratio)  # CogsStatus.HEALTHY
    """

    def __init__(self, config: CostingConfig | None = None) -> None:
        self.config = config or CostingConfig()

    @staticmethod
    def compute_unit_price(material: RawMaterial) -> Decimal:
        """Price per unit of measure; exactly 0 for a zero lot size."""
        if material.purchase_unit_qty == 0:
            return Decimal("0")
        return material.purchase_price / material.purchase_unit_qty

    @staticmethod
    def _line_cost(ingredient: RecipeIngredient, unit_price: Decimal, apply_waste: bool) -> Decimal:
        cost = unit_price * ingredient.quantity_used
        if not apply_waste or ingredient.waste_pct == 0:
            return cost
        usable = 1 - Decimal(str(ingredient.waste_pct))
        if usable <= 0:
            logger.debug("Waste of %.2f leaves no usable yield for %s", ingredient.waste_pct, ingredient.material_id)
            return Decimal("0")
        return cost / usable

    def compute_recipe_cost(
        self,
        ingredients: Iterable[RecipeIngredient],
        materials: MaterialLookup,
        *,
        apply_waste: bool = False,
    ) -> Decimal:
        """Sum of unit price times quantity over the bill of materials.

        Ingredients whose material cannot be resolved contribute 0.
        """
        lookup = _index_materials(materials)
        total = Decimal("0")
        for ingredient in ingredients:
            material = lookup.get(ingredient.material_id)
            if material is None:
                logger.debug("Skipping dangling material reference: %s", ingredient.material_id)
                continue
            total += self._line_cost(ingredient, self.compute_unit_price(material), apply_waste)
        return total

    @staticmethod
    def compute_cogs_ratio(recipe_cost: Decimal | float, sale_price: Decimal | float) -> float:
        """Cost as a percentage of sale price; 0 when the price is not positive."""
        if sale_price > 0:
            return float(Decimal(str(recipe_cost)) / Decimal(str(sale_price)) * 100)
        return 0.0

    def classify_cogs_ratio(self, ratio: float) -> CogsStatus:
        if ratio >= self.config.critical_from:
            return CogsStatus.CRITICAL
        if ratio >= self.config.healthy_below:
            return CogsStatus.WATCH
        return CogsStatus.HEALTHY

    def analyze_recipe(
        self,
        recipe: MenuRecipe,
        materials: MaterialLookup,
        *,
        apply_waste: bool = False,
    ) -> RecipeCostAnalysis:
        """Generate a line-by-line cost analysis for a recipe."""
        lookup = _index_materials(materials)

        lines: list[IngredientCostLine] = []
        for ingredient in recipe.ingredients:
            material = lookup.get(ingredient.material_id)
            unit_price = self.compute_unit_price(material) if material else Decimal("0")
            cost = self._line_cost(ingredient, unit_price, apply_waste) if material else Decimal("0")
            lines.append(IngredientCostLine(
                material_id=ingredient.material_id,
                material_name=material.name if material else None,
                quantity_used=ingredient.quantity_used,
                unit_price=unit_price,
                cost=cost,
                resolved=material is not None,
            ))

        total = sum((line.cost for line in lines), Decimal("0"))
        ratio = self.compute_cogs_ratio(total, recipe.sale_price)

        return RecipeCostAnalysis(
            recipe_id=recipe.id,
            recipe_name=recipe.name,
            category=recipe.category,
            sale_price=recipe.sale_price,
            total_cost=total,
            cogs_ratio=ratio,
            status=self.classify_cogs_ratio(ratio),
            lines=lines,
        )

    def analyze_menu(
        self,
        recipes: Iterable[MenuRecipe],
        materials: MaterialLookup,
        sort_by: str = "name",
        descending: bool = False,
        *,
        apply_waste: bool = False,
    ) -> list[RecipeCostAnalysis]:
        """Analyze every recipe, sorted by name or by COGS ratio."""
        if sort_by not in ("name", "cogs"):
            raise ValueError(f"Unknown sort key: {sort_by}")

        lookup = _index_materials(materials)
        analyses = [self.analyze_recipe(r, lookup, apply_waste=apply_waste) for r in recipes]

        if sort_by == "name":
            return sorted(analyses, key=lambda a: a.recipe_name.casefold(), reverse=descending)
        return sorted(analyses, key=lambda a: a.cogs_ratio, reverse=descending)

    @staticmethod
    def menu_summary(analyses: list[RecipeCostAnalysis]) -> dict[str, Any]:
        """Status counts and average ratio over priced recipes."""
        priced = [a for a in analyses if a.sale_price > 0]
        counts = {status.value: 0 for status in CogsStatus}
        for a in priced:
            counts[a.status.value] += 1

        return {
            "recipe_count": len(analyses),
            "priced_recipes": len(priced),
            "avg_cogs_ratio": sum(a.cogs_ratio for a in priced) / len(priced) if priced else 0.0,
            "status_counts": counts,
            "dangling_references": sum(len(a.unresolved_materials) for a in analyses),
        }
