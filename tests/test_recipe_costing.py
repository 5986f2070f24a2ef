"""Tests for the recipe cost engine."""

from __future__ import annotations

from decimal import Decimal

import pytest

from brewmetrics.analyzers.recipe_costing import CogsStatus, RecipeCostEngine
from brewmetrics.config import CostingConfig
from brewmetrics.models.records import MenuRecipe, RawMaterial, RecipeIngredient

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> RecipeCostEngine:
    return RecipeCostEngine()


@pytest.fixture
def materials() -> list[RawMaterial]:
    return [
        RawMaterial(id="bean", name="Espresso Bean", purchase_price=15000, purchase_unit_qty=1000, unit="g"),
        RawMaterial(id="milk", name="Milk", purchase_price=2800, purchase_unit_qty=1000, unit="ml"),
        RawMaterial(id="cup", name="Ice Cup", purchase_price=5000, purchase_unit_qty=100, unit="ea"),
    ]


@pytest.fixture
def latte() -> MenuRecipe:
    return MenuRecipe(
        id="latte",
        name="Caffe Latte",
        sale_price=4500,
        category="Coffee",
        ingredients=(
            RecipeIngredient(material_id="bean", quantity_used=20, waste_pct=0.05),
            RecipeIngredient(material_id="milk", quantity_used=200, waste_pct=0.02),
            RecipeIngredient(material_id="cup", quantity_used=1),
        ),
    )


class TestUnitPrice:
    def test_price_per_unit(self, engine: RecipeCostEngine) -> None:
        bean = RawMaterial(id="bean", name="Bean", purchase_price=15000, purchase_unit_qty=1000)
        assert engine.compute_unit_price(bean) == 15.0

    def test_zero_lot_size_is_zero(self, engine: RecipeCostEngine) -> None:
        odd = RawMaterial(id="x", name="Unpriced", purchase_price=9000, purchase_unit_qty=0)
        assert engine.compute_unit_price(odd) == 0
        assert odd.unit_price == 0

    def test_material_property_matches_engine(self, materials: list[RawMaterial]) -> None:
        assert materials[2].unit_price == 50.0


class TestRecipeCost:
    def test_end_to_end_americano(self, engine: RecipeCostEngine) -> None:
        """15000 per 1000 g, 20 g per cup, sold at 4000 -> 7.5% healthy."""
        materials = [RawMaterial(id="bean", name="Bean", purchase_price=15000, purchase_unit_qty=1000, unit="g")]
        ingredients = [RecipeIngredient(material_id="bean", quantity_used=20)]

        cost = engine.compute_recipe_cost(ingredients, materials)
        ratio = engine.compute_cogs_ratio(cost, 4000)

        assert cost == 300
        assert ratio == 7.5
        assert engine.classify_cogs_ratio(ratio) == CogsStatus.HEALTHY

    def test_dangling_reference_contributes_zero(
        self, engine: RecipeCostEngine, materials: list[RawMaterial], latte: MenuRecipe
    ) -> None:
        with_dangling = list(latte.ingredients) + [RecipeIngredient(material_id="deleted", quantity_used=30)]
        assert engine.compute_recipe_cost(with_dangling, materials) == engine.compute_recipe_cost(
            latte.ingredients, materials
        )

    def test_accepts_mapping_lookup(
        self, engine: RecipeCostEngine, materials: list[RawMaterial], latte: MenuRecipe
    ) -> None:
        by_id = {m.id: m for m in materials}
        assert engine.compute_recipe_cost(latte.ingredients, by_id) == engine.compute_recipe_cost(
            latte.ingredients, materials
        )

    def test_doubling_quantities_doubles_cost(
        self, engine: RecipeCostEngine, materials: list[RawMaterial], latte: MenuRecipe
    ) -> None:
        doubled = [i.model_copy(update={"quantity_used": i.quantity_used * 2}) for i in latte.ingredients]
        assert engine.compute_recipe_cost(doubled, materials) == 2 * engine.compute_recipe_cost(
            latte.ingredients, materials
        )

    def test_latte_cost(self, engine: RecipeCostEngine, materials: list[RawMaterial], latte: MenuRecipe) -> None:
        # 20 * 15 + 200 * 2.8 + 1 * 50
        assert engine.compute_recipe_cost(latte.ingredients, materials) == Decimal("910")

    def test_waste_grosses_up_line_cost(
        self, engine: RecipeCostEngine, materials: list[RawMaterial]
    ) -> None:
        ingredients = [RecipeIngredient(material_id="bean", quantity_used=19, waste_pct=0.05)]
        plain = engine.compute_recipe_cost(ingredients, materials)
        wasted = engine.compute_recipe_cost(ingredients, materials, apply_waste=True)
        assert plain == Decimal("285")
        assert wasted == Decimal("300")

    def test_total_waste_line_is_zero(self, engine: RecipeCostEngine, materials: list[RawMaterial]) -> None:
        ingredients = [RecipeIngredient(material_id="bean", quantity_used=20, waste_pct=1.0)]
        assert engine.compute_recipe_cost(ingredients, materials, apply_waste=True) == 0

    def test_costs_are_exact_decimals(self, engine: RecipeCostEngine) -> None:
        syrup = RawMaterial(id="syrup", name="Vanilla Syrup", purchase_price="0.1", purchase_unit_qty=1, unit="ml")
        cost = engine.compute_recipe_cost([RecipeIngredient(material_id="syrup", quantity_used=3)], [syrup])
        assert isinstance(cost, Decimal)
        assert cost == Decimal("0.3")

    def test_empty_recipe(self, engine: RecipeCostEngine, materials: list[RawMaterial]) -> None:
        assert engine.compute_recipe_cost([], materials) == 0


class TestCogsRatio:
    def test_zero_price_is_zero_ratio(self, engine: RecipeCostEngine) -> None:
        assert engine.compute_cogs_ratio(500, 0) == 0
        assert engine.compute_cogs_ratio(0, 0) == 0

    def test_negative_price_is_zero_ratio(self, engine: RecipeCostEngine) -> None:
        assert engine.compute_cogs_ratio(500, -100) == 0

    @pytest.mark.parametrize(
        ("ratio", "expected"),
        [
            (0.0, CogsStatus.HEALTHY),
            (19.999, CogsStatus.HEALTHY),
            (20.0, CogsStatus.WATCH),
            (29.999, CogsStatus.WATCH),
            (30.0, CogsStatus.CRITICAL),
            (85.0, CogsStatus.CRITICAL),
        ],
    )
    def test_classification_bands(self, engine: RecipeCostEngine, ratio: float, expected: CogsStatus) -> None:
        assert engine.classify_cogs_ratio(ratio) == expected

    def test_custom_bands(self) -> None:
        engine = RecipeCostEngine(CostingConfig(healthy_below=25, critical_from=35))
        assert engine.classify_cogs_ratio(24.9) == CogsStatus.HEALTHY
        assert engine.classify_cogs_ratio(30) == CogsStatus.WATCH
        assert engine.classify_cogs_ratio(35) == CogsStatus.CRITICAL

    def test_inverted_bands_rejected(self) -> None:
        with pytest.raises(ValueError):
            CostingConfig(healthy_below=30, critical_from=20)


class TestRecipeAnalysis:
    def test_breakdown_keeps_dangling_line(self, engine: RecipeCostEngine, materials: list[RawMaterial]) -> None:
        recipe = MenuRecipe(
            id="r1",
            name="Mystery Latte",
            sale_price=5000,
            ingredients=(
                RecipeIngredient(material_id="bean", quantity_used=20),
                RecipeIngredient(material_id="gone", quantity_used=15),
            ),
        )
        analysis = engine.analyze_recipe(recipe, materials)

        assert len(analysis.lines) == 2
        assert analysis.unresolved_materials == ["gone"]
        assert analysis.lines[1].cost == 0
        assert analysis.lines[1].material_name is None
        assert analysis.total_cost == 300
        assert analysis.cogs_ratio == 6.0
        assert analysis.gross_profit == 4700

    def test_menu_sorted_by_cogs(self, engine: RecipeCostEngine, materials: list[RawMaterial], latte: MenuRecipe) -> None:
        americano = MenuRecipe(
            id="ame",
            name="Americano",
            sale_price=4000,
            ingredients=(RecipeIngredient(material_id="bean", quantity_used=20),),
        )
        unpriced = MenuRecipe(id="new", name="Zesty Special", sale_price=0)

        by_cogs_desc = engine.analyze_menu([americano, latte, unpriced], materials, sort_by="cogs", descending=True)
        assert [a.recipe_id for a in by_cogs_desc] == ["latte", "ame", "new"]

        by_name = engine.analyze_menu([unpriced, latte, americano], materials)
        assert [a.recipe_name for a in by_name] == ["Americano", "Caffe Latte", "Zesty Special"]

    def test_unknown_sort_key(self, engine: RecipeCostEngine, materials: list[RawMaterial]) -> None:
        with pytest.raises(ValueError, match="sort key"):
            engine.analyze_menu([], materials, sort_by="price")

    def test_menu_summary(self, engine: RecipeCostEngine, materials: list[RawMaterial], latte: MenuRecipe) -> None:
        unpriced = MenuRecipe(
            id="new",
            name="New Drink",
            sale_price=0,
            ingredients=(RecipeIngredient(material_id="gone", quantity_used=1),),
        )
        summary = engine.menu_summary(engine.analyze_menu([latte, unpriced], materials))

        assert summary["recipe_count"] == 2
        assert summary["priced_recipes"] == 1
        # 910 / 4500
        assert summary["avg_cogs_ratio"] == pytest.approx(20.222, abs=1e-3)
        assert summary["status_counts"] == {"healthy": 0, "watch": 1, "critical": 0}
        assert summary["dangling_references"] == 1

    def test_inputs_not_mutated(self, engine: RecipeCostEngine, materials: list[RawMaterial], latte: MenuRecipe) -> None:
        before = [m.model_dump() for m in materials]
        engine.analyze_menu([latte], materials)
        assert [m.model_dump() for m in materials] == before
