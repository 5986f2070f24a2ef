"""
Example: Cost, stock and trend report for a small coffee shop.

Run:
    python examples/coffee_shop/run_report.py

Or via CLI:
    brewmetrics demo --output sales.csv --seed 7
    brewmetrics recipes --materials examples/coffee_shop/materials.csv \
            --recipes examples/coffee_shop/recipes.yaml --sort cogs --desc
    brewmetrics inventory --inventory examples/coffee_shop/inventory.csv \
            --sales sales.csv --recipes examples/coffee_shop/recipes.yaml --today 2025-11-25
"""

from datetime import date
from pathlib import Path

from brewmetrics import InventoryHealthEngine, PeriodAnalyticsEngine, RecipeCostEngine
from brewmetrics.config import BrewMetricsConfig
from brewmetrics.connectors import load_inventory_csv, load_materials_csv, load_recipes_yaml
from brewmetrics.fixtures import generate_demo_sales
from brewmetrics.models.records import InventoryItem

# Get the directory where this script lives
SCRIPT_DIR = Path(__file__).parent.resolve()
TODAY = date(2025, 11, 25)


def main() -> None:
    config = BrewMetricsConfig.load()
    materials = load_materials_csv(SCRIPT_DIR / "materials.csv")
    recipes = load_recipes_yaml(SCRIPT_DIR / "recipes.yaml")
    inventory = load_inventory_csv(SCRIPT_DIR / "inventory.csv")
    sales = generate_demo_sales(seed=7, end_date=date(2025, 11, 24), days=60)

    print("=== Recipe costs ===")
    costing = RecipeCostEngine(config.costing)
    for analysis in costing.analyze_menu(recipes, materials, sort_by="cogs", descending=True):
        print(
            f"  {analysis.recipe_name:<28} cost {analysis.total_cost:>7,.0f}  "
            f"COGS {analysis.cogs_ratio:5.1f}%  {analysis.status.value}"
        )

    print("\n=== Stock health ===")
    health = InventoryHealthEngine(config.inventory)
    window = PeriodAnalyticsEngine.filter_by_date_range(sales, "2025-10-26", "2025-11-24")
    usage = health.estimate_daily_usage(window, {r.name: r for r in recipes}, days=30)
    inventory = [InventoryItem.model_validate({**i.model_dump(), "avg_daily_usage": usage.get(i.id)}) for i in inventory]
    for row in health.assess_inventory(inventory, TODAY):
        cover = "inf" if row.days_cover is None else f"{row.days_cover:.1f}"
        print(f"  {row.item_name:<16} cover {cover:>6} days  {row.status.value}")

    print("\n=== Trend ===")
    analytics = PeriodAnalyticsEngine(config.analytics)
    comparison = analytics.compute_period_comparison(sales, "2025-11-01", "2025-11-24")
    print(
        f"  {comparison.current_revenue:,.0f} vs {comparison.previous_revenue:,.0f} "
        f"({comparison.percentage_change:+.1f}%) over {comparison.diff_days} days"
    )
    hourly = analytics.aggregate_by_hour(window, config.analytics.open_hour, config.analytics.close_hour)
    print(f"  Peak hour {hourly.peak_hour}:00, low hour {hourly.low_hour}:00")


if __name__ == "__main__":
    main()
