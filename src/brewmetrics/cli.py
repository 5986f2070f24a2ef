"""
BrewMetrics CLI — command-line interface.

Usage:
    brewmetrics recipes --materials materials.csv --recipes recipes.yaml
    brewmetrics inventory --inventory stock.csv --today 2025-11-25
    brewmetrics trend --sales sales.csv --start 2025-11-01 --end 2025-11-24
    brewmetrics compare --sales sales.csv --mode month -a 2024-11 -b 2025-11
    brewmetrics history --sales sales.csv --keyword latte --from 09:00 --to 12:00
    brewmetrics demo --output sales.csv --seed 7
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from brewmetrics import __version__

app = typer.Typer(
    name="brewmetrics",
    help="☕ BrewMetrics — cost, stock and sales analytics for coffee shops",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()

_STATUS_COLORS = {
    "healthy": "green",
    "watch": "yellow",
    "critical": "red",
    "warning": "yellow",
    "sufficient": "green",
}


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold]BrewMetrics[/bold] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log debug output",
    ),
) -> None:
    """☕ BrewMetrics — know your margins, your stock and your busy hours."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config: str | None):  # noqa: ANN202
    from brewmetrics.config import BrewMetricsConfig

    config_path = config if config and Path(config).exists() else None
    return BrewMetricsConfig.load(config_path)


def _parse_date(value: str, option: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Error: {option} must be YYYY-MM-DD, got {value!r}[/red]")
        raise typer.Exit(1)


def _money(amount: float) -> str:
    return f"{amount:,.0f}"


def _status(value: str) -> str:
    color = _STATUS_COLORS.get(value, "white")
    return f"[{color}]{value}[/{color}]"


@app.command()
def recipes(
    materials: str = typer.Option(..., "--materials", "-m", help="Raw material price list (CSV)"),
    recipes_file: str = typer.Option(..., "--recipes", "-r", help="Recipes (YAML)"),
    sort: str = typer.Option("name", "--sort", help="Sort by: name, cogs"),
    descending: bool = typer.Option(False, "--desc", help="Sort descending"),
    waste: bool = typer.Option(False, "--waste", help="Gross up line costs by waste"),
    config: str = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Cost every recipe and band its COGS ratio."""
    from brewmetrics.analyzers.recipe_costing import RecipeCostEngine
    from brewmetrics.connectors import load_materials_csv, load_recipes_yaml

    cfg = _load_config(config)
    try:
        material_list = load_materials_csv(materials)
        recipe_list = load_recipes_yaml(recipes_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    engine = RecipeCostEngine(cfg.costing)
    lookup = {m.id: m for m in material_list}
    try:
        analyses = engine.analyze_menu(
            recipe_list, lookup, sort_by=sort, descending=descending, apply_waste=waste
        )
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Recipe Costs ({cfg.currency})", show_lines=False)
    table.add_column("Recipe", style="bold")
    table.add_column("Sale Price", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("COGS %", justify="right")
    table.add_column("Status")
    table.add_column("Missing Materials")

    for a in analyses:
        table.add_row(
            a.recipe_name,
            _money(a.sale_price),
            _money(a.total_cost),
            f"{a.cogs_ratio:.1f}%",
            _status(a.status.value),
            ", ".join(a.unresolved_materials),
        )
    console.print(table)

    summary = engine.menu_summary(analyses)
    console.print(
        f"[dim]{summary['priced_recipes']} priced recipes, "
        f"average COGS {summary['avg_cogs_ratio']:.1f}%[/dim]"
    )


@app.command()
def inventory(
    inventory_file: str = typer.Option(..., "--inventory", "-i", help="Inventory snapshot (CSV)"),
    today: str = typer.Option(None, "--today", help="Reference date (YYYY-MM-DD), defaults to today"),
    sales: str = typer.Option(None, "--sales", help="Sales CSV used to estimate missing usage"),
    recipes_file: str = typer.Option(None, "--recipes", "-r", help="Recipes YAML used with --sales"),
    days: int = typer.Option(30, "--days", help="Usage window length in days"),
    config: str = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show stock coverage, status and reorder dates."""
    from brewmetrics.analyzers.inventory_health import InventoryHealthEngine
    from brewmetrics.connectors import load_inventory_csv, load_recipes_yaml, load_sales_csv
    from brewmetrics.models.records import InventoryItem

    cfg = _load_config(config)
    ref_date = _parse_date(today, "--today") if today else date.today()
    engine = InventoryHealthEngine(cfg.inventory)

    try:
        items = load_inventory_csv(inventory_file)
        if sales and recipes_file:
            recipe_map = {r.name: r for r in load_recipes_yaml(recipes_file)}
            usage = engine.estimate_daily_usage(load_sales_csv(sales), recipe_map, days)
            items = [
                item if item.avg_daily_usage else InventoryItem.model_validate(
                    {**item.model_dump(), "avg_daily_usage": usage.get(item.id)}
                )
                for item in items
            ]
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Inventory Health — {ref_date.isoformat()}")
    table.add_column("Item", style="bold")
    table.add_column("Stock", justify="right")
    table.add_column("Daily Usage", justify="right")
    table.add_column("Days Cover", justify="right")
    table.add_column("D-Day", justify="right")
    table.add_column("Status")
    table.add_column("Order By")

    cap = cfg.inventory.display_cover_cap
    units = {i.id: i.unit.value for i in items}
    for row in engine.assess_inventory(items, ref_date):
        finite = row.days_cover is not None and row.days_cover <= cap
        unit = units.get(row.item_id, "")
        table.add_row(
            row.item_name,
            f"{row.current_stock:,.0f}{unit}",
            f"{row.avg_daily_usage:.2f}{unit}" if row.avg_daily_usage else "-",
            f"{row.days_cover:.1f}" if finite else "∞",
            f"D-{row.d_day}" if finite else "D-∞",
            _status(row.status.value),
            (
                row.reorder_point.order_by.isoformat()
                if row.reorder_point.order_by and finite
                else f"{row.reorder_point.lead_time_days} days before"
            ),
        )
    console.print(table)


@app.command()
def trend(
    sales: str = typer.Option(..., "--sales", "-s", help="Sales ledger (CSV)"),
    start: str = typer.Option(..., "--start", help="Window start (YYYY-MM-DD)"),
    end: str = typer.Option(..., "--end", help="Window end (YYYY-MM-DD)"),
    open_hour: int = typer.Option(None, "--open-hour", help="First hour shown"),
    close_hour: int = typer.Option(None, "--close-hour", help="Last hour shown"),
    config: str = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Revenue trend for a window against the previous window."""
    from brewmetrics.analyzers.period_analytics import PeriodAnalyticsEngine
    from brewmetrics.connectors import load_sales_csv

    cfg = _load_config(config)
    start_date, end_date = _parse_date(start, "--start"), _parse_date(end, "--end")
    engine = PeriodAnalyticsEngine(cfg.analytics)

    try:
        ledger = load_sales_csv(sales)
        comparison = engine.compute_period_comparison(ledger, start_date, end_date)
        window = engine.filter_by_date_range(ledger, start_date, end_date)
        hourly = engine.aggregate_by_hour(
            window,
            cfg.analytics.open_hour if open_hour is None else open_hour,
            cfg.analytics.close_hour if close_hour is None else close_hour,
        )
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    summary = engine.compute_summary(window)
    direction = "[green]up[/green]" if comparison.increased else "[red]down[/red]"
    console.print(Panel.fit(
        f"Revenue {_money(comparison.current_revenue)} over {comparison.diff_days} days, "
        f"{direction} {abs(comparison.percentage_change):.1f}% vs "
        f"{comparison.previous_start} ~ {comparison.previous_end} "
        f"({_money(comparison.previous_revenue)})\n"
        f"{summary.count} sales, average ticket {_money(summary.avg_ticket)}",
        title="Period Trend",
    ))

    weekday_table = Table(title="Revenue by Weekday")
    weekdays = engine.aggregate_by_weekday(window)
    for bucket in weekdays:
        weekday_table.add_column(bucket.day, justify="right", style="orange1" if bucket.is_weekend else None)
    weekday_table.add_row(*[_money(b.revenue) for b in weekdays])
    console.print(weekday_table)

    if hourly.peak_hour is not None:
        console.print(
            f"Peak hour: [bold]{hourly.peak_hour}:00[/bold] ({_money(hourly.revenue_at(hourly.peak_hour))}) · "
            f"Low hour: [bold]{hourly.low_hour}:00[/bold] ({_money(hourly.revenue_at(hourly.low_hour))})"
        )

    top_table = Table(title="Top Items by Quantity")
    top_table.add_column("Item", style="bold")
    top_table.add_column("Qty", justify="right")
    for item in engine.top_items_by_quantity(window):
        top_table.add_row(item.name, str(item.quantity))
    console.print(top_table)


@app.command()
def compare(
    sales: str = typer.Option(..., "--sales", "-s", help="Sales ledger (CSV)"),
    mode: str = typer.Option("month", "--mode", help="Period mode: month, year, quarter"),
    period_a: str = typer.Option(..., "--period-a", "-a", help="First period, e.g. 2024-11"),
    period_b: str = typer.Option(..., "--period-b", "-b", help="Second period, e.g. 2025-11"),
    category: str = typer.Option(None, "--category", help="Limit to one category"),
    config: str = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Compare two months, years or quarters side by side."""
    from brewmetrics.analyzers.period_analytics import PeriodAnalyticsEngine, PeriodSelector
    from brewmetrics.connectors import load_sales_csv

    cfg = _load_config(config)
    engine = PeriodAnalyticsEngine(cfg.analytics)
    try:
        selector_a = PeriodSelector.parse(mode, period_a)
        selector_b = PeriodSelector.parse(mode, period_b)
        result = engine.compare_periods(load_sales_csv(sales), selector_a, selector_b, category)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    a, b = result.period_a.label, result.period_b.label
    table = Table(title="Period Comparison", show_lines=True)
    table.add_column("Metric", style="bold")
    table.add_column(a, justify="right")
    table.add_column(b, justify="right")
    table.add_row("Revenue", _money(result.summary_a.revenue), _money(result.summary_b.revenue))
    table.add_row("Sales", str(result.summary_a.count), str(result.summary_b.count))
    table.add_row("Avg Ticket", _money(result.summary_a.avg_ticket), _money(result.summary_b.avg_ticket))
    for row in result.categories:
        table.add_row(row.category, _money(row.revenue_a), _money(row.revenue_b))
    console.print(table)

    for label, items in ((a, result.top_items_a), (b, result.top_items_b)):
        ranked = ", ".join(f"{i.name} ({i.quantity})" for i in items) or "-"
        console.print(f"[bold]Top items {label}:[/bold] {ranked}")


@app.command()
def history(
    sales: str = typer.Option(..., "--sales", "-s", help="Sales ledger (CSV)"),
    start: str = typer.Option(None, "--start", help="First date (YYYY-MM-DD)"),
    end: str = typer.Option(None, "--end", help="Last date (YYYY-MM-DD)"),
    from_time: str = typer.Option(None, "--from", help="Earliest time of day (HH:MM)"),
    to_time: str = typer.Option(None, "--to", help="Latest time of day (HH:MM)"),
    category: str = typer.Option("All", "--category", help="Category, or All"),
    keyword: str = typer.Option(None, "--keyword", "-k", help="Text in the item name"),
    limit: int = typer.Option(50, "--limit", help="Maximum rows shown"),
) -> None:
    """Search the sales history, newest first."""
    from brewmetrics.analyzers.period_analytics import PeriodAnalyticsEngine
    from brewmetrics.connectors import load_sales_csv

    start_date = _parse_date(start, "--start") if start else None
    end_date = _parse_date(end, "--end") if end else None
    try:
        found = PeriodAnalyticsEngine.search_sales(
            load_sales_csv(sales), start_date, end_date, from_time, to_time, category, keyword,
        )
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Sales History ({len(found)} matches)")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Item", style="bold")
    table.add_column("Category")
    table.add_column("Qty", justify="right")
    table.add_column("Revenue", justify="right")
    for sale in found[:limit]:
        table.add_row(
            sale.date.isoformat(),
            sale.time.strftime("%H:%M"),
            sale.item_name,
            sale.category,
            str(sale.quantity),
            _money(sale.revenue),
        )
    console.print(table)


@app.command()
def demo(
    output: str = typer.Option("demo_sales.csv", "--output", "-o", help="Output CSV path"),
    seed: int = typer.Option(0, "--seed", help="Random seed"),
    days: int = typer.Option(30, "--days", help="Number of days in the ledger, ending on --end"),
    end: str = typer.Option("2025-11-24", "--end", help="Last ledger date (YYYY-MM-DD)"),
) -> None:
    """Write a reproducible demo sales ledger."""
    import pandas as pd

    from brewmetrics.fixtures import generate_demo_sales

    ledger = generate_demo_sales(seed=seed, end_date=_parse_date(end, "--end"), days=days)
    df = pd.DataFrame([s.model_dump(mode="json") for s in ledger])
    path = Path(output)
    df.to_csv(path, index=False)
    console.print(f"[green]✓[/green] Wrote {len(ledger)} sales to [bold]{path}[/bold]")


if __name__ == "__main__":
    app()
