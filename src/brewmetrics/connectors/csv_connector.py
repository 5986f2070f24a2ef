"""
File Connectors — load ledgers and price lists from CSV and YAML files.

CSV headers are matched case-insensitively against a list of aliases, so
exports from POS systems and spreadsheets load without renaming columns.
Rows that fail validation are logged and skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, time
from pathlib import Path
from typing import Any

import pandas as pd
import yaml

from brewmetrics.fixtures import make_id_factory
from brewmetrics.models.records import InventoryItem, MenuRecipe, RawMaterial, SaleRecord

logger = logging.getLogger("brewmetrics.connectors.csv")

# Common column name mappings
_SALES_ALIASES: dict[str, list[str]] = {
    "id": ["id", "sale_id", "receipt_id"],
    "date": ["date", "sale_date", "business_date"],
    "time": ["time", "sale_time"],
    "item_name": ["item_name", "item", "menu", "item_detail", "itemdetail", "product"],
    "category": ["category", "group", "menu_category"],
    "quantity": ["quantity", "qty", "count"],
    "unit_price": ["unit_price", "price"],
    "revenue": ["revenue", "sales_amount", "amount", "total"],
}

_MATERIAL_ALIASES: dict[str, list[str]] = {
    "id": ["id", "material_id"],
    "name": ["name", "material", "material_name"],
    "category": ["category"],
    "purchase_price": ["purchase_price", "price", "lot_price"],
    "purchase_unit_qty": ["purchase_unit_qty", "lot_size", "purchase_qty", "unit_qty"],
    "unit": ["unit", "uom"],
    "current_stock": ["current_stock", "stock"],
}

_INVENTORY_ALIASES: dict[str, list[str]] = {
    "id": ["id", "item_id"],
    "name": ["name", "name_en"],
    "name_localized": ["name_localized", "name_ko", "local_name"],
    "category": ["category"],
    "current_stock": ["current_stock", "stock", "on_hand"],
    "unit": ["unit", "uom"],
    "lead_time_days": ["lead_time_days", "lead_time", "leadtimedays"],
    "safety_stock": ["safety_stock", "safetystock", "safety"],
    "max_stock": ["max_stock", "max_stock_level", "par_level"],
    "avg_daily_usage": ["avg_daily_usage", "avgdailyusage", "daily_usage"],
    "supply_mode": ["supply_mode", "supplymode", "supplier"],
}


def _read_csv(file_path: str | Path) -> pd.DataFrame:
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {file_path}")
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.strip().str.lower().str.replace(" ", "_")
    return df


def _detect_columns(df: pd.DataFrame, aliases: dict[str, list[str]]) -> dict[str, str]:
    """Auto-detect column mappings from the DataFrame."""
    col_map: dict[str, str] = {}
    df_cols = set(df.columns)

    for field, names in aliases.items():
        for alias in names:
            if alias in df_cols:
                col_map[field] = alias
                break

    return col_map


def _row_values(row: pd.Series, col_map: dict[str, str]) -> dict[str, Any]:
    """Non-blank cell values keyed by field name."""
    values: dict[str, Any] = {}
    for field, column in col_map.items():
        raw = str(row[column]).strip()
        if raw:
            values[field] = raw
    return values


def _require(col_map: dict[str, str], required: list[str], source: str) -> None:
    missing = [f for f in required if f not in col_map]
    if missing:
        raise ValueError(f"{source} is missing required columns: {', '.join(missing)}")


def _to_number(raw: str) -> float:
    return float(raw.replace(",", ""))


def _to_count(raw: str) -> int:
    value = _to_number(raw)
    if not value.is_integer():
        raise ValueError(f"quantity must be a whole number, got {raw!r}")
    return int(value)


def _strip_thousands(values: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    """Drop thousands separators from numeric cells so ``15,000`` parses."""
    for field in fields:
        if field in values:
            values[field] = values[field].replace(",", "")
    return values


def load_sales_csv(
    file_path: str | Path,
    id_factory: Callable[[], str] | None = None,
) -> list[SaleRecord]:
    """Parse a sales ledger export.

    ``revenue`` is re-derived from quantity and unit price. When the file
    carries a revenue column that disagrees, the row is skipped.
    """
    df = _read_csv(file_path)
    col_map = _detect_columns(df, _SALES_ALIASES)
    _require(col_map, ["date", "item_name", "quantity", "unit_price"], Path(file_path).name)
    next_id = id_factory or make_id_factory()

    sales: list[SaleRecord] = []
    for index, row in df.iterrows():
        values = _row_values(row, col_map)
        try:
            sale = SaleRecord(
                id=values.get("id") or next_id(),
                date=pd.to_datetime(values["date"]).date(),
                time=time.fromisoformat(values.get("time", "00:00:00")),
                item_name=values["item_name"],
                category=values.get("category", "Uncategorized"),
                quantity=_to_count(values["quantity"]),
                unit_price=_to_number(values["unit_price"]),
                **({"revenue": _to_number(values["revenue"])} if "revenue" in values else {}),
            )
        except (KeyError, ValueError) as e:
            logger.warning("Skipping sales row %s: %s", index, e)
            continue
        sales.append(sale)

    logger.info("Parsed %d sales from %s", len(sales), Path(file_path).name)
    return sales


def load_materials_csv(file_path: str | Path) -> list[RawMaterial]:
    """Parse a raw-material price list."""
    df = _read_csv(file_path)
    col_map = _detect_columns(df, _MATERIAL_ALIASES)
    _require(col_map, ["id", "name", "purchase_price", "purchase_unit_qty"], Path(file_path).name)

    materials: list[RawMaterial] = []
    for index, row in df.iterrows():
        values = _row_values(row, col_map)
        try:
            materials.append(RawMaterial.model_validate(
                _strip_thousands(values, ("purchase_price", "purchase_unit_qty", "current_stock"))
            ))
        except ValueError as e:
            logger.warning("Skipping material row %s: %s", index, e)

    logger.info("Parsed %d materials from %s", len(materials), Path(file_path).name)
    return materials


def load_inventory_csv(file_path: str | Path) -> list[InventoryItem]:
    """Parse an inventory snapshot."""
    df = _read_csv(file_path)
    col_map = _detect_columns(df, _INVENTORY_ALIASES)
    _require(col_map, ["id", "name", "current_stock"], Path(file_path).name)

    items: list[InventoryItem] = []
    for index, row in df.iterrows():
        values = _row_values(row, col_map)
        try:
            items.append(InventoryItem.model_validate(
                _strip_thousands(values, ("current_stock", "safety_stock", "max_stock", "avg_daily_usage"))
            ))
        except ValueError as e:
            logger.warning("Skipping inventory row %s: %s", index, e)

    logger.info("Parsed %d inventory items from %s", len(items), Path(file_path).name)
    return items


def load_recipes_yaml(file_path: str | Path) -> list[MenuRecipe]:
    """Parse recipes from a YAML file with a top-level ``recipes`` list."""
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Recipe file not found: {file_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    raw_recipes = data.get("recipes", []) if isinstance(data, dict) else data
    recipes: list[MenuRecipe] = []
    for index, raw in enumerate(raw_recipes):
        try:
            recipes.append(MenuRecipe.model_validate(raw))
        except ValueError as e:
            logger.warning("Skipping recipe %d: %s", index, e)

    logger.info("Parsed %d recipes from %s", len(recipes), path.name)
    return recipes


def sale_dates(sales: list[SaleRecord]) -> tuple[date, date] | None:
    """First and last sale date, or None for an empty ledger."""
    if not sales:
        return None
    dates = [s.date for s in sales]
    return min(dates), max(dates)
