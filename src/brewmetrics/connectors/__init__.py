"""Loaders that turn exported files into records."""

from brewmetrics.connectors.csv_connector import (
    load_inventory_csv,
    load_materials_csv,
    load_recipes_yaml,
    load_sales_csv,
    sale_dates,
)

__all__ = [
    "load_inventory_csv",
    "load_materials_csv",
    "load_recipes_yaml",
    "load_sales_csv",
    "sale_dates",
]
