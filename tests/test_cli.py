"""Tests for the command-line interface."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from brewmetrics import __version__, cli
from brewmetrics.cli import app

runner = CliRunner()

MATERIALS = """id,name,category,purchase_price,purchase_unit_qty,unit
bean,Espresso Bean,Coffee,15000,1000,g
cup,Ice Cup,Packaging,5000,100,ea
"""

RECIPES = """
recipes:
  - id: americano
    name: Americano (I/H)
    sale_price: 4000
    ingredients:
      - material_id: bean
        quantity_used: 20
      - material_id: cup
        quantity_used: 1
  - id: ghost
    name: Ghost Latte
    sale_price: 1000
    ingredients:
      - material_id: deleted
        quantity_used: 5
      - material_id: bean
        quantity_used: 20
"""

INVENTORY = """id,name,current_stock,unit,lead_time_days,safety_stock,avg_daily_usage
bean,Espresso Bean,5000,g,3,1000,
cup,Ice Cup,500,ea,2,100,40
"""


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep rich tables on one line per row
    monkeypatch.setattr(cli.console, "width", 200)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    (tmp_path / "materials.csv").write_text(MATERIALS)
    (tmp_path / "recipes.yaml").write_text(RECIPES)
    (tmp_path / "inventory.csv").write_text(INVENTORY)
    result = runner.invoke(app, ["demo", "--output", str(tmp_path / "sales.csv"), "--seed", "5", "--days", "60"])
    assert result.exit_code == 0, result.output
    return tmp_path


class TestCLI:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_demo_writes_csv(self, workspace: Path) -> None:
        assert (workspace / "sales.csv").exists()
        header = (workspace / "sales.csv").read_text().splitlines()[0]
        assert "item_name" in header
        assert "revenue" in header

    def test_recipes(self, workspace: Path) -> None:
        result = runner.invoke(app, [
            "recipes",
            "--materials", str(workspace / "materials.csv"),
            "--recipes", str(workspace / "recipes.yaml"),
            "--sort", "cogs",
            "--desc",
        ])
        assert result.exit_code == 0, result.output
        assert "Ghost Latte" in result.output
        assert "critical" in result.output
        assert "deleted" in result.output

    def test_recipes_bad_sort(self, workspace: Path) -> None:
        result = runner.invoke(app, [
            "recipes",
            "--materials", str(workspace / "materials.csv"),
            "--recipes", str(workspace / "recipes.yaml"),
            "--sort", "price",
        ])
        assert result.exit_code == 1

    def test_inventory_estimates_usage(self, workspace: Path) -> None:
        result = runner.invoke(app, [
            "inventory",
            "--inventory", str(workspace / "inventory.csv"),
            "--today", "2025-11-25",
            "--sales", str(workspace / "sales.csv"),
            "--recipes", str(workspace / "recipes.yaml"),
        ])
        assert result.exit_code == 0, result.output
        assert "Espresso Bean" in result.output
        assert "D-12" in result.output

    def test_trend(self, workspace: Path) -> None:
        result = runner.invoke(app, [
            "trend",
            "--sales", str(workspace / "sales.csv"),
            "--start", "2025-11-01",
            "--end", "2025-11-24",
        ])
        assert result.exit_code == 0, result.output
        assert "24 days" in result.output
        assert "Peak hour" in result.output

    def test_trend_bad_date(self, workspace: Path) -> None:
        result = runner.invoke(app, [
            "trend", "--sales", str(workspace / "sales.csv"), "--start", "11/01/2025", "--end", "2025-11-24",
        ])
        assert result.exit_code == 1

    def test_compare(self, workspace: Path) -> None:
        result = runner.invoke(app, [
            "compare",
            "--sales", str(workspace / "sales.csv"),
            "--mode", "month",
            "-a", "2025-10",
            "-b", "2025-11",
        ])
        assert result.exit_code == 0, result.output
        assert "Avg Ticket" in result.output

    def test_compare_bad_period(self, workspace: Path) -> None:
        result = runner.invoke(app, [
            "compare", "--sales", str(workspace / "sales.csv"), "--mode", "quarter", "-a", "2025-Q9", "-b", "2025-Q4",
        ])
        assert result.exit_code == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["trend", "--sales", str(tmp_path / "none.csv"), "--start", "2025-11-01", "--end", "2025-11-02"])
        assert result.exit_code == 1

    def test_history(self, workspace: Path) -> None:
        result = runner.invoke(app, [
            "history",
            "--sales", str(workspace / "sales.csv"),
            "--start", "2025-11-20",
            "--category", "All",
            "-k", "latte",
            "--limit", "5",
        ])
        assert result.exit_code == 0, result.output
        assert "Sales History" in result.output
        assert "Latte" in result.output

    def test_history_bad_time(self, workspace: Path) -> None:
        result = runner.invoke(app, ["history", "--sales", str(workspace / "sales.csv"), "--from", "noon"])
        assert result.exit_code == 1
