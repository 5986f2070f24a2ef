"""Tests for month-to-date financials, utilities and expenditures."""

from __future__ import annotations

from datetime import date, time

import pytest

from brewmetrics.analyzers.financials import (
    DateRange,
    carry_over_recurring,
    compute_financial_metrics,
    month_to_date_range,
    summarize_expenditures,
)
from brewmetrics.config import FinancialsConfig
from brewmetrics.fixtures import make_id_factory
from brewmetrics.models.records import ExpenditureRecord, ProofType, SaleRecord, UtilityExpense, UtilityKind


@pytest.fixture
def sales() -> list[SaleRecord]:
    return [
        SaleRecord.create("a", date(2025, 10, 31), time(9), "Americano", "Coffee", 1, 4000),
        SaleRecord.create("b", date(2025, 11, 1), time(9), "Americano", "Coffee", 5, 4000),
        SaleRecord.create("c", date(2025, 11, 12), time(12), "Latte", "Coffee", 10, 4500),
        SaleRecord.create("d", date(2025, 11, 25), time(15), "Latte", "Coffee", 1, 4500),
    ]


@pytest.fixture
def utilities() -> list[UtilityExpense]:
    return [
        UtilityExpense(id="u1", name="Rent", amount=1_500_000, kind=UtilityKind.RECURRING, month="2025-11"),
        UtilityExpense(id="u2", name="Repair", amount=100_000, kind=UtilityKind.ONETIME, month="2025-11"),
        UtilityExpense(id="u3", name="Rent", amount=1_500_000, kind=UtilityKind.RECURRING, month="2025-10"),
    ]


class TestMonthToDate:
    def test_range(self) -> None:
        rng = month_to_date_range(date(2025, 11, 25))
        assert rng == DateRange(start=date(2025, 11, 1), end=date(2025, 11, 24), days=24)

    def test_first_of_month_is_empty(self) -> None:
        rng = month_to_date_range(date(2025, 11, 1))
        assert rng.empty
        assert rng.days == 0


class TestFinancialMetrics:
    def test_metrics(self, sales: list[SaleRecord], utilities: list[UtilityExpense]) -> None:
        metrics = compute_financial_metrics(sales, utilities, month_to_date_range(date(2025, 11, 25)))

        assert metrics.total_revenue == 65_000
        assert metrics.estimated_cogs == pytest.approx(22_750)
        assert metrics.total_utilities == 1_600_000
        assert metrics.total_cost == pytest.approx(1_622_750)
        assert metrics.net_profit == pytest.approx(-1_557_750)
        assert metrics.profit_margin == pytest.approx(-1_557_750 / 65_000 * 100)
        assert metrics.avg_daily_revenue == pytest.approx(65_000 / 24)

    def test_excluding_utilities(self, sales: list[SaleRecord], utilities: list[UtilityExpense]) -> None:
        config = FinancialsConfig(estimated_cogs_ratio=0.3, include_utilities=False)
        metrics = compute_financial_metrics(sales, utilities, month_to_date_range(date(2025, 11, 25)), config)

        assert metrics.total_cost == pytest.approx(19_500)
        assert metrics.cost_ratio == pytest.approx(30.0)
        assert metrics.profit_margin == pytest.approx(70.0)

    def test_empty_range_is_zero_guarded(self, sales: list[SaleRecord]) -> None:
        metrics = compute_financial_metrics(sales, [], month_to_date_range(date(2025, 11, 1)))

        assert metrics.total_revenue == 0
        assert metrics.profit_margin == 0
        assert metrics.cost_ratio == 0
        assert metrics.avg_daily_revenue == 0


class TestUtilities:
    def test_carry_over_recurring(self, utilities: list[UtilityExpense]) -> None:
        november = [u for u in utilities if u.month == "2025-11"]
        carried = carry_over_recurring(november, "2025-12", make_id_factory(seed=3))

        assert len(carried) == 1
        assert carried[0].name == "Rent"
        assert carried[0].month == "2025-12"
        assert carried[0].id != "u1"
        assert november[0].month == "2025-11"

    def test_carry_over_validates_month(self, utilities: list[UtilityExpense]) -> None:
        with pytest.raises(ValueError):
            carry_over_recurring(utilities, "2025/12", make_id_factory())

    def test_carry_over_skips_onetime(self) -> None:
        items = [UtilityExpense(id="o", name="Repair", amount=80_000, kind=UtilityKind.ONETIME, month="2025-11")]
        assert carry_over_recurring(items, "2025-12", make_id_factory()) == []

    def test_bad_month_rejected(self) -> None:
        with pytest.raises(ValueError):
            UtilityExpense(id="x", name="Gas", amount=1, month="2025/11")


class TestExpenditures:
    def test_summary(self) -> None:
        records = [
            ExpenditureRecord(id="e1", date=date(2025, 11, 2), vendor="Euljiro Interior", amount=150_000, proof_type=ProofType.TAX_INVOICE),
            ExpenditureRecord(id="e2", date=date(2025, 11, 10), vendor="Daiso", amount=15_000, proof_type=ProofType.CASH_RECEIPT),
            ExpenditureRecord(id="e3", date=date(2025, 11, 15), vendor="Kim Freight", amount=50_000, proof_type=ProofType.OTHER_TRANSFER),
            ExpenditureRecord(id="e4", date=date(2025, 11, 23), vendor="Namyang Dairy", amount=12_000, proof_type=ProofType.SIMPLE_RECEIPT),
            ExpenditureRecord(id="e5", date=date(2025, 12, 1), amount=99_000, proof_type=ProofType.OTHER_TRANSFER),
        ]
        summary = summarize_expenditures(records, end=date(2025, 11, 30))

        assert summary.count == 4
        assert summary.total == 227_000
        assert summary.deductible_total == 177_000
        assert summary.non_deductible_total == 50_000
        assert summary.by_proof_type["tax_invoice"] == 150_000
        assert summary.by_proof_type["simple_receipt"] == 12_000
        assert summary.by_proof_type["other_transfer"] == 50_000

    def test_start_bound(self) -> None:
        records = [
            ExpenditureRecord(id="e1", date=date(2025, 11, 2), amount=1_000, proof_type=ProofType.TAX_INVOICE),
            ExpenditureRecord(id="e2", date=date(2025, 11, 10), amount=2_000),
        ]
        summary = summarize_expenditures(records, start=date(2025, 11, 10))
        assert summary.count == 1
        assert summary.by_proof_type["cash_receipt"] == 2_000

    def test_empty(self) -> None:
        summary = summarize_expenditures([])
        assert summary.total == 0
        assert set(summary.by_proof_type) == {"tax_invoice", "cash_receipt", "simple_receipt", "other_transfer"}
