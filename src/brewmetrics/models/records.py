"""
Coffee-shop data records — sales, stock, raw materials, recipes, expenses.

Records are validated at construction. Derived fields (sale revenue and
weekday) are always computed here, never trusted from the caller.
"""

from __future__ import annotations

import math
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

WEEKDAY_ORDER: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class UnitOfMeasure(str, Enum):
    """Units that stock and purchase lots are counted in."""

    GRAM = "g"
    MILLILITER = "ml"
    EACH = "ea"
    KILOGRAM = "kg"
    LITER = "L"


class UtilityKind(str, Enum):
    """Whether a monthly fixed cost repeats next month."""

    RECURRING = "recurring"
    ONETIME = "onetime"


class ProofType(str, Enum):
    """Supporting document attached to an expenditure."""

    TAX_INVOICE = "tax_invoice"
    CASH_RECEIPT = "cash_receipt"
    SIMPLE_RECEIPT = "simple_receipt"
    OTHER_TRANSFER = "other_transfer"


# Qualifying proofs; a bare bank transfer record is not one
DEDUCTIBLE_PROOF_TYPES = frozenset({
    ProofType.TAX_INVOICE,
    ProofType.CASH_RECEIPT,
    ProofType.SIMPLE_RECEIPT,
})


class SaleRecord(BaseModel):
    """A single line of the sales ledger.

    ``revenue`` always equals ``quantity * unit_price`` and ``weekday`` always
    matches ``date``. Both are derived on construction; a supplied revenue
    that disagrees with the product is rejected.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    date: date
    time: time
    item_name: str
    category: str
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)
    revenue: float = 0.0
    weekday: str = ""

    @model_validator(mode="after")
    def _derive_fields(self) -> SaleRecord:
        expected = self.quantity * self.unit_price
        fields_set = self.model_fields_set
        if "revenue" in fields_set and not math.isclose(self.revenue, expected, abs_tol=1e-9):
            raise ValueError(
                f"revenue {self.revenue} does not equal quantity * unit_price ({expected})"
            )
        # Frozen model: write through the instance dict.
        self.__dict__["revenue"] = expected
        self.__dict__["weekday"] = WEEKDAY_ORDER[self.date.weekday()]
        return self

    @classmethod
    def create(
        cls,
        id: str,
        date: date,
        time: time,
        item_name: str,
        category: str,
        quantity: int,
        unit_price: float,
    ) -> SaleRecord:
        """Build a sale from its primary fields."""
        return cls(
            id=id,
            date=date,
            time=time,
            item_name=item_name,
            category=category,
            quantity=quantity,
            unit_price=unit_price,
        )

    @property
    def hour(self) -> int:
        return self.time.hour


_SALE_DERIVED = frozenset({"revenue", "weekday"})


def apply_sale_update(sale: SaleRecord, **changes: Any) -> SaleRecord:
    """Return a new sale with ``changes`` applied and derived fields recomputed.

    Raises:
        ValueError: if a change targets a derived or unknown field.
    """
    derived = _SALE_DERIVED.intersection(changes)
    if derived:
        raise ValueError(f"Derived fields cannot be set directly: {sorted(derived)}")
    unknown = set(changes) - set(SaleRecord.model_fields)
    if unknown:
        raise ValueError(f"Unknown sale fields: {sorted(unknown)}")

    data = sale.model_dump(exclude=set(_SALE_DERIVED))
    data.update(changes)
    return SaleRecord.model_validate(data)


class InventoryItem(BaseModel):
    """A stocked ingredient or consumable.

    Coverage and status are never stored; see ``InventoryHealthEngine``.
    Negative stock is accepted so unreconciled counts surface downstream.
    """

    id: str
    name: str
    name_localized: str = ""
    category: str = "General"
    current_stock: Decimal = Decimal("0")
    unit: UnitOfMeasure = UnitOfMeasure.GRAM
    lead_time_days: int = Field(default=0, ge=0)
    safety_stock: Decimal = Decimal("0")
    max_stock: Decimal | None = None
    avg_daily_usage: Decimal | None = None
    supply_mode: str = ""


class RawMaterial(BaseModel):
    """A purchasable raw material priced per purchase lot."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str = "General"
    purchase_price: Decimal
    purchase_unit_qty: Decimal
    unit: UnitOfMeasure = UnitOfMeasure.GRAM
    current_stock: Decimal = Decimal("0")

    @property
    def unit_price(self) -> Decimal:
        """Price per single unit of measure (0 for a zero lot size)."""
        from brewmetrics.analyzers.recipe_costing import RecipeCostEngine

        return RecipeCostEngine.compute_unit_price(self)


class RecipeIngredient(BaseModel):
    """One bill-of-materials line: how much of a material one item consumes."""

    model_config = ConfigDict(frozen=True)

    material_id: str
    quantity_used: Decimal
    waste_pct: float = Field(default=0.0, ge=0.0)
    id: str | None = None


class MenuRecipe(BaseModel):
    """A menu item with its sale price and bill of materials."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    sale_price: Decimal
    category: str = "General"
    ingredients: tuple[RecipeIngredient, ...] = ()


class UtilityExpense(BaseModel):
    """A monthly fixed cost (rent, power, internet, ...)."""

    id: str
    name: str
    amount: float
    kind: UtilityKind = UtilityKind.ONETIME
    month: str = Field(pattern=r"^\d{4}-\d{2}$")


class ExpenditureRecord(BaseModel):
    """An ad-hoc expense with its supporting document type."""

    id: str
    date: date
    vendor: str = ""
    description: str = ""
    amount: float
    proof_type: ProofType = ProofType.CASH_RECEIPT

    @property
    def deductible(self) -> bool:
        return self.proof_type in DEDUCTIBLE_PROOF_TYPES
