"""Plain data records consumed by the analytics engines."""

from brewmetrics.models.records import (
    DEDUCTIBLE_PROOF_TYPES,
    WEEKDAY_ORDER,
    ExpenditureRecord,
    InventoryItem,
    MenuRecipe,
    ProofType,
    RawMaterial,
    RecipeIngredient,
    SaleRecord,
    UnitOfMeasure,
    UtilityExpense,
    UtilityKind,
    apply_sale_update,
)

__all__ = [
    "DEDUCTIBLE_PROOF_TYPES",
    "WEEKDAY_ORDER",
    "ExpenditureRecord",
    "InventoryItem",
    "MenuRecipe",
    "ProofType",
    "RawMaterial",
    "RecipeIngredient",
    "SaleRecord",
    "UnitOfMeasure",
    "UtilityExpense",
    "UtilityKind",
    "apply_sale_update",
]
