"""Pydantic schemas for macro-nutrient estimates."""

import logging
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Mapping, Optional

from domain.enums import MacroBasis

logger = logging.getLogger("mise.macros")

# kcal per gram. Not the 4/4/9 Atwater factors: previously stored calorie
# figures were computed with these, so they must not change.
KCAL_PER_G_PROTEIN = 4.27
KCAL_PER_G_CARBS = 3.87
KCAL_PER_G_FAT = 8.79

# canonical field -> accepted wire keys, in priority order
MACRO_WIRE_KEYS = {
    "protein_g": ("protein_g", "protein"),
    "fat_g": ("fat_g", "fat"),
    "carbs_g": ("carbs_g", "carbs"),
}


def _read_grams(payload: Mapping[str, Any], field: str) -> float:
    for key in MACRO_WIRE_KEYS[field]:
        value = payload.get(key)
        if value is None or isinstance(value, bool):
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric %s=%r in macro payload", key, value)
    return 0.0


class IngredientMacros(BaseModel):
    """Macro estimate for a single recipe ingredient."""

    model_config = ConfigDict(frozen=True)

    name: str
    protein_g: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    fat_g: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    carbs_g: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    skipped: bool = False

    @classmethod
    def from_wire(cls, payload: Mapping[str, Any]) -> "IngredientMacros":
        """
        Decode one estimator entry.

        protein_g|protein, fat_g|fat, carbs_g|carbs (missing -> 0),
        name, skipped (missing -> False).
        """
        return cls(
            name=str(payload.get("name") or ""),
            protein_g=_read_grams(payload, "protein_g"),
            fat_g=_read_grams(payload, "fat_g"),
            carbs_g=_read_grams(payload, "carbs_g"),
            skipped=bool(payload.get("skipped") or False),
        )


class RecipeMacros(BaseModel):
    """Recipe-level macro totals plus the per-ingredient breakdown."""

    model_config = ConfigDict(frozen=True)

    protein_g: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    fat_g: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    carbs_g: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    ingredients: List[IngredientMacros] = []
    basis: Optional[MacroBasis] = None

    @property
    def kcal(self) -> float:
        """Derived calories; never stored"""
        return (
            self.protein_g * KCAL_PER_G_PROTEIN
            + self.carbs_g * KCAL_PER_G_CARBS
            + self.fat_g * KCAL_PER_G_FAT
        )

    @classmethod
    def from_wire(cls, payload: Mapping[str, Any]) -> "RecipeMacros":
        """
        Decode a stored or estimator-produced macro object.

        Two shapes are accepted:
          * flat:   {"protein_g": .., "fat_g": .., "carbs_g": .., ...}
          * nested: {"macros": {"protein_g": .., ...}, "ingredients": [...]}
        Totals use the same key aliases as IngredientMacros.from_wire.
        "ingredients" defaults to an empty list; "basis" is optional.
        """
        nested = payload.get("macros")
        totals = nested if isinstance(nested, Mapping) else payload

        raw_items = payload.get("ingredients")
        if raw_items is None and totals is not payload:
            raw_items = totals.get("ingredients")
        items = [
            IngredientMacros.from_wire(item)
            for item in (raw_items or [])
            if isinstance(item, Mapping)
        ]

        basis = payload.get("basis") or totals.get("basis")
        return cls(
            protein_g=_read_grams(totals, "protein_g"),
            fat_g=_read_grams(totals, "fat_g"),
            carbs_g=_read_grams(totals, "carbs_g"),
            ingredients=items,
            basis=basis,
        )
