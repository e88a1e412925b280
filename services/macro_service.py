"""Macro-nutrient aggregation service"""

import logging
import re
from typing import Iterable, Optional

from core.utils.helpers import parse_decimal
from domain.enums import MacroBasis
from domain.schemas.macro_schemas import IngredientMacros, RecipeMacros

logger = logging.getLogger("mise.macros")

# first number in a yield text, optionally a range ("2-3 servings")
_SERVINGS_NUM_RE = re.compile(r"(\d+(?:[.,]\d+)?)(?:\s*[-–]\s*(\d+(?:[.,]\d+)?))?")


class MacroService:
    """Turns per-ingredient macro estimates into recipe totals."""

    @staticmethod
    def aggregate(
        per_ingredient: Iterable[IngredientMacros],
        basis: Optional[MacroBasis] = None,
    ) -> RecipeMacros:
        """
        Sum protein, fat and carbs over the entries that are not skipped.

        Skipped entries (ingredients the estimator could not price, like
        "salt to taste") still appear in ``ingredients`` in their original
        order so the breakdown stays complete.

        Args:
            per_ingredient: Estimates in recipe order
            basis: Whether the figures are per serving or for the whole recipe

        Returns:
            RecipeMacros with totals and the full breakdown
        """
        items = list(per_ingredient)
        counted = [m for m in items if not m.skipped]

        macros = RecipeMacros(
            protein_g=sum(m.protein_g for m in counted),
            fat_g=sum(m.fat_g for m in counted),
            carbs_g=sum(m.carbs_g for m in counted),
            ingredients=items,
            basis=basis,
        )
        logger.debug(
            f"Aggregated macros over {len(counted)}/{len(items)} ingredients: "
            f"P={macros.protein_g:.1f} F={macros.fat_g:.1f} C={macros.carbs_g:.1f}"
        )
        return macros

    @staticmethod
    def calories(macros: RecipeMacros) -> float:
        """kcal derived from protein, carbs and fat; never stored"""
        return macros.kcal

    @staticmethod
    def servings_from_yield(text: Optional[str]) -> Optional[float]:
        """
        Number of servings in a free-text yield.

        "4 servings" -> 4.0, "2-3" -> 2.5, "2,5 portions" -> 2.5.
        None when the text holds no number or the number is zero.
        """
        if not text:
            return None
        match = _SERVINGS_NUM_RE.search(text)
        if not match:
            return None

        first = parse_decimal(match.group(1))
        if first is None:
            return None
        servings = first
        if match.group(2):
            second = parse_decimal(match.group(2))
            if second is None:
                return None
            servings = (first + second) / 2.0
        return servings if servings > 0 else None

    @staticmethod
    def basis_for_yield(text: Optional[str]) -> MacroBasis:
        """per_serving when the yield names a serving count, else per_recipe"""
        if MacroService.servings_from_yield(text) is not None:
            return MacroBasis.PER_SERVING
        return MacroBasis.PER_RECIPE
