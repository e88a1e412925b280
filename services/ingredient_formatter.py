"""Ingredient line formatter - structured Ingredient back to display text."""

import logging
import math
from typing import Optional

from core.utils.helpers import round_half_up, trim_decimal
from core.utils.units import WHOLE_NUMBER_UNITS
from domain.enums import CanonicalUnit
from domain.schemas.ingredient_schemas import Ingredient

logger = logging.getLogger("mise.formatter")

DEFAULT_SCALE = 1.0


def effective_scale(scale) -> float:
    """Scale factor actually applied; NaN, infinite or negative values fall back to 1.0"""
    try:
        value = float(scale)
    except (TypeError, ValueError):
        logger.debug("Non-numeric scale %r; using %s", scale, DEFAULT_SCALE)
        return DEFAULT_SCALE
    if not math.isfinite(value) or value < 0:
        logger.debug("Invalid scale %r; using %s", scale, DEFAULT_SCALE)
        return DEFAULT_SCALE
    return value


def format_quantity(quantity: float, unit: Optional[CanonicalUnit]) -> str:
    """
    Render a quantity for its unit.

    g and ml are whole numbers. kg, L, spoons and unitless amounts get at
    most two decimals with trailing zeros dropped (1.50 -> "1.5", 2.00 -> "2").
    """
    if unit in WHOLE_NUMBER_UNITS:
        return trim_decimal(round_half_up(quantity, 0))
    return trim_decimal(round_half_up(quantity, 2))


def scale_ingredient(ingredient: Ingredient, scale=DEFAULT_SCALE) -> Ingredient:
    """
    Copy of ``ingredient`` with its quantity multiplied by ``scale``.

    A product that overflows to infinity is handled like an invalid scale:
    the quantity is kept unscaled and a warning is logged.
    """
    if ingredient.quantity is None:
        return ingredient
    factor = effective_scale(scale)
    scaled = ingredient.quantity * factor
    if not math.isfinite(scaled):
        logger.warning(
            "Scaling %r by %s overflows; using %s", ingredient.quantity, factor, DEFAULT_SCALE
        )
        return ingredient
    return ingredient.model_copy(update={"quantity": scaled})


def format_ingredient(
    ingredient: Ingredient, scale=DEFAULT_SCALE, include_prep: bool = True
) -> str:
    """
    Display text for an ingredient:

        "<quantity> <unit> <name>[, <prep>]"
        "<quantity> <name>[, <prep>]"
        "<name>[, <prep>]"

    The quantity is multiplied by ``scale`` first; without a quantity the
    scale has no effect.
    """
    parts = []
    if ingredient.quantity is not None:
        scaled = scale_ingredient(ingredient, scale)
        parts.append(format_quantity(scaled.quantity, ingredient.unit))
        if ingredient.unit is not None:
            parts.append(ingredient.unit.value)
    if ingredient.name:
        parts.append(ingredient.name)

    text = " ".join(parts)
    if include_prep and ingredient.prep:
        text = f"{text}, {ingredient.prep}"
    return text
