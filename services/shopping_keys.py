"""Canonical merge keys for shopping list reconciliation."""

from typing import Optional, Union

from core.utils.units import coerce_unit
from domain.enums import CanonicalUnit
from domain.schemas.ingredient_schemas import Ingredient

KEY_SEPARATOR = "|"


def make_key(unit: Optional[Union[CanonicalUnit, str]], name: str) -> str:
    """
    Merge key "<unit>|<lower(trim(name))>"; unitless items start with "|".

    "200 g flour" and "2 flour" get different keys on purpose: amounts in
    different units are never added together.
    """
    canonical = coerce_unit(unit)
    prefix = canonical.value if canonical is not None else ""
    return f"{prefix}{KEY_SEPARATOR}{(name or '').strip().lower()}"


def key_for(ingredient: Ingredient) -> str:
    return make_key(ingredient.unit, ingredient.name)
