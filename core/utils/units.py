"""Unit table - spelling variants to canonical unit symbols."""

from typing import Dict, Optional

from domain.enums import CanonicalUnit

# lowercase spelling -> canonical unit.
# "cup", "oz", "lb" and friends are intentionally absent: they stay in the
# ingredient name instead of becoming units.
UNIT_ALIASES: Dict[str, CanonicalUnit] = {
    "g": CanonicalUnit.G,
    "gram": CanonicalUnit.G,
    "grams": CanonicalUnit.G,
    "gramme": CanonicalUnit.G,
    "grammes": CanonicalUnit.G,
    "kg": CanonicalUnit.KG,
    "kilogram": CanonicalUnit.KG,
    "kilograms": CanonicalUnit.KG,
    "kilogramme": CanonicalUnit.KG,
    "kilogrammes": CanonicalUnit.KG,
    "ml": CanonicalUnit.ML,
    "milliliter": CanonicalUnit.ML,
    "millilitre": CanonicalUnit.ML,
    "milliliters": CanonicalUnit.ML,
    "millilitres": CanonicalUnit.ML,
    "l": CanonicalUnit.L,
    "liter": CanonicalUnit.L,
    "litre": CanonicalUnit.L,
    "liters": CanonicalUnit.L,
    "litres": CanonicalUnit.L,
    "tsp": CanonicalUnit.TSP,
    "teaspoon": CanonicalUnit.TSP,
    "teaspoons": CanonicalUnit.TSP,
    "tbsp": CanonicalUnit.TBSP,
    "tablespoon": CanonicalUnit.TBSP,
    "tablespoons": CanonicalUnit.TBSP,
}

# g/ml are shown as whole numbers; everything else gets up to two decimals
WHOLE_NUMBER_UNITS = frozenset({CanonicalUnit.G, CanonicalUnit.ML})


def canonicalize_unit(token: Optional[str]) -> Optional[CanonicalUnit]:
    """Map a unit spelling (any case) to a CanonicalUnit, or None if it is not one."""
    if not token:
        return None
    return UNIT_ALIASES.get(token.strip().lower())


def coerce_unit(unit) -> Optional[CanonicalUnit]:
    """
    Accept a CanonicalUnit, one of its spellings, or None/empty.

    Raises:
        ValueError: If a non-empty value is not a known unit spelling
    """
    if unit is None or isinstance(unit, CanonicalUnit):
        return unit
    text = str(unit).strip()
    if not text:
        return None
    canonical = canonicalize_unit(text)
    if canonical is None:
        raise ValueError(f"Unknown unit: {unit!r}")
    return canonical
