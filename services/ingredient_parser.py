"""Ingredient line parser - free text to structured Ingredient."""

import logging
import math
import re
from typing import Iterable, List, Optional

from core.utils.helpers import parse_decimal
from core.utils.units import canonicalize_unit
from domain.schemas.ingredient_schemas import Ingredient

logger = logging.getLogger("mise.parser")

_NUMBER = r"\d+(?:[.,]\d+)?"

# "<n>" or "<n>-<n>" / "<n>–<n>" at the very start of the line. The number
# must be followed by whitespace, a letter or the end, so "1/2 cup" is not
# read as the quantity 1.
_LEADING_QTY_RE = re.compile(
    rf"""
    ^(?P<low>{_NUMBER})
    (?:\s*[-–]\s*(?P<high>{_NUMBER}))?
    (?=\s|[^\W\d_]|$)
    """,
    re.VERBOSE,
)

_TOKEN_RE = re.compile(r"(?P<token>\S+)\s*(?P<rest>.*)$", re.DOTALL)
_OF_RE = re.compile(r"^of(?:\s+|$)", re.IGNORECASE)


def _leading_quantity(match: "re.Match[str]") -> Optional[float]:
    low = parse_decimal(match.group("low"))
    if match.group("high") is None:
        return low
    high = parse_decimal(match.group("high"))
    if low is None or high is None:
        return None
    mean = (low + high) / 2.0
    if not math.isfinite(mean):
        return None
    return mean


def parse_ingredient_line(line: str) -> Ingredient:
    """
    Convert a single free-text ingredient line into an Ingredient.

    Handles lines like:
      - "120 g flour"
      - "2-3 tbsp sugar"           (range -> mean, 2.5)
      - "1,5 L water"              (comma decimal)
      - "2 carrots, diced"         (text after the first comma is prep)
      - "1 cup sugar"              (cup is not a unit; stays in the name)

    Never raises. Whenever the quantity/unit split would leave no name,
    the whole trimmed line becomes the name with no quantity or unit.
    """
    text = (line or "").strip()
    if not text:
        return Ingredient()

    match = _LEADING_QTY_RE.match(text)
    if match is None:
        return Ingredient(name=text)

    quantity = _leading_quantity(match)
    if quantity is None:
        logger.debug("Unusable quantity in %r; keeping line as name", text)
        return Ingredient(name=text)

    rest = text[match.end():].lstrip()
    unit = None
    token_match = _TOKEN_RE.match(rest)
    if token_match:
        unit = canonicalize_unit(token_match.group("token"))
        if unit is not None:
            rest = token_match.group("rest")
            rest = _OF_RE.sub("", rest, count=1)

    name, comma, prep = rest.partition(",")
    name = name.strip()
    if not name:
        logger.debug("No name left after quantity/unit in %r; keeping line as name", text)
        return Ingredient(name=text)

    return Ingredient(
        quantity=quantity,
        unit=unit,
        name=name,
        prep=(prep.strip() or None) if comma else None,
    )


def parse_ingredient_lines(lines: Iterable[str]) -> List[Ingredient]:
    """Parse every non-blank line, preserving order."""
    return [parse_ingredient_line(line) for line in lines if line and line.strip()]
