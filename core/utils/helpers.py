"""
Mise utility functions
"""

from __future__ import annotations
import math
import re
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Optional


# Text utilities

_WS_RE = re.compile(r"\s+")


def norm_whitespace(s: str) -> str:
    """Trim and collapse every whitespace run to a single space."""
    return _WS_RE.sub(" ", s).strip()


def normalize_name(s: str) -> str:
    """Lowercase + collapsed whitespace; the lookup form of an ingredient name."""
    return norm_whitespace(s.lower())


def blank_to_none(s: Optional[str]) -> Optional[str]:
    """Trim a string, mapping empty results to None."""
    if s is None:
        return None
    s = s.strip()
    return s or None


# Numeric utilities

# Wide enough for any finite float quantized to a few decimals
_WIDE = Context(prec=400)

def parse_decimal(token: str) -> Optional[float]:
    """
    Convert "1.5" or "1,5" to a float. A comma is always a decimal
    separator here, never a thousands separator.
    """
    try:
        value = float(token.replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def round_half_up(value: float, places: int) -> Decimal:
    """
    Round a float half away from zero on its shortest decimal repr, so that
    250.5 -> 251 and 1.005 -> 1.01 as a person would expect.
    """
    exponent = Decimal(1).scaleb(-places)
    return Decimal(repr(value)).quantize(exponent, rounding=ROUND_HALF_UP, context=_WIDE)


def trim_decimal(value: Decimal) -> str:
    """Render a Decimal without trailing zeros or a dangling point."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text
