"""Pydantic schemas for parsed ingredient lines."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Dict, Mapping, Optional

from core.utils.helpers import blank_to_none
from domain.enums import CanonicalUnit
from core.utils.units import canonicalize_unit


class Ingredient(BaseModel):
    """
    One structured ingredient line.

    A unit never appears without a quantity. The name is empty only for the
    degenerate record produced from blank input.
    """

    model_config = ConfigDict(frozen=True)

    quantity: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    unit: Optional[CanonicalUnit] = None
    name: str = ""
    prep: Optional[str] = None

    @field_validator("unit", mode="before")
    @classmethod
    def canonicalize(cls, v):
        """Accept any known spelling; "" means no unit"""
        if v is None or isinstance(v, CanonicalUnit):
            return v
        if isinstance(v, str):
            if not v.strip():
                return None
            unit = canonicalize_unit(v)
            if unit is None:
                raise ValueError(f"Not a canonical unit: {v!r}")
            return unit
        return v

    @field_validator("prep", mode="before")
    @classmethod
    def blank_prep(cls, v):
        if isinstance(v, str):
            return blank_to_none(v)
        return v

    @model_validator(mode="after")
    def unit_requires_quantity(self):
        if self.unit is not None and self.quantity is None:
            raise ValueError("unit given without a quantity")
        return self

    @classmethod
    def from_wire(cls, payload: Mapping[str, Any]) -> "Ingredient":
        """
        Decode the JSON shape used by importers and stored recipes.

        Accepted keys: quantity, unit, name, and either prep (string) or
        prep_words (list of strings joined by spaces). prep wins when both
        are present.
        """
        prep = payload.get("prep")
        if blank_to_none(prep) is None:
            words = payload.get("prep_words")
            if isinstance(words, (list, tuple)):
                prep = " ".join(str(w).strip() for w in words if str(w).strip())
        return cls(
            quantity=payload.get("quantity"),
            unit=payload.get("unit"),
            name=str(payload.get("name") or "").strip(),
            prep=prep,
        )

    def to_wire(self) -> Dict[str, Any]:
        """JSON shape; prep is only present when set"""
        data: Dict[str, Any] = {
            "quantity": self.quantity,
            "unit": self.unit.value if self.unit else None,
            "name": self.name,
        }
        if self.prep is not None:
            data["prep"] = self.prep
        return data
