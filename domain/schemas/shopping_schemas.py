"""Pydantic schemas for shopping list operations."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Set

from domain.enums import CanonicalUnit


class ShoppingItemRecord(BaseModel):
    """
    Value form of a shopping list entry, used by the in-memory reconciler.

    id is None until the row has been stored.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: Optional[int] = None
    name: str
    unit: Optional[CanonicalUnit] = None
    quantity: Optional[float] = None
    key: str
    done: bool = False
    category: Optional[str] = None
    recipe_ids: Set[int] = Field(default_factory=set)

    @field_validator("recipe_ids", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return set() if v is None else v


class ShoppingItemResponse(BaseModel):
    """Shopping list entry as shown to a user"""

    id: int
    text: str
    name: str
    unit: Optional[CanonicalUnit]
    quantity: Optional[float]
    key: str
    done: bool = False
    category: Optional[str] = None
    recipe_ids: List[int] = []

    model_config = {"from_attributes": True}

