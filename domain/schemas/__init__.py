"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.ingredient_schemas import Ingredient
from domain.schemas.macro_schemas import (
    IngredientMacros,
    RecipeMacros,
    KCAL_PER_G_PROTEIN,
    KCAL_PER_G_CARBS,
    KCAL_PER_G_FAT,
)
from domain.schemas.shopping_schemas import (
    ShoppingItemRecord,
    ShoppingItemResponse,
)

__all__ = [
    # Ingredient schemas
    "Ingredient",
    # Macro schemas
    "IngredientMacros",
    "RecipeMacros",
    "KCAL_PER_G_PROTEIN",
    "KCAL_PER_G_CARBS",
    "KCAL_PER_G_FAT",
    # Shopping schemas
    "ShoppingItemRecord",
    "ShoppingItemResponse",
]
