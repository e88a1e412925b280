"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    make_engine,
    init_database,
)
from domain.models.shopping import ShoppingItem, RecipeIdList, decode_recipe_ids
from domain.models.normalization import IngredientNormalization

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "make_engine",
    "init_database",
    # Shopping models
    "ShoppingItem",
    "RecipeIdList",
    "decode_recipe_ids",
    # Normalization cache
    "IngredientNormalization",
]
