"""
Repository layer for data access.
Repositories encapsulate database queries and provide a clean interface for services.
"""

from repositories.base import BaseRepository
from repositories.shopping_repository import ShoppingItemRepository
from repositories.normalization_repository import NormalizationRepository

__all__ = [
    "BaseRepository",
    "ShoppingItemRepository",
    "NormalizationRepository",
]
