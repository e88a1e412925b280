"""
Domain mappers package.
Handles transformation between ORM models and DTOs (Data Transfer Objects).
"""

from domain.mappers.shopping_mapper import ShoppingMapper

__all__ = ["ShoppingMapper"]
