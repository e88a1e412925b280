"""
Shopping list domain mappers.
Handles transformation between ORM models and DTOs for shopping-related entities.
"""

from domain.models import ShoppingItem
from domain.schemas.ingredient_schemas import Ingredient
from domain.schemas.shopping_schemas import ShoppingItemRecord, ShoppingItemResponse
from services.ingredient_formatter import format_ingredient


class ShoppingMapper:
    """Mapper for shopping item transformations."""

    @staticmethod
    def to_ingredient(item: ShoppingItem) -> Ingredient:
        """Rebuild the ingredient a shopping row stands for (without prep)"""
        return Ingredient(
            quantity=item.quantity,
            unit=item.unit if item.quantity is not None else None,
            name=item.name or "",
        )

    @staticmethod
    def to_response(item: ShoppingItem) -> ShoppingItemResponse:
        """
        Convert ORM ShoppingItem to ShoppingItemResponse DTO.

        Args:
            item: ShoppingItem ORM instance

        Returns:
            ShoppingItemResponse with a display line such as "300 g flour"
        """
        return ShoppingItemResponse(
            id=item.id,
            text=format_ingredient(ShoppingMapper.to_ingredient(item)),
            name=item.name,
            unit=item.unit,
            quantity=item.quantity,
            key=item.key,
            done=item.done,
            category=item.category,
            recipe_ids=sorted(item.recipe_ids or []),
        )

    @staticmethod
    def to_record(item: ShoppingItem) -> ShoppingItemRecord:
        """Value form of a stored row, for the in-memory reconciler"""
        return ShoppingItemRecord.model_validate(item)
