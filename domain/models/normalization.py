"""
Ingredient name normalization cache model.
"""

from sqlalchemy import Column, Text, TIMESTAMP
from sqlalchemy.sql import func

from domain.models.database import Base


class IngredientNormalization(Base):
    """
    Write-once memo of an external name normalization.

    Rows are inserted with insert-or-ignore on raw_name and never updated,
    so the first stored result wins.
    """

    __tablename__ = "ingredient_normalizations"

    raw_name = Column(Text, primary_key=True)
    normalized_name = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<IngredientNormalization(raw_name='{self.raw_name}', normalized_name='{self.normalized_name}')>"
