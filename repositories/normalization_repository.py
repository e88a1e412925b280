"""
Normalization Repository - Data access layer for the ingredient name cache
"""

from typing import Optional
from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from domain.models import IngredientNormalization
from repositories.base import BaseRepository


class NormalizationRepository(BaseRepository[IngredientNormalization]):
    """Repository for write-once ingredient name normalizations"""

    def __init__(self, db: Session):
        super().__init__(db, IngredientNormalization)

    def get(self, raw_name: str) -> Optional[IngredientNormalization]:
        """Get cache entry by its (already normalized) raw name"""
        return (
            self.db.query(IngredientNormalization)
            .filter(IngredientNormalization.raw_name == raw_name)
            .first()
        )

    def get_value(self, raw_name: str) -> Optional[str]:
        """Stored normalized name, or None on a miss"""
        entry = self.get(raw_name)
        return entry.normalized_name if entry else None

    def insert_or_ignore(self, raw_name: str, normalized_name: str) -> bool:
        """
        Store a normalization unless one already exists for raw_name.

        Uses ON CONFLICT DO NOTHING so two writers racing on the same name
        never fail; the first committed row wins and is never overwritten.

        Returns:
            True if this call inserted the row
        """
        values = {"raw_name": raw_name, "normalized_name": normalized_name}
        dialect = self.db.get_bind().dialect.name

        if dialect == "sqlite":
            stmt = sqlite.insert(IngredientNormalization).values(**values)
            stmt = stmt.on_conflict_do_nothing(index_elements=["raw_name"])
        elif dialect == "postgresql":
            stmt = postgresql.insert(IngredientNormalization).values(**values)
            stmt = stmt.on_conflict_do_nothing(index_elements=["raw_name"])
        else:
            # No portable upsert; a plain insert still lets the primary key decide
            if self.get(raw_name) is not None:
                return False
            stmt = insert(IngredientNormalization).values(**values)

        result = self.db.execute(stmt)
        self.db.commit()
        return bool(result.rowcount)
