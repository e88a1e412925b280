"""
Shopping Item Repository - Data access layer for shopping list rows
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import ShoppingItem


class ShoppingItemRepository(BaseRepository[ShoppingItem]):
    """Repository for shopping item data access"""

    def __init__(self, db: Session):
        super().__init__(db, ShoppingItem)

    def get_all(self, skip: int = 0, limit: Optional[int] = None) -> List[ShoppingItem]:
        """All items in insertion order; no limit unless one is given"""
        query = self.db.query(ShoppingItem).order_by(ShoppingItem.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_active_by_key(self, key: str) -> Optional[ShoppingItem]:
        """The single not-done item with this merge key, if any"""
        return (
            self.db.query(ShoppingItem)
            .filter(ShoppingItem.key == key, ShoppingItem.done.is_(False))
            .first()
        )

    def get_by_key(self, key: str) -> List[ShoppingItem]:
        """Every row (active and done) sharing a merge key"""
        return (
            self.db.query(ShoppingItem)
            .filter(ShoppingItem.key == key)
            .order_by(ShoppingItem.id)
            .all()
        )

    def get_done(self) -> List[ShoppingItem]:
        """Checked-off items"""
        return (
            self.db.query(ShoppingItem)
            .filter(ShoppingItem.done.is_(True))
            .order_by(ShoppingItem.id)
            .all()
        )

    def add(self, item: ShoppingItem) -> ShoppingItem:
        """Stage a new row and flush it so constraint errors surface here"""
        self.db.add(item)
        self.db.flush()
        return item

    def delete_done(self) -> int:
        """Delete all checked-off items, returns the number removed"""
        result = (
            self.db.query(ShoppingItem)
            .filter(ShoppingItem.done.is_(True))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return result
