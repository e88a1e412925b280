"""Shopping list service"""

import logging
import time
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.config import settings
from app.exceptions import (
    ConflictError,
    MergeConflictError,
    NotFoundError,
    ServiceValidationError,
)
from core.utils.helpers import blank_to_none, norm_whitespace
from domain.models import ShoppingItem
from domain.schemas.ingredient_schemas import Ingredient
from repositories.shopping_repository import ShoppingItemRepository
from services.category_service import guess_category
from services.ingredient_parser import parse_ingredient_line
from services.reconciliation import add_quantities, union_recipe_ids
from services.shopping_keys import key_for

logger = logging.getLogger("mise.shopping")

# Errors that can mean another writer got to the same key first;
# OperationalError only when _is_retryable says so
_RETRYABLE = (IntegrityError, StaleDataError, OperationalError)

# Driver messages of an OperationalError caused by lock contention
_LOCK_MARKERS = ("locked", "busy", "could not obtain lock", "deadlock")


def _is_retryable(error: Exception) -> bool:
    if isinstance(error, OperationalError):
        message = str(getattr(error, "orig", None) or error).lower()
        return any(marker in message for marker in _LOCK_MARKERS)
    return True


class ShoppingService:
    """Business logic for the shared shopping list."""

    @staticmethod
    def merge_ingredients(
        db: Session,
        ingredients: Iterable[Ingredient],
        recipe_id: Optional[int] = None,
        max_retries: Optional[int] = None,
    ) -> List[ShoppingItem]:
        """
        Merge parsed ingredients into the stored shopping list.

        Ingredients are grouped by merge key and each key is merged in its
        own transaction: the active row for the key gets the summed quantity
        and ``recipe_id`` added to its recipe_ids, or a new row is inserted.
        Rows that are done are never touched.

        A concurrent writer on the same key shows up as a unique index
        violation (two inserts), a stale version (two updates) or a locked
        database; the key is then retried from a fresh read. Other
        OperationalErrors (missing table, bad SQL) are not retried.

        The batch is not atomic: keys merged before a failing key stay
        committed, and the error lists them in details["merged_keys"].

        Args:
            db: Database session
            ingredients: Parsed ingredients, blank names are skipped
            recipe_id: Recipe the ingredients come from, if any
            max_retries: Attempts per key (defaults to settings.merge_max_retries)

        Returns:
            The merged rows, one per distinct key, in first-seen order

        Raises:
            MergeConflictError: If a key could not be merged within max_retries
            OperationalError: For database errors other than lock contention
        """
        grouped: Dict[str, List[Ingredient]] = {}
        for ingredient in ingredients:
            if not ingredient.name.strip():
                logger.debug(f"Skipping ingredient without a name: {ingredient!r}")
                continue
            grouped.setdefault(key_for(ingredient), []).append(ingredient)

        merged: List[ShoppingItem] = []
        for key, group in grouped.items():
            try:
                merged.append(
                    ShoppingService._merge_key(db, key, group, recipe_id, max_retries=max_retries)
                )
            except MergeConflictError as e:
                e.details = {**(e.details or {}), "merged_keys": [item.key for item in merged]}
                raise
        logger.info(
            f"Merged {sum(len(g) for g in grouped.values())} ingredients into "
            f"{len(merged)} shopping items (recipe_id={recipe_id})"
        )
        return merged

    @staticmethod
    def _merge_key(
        db: Session,
        key: str,
        group: List[Ingredient],
        recipe_id: Optional[int],
        category: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> ShoppingItem:
        """Upsert the active row for one key, retrying when a writer races us."""
        attempts = max(1, max_retries or settings.merge_max_retries)
        repo = ShoppingItemRepository(db)

        extra: Optional[float] = None
        for ingredient in group:
            extra = add_quantities(extra, ingredient.quantity)

        for attempt in range(1, attempts + 1):
            try:
                item = repo.get_active_by_key(key)
                if item is None:
                    first = group[0]
                    item = repo.add(
                        ShoppingItem(
                            name=first.name.strip(),
                            unit=first.unit,
                            quantity=extra,
                            key=key,
                            done=False,
                            category=category,
                            recipe_ids=sorted(union_recipe_ids((), recipe_id)),
                        )
                    )
                else:
                    item.quantity = add_quantities(item.quantity, extra)
                    item.recipe_ids = sorted(union_recipe_ids(item.recipe_ids, recipe_id))
                db.commit()
                db.refresh(item)
                return item
            except _RETRYABLE as e:
                db.rollback()
                if not _is_retryable(e):
                    raise
                if attempt >= attempts:
                    logger.error(
                        f"Giving up merge for key '{key}' after {attempt} attempts: {e}"
                    )
                    raise MergeConflictError(
                        f"Could not merge shopping item '{key}'",
                        details={"key": key, "attempts": attempt},
                    ) from e
                logger.warning(
                    f"Merge conflict on key '{key}' (attempt {attempt}/{attempts}): "
                    f"{type(e).__name__}, retrying"
                )
                time.sleep(settings.merge_retry_delay_sec * attempt)

    @staticmethod
    def list_items(db: Session) -> List[ShoppingItem]:
        """All shopping items ordered by id"""
        return ShoppingItemRepository(db).get_all()

    @staticmethod
    def add_item_from_text(
        db: Session, text: str, recipe_id: Optional[int] = None
    ) -> ShoppingItem:
        """
        Parse a free-text line and merge it into the list.

        A new row gets a guessed category when settings.guess_categories is
        on; an existing active row keeps its own category.

        Raises:
            ServiceValidationError: If text is blank
        """
        if text is None or not text.strip():
            raise ServiceValidationError("Item text must not be empty", details={"text": text})

        ingredient = parse_ingredient_line(text)
        category = guess_category(ingredient.name) if settings.guess_categories else None
        item = ShoppingService._merge_key(
            db, key_for(ingredient), [ingredient], recipe_id, category=category
        )
        logger.info(f"Added '{text.strip()}' to shopping list as item {item.id}")
        return item

    @staticmethod
    def update_item(
        db: Session,
        item_id: int,
        done: Optional[bool] = None,
        category: Optional[str] = None,
        text: Optional[str] = None,
    ) -> ShoppingItem:
        """
        Update a single shopping item.

        Args:
            db: Database session
            item_id: Shopping item id
            done: New done state
            category: New category; blank clears it
            text: Replacement line text, re-parsed (the merge key follows it)

        Raises:
            ServiceValidationError: If no field is given or text is blank
            NotFoundError: If the item does not exist
            ConflictError: If the item would become a second active row for its key
        """
        if done is None and category is None and text is None:
            raise ServiceValidationError("No fields to update", details={"item_id": item_id})

        repo = ShoppingItemRepository(db)
        item = repo.get_by_id(item_id)
        if not item:
            raise NotFoundError(
                f"Shopping item {item_id} not found", details={"item_id": item_id}
            )

        was_active = not item.done
        old_key = item.key

        if text is not None:
            if not text.strip():
                raise ServiceValidationError("Item text must not be empty", details={"item_id": item_id})
            parsed = parse_ingredient_line(text)
            item.name = parsed.name
            item.unit = parsed.unit
            item.quantity = parsed.quantity
            item.key = key_for(parsed)

        if category is not None:
            item.category = blank_to_none(norm_whitespace(category))

        if done is not None:
            item.done = done

        becomes_active = not item.done and (not was_active or item.key != old_key)
        if becomes_active:
            with db.no_autoflush:
                other = (
                    db.query(ShoppingItem)
                    .filter(
                        ShoppingItem.key == item.key,
                        ShoppingItem.done.is_(False),
                        ShoppingItem.id != item.id,
                    )
                    .first()
                )
            if other is not None:
                details = {"item_id": item_id, "conflicting_id": other.id, "key": other.key}
                db.rollback()
                raise ConflictError(
                    f"Another active item already uses key '{details['key']}'",
                    details=details,
                )

        try:
            db.commit()
        except (IntegrityError, StaleDataError) as e:
            db.rollback()
            raise ConflictError(
                f"Shopping item {item_id} was changed concurrently",
                details={"item_id": item_id},
            ) from e

        db.refresh(item)
        logger.info(f"Updated shopping item {item_id}")
        return item

    @staticmethod
    def delete_item(db: Session, item_id: int) -> None:
        """
        Delete a shopping item.

        Raises:
            NotFoundError: If the item does not exist
        """
        if not ShoppingItemRepository(db).delete(item_id):
            raise NotFoundError(
                f"Shopping item {item_id} not found", details={"item_id": item_id}
            )
        logger.info(f"Deleted shopping item {item_id}")

    @staticmethod
    def clear_done(db: Session) -> int:
        """Delete every checked-off item, returns how many were removed"""
        removed = ShoppingItemRepository(db).delete_done()
        logger.info(f"Cleared {removed} done shopping items")
        return removed
