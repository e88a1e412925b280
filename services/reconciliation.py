"""
In-memory shopping list reconciliation.

Pure functions: the same merge rules ShoppingService applies against the
database, usable on plain values (previews, tests, offline lists).
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from domain.schemas.ingredient_schemas import Ingredient
from domain.schemas.shopping_schemas import ShoppingItemRecord
from services.shopping_keys import key_for

logger = logging.getLogger("mise.shopping")


def add_quantities(current: Optional[float], extra: Optional[float]) -> Optional[float]:
    """Sum two optional quantities; None is the additive identity."""
    if current is None:
        return extra
    if extra is None:
        return current
    return current + extra


def union_recipe_ids(current: Iterable[int], recipe_id: Optional[int]) -> Set[int]:
    ids = set(current or ())
    if recipe_id is not None:
        ids.add(recipe_id)
    return ids


def reconcile(
    existing: Iterable[ShoppingItemRecord],
    incoming: Iterable[Ingredient],
    source_recipe_id: Optional[int] = None,
) -> List[ShoppingItemRecord]:
    """
    Merge ``incoming`` ingredients into ``existing`` shopping items.

    An incoming ingredient merges into the active (not done) item with the
    same key: quantities add and ``source_recipe_id`` joins recipe_ids;
    category and done are left alone. Without an active match a new item
    is appended. Done items are never merge targets, so re-adding something
    already crossed off starts a new entry. Ingredients with a blank name
    are skipped.

    Returns a new list in the original order followed by new items; the
    inputs are not modified.
    """
    result: List[ShoppingItemRecord] = list(existing)
    active: Dict[str, int] = {}
    for index, item in enumerate(result):
        if not item.done:
            active.setdefault(item.key, index)

    for ingredient in incoming:
        if not ingredient.name.strip():
            logger.debug("Skipping ingredient without a name: %r", ingredient)
            continue

        key = key_for(ingredient)
        index = active.get(key)
        if index is not None:
            current = result[index]
            result[index] = current.model_copy(
                update={
                    "quantity": add_quantities(current.quantity, ingredient.quantity),
                    "recipe_ids": union_recipe_ids(current.recipe_ids, source_recipe_id),
                }
            )
            continue

        result.append(
            ShoppingItemRecord(
                name=ingredient.name.strip(),
                unit=ingredient.unit,
                quantity=ingredient.quantity,
                key=key,
                done=False,
                category=None,
                recipe_ids=union_recipe_ids((), source_recipe_id),
            )
        )
        active[key] = len(result) - 1

    return result
