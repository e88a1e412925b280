"""
Shopping list models.
"""

import json
import logging
from typing import Any, Set

from sqlalchemy import Column, Integer, Text, Float, Boolean, Enum, Index, false, text
from sqlalchemy.types import TypeDecorator

from domain.enums import CanonicalUnit
from domain.models.database import Base

logger = logging.getLogger("mise.shopping")


def decode_recipe_ids(raw: Any) -> Set[int]:
    """
    Decode a stored recipe_ids value into a set of ints. Never raises.

    Accepted: a JSON array (text or already decoded) of integers, or a bare
    integer left over from the single recipe_id column. Integral floats are
    accepted; any other element is dropped. Anything undecodable yields an
    empty set.
    """
    if raw is None:
        return set()
    value = raw
    if isinstance(raw, (bytes, bytearray)):
        value = raw.decode("utf-8", errors="replace")
    if isinstance(value, str):
        if not value.strip():
            return set()
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("Malformed recipe_ids %r; treating as empty", raw)
            return set()

    if isinstance(value, bool):
        logger.warning("Malformed recipe_ids %r; treating as empty", raw)
        return set()
    if isinstance(value, int):
        return {value}
    if not isinstance(value, (list, tuple, set, frozenset)):
        logger.warning("Malformed recipe_ids %r; treating as empty", raw)
        return set()

    ids = set()
    for element in value:
        if isinstance(element, bool):
            continue
        if isinstance(element, int):
            ids.add(element)
        elif isinstance(element, float) and element.is_integer():
            ids.add(int(element))
    return ids


class RecipeIdList(TypeDecorator):
    """Sorted JSON array of recipe ids stored as text."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return json.dumps(sorted(decode_recipe_ids(value)))

    def process_result_value(self, value, dialect):
        return sorted(decode_recipe_ids(value))


class ShoppingItem(Base):
    """
    One shopping list row.

    ``key`` is the merge identity ("<unit>|<lower name>"). It is unique among
    rows that are not done; checked-off rows keep their key so that adding
    the same ingredient again starts a fresh row.
    """

    __tablename__ = "shopping_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, default="")
    unit = Column(
        Enum(
            CanonicalUnit,
            name="canonical_unit",
            native_enum=False,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=True,
    )
    quantity = Column(Float, nullable=True)
    key = Column(Text, nullable=False)
    done = Column(Boolean, nullable=False, default=False, server_default=false())
    category = Column(Text, index=True)
    recipe_ids = Column(RecipeIdList, nullable=False, default=list, server_default="[]")
    version = Column(Integer, nullable=False)

    __table_args__ = (
        Index(
            "uq_shopping_items_active_key",
            "key",
            unique=True,
            sqlite_where=text("done = 0"),
            postgresql_where=text("NOT done"),
        ),
    )
    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<ShoppingItem(id={self.id}, key='{self.key}', done={self.done})>"
