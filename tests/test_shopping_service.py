"""
Tests for the stored shopping list (ShoppingService).

Covers transactional merging, the supplementary item operations and the
retry loop that resolves concurrent merges on the same key.
"""

import threading

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    ConflictError,
    MergeConflictError,
    NotFoundError,
    ServiceValidationError,
)
from domain.enums import CanonicalUnit
from domain.mappers import ShoppingMapper
from repositories.shopping_repository import ShoppingItemRepository
from services.ingredient_parser import parse_ingredient_line, parse_ingredient_lines
from services.shopping_service import ShoppingService
from test_fixtures import db_session, make_ingredient, session_factory


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch):
    monkeypatch.setattr(settings, "merge_retry_delay_sec", 0.001)


# =============================================================================
# MERGE
# =============================================================================


def test_merge_creates_items(db_session: Session):
    items = ShoppingService.merge_ingredients(
        db_session, parse_ingredient_lines(["200 g flour", "2 eggs"]), recipe_id=1
    )

    assert [i.key for i in items] == ["g|flour", "|eggs"]
    flour = items[0]
    assert flour.id is not None
    assert flour.quantity == 200
    assert flour.unit is CanonicalUnit.G
    assert flour.done is False
    assert flour.category is None
    assert flour.recipe_ids == [1]


def test_merge_sums_into_active_row(db_session: Session):
    ShoppingService.merge_ingredients(db_session, [parse_ingredient_line("200 g flour")], 1)
    ShoppingService.merge_ingredients(db_session, [parse_ingredient_line("100 g Flour")], 2)

    items = ShoppingService.list_items(db_session)
    assert len(items) == 1
    assert items[0].quantity == 300
    assert items[0].recipe_ids == [1, 2]
    assert items[0].name == "flour"


def test_merge_same_key_within_batch(db_session: Session):
    items = ShoppingService.merge_ingredients(
        db_session, parse_ingredient_lines(["100 g flour", "50 g flour"])
    )

    assert len(items) == 1
    assert items[0].quantity == 150
    assert items[0].recipe_ids == []


def test_merge_keeps_units_apart(db_session: Session):
    ShoppingService.merge_ingredients(
        db_session, parse_ingredient_lines(["1 kg flour", "200 g flour"])
    )

    keys = sorted(i.key for i in ShoppingService.list_items(db_session))
    assert keys == ["g|flour", "kg|flour"]


def test_merge_skips_done_rows(db_session: Session):
    (first,) = ShoppingService.merge_ingredients(db_session, [parse_ingredient_line("200 g flour")], 1)
    ShoppingService.update_item(db_session, first.id, done=True)

    (second,) = ShoppingService.merge_ingredients(db_session, [parse_ingredient_line("100 g flour")], 2)

    assert second.id != first.id
    assert second.quantity == 100
    assert second.recipe_ids == [2]
    db_session.refresh(first)
    assert first.done is True
    assert first.quantity == 200


def test_merge_none_quantity_then_number(db_session: Session):
    ShoppingService.merge_ingredients(db_session, [parse_ingredient_line("salt")])
    (item,) = ShoppingService.merge_ingredients(db_session, [make_ingredient("salt", 1, None)])

    assert item.quantity == 1


def test_merge_skips_blank_names(db_session: Session):
    assert ShoppingService.merge_ingredients(db_session, [make_ingredient("", None, None)]) == []
    assert ShoppingService.list_items(db_session) == []


def test_merge_repairs_malformed_recipe_ids(db_session: Session):
    """Undecodable stored recipe_ids read as empty and are rewritten on merge"""
    from sqlalchemy import text

    (item,) = ShoppingService.merge_ingredients(db_session, [parse_ingredient_line("2 eggs")], 1)
    db_session.execute(
        text("UPDATE shopping_items SET recipe_ids = 'not json' WHERE id = :id"),
        {"id": item.id},
    )
    db_session.commit()
    db_session.expire_all()

    assert ShoppingItemRepository(db_session).get_by_id(item.id).recipe_ids == []

    (merged,) = ShoppingService.merge_ingredients(db_session, [parse_ingredient_line("1 eggs")], 5)
    assert merged.recipe_ids == [5]
    assert merged.quantity == 3


# =============================================================================
# RETRIES
# =============================================================================


def _locked():
    return OperationalError("SELECT", {}, Exception("database is locked"))


def test_merge_retries_transient_errors(db_session: Session, monkeypatch):
    real_lookup = ShoppingItemRepository.get_active_by_key
    calls = {"count": 0}

    def flaky_lookup(self, key):
        calls["count"] += 1
        if calls["count"] < 3:
            raise _locked()
        return real_lookup(self, key)

    monkeypatch.setattr(ShoppingItemRepository, "get_active_by_key", flaky_lookup)

    (item,) = ShoppingService.merge_ingredients(
        db_session, [parse_ingredient_line("200 g flour")], max_retries=5
    )

    assert calls["count"] == 3
    assert item.quantity == 200


def test_merge_gives_up_with_merge_conflict(db_session: Session, monkeypatch):
    def always_locked(self, key):
        raise _locked()

    monkeypatch.setattr(ShoppingItemRepository, "get_active_by_key", always_locked)

    with pytest.raises(MergeConflictError) as exc_info:
        ShoppingService.merge_ingredients(
            db_session, [parse_ingredient_line("200 g flour")], max_retries=3
        )

    err = exc_info.value
    assert isinstance(err, ConflictError)
    assert not isinstance(err, NotFoundError)
    assert err.http_status == 409
    assert err.code == "merge_conflict"
    assert err.details == {"key": "g|flour", "attempts": 3, "merged_keys": []}


def test_merge_does_not_retry_other_operational_errors(db_session: Session, monkeypatch):
    calls = {"count": 0}

    def missing_table(self, key):
        calls["count"] += 1
        raise OperationalError("SELECT", {}, Exception("no such table: shopping_items"))

    monkeypatch.setattr(ShoppingItemRepository, "get_active_by_key", missing_table)

    with pytest.raises(OperationalError):
        ShoppingService.merge_ingredients(
            db_session, [parse_ingredient_line("200 g flour")], max_retries=5
        )

    assert calls["count"] == 1


def test_merge_conflict_reports_keys_already_merged(db_session: Session, monkeypatch):
    """Earlier keys of the batch stay committed when a later key gives up"""
    real_lookup = ShoppingItemRepository.get_active_by_key

    def sugar_locked(self, key):
        if key == "|sugar":
            raise _locked()
        return real_lookup(self, key)

    monkeypatch.setattr(ShoppingItemRepository, "get_active_by_key", sugar_locked)

    with pytest.raises(MergeConflictError) as exc_info:
        ShoppingService.merge_ingredients(
            db_session,
            parse_ingredient_lines(["200 g flour", "1 sugar"]),
            max_retries=2,
        )

    assert exc_info.value.details == {"key": "|sugar", "attempts": 2, "merged_keys": ["g|flour"]}
    items = ShoppingService.list_items(db_session)
    assert [(i.key, i.quantity) for i in items] == [("g|flour", 200)]


def test_concurrent_merges_on_same_key(session_factory):
    """Writers racing on one key end up in a single active row with every contribution"""
    workers = 8
    barrier = threading.Barrier(workers)
    errors = []

    def worker(recipe_id):
        db = session_factory()
        try:
            barrier.wait(timeout=10)
            ShoppingService.merge_ingredients(
                db, [parse_ingredient_line("100 g flour")], recipe_id=recipe_id, max_retries=100
            )
        except Exception as e:  # collected for the assertion below
            errors.append(e)
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert errors == []
    db = session_factory()
    try:
        items = ShoppingService.list_items(db)
        assert len(items) == 1
        assert items[0].quantity == 100 * workers
        assert items[0].recipe_ids == list(range(workers))
    finally:
        db.close()


# =============================================================================
# ADD FROM TEXT
# =============================================================================


def test_add_item_from_text_guesses_category(db_session: Session):
    item = ShoppingService.add_item_from_text(db_session, "2 tomatoes")

    assert item.name == "tomatoes"
    assert item.quantity == 2
    assert item.category == "Produce"


def test_add_item_from_text_without_guessing(db_session: Session, monkeypatch):
    monkeypatch.setattr(settings, "guess_categories", False)

    item = ShoppingService.add_item_from_text(db_session, "2 tomatoes")

    assert item.category is None


def test_add_item_from_text_keeps_existing_category(db_session: Session):
    first = ShoppingService.add_item_from_text(db_session, "1 kg rice")
    ShoppingService.update_item(db_session, first.id, category="Asian")

    again = ShoppingService.add_item_from_text(db_session, "1 kg rice", recipe_id=3)

    assert again.id == first.id
    assert again.quantity == 2
    assert again.category == "Asian"
    assert again.recipe_ids == [3]


@pytest.mark.parametrize("text", ["", "   ", None])
def test_add_item_from_text_rejects_blank(db_session: Session, text):
    with pytest.raises(ServiceValidationError):
        ShoppingService.add_item_from_text(db_session, text)


# =============================================================================
# UPDATE / DELETE / CLEAR
# =============================================================================


def test_update_item_requires_a_field(db_session: Session):
    item = ShoppingService.add_item_from_text(db_session, "2 eggs")

    with pytest.raises(ServiceValidationError):
        ShoppingService.update_item(db_session, item.id)


def test_update_item_unknown_id(db_session: Session):
    with pytest.raises(NotFoundError):
        ShoppingService.update_item(db_session, 999, done=True)


def test_update_item_category(db_session: Session):
    item = ShoppingService.add_item_from_text(db_session, "2 eggs")

    updated = ShoppingService.update_item(db_session, item.id, category="  Baking   goods ")
    assert updated.category == "Baking goods"

    cleared = ShoppingService.update_item(db_session, item.id, category="   ")
    assert cleared.category is None


def test_update_item_text_recomputes_key(db_session: Session):
    item = ShoppingService.add_item_from_text(db_session, "200 g flour")

    updated = ShoppingService.update_item(db_session, item.id, text="300 g sugar")

    assert updated.key == "g|sugar"
    assert updated.name == "sugar"
    assert updated.quantity == 300


def test_update_item_text_rejects_blank(db_session: Session):
    item = ShoppingService.add_item_from_text(db_session, "200 g flour")

    with pytest.raises(ServiceValidationError):
        ShoppingService.update_item(db_session, item.id, text="  ")


def test_update_item_text_collision_is_conflict(db_session: Session):
    ShoppingService.add_item_from_text(db_session, "200 g flour")
    sugar = ShoppingService.add_item_from_text(db_session, "100 g sugar")

    with pytest.raises(ConflictError):
        ShoppingService.update_item(db_session, sugar.id, text="50 g flour")

    db_session.refresh(sugar)
    assert sugar.key == "g|sugar"
    assert sugar.quantity == 100


def test_update_item_text_on_done_row_may_share_key(db_session: Session):
    ShoppingService.add_item_from_text(db_session, "200 g flour")
    sugar = ShoppingService.add_item_from_text(db_session, "100 g sugar")
    ShoppingService.update_item(db_session, sugar.id, done=True)

    updated = ShoppingService.update_item(db_session, sugar.id, text="50 g flour")

    assert updated.key == "g|flour"
    assert updated.done is True


def test_undo_done_onto_active_key_is_conflict(db_session: Session):
    first = ShoppingService.add_item_from_text(db_session, "200 g flour")
    ShoppingService.update_item(db_session, first.id, done=True)
    ShoppingService.add_item_from_text(db_session, "100 g flour")

    with pytest.raises(ConflictError):
        ShoppingService.update_item(db_session, first.id, done=False)


def test_undo_done_without_active_twin(db_session: Session):
    item = ShoppingService.add_item_from_text(db_session, "200 g flour")
    ShoppingService.update_item(db_session, item.id, done=True)

    restored = ShoppingService.update_item(db_session, item.id, done=False)

    assert restored.done is False


def test_delete_item(db_session: Session):
    item = ShoppingService.add_item_from_text(db_session, "2 eggs")

    ShoppingService.delete_item(db_session, item.id)

    assert ShoppingService.list_items(db_session) == []
    with pytest.raises(NotFoundError):
        ShoppingService.delete_item(db_session, item.id)


def test_clear_done(db_session: Session):
    eggs = ShoppingService.add_item_from_text(db_session, "2 eggs")
    milk = ShoppingService.add_item_from_text(db_session, "1 L milk")
    ShoppingService.add_item_from_text(db_session, "200 g flour")
    ShoppingService.update_item(db_session, eggs.id, done=True)
    ShoppingService.update_item(db_session, milk.id, done=True)

    assert ShoppingService.clear_done(db_session) == 2
    db_session.expire_all()
    assert [i.name for i in ShoppingService.list_items(db_session)] == ["flour"]
    assert ShoppingService.clear_done(db_session) == 0


# =============================================================================
# MAPPER
# =============================================================================


def test_mapper_renders_display_text(db_session: Session):
    flour, salt = ShoppingService.merge_ingredients(
        db_session, parse_ingredient_lines(["250.5 g flour", "salt"]), recipe_id=4
    )

    response = ShoppingMapper.to_response(flour)
    assert response.text == "251 g flour"
    assert response.recipe_ids == [4]
    assert response.unit is CanonicalUnit.G

    assert ShoppingMapper.to_response(salt).text == "salt"


def test_mapper_to_record(db_session: Session):
    (item,) = ShoppingService.merge_ingredients(db_session, [parse_ingredient_line("2 eggs")], 9)

    record = ShoppingMapper.to_record(item)

    assert record.id == item.id
    assert record.key == "|eggs"
    assert record.recipe_ids == {9}
