# tests/test_categories.py

from __future__ import annotations

import random

import pytest

import categories
import store
from errors import ValidationError
from lifecycle import new_task
from models import PALETTE, Task

from .conftest import T0


def test_create_and_find_case_insensitively(db) -> None:
    work = categories.create_category(db, "  Work ", "blue")

    assert work.id is not None
    assert work.name == "Work"
    assert work.color == "blue"
    assert categories.find_by_name(db, "WORK") is work


def test_duplicate_name_is_rejected(db) -> None:
    categories.create_category(db, "Work")

    with pytest.raises(ValidationError):
        categories.create_category(db, "work")

    assert [c.name for c in store.query_all_categories(db)] == ["Work"]


def test_duplicate_detection_folds_non_ascii_case(db) -> None:
    categories.create_category(db, "ÉTÉ", "blue")

    with pytest.raises(ValidationError):
        categories.create_category(db, "été")
    categories.create_category(db, "STRASSE")
    with pytest.raises(ValidationError):
        categories.create_category(db, "straße")

    assert categories.find_by_name(db, "été").name == "ÉTÉ"


@pytest.mark.parametrize("name", ["", "   ", None, 7])
def test_blank_or_non_text_name_is_rejected(db, name) -> None:
    with pytest.raises(ValidationError):
        categories.create_category(db, name)
    assert store.query_all_categories(db) == []


def test_colour_hint_must_come_from_palette(db) -> None:
    with pytest.raises(ValidationError):
        categories.create_category(db, "Fun", "chartreuse")
    assert store.query_all_categories(db) == []


def test_unused_colour_is_preferred(db) -> None:
    spare = "mint"
    for i, color in enumerate(c for c in PALETTE if c != spare):
        categories.create_category(db, f"cat{i}", color)

    fresh = categories.create_category(db, "last one")

    assert fresh.color == spare


def test_pick_color_falls_back_to_full_palette() -> None:
    rng = random.Random(7)
    picks = {categories.pick_color(set(PALETTE), rng) for _ in range(50)}

    assert picks <= set(PALETTE)
    assert len(picks) > 1


def test_tasks_for_is_the_back_reference(db) -> None:
    home = categories.create_category(db, "Home")
    other = categories.create_category(db, "Other")
    t1 = store.create(db, new_task("dishes", T0, category=home))
    store.create(db, new_task("taxes", T0, category=other))
    t3 = store.create(db, new_task("laundry", T0, category=home))

    assert [t.id for t in categories.tasks_for(db, home)] == [t1.id, t3.id]


def test_delete_category_detaches_but_keeps_tasks(db, session_factory) -> None:
    home = categories.create_category(db, "Home")
    keep = categories.create_category(db, "Keep")
    t1 = store.create(db, new_task("dishes", T0, category=home))
    t2 = store.create(db, new_task("laundry", T0, category=home))
    t3 = store.create(db, new_task("plants", T0, category=keep))

    assert categories.delete_category(db, home) == 2

    with session_factory() as fresh:
        rows = {t.id: t for t in store.query_all_tasks(fresh)}
        assert set(rows) == {t1.id, t2.id, t3.id}
        assert rows[t1.id].category_id is None
        assert rows[t2.id].category is None
        assert rows[t3.id].category.name == "Keep"
        assert [c.name for c in store.query_all_categories(fresh)] == ["Keep"]


def test_store_create_and_delete_task(db) -> None:
    t = store.create(db, new_task("temp", T0))
    assert store.get_task(db, t.id) is t

    store.delete(db, t)

    assert db.query(Task).count() == 0
