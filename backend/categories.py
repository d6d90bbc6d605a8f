# categories.py
import logging
import random

from sqlalchemy import select
from sqlalchemy.orm import Session

import store
from errors import ValidationError
from models import PALETTE, Category, Task, category_key

logger = logging.getLogger(__name__)


def clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("category name must be a non-empty string")
    return name.strip()


def find_by_name(db: Session, name: str) -> Category | None:
    """Case-insensitive lookup, Unicode-aware."""
    return db.execute(
        select(Category).where(Category.name_key == category_key(clean_name(name)))
    ).scalars().first()


def pick_color(used: set[str], rng: random.Random | None = None) -> str:
    """Prefer a palette colour no category has yet; otherwise any palette colour."""
    rng = rng or random
    unused = [c for c in PALETTE if c not in used]
    return rng.choice(unused or list(PALETTE))


def create_category(db: Session, name: str, color_hint: str | None = None, *, rng=None) -> Category:
    name = clean_name(name)
    if find_by_name(db, name) is not None:
        raise ValidationError(f"category {name!r} already exists")

    if color_hint is not None:
        if color_hint not in PALETTE:
            raise ValidationError(f"unknown colour {color_hint!r}")
        color = color_hint
    else:
        used = {c.color for c in store.query_all_categories(db)}
        color = pick_color(used, rng)

    category = store.create(db, Category(name=name, color=color))
    logger.info("Created category %r color=%s", category.name, category.color)
    return category


def tasks_for(db: Session, category: Category) -> list[Task]:
    """Tasks currently pointing at ``category``."""
    return list(
        db.execute(select(Task).where(Task.category_id == category.id).order_by(Task.id)).scalars().all()
    )


def delete_category(db: Session, category: Category) -> int:
    """Delete ``category`` and detach its tasks. Returns how many tasks were detached."""
    orphans = tasks_for(db, category)
    for t in orphans:
        t.category = None
    store.delete(db, category)
    logger.info("Deleted category %r, detached %d task(s)", category.name, len(orphans))
    return len(orphans)
