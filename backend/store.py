# store.py
"""Entity store on top of a SQLAlchemy session. Every write commits immediately."""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import Category, Task

logger = logging.getLogger(__name__)


def create(db: Session, entity):
    db.add(entity)
    db.commit()
    logger.debug("created %r", entity)
    return entity


def delete(db: Session, entity) -> None:
    db.delete(entity)
    db.commit()
    logger.debug("deleted %r", entity)


def save(db: Session) -> None:
    """Commit pending mutations of loaded entities as one transaction."""
    db.commit()


def get_task(db: Session, task_id: int) -> Task | None:
    return db.get(Task, task_id)


def get_category(db: Session, category_id: int) -> Category | None:
    return db.get(Category, category_id)


def query_all_tasks(db: Session) -> list[Task]:
    return list(db.execute(select(Task).order_by(Task.id)).scalars().all())


def query_all_categories(db: Session) -> list[Category]:
    return list(db.execute(select(Category).order_by(Category.id)).scalars().all())
