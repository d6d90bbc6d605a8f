from datetime import timedelta

import categories
import lifecycle
import store
from db import SessionLocal, init_db
from models import LifecycleMode
from timeutil import utcnow


def seed():
    init_db()
    db = SessionLocal()
    try:
        if store.query_all_tasks(db):
            return
        now = utcnow()
        work = categories.create_category(db, "Work", "blue")
        home = categories.create_category(db, "Home", "green")
        store.create(db, lifecycle.new_task("Reply to Anna", now, category=work))
        store.create(db, lifecycle.new_task("Water the plants", now, deadline=now + timedelta(hours=6), category=home))
        store.create(db, lifecycle.new_task("Stretch", now, mode=LifecycleMode.PERSISTENT))
    finally:
        db.close()


if __name__ == "__main__":
    seed()
