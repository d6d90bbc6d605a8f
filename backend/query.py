# query.py
"""
Derive the visible task list from the full task set and the view state.

``filter_and_sort`` is read-only: it never touches the tasks it is given and
returns a fresh list, so it can run on every request.

Sort keys:
- ``deadline``: the task's current deadline.
- ``age``: the designed lifespan, ``deadline_date - creation_date``;
  ascending lists the shortest-lived task first.
Ties fall back to ascending task id whatever the order; unsaved tasks
(no id yet) go last among their ties.
"""
import enum
from collections.abc import Iterable
from datetime import datetime

from lifecycle import is_alive
from models import Task


class SortKey(str, enum.Enum):
    AGE = "age"
    DEADLINE = "deadline"


class SortOrder(str, enum.Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


def _category_name(task: Task) -> str | None:
    return task.category.name if task.category is not None else None


def filter_and_sort(
    tasks: Iterable[Task],
    show_dead: bool,
    selected_category_names: Iterable[str],
    sort_key: SortKey,
    sort_order: SortOrder,
    now: datetime,
) -> list[Task]:
    selected = set(selected_category_names)

    visible = [t for t in tasks if is_alive(t, now) == (not show_dead)]

    if selected:
        # uncategorised tasks drop out whenever a filter is active
        visible = [t for t in visible if _category_name(t) in selected]

    if SortKey(sort_key) == SortKey.AGE:
        primary = lambda t: t.deadline_date - t.creation_date  # noqa: E731
    else:
        primary = lambda t: t.deadline_date  # noqa: E731

    # two stable passes: id first, then the primary key in the wanted direction
    visible.sort(key=lambda t: (t.id is None, t.id or 0))
    visible.sort(key=primary, reverse=SortOrder(sort_order) == SortOrder.DESCENDING)
    return visible
