# lifecycle.py
"""
Alive/dead bookkeeping for tasks.

A task never stores whether it is alive. Everything here takes an explicit
``now`` (naive UTC) so the same task can be evaluated at any point in time.

Lifespan is anchored at the most recent revival: ``lifespan = deadline - last_revived_at``.
Reviving doubles it and moves the anchor to ``now``.
"""
import logging
import os
from datetime import datetime, timedelta

from errors import ValidationError
from models import Category, LifecycleMode, Task

logger = logging.getLogger(__name__)

DEFAULT_LIFESPAN_HOURS = int(os.getenv("BULLET_DEFAULT_LIFESPAN_HOURS", "24"))
DEFAULT_LIFESPAN = timedelta(hours=DEFAULT_LIFESPAN_HOURS)


def clean_title(title) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title must be a non-empty string")
    return title.strip()


def clean_notes(notes) -> str:
    if notes is None:
        return ""
    if not isinstance(notes, str):
        raise ValidationError("notes must be a string")
    return notes


def parse_mode(mode) -> LifecycleMode:
    try:
        return LifecycleMode(mode)
    except (ValueError, TypeError):
        raise ValidationError(f"unknown lifecycle mode {mode!r}") from None


def is_persistent(task: Task) -> bool:
    return task.mode == LifecycleMode.PERSISTENT


def lifespan(task: Task) -> timedelta:
    """Length of the current life: deadline minus anchor, never negative."""
    return max(timedelta(0), task.deadline_date - task.last_revived_at)


def is_alive(task: Task, now: datetime) -> bool:
    if is_persistent(task):
        return True
    if task.killed_at is not None:
        return False
    return now < task.deadline_date


def decay_progress(task: Task, now: datetime) -> float:
    """Fraction of the current lifespan already used up, in [0, 1]."""
    if is_persistent(task):
        return 0.0
    span = lifespan(task)
    if span <= timedelta(0):
        return 1.0
    elapsed = now - task.last_revived_at
    return min(max(elapsed / span, 0.0), 1.0)


def new_task(
    title: str,
    now: datetime,
    *,
    notes: str = "",
    deadline: datetime | None = None,
    category: Category | None = None,
    mode: LifecycleMode = LifecycleMode.NORMAL,
) -> Task:
    """Build a validated, not yet persisted Task created at ``now``."""
    title = clean_title(title)
    if deadline is None:
        deadline = now + DEFAULT_LIFESPAN
    elif deadline < now:
        raise ValidationError("deadline must not be before the creation date")

    return Task(
        title=title,
        notes=clean_notes(notes),
        creation_date=now,
        last_revived_at=now,
        deadline_date=deadline,
        killed_at=None,
        category=category,
        mode=parse_mode(mode),
    )


def kill(task: Task, now: datetime) -> bool:
    """Mark a living task dead by hand. Returns False when nothing changed."""
    if is_persistent(task):
        logger.debug("kill ignored for persistent task id=%s", task.id)
        return False
    if not is_alive(task, now):
        return False
    task.killed_at = now
    logger.info("Killed task id=%s", task.id)
    return True


def revive(task: Task, now: datetime) -> bool:
    """
    Bring a task back with twice its current lifespan, measured from ``now``.

    Zero-lifespan and persistent tasks are left untouched (returns False).
    The deadline and kill marker change together, so a caller committing
    after this call never persists a half-revived task.
    """
    if is_persistent(task):
        logger.debug("revive ignored for persistent task id=%s", task.id)
        return False

    span = lifespan(task)
    if span <= timedelta(0):
        logger.debug("revive skipped for zero-lifespan task id=%s", task.id)
        return False

    # never move the anchor backwards
    anchor = max(now, task.last_revived_at)
    task.last_revived_at = anchor
    task.deadline_date = anchor + span * 2
    task.killed_at = None
    logger.info("Revived task id=%s lifespan=%s", task.id, span * 2)
    return True


# ---------- edits ----------
def rename(task: Task, title: str) -> None:
    task.title = clean_title(title)


def set_notes(task: Task, notes: str | None) -> None:
    task.notes = clean_notes(notes)


def set_deadline(task: Task, deadline: datetime) -> None:
    if deadline < task.last_revived_at:
        raise ValidationError("deadline must not be before the task's last revival")
    task.deadline_date = deadline


def assign_category(task: Task, category: Category | None) -> None:
    task.category = category


def set_mode(task: Task, mode: LifecycleMode | str) -> None:
    task.mode = parse_mode(mode)
