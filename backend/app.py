import logging
import os
from flask import Blueprint, Flask, current_app, g, jsonify, request
from flask_cors import CORS

import categories
import lifecycle
import store
from db import engine as default_engine, init_db, make_session_factory
from errors import ValidationError
from models import Category, Task
from query import SortKey, SortOrder, filter_and_sort
from timeutil import iso_utc, parse_lenient_iso_to_naive_utc, utcnow

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")


# ---------- Helpers ----------
def get_db():
    if "db" not in g:
        g.db = current_app.extensions["bullet_sessions"]()
    return g.db


def _close_db(_exc=None):
    db = g.pop("db", None)
    if db is not None:
        db.close()


def _json_body() -> dict:
    data = request.get_json(force=True, silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def _parse_date_field(data: dict, key: str):
    raw = data.get(key)
    if raw is not None and not isinstance(raw, str):
        raise ValidationError(f"{key} must be an ISO-8601 string")
    try:
        return parse_lenient_iso_to_naive_utc(raw)
    except ValueError:
        raise ValidationError(f"invalid {key}: {raw!r}") from None


def _flag(raw: str | None) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def _resolve_category(db, name: str | None) -> Category | None:
    """Look a category up by name, creating it inline when it does not exist."""
    if name is None or (isinstance(name, str) and not name.strip()):
        return None
    return categories.find_by_name(db, name) or categories.create_category(db, name)


def category_json(c: Category | None):
    if c is None:
        return None
    return {"id": c.id, "name": c.name, "color": c.color}


def task_json(t: Task, now):
    return {
        "id": t.id,
        "title": t.title,
        "notes": t.notes,
        "mode": t.mode.value,
        "created_at": iso_utc(t.creation_date),
        "last_revived_at": iso_utc(t.last_revived_at),
        "deadline_at": iso_utc(t.deadline_date),
        "killed_at": iso_utc(t.killed_at),
        "lifespan_seconds": lifecycle.lifespan(t).total_seconds(),
        "is_alive": lifecycle.is_alive(t, now),
        "decay_progress": lifecycle.decay_progress(t, now),
        "category": category_json(t.category),
    }


def _task_or_404(task_id: int):
    t = store.get_task(get_db(), task_id)
    if not t:
        return None, (jsonify({"error": "Not found"}), 404)
    return t, None


# ---------- API: tasks ----------
@api.get("/tasks")
def list_tasks():
    db = get_db()
    now = utcnow()
    try:
        sort_key = SortKey(request.args.get("sort", SortKey.DEADLINE.value))
        sort_order = SortOrder(request.args.get("order", SortOrder.ASCENDING.value))
    except ValueError as e:
        raise ValidationError(str(e)) from None

    visible = filter_and_sort(
        store.query_all_tasks(db),
        show_dead=_flag(request.args.get("show_dead")),
        selected_category_names=request.args.getlist("category"),
        sort_key=sort_key,
        sort_order=sort_order,
        now=now,
    )
    return jsonify([task_json(t, now) for t in visible])


@api.post("/tasks")
def create_task():
    db = get_db()
    data = _json_body()
    now = utcnow()

    t = lifecycle.new_task(
        data.get("title"),
        now,
        notes=data.get("notes"),
        deadline=_parse_date_field(data, "deadline_at"),
        mode=data.get("mode", "normal"),
    )
    # only once the task itself is valid
    t.category = _resolve_category(db, data.get("category"))
    store.create(db, t)
    logger.info("Created task id=%s title=%r deadline=%s", t.id, t.title, iso_utc(t.deadline_date))
    return jsonify(task_json(t, now)), 201


@api.get("/tasks/<int:task_id>")
def get_task(task_id: int):
    t, err = _task_or_404(task_id)
    if err:
        return err
    return jsonify(task_json(t, utcnow()))


@api.put("/tasks/<int:task_id>")
def update_task(task_id: int):
    db = get_db()
    t, err = _task_or_404(task_id)
    if err:
        return err

    data = _json_body()

    # validate everything first so a rejected edit leaves the task untouched
    title = lifecycle.clean_title(data["title"]) if "title" in data else t.title
    notes = lifecycle.clean_notes(data["notes"]) if "notes" in data else t.notes
    deadline = _parse_date_field(data, "deadline_at") if "deadline_at" in data else None
    if deadline is not None and deadline < t.last_revived_at:
        raise ValidationError("deadline must not be before the task's last revival")
    mode = lifecycle.parse_mode(data["mode"]) if "mode" in data else t.mode

    category = t.category
    if "category" in data:
        category = _resolve_category(db, data.get("category"))

    lifecycle.rename(t, title)
    lifecycle.set_notes(t, notes)
    if deadline is not None:
        lifecycle.set_deadline(t, deadline)
    lifecycle.set_mode(t, mode)
    lifecycle.assign_category(t, category)
    store.save(db)
    return jsonify(task_json(t, utcnow()))


@api.delete("/tasks/<int:task_id>")
def delete_task(task_id: int):
    t, err = _task_or_404(task_id)
    if err:
        return err
    store.delete(get_db(), t)
    return jsonify({"ok": True})


@api.post("/tasks/<int:task_id>/kill")
def kill_task(task_id: int):
    t, err = _task_or_404(task_id)
    if err:
        return err
    now = utcnow()
    changed = lifecycle.kill(t, now)
    store.save(get_db())
    return jsonify({"ok": True, "changed": changed, "task": task_json(t, now)})


@api.post("/tasks/<int:task_id>/revive")
def revive_task(task_id: int):
    t, err = _task_or_404(task_id)
    if err:
        return err
    now = utcnow()
    changed = lifecycle.revive(t, now)
    store.save(get_db())
    return jsonify({"ok": True, "changed": changed, "task": task_json(t, now)})


# ---------- API: categories ----------
@api.get("/categories")
def list_categories():
    cats = sorted(store.query_all_categories(get_db()), key=lambda c: c.name_key)
    return jsonify([dict(category_json(c), task_count=len(c.tasks)) for c in cats])


@api.post("/categories")
def create_category():
    data = _json_body()
    c = categories.create_category(get_db(), data.get("name"), data.get("color"))
    return jsonify(category_json(c)), 201


@api.get("/categories/<int:category_id>/tasks")
def category_tasks(category_id: int):
    db = get_db()
    c = store.get_category(db, category_id)
    if not c:
        return jsonify({"error": "Not found"}), 404
    now = utcnow()
    return jsonify([task_json(t, now) for t in categories.tasks_for(db, c)])


@api.delete("/categories/<int:category_id>")
def delete_category(category_id: int):
    db = get_db()
    c = store.get_category(db, category_id)
    if not c:
        return jsonify({"error": "Not found"}), 404
    detached = categories.delete_category(db, c)
    return jsonify({"ok": True, "detached_tasks": detached})


@api.errorhandler(ValidationError)
def handle_validation_error(e: ValidationError):
    get_db().rollback()
    return jsonify({"error": str(e)}), 400


def create_app(bind=None) -> Flask:
    bind = bind or default_engine
    init_db(bind)

    app = Flask(__name__)
    CORS(app)
    app.extensions["bullet_sessions"] = make_session_factory(bind)
    app.teardown_appcontext(_close_db)
    app.register_blueprint(api)
    return app


if __name__ == "__main__":
    from logging_setup import setup_logging

    setup_logging()
    port = int(os.getenv("PORT", 8000))
    create_app().run(host="0.0.0.0", port=port, debug=False)
