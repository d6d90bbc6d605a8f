# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from db import init_db, make_engine, make_session_factory

T0 = datetime(2025, 3, 1, 9, 0, 0)


@pytest.fixture()
def engine(tmp_path: Path):
    """Fresh SQLite file per test, schema created."""
    eng = make_engine(str(tmp_path / "bullet.sqlite3"))
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def app(engine):
    from app import create_app

    flask_app = create_app(engine)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(app):
    return app.test_client()
