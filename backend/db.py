import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

DB_PATH = os.getenv("BULLET_DB_PATH", os.path.join(os.getcwd(), "bullet.sqlite3"))
Base = declarative_base()


def make_engine(path: str = DB_PATH):
    engine = create_engine(f"sqlite:///{path}", connect_args={"check_same_thread": False})

    # SQLite ignores ON DELETE SET NULL unless asked per connection
    @event.listens_for(engine, "connect")
    def _fk_pragma(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    return engine


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


engine = make_engine()
SessionLocal = make_session_factory(engine)


def init_db(bind=None):
    bind = bind or engine
    import models  # noqa: F401  registers tables on Base

    Base.metadata.create_all(bind=bind)
