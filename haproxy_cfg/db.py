"""SQLite engine and session handling for the snapshot store."""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from . import models
from .config import DB_PATH, ensure_app_dir

SCHEMA_VERSION = "1"
SCHEMA_KEY = "schema_version"

_engine: Engine | None = None
_engine_path: Path | None = None
_SessionLocal: sessionmaker[Session] | None = None


class SchemaVersionError(RuntimeError):
    """The database was written by an incompatible schema."""

    def __init__(self, path: Path, found: str | None):
        self.path = path
        self.found = found
        super().__init__(
            f"{path} uses schema version {found!r}, expected {SCHEMA_VERSION!r}; "
            "move it aside and import the configuration again"
        )


def get_engine(db_path: Path | str | None = None) -> Engine:
    """Return the shared engine, rebinding it when another path is requested."""
    global _engine, _engine_path, _SessionLocal
    if _engine is not None and (db_path is None or Path(db_path) == _engine_path):
        return _engine
    reset_engine()
    path = Path(db_path or DB_PATH)
    ensure_app_dir(path.parent)
    engine = create_engine(f"sqlite:///{path}", future=True)
    event.listen(engine, "connect", _enable_foreign_keys)
    session_factory = sessionmaker(bind=engine, expire_on_commit=False, future=True)
    try:
        _bootstrap_schema(engine, session_factory, path)
    except Exception:
        engine.dispose()
        raise
    _engine, _engine_path, _SessionLocal = engine, path, session_factory
    return engine


def reset_engine() -> None:
    """Drop the cached engine so the next call binds to a new path."""
    global _engine, _engine_path, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _engine_path = None
    _SessionLocal = None


def init_db(db_path: Path | str | None = None) -> None:
    models.Base.metadata.create_all(get_engine(db_path=db_path))


@contextmanager
def session_scope(db_path: Path | str | None = None) -> Iterator[Session]:
    """Provide a transactional scope."""
    get_engine(db_path=db_path)
    if _SessionLocal is None:
        raise RuntimeError("database engine is not initialised")
    session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def schema_version(db_path: Path | str | None = None) -> str | None:
    with session_scope(db_path=db_path) as session:
        meta = session.get(models.Meta, SCHEMA_KEY)
        return meta.value if meta else None


def _bootstrap_schema(engine: Engine, session_factory: sessionmaker[Session], path: Path) -> None:
    """Create missing tables, then record or check the schema version."""
    models.Base.metadata.create_all(engine)
    with session_factory() as session, session.begin():
        meta = session.get(models.Meta, SCHEMA_KEY)
        if meta is None:
            session.add(models.Meta(key=SCHEMA_KEY, value=SCHEMA_VERSION))
        elif meta.value != SCHEMA_VERSION:
            raise SchemaVersionError(path, meta.value)


def _enable_foreign_keys(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()
