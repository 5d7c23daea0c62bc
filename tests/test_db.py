from pathlib import Path

import pytest
from sqlalchemy import inspect

from haproxy_cfg import db, models


def test_init_db(tmp_path: Path):
    db.reset_engine()
    db_path = tmp_path / "snapshots.db"
    db.init_db(db_path)
    engine = db.get_engine(db_path)
    tables = inspect(engine).get_table_names()
    assert {"configs", "sections", "directives", "meta"} <= set(tables)
    assert db.schema_version(db_path) == db.SCHEMA_VERSION


def test_engine_rebinds_to_new_path(tmp_path: Path):
    db.reset_engine()
    first = db.get_engine(tmp_path / "first.db")
    assert db.get_engine() is first
    second = db.get_engine(tmp_path / "second.db")
    assert second is not first
    assert (tmp_path / "second.db").exists()


def test_schema_version_mismatch_is_rejected(tmp_path: Path):
    db.reset_engine()
    db_path = tmp_path / "snapshots.db"
    db.init_db(db_path)
    with db.session_scope(db_path) as session:
        session.get(models.Meta, db.SCHEMA_KEY).value = "0"
    db.reset_engine()

    with pytest.raises(db.SchemaVersionError) as excinfo:
        db.get_engine(db_path)
    assert excinfo.value.found == "0"
    assert db._engine is None
