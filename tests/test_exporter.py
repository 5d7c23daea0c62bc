from pathlib import Path

import pytest

from haproxy_cfg import db
from haproxy_cfg.exporter import ExportError, generate_config, render_config_text
from haproxy_cfg.importer import import_config_text

SAMPLE = """# _md5hash=0123
# _version=2
# managed by ops

global
  # foreground for systemd
  daemon
  master-worker

# entry points
frontend http
  mode http
  bind 0.0.0.0:80 name bind_1
  default_backend app

backend app
  mode http
  ###_config-snippet_### BEGIN
    http-request set-var(txn.tier) str(gold)
  ###_config-snippet_### END
"""


def _reset_db(tmp_path: Path) -> Path:
    db.reset_engine()
    db_path = tmp_path / "snapshots.db"
    db.init_db(db_path)
    return db_path


def test_render_matches_imported_text(tmp_path: Path):
    db_path = _reset_db(tmp_path)
    import_config_text(SAMPLE, source_label="sample", db_path=db_path)
    assert render_config_text(db_path=db_path) == SAMPLE


def test_render_unknown_name_is_empty(tmp_path: Path):
    db_path = _reset_db(tmp_path)
    assert render_config_text(db_path=db_path, name="missing") == ""


def test_generate_config(tmp_path: Path):
    db_path = _reset_db(tmp_path)
    import_config_text(SAMPLE, source_label="sample", db_path=db_path)
    target = tmp_path / "haproxy.generated.cfg"
    assert generate_config(target, db_path=db_path) == target
    assert target.read_text() == SAMPLE


def test_generate_without_import_fails(tmp_path: Path):
    db_path = _reset_db(tmp_path)
    with pytest.raises(ExportError):
        generate_config(tmp_path / "out.cfg", db_path=db_path)
