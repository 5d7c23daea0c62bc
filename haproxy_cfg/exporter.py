"""Generate HAProxy configuration text from the database."""
from __future__ import annotations

from pathlib import Path

from sqlalchemy import select

from . import models
from .db import session_scope
from .importer import DEFAULT_CONFIG_NAME
from .state import SectionKind
from .writer import join_blocks


class ExportError(RuntimeError):
    pass


def _split(rendered: str) -> list[str]:
    return rendered.split("\n") if rendered else []


def render_config_text(db_path: Path | None = None, *, name: str = DEFAULT_CONFIG_NAME) -> str:
    """Rebuild the configuration text from the stored sections.

    Returns an empty string when nothing has been imported under ``name``.
    """
    with session_scope(db_path=db_path) as session:
        config = session.scalar(select(models.Config).where(models.Config.name == name))
        if config is None:
            return ""
        root: list[str] = []
        blocks: list[list[str]] = []
        for section in sorted(config.sections, key=lambda s: s.position):
            if SectionKind(section.kind).is_root:
                root.extend(_split(section.rendered))
            else:
                blocks.append(_split(section.rendered))
        return join_blocks(root, blocks)


def generate_config(target: Path, db_path: Path | None = None, *, name: str = DEFAULT_CONFIG_NAME) -> Path:
    """Render the stored snapshot and write it to ``target``.

    Raises:
        ExportError: When nothing has been imported or the file cannot be written.
    """
    data = render_config_text(db_path=db_path, name=name)
    if not data:
        raise ExportError(f"No stored configuration named {name!r}; run an import first")
    try:
        target.write_text(data, encoding="utf-8")
    except PermissionError as exc:
        raise ExportError(f"Unable to write {target}: {exc}") from exc
    return target
