"""Import an existing HAProxy configuration into the database."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from hashlib import sha256
from pathlib import Path
import logging
import os

from sqlalchemy import select

from . import models
from .config import ParserOptions
from .db import session_scope
from .errors import Diagnostic, FetchError
from .parser import ConfigParser
from .sections import Section
from .writer import render_root, render_section

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "haproxy.cfg"

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("/etc/haproxy/haproxy.cfg"),
    Path("/usr/local/etc/haproxy/haproxy.cfg"),
    Path("./haproxy.cfg"),
)

MAX_PARENT_SEARCH_DEPTH = 5

DEFAULT_CONFIG_NAME = "default"


def _generate_candidate_paths(explicit: Path) -> list[Path]:
    """Return a list of nearby paths that might contain a configuration."""
    path = explicit.expanduser()
    candidates: list[Path] = []
    seen: set[Path] = set()

    def add(candidate: Path) -> None:
        candidate = candidate.expanduser()
        if candidate not in seen:
            seen.add(candidate)
            candidates.append(candidate)

    add(path)
    if path.name and path.name != CONFIG_FILENAME:
        add(path.with_name(CONFIG_FILENAME))
    add(path / CONFIG_FILENAME)

    current = path.parent
    depth = 0
    while depth < MAX_PARENT_SEARCH_DEPTH and current != current.parent:
        add(current / CONFIG_FILENAME)
        current = current.parent
        depth += 1
    return candidates


class ConfigPermissionError(PermissionError):
    """Raised when the configuration cannot be read due to permissions."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"Permission denied reading {path}. Run the import with elevated permissions "
            "or copy the file to a readable location."
        )

    @property
    def suggested_command(self) -> str:
        return f"sudo haproxy-cfg import {self.path}"


def find_config(explicit: Path | None = None) -> Path:
    """Locate a configuration file to import.

    If an explicit path is given, search nearby locations for a
    ``haproxy.cfg``. Otherwise fall back to the default search paths.

    Raises:
        FileNotFoundError: When no configuration can be located.
    """
    if explicit:
        for candidate in _generate_candidate_paths(explicit):
            if candidate.exists() and candidate.is_file():
                return candidate
    for candidate in DEFAULT_CONFIG_PATHS:
        if candidate.exists():
            return candidate
    raise FileNotFoundError("Unable to locate an HAProxy configuration to import")


@dataclass(slots=True)
class ImportSummary:
    source_path: Path
    section_labels: list[str]
    section_count: int
    version: int | None
    diagnostics: list[Diagnostic] = field(default_factory=list)


def import_config(
    path: Path | None = None,
    *,
    name: str = DEFAULT_CONFIG_NAME,
    options: ParserOptions | None = None,
    db_path: Path | None = None,
) -> ImportSummary:
    """Parse a configuration file and store it as the named snapshot.

    Raises:
        FileNotFoundError: When no configuration is found.
        ConfigPermissionError: When the file cannot be read.
    """
    source = find_config(path)
    if not os.access(source, os.R_OK):
        raise ConfigPermissionError(source)
    return import_config_text(
        source.read_text(encoding="utf-8"),
        source_label=str(source),
        name=name,
        options=options,
        db_path=db_path,
    )


def import_config_text(
    text: str,
    *,
    source_label: str,
    name: str = DEFAULT_CONFIG_NAME,
    options: ParserOptions | None = None,
    db_path: Path | None = None,
) -> ImportSummary:
    """Parse configuration text and replace the stored snapshot ``name``."""
    parser = ConfigParser(options or ParserOptions.from_env())
    diagnostics = parser.process_text(text)
    try:
        version = parser.get_version()
    except FetchError:
        version = None

    digest = sha256(text.encode("utf-8")).hexdigest()
    sections = parser.sections()
    labels = [_label(section) for section in sections]

    with session_scope(db_path=db_path) as session:
        config = session.scalar(select(models.Config).where(models.Config.name == name))
        if config is None:
            config = models.Config(name=name, source_path=source_label)
            session.add(config)
        config.source_path = source_label
        config.source_hash = digest
        config.version = version
        config.imported_at = datetime.now(timezone.utc)
        config.sections.clear()
        session.flush()

        config.sections.append(_store_section(parser.store.root, 0, render_root(parser.store.root)))
        for position, section in enumerate(sections, start=1):
            config.sections.append(_store_section(section, position, render_section(section)))

    logger.info("imported %d section(s) from %s", len(sections), source_label)
    return ImportSummary(
        source_path=Path(source_label),
        section_labels=labels,
        section_count=len(sections),
        version=version,
        diagnostics=diagnostics,
    )


def _store_section(section: Section, position: int, lines: list[str]) -> models.ConfigSection:
    record = models.ConfigSection(
        position=position,
        kind=section.kind.value,
        name=section.name or None,
        from_defaults=section.from_defaults or None,
        comment=section.comment or None,
        rendered="\n".join(lines),
    )
    line_index = 0
    for parser in section.registry:
        for result in parser.result():
            record.directives.append(
                models.SectionDirective(
                    line_index=line_index,
                    keyword=parser.name,
                    text=result.data,
                    comment=result.comment or None,
                )
            )
            line_index += 1
    return record


def _label(section: Section) -> str:
    return f"{section.kind.value} {section.name}".strip()
