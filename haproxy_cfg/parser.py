"""Public entry point: load, inspect, edit and write a configuration."""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import IO, Any, Iterable, Iterator

from .config import FILE_ENCODING, FILE_ERRORS, ParserOptions
from .directives.base import DirectiveParser
from .engine import Engine
from .errors import AttributeNotFoundError, ConfigError, Diagnostic, FetchError, SectionMissingError, StrictModeError
from .sections import Section, SectionStore
from .state import SectionKind
from .tokenizer import VERSION_MARKER
from .types import ConfigVersion
from .writer import render

logger = logging.getLogger(__name__)

KindLike = SectionKind | str


def _kind(kind: KindLike) -> SectionKind:
    if isinstance(kind, SectionKind):
        return kind
    try:
        return SectionKind(kind)
    except ValueError:
        raise SectionMissingError(f"unknown section kind {kind!r}") from None


def _lines(stream: IO[Any]) -> Iterator[str]:
    for raw in stream:
        yield raw.decode(FILE_ENCODING, FILE_ERRORS) if isinstance(raw, bytes) else raw


class ConfigParser:
    """Caller-held aggregate of every section of one configuration.

    Processing replaces the current contents. Per-line problems never abort
    processing; they are collected in :attr:`diagnostics`, and raised as a
    :class:`StrictModeError` only when strict mode is on.

    Instances are not thread safe; serialize parse and edit sequences with
    an external lock when sharing one between threads.
    """

    def __init__(self, options: ParserOptions | None = None, **kwargs):
        self.options = options or ParserOptions(**kwargs)
        self.store = SectionStore()
        self.diagnostics: list[Diagnostic] = []

    # Processing

    def load(self, path: Path | str) -> list[Diagnostic]:
        path = Path(path)
        logger.debug("%sreading data from %s", self.options.log_prefix, path)
        self.options.path = path
        with path.open("r", encoding=FILE_ENCODING, errors=FILE_ERRORS) as handle:
            return self.process(handle)

    def process(self, stream: IO[Any] | Iterable[str]) -> list[Diagnostic]:
        self.store = SectionStore()
        engine = Engine(self.store, self.options)
        self.diagnostics = engine.run(_lines(stream))
        if self.options.strict and self.diagnostics:
            raise StrictModeError(self.diagnostics)
        return self.diagnostics

    def process_text(self, text: str) -> list[Diagnostic]:
        return self.process(io.StringIO(text))

    # Serialization

    def string(self) -> str:
        return render(self.store, use_md5_hash=self.options.use_md5_hash)

    def __str__(self) -> str:
        return self.string()

    def save(self, path: Path | str | None = None) -> Path:
        target = Path(path) if path is not None else self.options.path
        if target is None:
            raise ConfigError("no path given and nothing was loaded")
        target.write_text(self.string(), encoding=FILE_ENCODING, errors=FILE_ERRORS)
        logger.debug("%sconfiguration written to %s", self.options.log_prefix, target)
        return target

    # Sections

    def section(self, kind: KindLike, name: str | None = None) -> Section:
        return self.store.require(_kind(kind), name)

    def sections(self) -> list[Section]:
        return self.store.sections()

    def section_names(self, kind: KindLike) -> list[str]:
        return self.store.names(_kind(kind))

    def section_exists(self, kind: KindLike, name: str | None = None) -> bool:
        return self.store.get(_kind(kind), name) is not None

    def section_create(self, kind: KindLike, name: str) -> Section:
        return self.store.create(_kind(kind), name)

    def section_delete(self, kind: KindLike, name: str) -> None:
        self.store.delete(_kind(kind), name)

    # Directives

    def parser(self, kind: KindLike, name: str | None, attribute: str) -> DirectiveParser:
        section = self.section(kind, name)
        parser = section.registry.get(attribute)
        if parser is None:
            raise AttributeNotFoundError(f"{section.kind.value or 'root'} has no attribute {attribute!r}")
        return parser

    def get(self, kind: KindLike, name: str | None, attribute: str, create: bool = False) -> Any:
        return self.parser(kind, name, attribute).get(create)

    def get_one(self, kind: KindLike, name: str | None, attribute: str, index: int = 0) -> Any:
        return self.parser(kind, name, attribute).get_one(index)

    def entries(self, kind: KindLike, name: str | None, attribute: str) -> list[Any]:
        """Every record stored for ``attribute``, empty when there is none."""
        return list(self.parser(kind, name, attribute).data)

    def set(self, kind: KindLike, name: str | None, attribute: str, value: Any, index: int | None = None) -> None:
        self.parser(kind, name, attribute).set(value, index)

    def insert(self, kind: KindLike, name: str | None, attribute: str, value: Any, index: int | None = None) -> None:
        self.parser(kind, name, attribute).insert(value, index)

    def delete(self, kind: KindLike, name: str | None, attribute: str, index: int | None = None) -> None:
        self.parser(kind, name, attribute).delete(index)

    # Version marker

    def get_version(self) -> int:
        return self.get(SectionKind.ROOT, None, VERSION_MARKER).value

    def set_version(self, version: int) -> None:
        self.set(SectionKind.ROOT, None, VERSION_MARKER, ConfigVersion(value=int(version)))

    def increment_version(self) -> int:
        try:
            version = self.get_version() + 1
        except FetchError:
            version = 1
        self.set_version(version)
        return version
