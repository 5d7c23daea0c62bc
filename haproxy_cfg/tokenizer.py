"""Split raw configuration lines into fields and a trailing comment."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

VERSION_MARKER = "# _version"
HASH_MARKER = "# _md5hash"
SNIPPET_MARKER = "config-snippet"
SNIPPET_BEGIN = "###_config-snippet_### BEGIN"
SNIPPET_END = "###_config-snippet_### END"

CONDITION_KEYWORDS = ("if", "unless")


@dataclass(slots=True)
class Line:
    raw: str
    parts: list[str] = field(default_factory=list)
    comment: str | None = None

    @property
    def is_blank(self) -> bool:
        return not self.parts and self.comment is None

    @property
    def is_comment(self) -> bool:
        return not self.parts and self.comment is not None

    @property
    def indented(self) -> bool:
        return self.raw[:1].isspace()

    @property
    def is_snippet_marker(self) -> bool:
        return self.parts == [SNIPPET_MARKER]


def split_line(raw: str) -> Line:
    """Tokenize ``raw`` (newline already stripped).

    Fields are split on runs of whitespace. Text after the first unescaped
    ``#`` is the comment. Comment-only lines carrying file metadata (version,
    hash, snippet markers) come back as a single synthetic field so they can
    be dispatched to a dedicated parser.
    """
    parts: list[str] = []
    buffer: list[str] = []
    comment: str | None = None
    escaped = False
    for index, char in enumerate(raw):
        if escaped:
            buffer.append(char)
            escaped = False
            continue
        if char == "\\":
            buffer.append(char)
            escaped = True
            continue
        if char == "#":
            comment = raw[index + 1 :].strip()
            break
        if char.isspace():
            if buffer:
                parts.append("".join(buffer))
                buffer = []
            continue
        buffer.append(char)
    if buffer:
        parts.append("".join(buffer))

    if not parts and comment is not None:
        if raw.startswith(VERSION_MARKER):
            parts = [VERSION_MARKER]
        elif SNIPPET_MARKER in raw:
            parts = [SNIPPET_MARKER]
        elif raw.startswith(HASH_MARKER):
            parts = [HASH_MARKER]
    return Line(raw=raw, parts=parts, comment=comment)


def split_condition(parts: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split ``parts`` at the first ``if``/``unless`` keyword."""
    for index, part in enumerate(parts):
        if part in CONDITION_KEYWORDS:
            return list(parts[:index]), list(parts[index:])
    return list(parts), []


def format_condition(cond: str, cond_test: str) -> str:
    if not cond:
        return ""
    return f" {cond} {cond_test}"
