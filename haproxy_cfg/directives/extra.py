"""Parsers owned by the engine itself rather than by the keyword catalog."""
from __future__ import annotations

from typing import Sequence

from ..state import SectionKind, Transition
from ..tokenizer import HASH_MARKER, SNIPPET_BEGIN, SNIPPET_END, SNIPPET_MARKER, VERSION_MARKER, Line
from ..types import Comment, ConfigHash, ConfigVersion, Snippet, UnProcessed
from .base import DirectiveParser, ResultLine

PSEUDO_DIRECTIVES = (VERSION_MARKER, HASH_MARKER, SNIPPET_MARKER)


class SectionParser(DirectiveParser):
    """Recognizes a section boundary line such as ``frontend http``.

    It never stores anything: the section name, the optional ``from``
    defaults reference and the header comment travel in the transition.
    """

    def __init__(self, kind: SectionKind):
        super().__init__(kind.value)
        self.kind = kind

    def pre_parse(self, line: Line, previous: Sequence[str] = ()) -> Transition | None:
        parts = line.parts
        if not parts or parts[0] != self.name:
            raise self.invalid(line, "not a section boundary")
        name = ""
        from_defaults = ""
        rest = parts[1:]
        if self.kind is SectionKind.GLOBAL:
            if rest:
                raise self.invalid(line, "global takes no name")
        else:
            if rest:
                name, rest = rest[0], rest[1:]
            elif self.kind.is_named:
                raise self.not_enough(line)
            if rest:
                if rest[0] != "from" or len(rest) != 2:
                    raise self.invalid(line, " ".join(rest))
                from_defaults = rest[1]
        return Transition(kind=self.kind, name=name, from_defaults=from_defaults, comment=line.comment or "")

    def parse(self, line: Line, previous: Sequence[str] = (), pre_comments: Sequence[str] = ()) -> Transition | None:
        return self.pre_parse(line, previous)

    def result(self) -> list[ResultLine]:
        return []


class CommentsParser(DirectiveParser):
    """Free comment lines at the top of the file (before the first blank line)."""

    name = "#"
    multiple = True

    def parse_line(self, line: Line, previous: Sequence[str]) -> Comment:
        if line.is_comment or line.is_snippet_marker:
            return Comment(value=line.comment or "")
        # an unmatched line in the root state is kept as a comment
        return Comment(value=line.raw.strip())

    def parse(self, line: Line, previous: Sequence[str] = (), pre_comments: Sequence[str] = ()) -> Transition | None:
        record = self.parse_line(line, previous)
        record.pre_comments = list(pre_comments)
        self.data.append(record)
        return None

    def format(self, record: Comment) -> str:
        return f"# {record.value}" if record.value else "#"

    def result(self) -> list[ResultLine]:
        return [ResultLine(data=self.format(record), pre_comments=list(record.pre_comments)) for record in self.data]


def _marker_value(line: Line, marker: str) -> str:
    text = line.comment or ""
    key, _, value = text.partition("=")
    if not line.raw.startswith(marker) or key.strip() != marker[2:] or not value.strip():
        raise ValueError(text)
    return value.strip()


class ConfigVersionParser(DirectiveParser):
    name = VERSION_MARKER

    def parse_line(self, line: Line, previous: Sequence[str]) -> ConfigVersion:
        try:
            return ConfigVersion(value=int(_marker_value(line, VERSION_MARKER)))
        except ValueError:
            raise self.invalid(line, "version must be an integer") from None

    def parse(self, line: Line, previous: Sequence[str] = (), pre_comments: Sequence[str] = ()) -> Transition | None:
        record = self.parse_line(line, previous)
        record.pre_comments = list(pre_comments)
        self.data = [record]
        return None

    def format(self, record: ConfigVersion) -> str:
        return f"{VERSION_MARKER}={record.value}"


class ConfigHashParser(DirectiveParser):
    name = HASH_MARKER

    def parse_line(self, line: Line, previous: Sequence[str]) -> ConfigHash:
        try:
            return ConfigHash(value=_marker_value(line, HASH_MARKER))
        except ValueError:
            raise self.invalid(line, "malformed hash marker") from None

    def parse(self, line: Line, previous: Sequence[str] = (), pre_comments: Sequence[str] = ()) -> Transition | None:
        record = self.parse_line(line, previous)
        record.pre_comments = list(pre_comments)
        self.data = [record]
        return None

    def format(self, record: ConfigHash) -> str:
        return f"{HASH_MARKER}={record.value}"


class UnProcessedParser(DirectiveParser):
    """Catch-all registered under the empty keyword; keeps unknown lines as-is."""

    name = ""
    multiple = True

    def parse_line(self, line: Line, previous: Sequence[str]) -> UnProcessed:
        if not line.parts:
            raise self.invalid(line, "empty line")
        if line.parts[0] in PSEUDO_DIRECTIVES:
            return UnProcessed(value=line.raw.strip())
        # the trailing comment is stored and written separately
        return UnProcessed(value=" ".join(line.parts), comment=line.comment or "")

    def parse(self, line: Line, previous: Sequence[str] = (), pre_comments: Sequence[str] = ()) -> Transition | None:
        record = self.parse_line(line, previous)
        record.pre_comments = list(pre_comments)
        self.data.append(record)
        return None

    def format(self, record: UnProcessed) -> str:
        return record.value


class ConfigSnippetParser(DirectiveParser):
    """Captures everything between the snippet markers byte for byte."""

    name = SNIPPET_MARKER
    multiple = True

    def __init__(self) -> None:
        super().__init__()
        self.active = False

    def pre_parse(self, line: Line, previous: Sequence[str] = ()) -> Transition | None:
        marker = self._marker(line)
        if not self.active:
            if marker != SNIPPET_BEGIN:
                raise self.invalid(line, "expected snippet begin marker")
            return Transition(kind=SectionKind.SNIPPET_BEGIN)
        if marker == SNIPPET_END:
            return Transition(kind=SectionKind.SNIPPET_END)
        return None

    def parse(self, line: Line, previous: Sequence[str] = (), pre_comments: Sequence[str] = ()) -> Transition | None:
        transition = self.pre_parse(line, previous)
        if transition is None:
            self.data[-1].lines.append(line.raw)
        elif transition.kind is SectionKind.SNIPPET_BEGIN:
            self.active = True
            self.data.append(Snippet(pre_comments=list(pre_comments)))
        else:
            self.active = False
        return transition

    def result(self) -> list[ResultLine]:
        lines: list[ResultLine] = []
        for record in self.data:
            lines.append(ResultLine(data=SNIPPET_BEGIN, pre_comments=list(record.pre_comments)))
            lines.extend(ResultLine(data=raw, raw=True) for raw in record.lines)
            lines.append(ResultLine(data=SNIPPET_END))
        return lines

    @staticmethod
    def _marker(line: Line) -> str | None:
        if not line.is_snippet_marker:
            return None
        text = f"#{line.comment}"
        for marker in (SNIPPET_BEGIN, SNIPPET_END):
            if text.startswith(marker):
                return marker
        return None
