"""Line-by-line processing of a configuration stream.

The :class:`Engine` owns the parse cursor. Each call to :meth:`Engine.advance`
consumes one raw line and reports what happened as an event. Dispatch (which
parser owns the line) lives in :class:`DispatchResolver`; the engine only
applies the outcome: committing the record, switching sections and attaching
pending comments.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Union

from .config import ParserOptions
from .directives.base import DirectiveParser
from .errors import Diagnostic, ParseError
from .sections import Section, SectionStore, snippet_section
from .state import SectionKind, Transition
from .tokenizer import Line, split_line

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DirectiveApplied:
    section: Section
    parser: DirectiveParser


@dataclass(frozen=True, slots=True)
class SectionEntered:
    kind: SectionKind
    name: str = ""


@dataclass(frozen=True, slots=True)
class SnippetEntered:
    pass


@dataclass(frozen=True, slots=True)
class SnippetExited:
    pass


@dataclass(frozen=True, slots=True)
class LineDropped:
    reason: str


@dataclass(frozen=True, slots=True)
class CommentCollected:
    text: str
    section_level: bool


@dataclass(frozen=True, slots=True)
class BlankLine:
    pass


Event = Union[
    DirectiveApplied,
    SectionEntered,
    SnippetEntered,
    SnippetExited,
    LineDropped,
    CommentCollected,
    BlankLine,
]


@dataclass(slots=True)
class Cursor:
    """Mutable state threaded through one processing pass."""

    active: Section
    state: SectionKind = SectionKind.ROOT
    previous: Section | None = None
    previous_state: SectionKind | None = None
    active_comments: list[str] = field(default_factory=list)
    active_section_comments: list[str] = field(default_factory=list)
    has_default_parser: bool = False
    previous_parts: list[str] = field(default_factory=list)
    line_number: int = 0


class DispatchResolver:
    """Choose the candidate parsers for one line.

    Candidates come back lowest priority first; the engine tries them in
    reverse order and commits the first one whose ``pre_parse`` accepts.
    """

    def __init__(self, *, unprocessed: bool = True):
        self.unprocessed = unprocessed

    def candidates(self, line: Line, section: Section, *, snippet_mode: bool, root_state: bool) -> list[DirectiveParser]:
        registry = section.registry
        found: list[DirectiveParser] = []
        if self.unprocessed and "" in registry:
            found.append(registry[""])
        if snippet_mode:
            found.append(registry.default)
            return found

        parser = registry.match(line.parts)
        if parser is None and line.is_comment and "#" in registry:
            parser = registry["#"]
        if parser is None and line.parts[:1] == ["no"]:
            parser = registry.match(line.parts[1:])
        if parser is not None:
            found.append(parser)
        if root_state and "#" in registry and registry["#"] not in found:
            # unmatched lines before the first section are kept as comments
            found.insert(0, registry["#"])
        return found


class Engine:
    def __init__(self, store: SectionStore, options: ParserOptions | None = None):
        self.store = store
        self.options = options or ParserOptions()
        self.resolver = DispatchResolver(unprocessed=not self.options.disable_unprocessed)
        self.cursor = Cursor(active=store.root)
        self.diagnostics: list[Diagnostic] = []

    def run(self, lines: Iterable[str]) -> list[Diagnostic]:
        logger.debug("%sprocessing of data started", self.options.log_prefix)
        for raw in lines:
            self.advance(raw)
        self.finish()
        logger.debug("%sprocessing of data ended", self.options.log_prefix)
        return self.diagnostics

    def advance(self, raw: str) -> Event:
        cursor = self.cursor
        cursor.line_number += 1
        line = split_line(raw.rstrip("\n").rstrip("\r"))

        if cursor.has_default_parser:
            return self._dispatch(line)
        if line.is_blank:
            if cursor.state is SectionKind.ROOT:
                cursor.state = SectionKind.COMMENTS
            return BlankLine()
        if line.is_comment and cursor.state is not SectionKind.ROOT:
            text = line.comment or ""
            section_level = not line.indented
            if section_level:
                cursor.active_section_comments.append(text)
            else:
                cursor.active_comments.append(text)
            return CommentCollected(text=text, section_level=section_level)
        return self._dispatch(line)

    def finish(self) -> None:
        """Flush comments that never found a following element."""
        cursor = self.cursor
        if cursor.has_default_parser:
            self._record(cursor.line_number, "", cursor.active.registry.default.name, "unterminated config snippet")
            cursor.active.registry.default.active = False
            self._leave_snippet()
        cursor.active.post_comments.extend(cursor.active_comments)
        cursor.active.post_comments.extend(cursor.active_section_comments)
        cursor.active_comments = []
        cursor.active_section_comments = []

    def _dispatch(self, line: Line) -> Event:
        cursor = self.cursor
        candidates = self.resolver.candidates(
            line,
            cursor.active,
            snippet_mode=cursor.has_default_parser,
            root_state=cursor.state.is_root,
        )
        rejected: list[Diagnostic] = []
        event: Event | None = None
        for parser in reversed(candidates):
            logger.debug("%susing parser [%s] for line %d", self.options.log_prefix, parser.name, cursor.line_number)
            try:
                transition = parser.pre_parse(line, cursor.previous_parts)
            except ParseError as err:
                rejected.append(self._diagnostic(line, parser.name, err.message))
                continue
            snippet_begin = transition is not None and transition.kind is SectionKind.SNIPPET_BEGIN
            if transition is not None and not snippet_begin:
                transition = parser.parse(line, cursor.previous_parts)
                event = self._enter(transition, parser)
            else:
                transition = parser.parse(line, cursor.previous_parts, cursor.active_comments)
                cursor.active_comments = []
                if snippet_begin:
                    event = self._enter(transition, parser)
                else:
                    event = DirectiveApplied(section=cursor.active, parser=parser)
            break

        self.diagnostics.extend(rejected)
        if line.parts:
            cursor.previous_parts = list(line.parts)
        if event is not None:
            return event

        reason = rejected[-1].message if rejected else "no parser matched"
        self.diagnostics.append(self._diagnostic(line, rejected[-1].parser if rejected else "", reason, dropped=True))
        logger.debug("%sline %d dropped: %s", self.options.log_prefix, cursor.line_number, reason)
        return LineDropped(reason=reason)

    def _enter(self, transition: Transition, parser: DirectiveParser) -> Event:
        cursor = self.cursor
        kind = transition.kind
        logger.debug("%schange active section to %s", self.options.log_prefix, kind.value or "root")
        if kind is SectionKind.SNIPPET_BEGIN:
            cursor.previous = cursor.active
            cursor.previous_state = cursor.state
            cursor.active = snippet_section(parser)
            cursor.state = kind
            cursor.has_default_parser = True
            return SnippetEntered()
        if kind is SectionKind.SNIPPET_END:
            self._leave_snippet()
            return SnippetExited()

        if cursor.active_comments:
            cursor.active.post_comments.extend(cursor.active_comments)
            cursor.active_comments = []
        section = self.store.enter(kind, transition.name)
        section.comment = transition.comment
        section.from_defaults = transition.from_defaults
        cursor.active = section
        cursor.state = kind
        if cursor.active_section_comments:
            section.pre_comments = cursor.active_section_comments
            cursor.active_section_comments = []
        logger.debug("%s%s section %s active", self.options.log_prefix, kind.value, transition.name)
        return SectionEntered(kind=kind, name=transition.name)

    def _leave_snippet(self) -> None:
        cursor = self.cursor
        if cursor.previous is not None:
            cursor.active = cursor.previous
            cursor.state = cursor.previous_state or SectionKind.ROOT
        cursor.previous = None
        cursor.previous_state = None
        cursor.has_default_parser = False

    def _diagnostic(self, line: Line, parser: str, message: str, *, dropped: bool = False) -> Diagnostic:
        return Diagnostic(
            line_number=self.cursor.line_number,
            line=line.raw,
            parser=parser,
            message=message,
            dropped=dropped,
        )

    def _record(self, line_number: int, raw: str, parser: str, message: str) -> None:
        logger.warning("%sline %d: %s", self.options.log_prefix, line_number, message)
        self.diagnostics.append(Diagnostic(line_number=line_number, line=raw, parser=parser, message=message))
