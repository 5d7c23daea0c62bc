"""The contract every directive parser satisfies, plus the shared base class.

The engine only talks to parsers through this interface: it asks a parser
whether it accepts a line (``pre_parse``), commits the line (``parse``) and
later asks for the lines to write back (``result``). Everything about the
keyword grammar stays inside the concrete parser.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from ..errors import FetchError, IndexOutOfRangeError, InvalidDataError, NotEnoughParamsError, ParseError
from ..state import Transition
from ..tokenizer import Line


@dataclass(slots=True)
class ResultLine:
    data: str
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)
    raw: bool = False


class DirectiveParser:
    """Base class for parsers that store one record per accepted line."""

    name: str = ""
    multiple: bool = False
    negatable: bool = False

    def __init__(self, name: str | None = None, *, multiple: bool | None = None):
        if name is not None:
            self.name = name
        if multiple is not None:
            self.multiple = multiple
        self.data: list[Any] = []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    @property
    def keyword_length(self) -> int:
        return len(self.name.split())

    # Contract

    def pre_parse(self, line: Line, previous: Sequence[str] = ()) -> Transition | None:
        """Check that the line is acceptable without storing anything."""
        self.parse_line(line, previous)
        return None

    def parse(self, line: Line, previous: Sequence[str] = (), pre_comments: Sequence[str] = ()) -> Transition | None:
        record = self.parse_line(line, previous)
        if line.comment:
            record.comment = line.comment
        if pre_comments:
            record.pre_comments = list(pre_comments)
        if self.multiple:
            self.data.append(record)
        else:
            self.data = [record]
        return None

    def result(self) -> list[ResultLine]:
        return [
            ResultLine(data=self.format(record), comment=record.comment, pre_comments=list(record.pre_comments))
            for record in self.data
        ]

    # Grammar hooks

    def parse_line(self, line: Line, previous: Sequence[str]) -> Any:
        raise NotImplementedError

    def format(self, record: Any) -> str:
        raise NotImplementedError

    def args(self, line: Line) -> tuple[bool, list[str]]:
        """Return ``(negated, arguments)`` for ``line``."""
        parts = line.parts
        negated = bool(parts) and parts[0] == "no"
        if negated:
            if not self.negatable:
                raise self.invalid(line, "negation not supported")
            parts = parts[1:]
        return negated, list(parts[self.keyword_length :])

    def invalid(self, line: Line, detail: str = "") -> ParseError:
        return InvalidDataError(detail, parser=self.name, line=line.raw)

    def not_enough(self, line: Line) -> ParseError:
        return NotEnoughParamsError(parser=self.name, line=line.raw)

    # Data access

    def get(self, create: bool = False) -> Any:
        if not self.data:
            if not create:
                raise FetchError(f"no data for {self.name}")
            return [] if self.multiple else None
        if self.multiple:
            return list(self.data)
        return self.data[0]

    def get_one(self, index: int = 0) -> Any:
        if not self.data:
            raise FetchError(f"no data for {self.name}")
        self._check_index(index)
        return self.data[index]

    def set(self, value: Any, index: int | None = None) -> None:
        """Replace stored data.

        ``None`` deletes, a list replaces everything, a single record
        replaces the record at ``index`` (or everything when no index).
        """
        if value is None:
            self.delete(index)
            return
        if isinstance(value, list):
            if not self.multiple and len(value) > 1:
                raise InvalidDataError(f"{self.name} holds a single value", parser=self.name)
            self.data = list(value)
            return
        if index is None:
            self.data = [value]
            return
        self._check_index(index)
        self.data[index] = value

    def insert(self, value: Any, index: int | None = None) -> None:
        if not self.multiple:
            self.set(value)
            return
        if index is None or index >= len(self.data):
            self.data.append(value)
            return
        if index < 0:
            raise IndexOutOfRangeError(f"index {index} out of range for {self.name}")
        self.data.insert(index, value)

    def delete(self, index: int | None = None) -> None:
        if index is None:
            self.data = []
            return
        self._check_index(index)
        del self.data[index]

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self.data):
            raise IndexOutOfRangeError(f"index {index} out of range for {self.name}")
