"""Generic parsers for the many directives that share a trivial grammar."""
from __future__ import annotations

from typing import Sequence

from ..tokenizer import Line
from ..types import Enabled, Int64C, NamedEntry, SimpleOption, StringC, StringSliceC
from .base import DirectiveParser


class FlagParser(DirectiveParser):
    """``daemon``, ``master-worker``: the keyword alone."""

    def parse_line(self, line: Line, previous: Sequence[str]) -> Enabled:
        _, args = self.args(line)
        if args:
            raise self.invalid(line, f"{self.name} takes no arguments")
        return Enabled()

    def format(self, record: Enabled) -> str:
        return self.name


class StringParser(DirectiveParser):
    """Exactly one argument, e.g. ``mode http``."""

    def parse_line(self, line: Line, previous: Sequence[str]) -> StringC:
        _, args = self.args(line)
        if not args:
            raise self.not_enough(line)
        if len(args) > 1:
            raise self.invalid(line, "expected a single value")
        return StringC(value=args[0])

    def format(self, record: StringC) -> str:
        return f"{self.name} {record.value}"


class NumberParser(DirectiveParser):
    def parse_line(self, line: Line, previous: Sequence[str]) -> Int64C:
        _, args = self.args(line)
        if not args:
            raise self.not_enough(line)
        if len(args) > 1:
            raise self.invalid(line, "expected a single number")
        try:
            return Int64C(value=int(args[0]))
        except ValueError:
            raise self.invalid(line, f"{args[0]!r} is not a number") from None

    def format(self, record: Int64C) -> str:
        return f"{self.name} {record.value}"


class WordsParser(DirectiveParser):
    """One or more free-form arguments kept as a list."""

    def parse_line(self, line: Line, previous: Sequence[str]) -> StringSliceC:
        _, args = self.args(line)
        if not args:
            raise self.not_enough(line)
        return StringSliceC(values=args)

    def format(self, record: StringSliceC) -> str:
        return " ".join([self.name, *record.values])


class OptionParser(DirectiveParser):
    """``[no] option <name> [params]``."""

    negatable = True

    def __init__(self, option: str, *, takes_params: bool = False):
        super().__init__(f"option {option}")
        self.takes_params = takes_params

    def parse_line(self, line: Line, previous: Sequence[str]) -> SimpleOption:
        negated, args = self.args(line)
        if args and (negated or not self.takes_params):
            raise self.invalid(line, f"unexpected arguments {' '.join(args)}")
        return SimpleOption(no=negated, params=args)

    def format(self, record: SimpleOption) -> str:
        words = [self.name, *record.params]
        if record.no:
            words.insert(0, "no")
        return " ".join(words)


class TimeoutParser(StringParser):
    def __init__(self, timeout: str):
        super().__init__(f"timeout {timeout}")


class NamedParser(DirectiveParser):
    """``<keyword> <name> [args...]`` repeated, e.g. ``nameserver dns1 1.1.1.1:53``."""

    multiple = True

    def __init__(self, name: str, *, min_args: int = 1, multiple: bool = True):
        super().__init__(name, multiple=multiple)
        self.min_args = min_args

    def parse_line(self, line: Line, previous: Sequence[str]) -> NamedEntry:
        _, args = self.args(line)
        if len(args) < 1 + self.min_args:
            raise self.not_enough(line)
        return NamedEntry(name=args[0], args=args[1:])

    def format(self, record: NamedEntry) -> str:
        return " ".join([self.name, record.name, *record.args])
