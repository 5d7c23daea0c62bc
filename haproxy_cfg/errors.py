"""Exception hierarchy shared by the parser, the store and the CLI."""
from __future__ import annotations

from dataclasses import dataclass


class ConfigError(RuntimeError):
    pass


class ParseError(ConfigError):
    """Raised by a directive parser that cannot accept a line."""

    def __init__(self, message: str, *, parser: str = "", line: str = "", line_number: int | None = None):
        self.message = message
        self.parser = parser
        self.line = line
        self.line_number = line_number
        super().__init__(message)

    def __str__(self) -> str:
        location = f"line {self.line_number}: " if self.line_number is not None else ""
        owner = f"[{self.parser}] " if self.parser else ""
        return f"{location}{owner}{self.message}"


class NotEnoughParamsError(ParseError):
    def __init__(self, **kwargs):
        super().__init__("not enough params", **kwargs)


class InvalidDataError(ParseError):
    def __init__(self, detail: str = "", **kwargs):
        message = "invalid data" if not detail else f"invalid data: {detail}"
        super().__init__(message, **kwargs)


class SectionMissingError(ConfigError):
    pass


class SectionAlreadyExistsError(ConfigError):
    pass


class AttributeNotFoundError(ConfigError):
    pass


class FetchError(ConfigError):
    pass


class IndexOutOfRangeError(ConfigError):
    pass


@dataclass(slots=True)
class Diagnostic:
    line_number: int
    line: str
    parser: str
    message: str
    dropped: bool = False

    def __str__(self) -> str:
        verdict = "dropped" if self.dropped else "rejected"
        owner = self.parser or "-"
        return f"line {self.line_number} {verdict} by [{owner}]: {self.message}"


class StrictModeError(ConfigError):
    """Raised after processing when strict mode is on and lines were rejected."""

    def __init__(self, diagnostics: list[Diagnostic]):
        self.diagnostics = diagnostics
        count = len(diagnostics)
        first = f" (first: {diagnostics[0]})" if diagnostics else ""
        super().__init__(f"{count} configuration line(s) could not be parsed{first}")
