"""Value records stored by directive parsers.

Every record keeps the trailing comment found on its line and the comment
lines that preceded it, so an untouched record serializes back with the same
annotations.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .directives.actions import Action


@dataclass(slots=True)
class Comment:
    value: str
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ConfigVersion:
    value: int
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ConfigHash:
    value: str
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Enabled:
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class StringC:
    value: str
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Int64C:
    value: int
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class StringSliceC:
    values: list[str]
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SimpleOption:
    no: bool = False
    params: list[str] = field(default_factory=list)
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class NamedEntry:
    name: str
    args: list[str] = field(default_factory=list)
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Param:
    """A ``bind``/``server`` keyword, with a value when the keyword takes one."""

    name: str
    value: str | None = None

    def __str__(self) -> str:
        if self.value is None:
            return self.name
        return f"{self.name} {self.value}"


@dataclass(slots=True)
class Bind:
    address: str
    params: list[Param] = field(default_factory=list)
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)

    def param(self, name: str) -> str | None:
        return _param_value(self.params, name)


@dataclass(slots=True)
class Server:
    name: str
    address: str
    params: list[Param] = field(default_factory=list)
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)

    def param(self, name: str) -> str | None:
        return _param_value(self.params, name)


@dataclass(slots=True)
class DefaultServer:
    params: list[Param] = field(default_factory=list)
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)

    def param(self, name: str) -> str | None:
        return _param_value(self.params, name)


@dataclass(slots=True)
class Log:
    global_: bool = False
    no: bool = False
    address: str = ""
    length: int | None = None
    format: str = ""
    sample_range: str = ""
    sample_size: int | None = None
    facility: str = ""
    level: str = ""
    min_level: str = ""
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Acl:
    name: str
    criterion: str
    value: str = ""
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class UseBackend:
    name: str
    cond: str = ""
    cond_test: str = ""
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Rule:
    """One ``http-request``/``tcp-request``/``tcp-check``... line."""

    action: "Action"
    scope: str = ""
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Snippet:
    lines: list[str] = field(default_factory=list)
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class UnProcessed:
    value: str
    comment: str = ""
    pre_comments: list[str] = field(default_factory=list)


def _param_value(params: list[Param], name: str) -> str | None:
    for param in params:
        if param.name == name:
            return param.value if param.value is not None else ""
    return None
