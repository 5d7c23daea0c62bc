"""Actions accepted by rule directives (``http-request deny``, ``tcp-check send``...).

An action receives the whole field list of the line together with the parser
mode, which tells it where its own arguments start: ``http-request <action>``
(HTTP) versus ``tcp-request <scope> <action>`` (TCP).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Sequence

from ..errors import InvalidDataError, NotEnoughParamsError
from ..tokenizer import format_condition, split_condition


class ParserMode(Enum):
    HTTP = 2
    TCP = 3

    @property
    def offset(self) -> int:
        return self.value


@dataclass
class Action:
    keyword: ClassVar[str] = ""

    cond: str = ""
    cond_test: str = ""

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        raise NotImplementedError

    def __str__(self) -> str:
        return f"{self.keyword}{format_condition(self.cond, self.cond_test)}"

    def _arguments(self, parts: Sequence[str], mode: ParserMode) -> tuple[list[str], list[str]]:
        return split_condition(parts[mode.offset :])

    def _set_condition(self, condition: list[str]) -> None:
        if not condition:
            return
        if len(condition) < 2:
            raise NotEnoughParamsError()
        self.cond = condition[0]
        self.cond_test = " ".join(condition[1:])


@dataclass
class Allow(Action):
    keyword: ClassVar[str] = "allow"

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        command, condition = self._arguments(parts, mode)
        if command:
            raise InvalidDataError(" ".join(command))
        self._set_condition(condition)


@dataclass
class Accept(Allow):
    keyword: ClassVar[str] = "accept"


@dataclass
class Reject(Allow):
    keyword: ClassVar[str] = "reject"


@dataclass
class Deny(Action):
    keyword: ClassVar[str] = "deny"

    deny_status: int | None = None

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        command, condition = self._arguments(parts, mode)
        if command:
            if command[0] != "deny_status" or len(command) != 2:
                raise InvalidDataError(" ".join(command))
            try:
                self.deny_status = int(command[1])
            except ValueError:
                raise InvalidDataError(f"deny_status {command[1]!r}") from None
        self._set_condition(condition)

    def __str__(self) -> str:
        status = f" deny_status {self.deny_status}" if self.deny_status is not None else ""
        return f"{self.keyword}{status}{format_condition(self.cond, self.cond_test)}"


@dataclass
class SetHeader(Action):
    keyword: ClassVar[str] = "set-header"

    name: str = ""
    fmt: str = ""

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        command, condition = self._arguments(parts, mode)
        if len(command) < 2:
            raise NotEnoughParamsError()
        self.name = command[0]
        self.fmt = " ".join(command[1:])
        self._set_condition(condition)

    def __str__(self) -> str:
        return f"{self.keyword} {self.name} {self.fmt}{format_condition(self.cond, self.cond_test)}"


@dataclass
class AddHeader(SetHeader):
    keyword: ClassVar[str] = "add-header"


@dataclass
class DelHeader(Action):
    keyword: ClassVar[str] = "del-header"

    name: str = ""

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        command, condition = self._arguments(parts, mode)
        if not command:
            raise NotEnoughParamsError()
        if len(command) > 1:
            raise InvalidDataError(" ".join(command[1:]))
        self.name = command[0]
        self._set_condition(condition)

    def __str__(self) -> str:
        return f"{self.keyword} {self.name}{format_condition(self.cond, self.cond_test)}"


@dataclass
class ReplaceValue(Action):
    keyword: ClassVar[str] = "replace-value"

    name: str = ""
    match_regex: str = ""
    replace_fmt: str = ""

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        if len(parts) < mode.offset + 3:
            raise InvalidDataError()
        command, condition = self._arguments(parts, mode)
        if len(command) < 3:
            raise InvalidDataError()
        self.name, self.match_regex, self.replace_fmt = command[0], command[1], command[2]
        self._set_condition(condition)

    def __str__(self) -> str:
        return (
            f"{self.keyword} {self.name} {self.match_regex} {self.replace_fmt}"
            f"{format_condition(self.cond, self.cond_test)}"
        )


@dataclass
class SetDstPort(Action):
    keyword: ClassVar[str] = "set-dst-port"

    expr: str = ""

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        if len(parts) < 3:
            raise NotEnoughParamsError()
        command, condition = self._arguments(parts, mode)
        if not command:
            raise NotEnoughParamsError()
        self.expr = " ".join(command)
        self._set_condition(condition)

    def __str__(self) -> str:
        return f"{self.keyword} {self.expr}{format_condition(self.cond, self.cond_test)}"


@dataclass
class ExpectProxy(Action):
    keyword: ClassVar[str] = "expect-proxy"

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        command, condition = self._arguments(parts, mode)
        if command != ["layer4"]:
            raise InvalidDataError("expect-proxy expects layer4")
        self._set_condition(condition)

    def __str__(self) -> str:
        return f"{self.keyword} layer4{format_condition(self.cond, self.cond_test)}"


@dataclass
class CheckConnect(Action):
    keyword: ClassVar[str] = "connect"

    params: list[str] = field(default_factory=list)

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        self.params = list(parts[mode.offset :])

    def __str__(self) -> str:
        return " ".join([self.keyword, *self.params])


@dataclass
class CheckSend(Action):
    """``send <data> [comment <msg>]``."""

    keyword: ClassVar[str] = "send"

    data: str = ""
    check_comment: str = ""

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        args = list(parts[mode.offset :])
        if not args:
            raise NotEnoughParamsError()
        self.data = args[0]
        rest = args[1:]
        if rest:
            if rest[0] != "comment" or len(rest) < 2:
                raise InvalidDataError(" ".join(rest))
            self.check_comment = " ".join(rest[1:])

    def __str__(self) -> str:
        comment = f" comment {self.check_comment}" if self.check_comment else ""
        return f"{self.keyword} {self.data}{comment}"


@dataclass
class CheckSendBinary(CheckSend):
    keyword: ClassVar[str] = "send-binary"


@dataclass
class CheckExpect(Action):
    keyword: ClassVar[str] = "expect"

    args: list[str] = field(default_factory=list)

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        self.args = list(parts[mode.offset :])
        if len(self.args) < 2:
            raise NotEnoughParamsError()

    def __str__(self) -> str:
        return " ".join([self.keyword, *self.args])


@dataclass
class RawAction(Action):
    """An action outside the catalog, kept field for field.

    ``start`` is the index of the action keyword in the line, which differs
    from the mode offset when a TCP rule carries no known scope
    (``tcp-request inspect-delay 5s``).
    """

    start: int = 1
    verb: str = ""
    args: list[str] = field(default_factory=list)

    def parse(self, parts: Sequence[str], mode: ParserMode) -> None:
        command, condition = split_condition(parts[self.start :])
        if not command:
            raise NotEnoughParamsError()
        self.verb = command[0]
        self.args = command[1:]
        self._set_condition(condition)

    def __str__(self) -> str:
        return " ".join([self.verb, *self.args]) + format_condition(self.cond, self.cond_test)


HTTP_ACTIONS: dict[str, type[Action]] = {
    action.keyword: action
    for action in (Allow, Deny, SetHeader, AddHeader, DelHeader, ReplaceValue, SetDstPort)
}
TCP_ACTIONS: dict[str, type[Action]] = {
    action.keyword: action for action in (Accept, Reject, ExpectProxy, SetDstPort)
}
TCP_CHECK_ACTIONS: dict[str, type[Action]] = {
    action.keyword: action for action in (CheckConnect, CheckSend, CheckSendBinary, CheckExpect)
}
