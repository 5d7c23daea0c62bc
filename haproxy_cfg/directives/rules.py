"""Rule directives whose second (or third) field selects an action.

Actions missing from the catalog are kept as :class:`RawAction` so a rule
never leaves its place among the other rules of the same keyword.
"""
from __future__ import annotations

from typing import Mapping, Sequence

from ..errors import ParseError
from ..tokenizer import Line
from ..types import Rule
from .actions import HTTP_ACTIONS, TCP_ACTIONS, TCP_CHECK_ACTIONS, Action, ParserMode, RawAction
from .base import DirectiveParser


class RulesParser(DirectiveParser):
    multiple = True

    def __init__(
        self,
        name: str,
        actions: Mapping[str, type[Action]],
        *,
        mode: ParserMode = ParserMode.HTTP,
        scopes: Sequence[str] = (),
    ):
        super().__init__(name)
        self.actions = dict(actions)
        self.mode = mode
        self.scopes = tuple(scopes)

    def parse_line(self, line: Line, previous: Sequence[str]) -> Rule:
        parts = line.parts
        if parts[:1] != [self.name]:
            raise self.invalid(line, "negation not supported")
        scope = ""
        start = 1
        if self.mode is ParserMode.TCP and parts[1:2] and parts[1] in self.scopes:
            scope = parts[1]
            start = 2
        if len(parts) <= start:
            raise self.not_enough(line)
        action_cls = None
        if start == self.mode.offset - 1:
            action_cls = self.actions.get(parts[start])
        action = action_cls() if action_cls is not None else RawAction(start=start)
        try:
            action.parse(parts, self.mode)
        except ParseError as exc:
            exc.parser = exc.parser or self.name
            exc.line = exc.line or line.raw
            raise
        return Rule(action=action, scope=scope)

    def format(self, record: Rule) -> str:
        return " ".join(filter(None, [self.name, record.scope, str(record.action)]))


def http_request() -> RulesParser:
    return RulesParser("http-request", HTTP_ACTIONS)


def http_response() -> RulesParser:
    return RulesParser("http-response", HTTP_ACTIONS)


def tcp_request() -> RulesParser:
    return RulesParser("tcp-request", TCP_ACTIONS, mode=ParserMode.TCP, scopes=("connection", "content", "session"))


def tcp_response() -> RulesParser:
    return RulesParser("tcp-response", TCP_ACTIONS, mode=ParserMode.TCP, scopes=("content",))


def tcp_check() -> RulesParser:
    return RulesParser("tcp-check", TCP_CHECK_ACTIONS)
