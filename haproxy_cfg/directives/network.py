"""Listener, server, logging and routing directives."""
from __future__ import annotations

from typing import Iterable, Sequence

from ..tokenizer import Line, format_condition, split_condition
from ..types import Acl, Bind, DefaultServer, Log, Param, Server, UseBackend
from .base import DirectiveParser

BIND_VALUE_PARAMS = frozenset(
    {
        "accept-netscaler-cip", "alpn", "backlog", "ca-file", "ca-ignore-err", "ca-sign-file",
        "ca-sign-pass", "ciphers", "ciphersuites", "crl-file", "crt", "crt-ignore-err", "crt-list",
        "curves", "ecdhe", "gid", "group", "id", "interface", "level", "maxconn", "mode", "mss",
        "name", "namespace", "nice", "npn", "process", "proto", "severity-output", "sigalgs",
        "ssl-max-ver", "ssl-min-ver", "tcp-ut", "thread", "tls-ticket-keys", "uid", "user", "verify",
    }
)

SERVER_VALUE_PARAMS = frozenset(
    {
        "addr", "agent-addr", "agent-inter", "agent-port", "agent-send", "alpn", "ca-file", "check-alpn",
        "check-proto", "check-sni", "ciphers", "ciphersuites", "cookie", "crl-file", "crt", "downinter",
        "error-limit", "fall", "fastinter", "id", "init-addr", "inter", "log-proto", "maxconn", "maxqueue",
        "max-reuse", "minconn", "namespace", "npn", "observe", "on-error", "on-marked-down",
        "on-marked-up", "pool-low-conn", "pool-max-conn", "pool-purge-delay", "port", "proto",
        "proxy-v2-options", "redir", "resolve-net", "resolve-opts", "resolve-prefer", "resolvers",
        "rise", "shard", "slowstart", "sni", "source", "ssl-max-ver", "ssl-min-ver", "tcp-ut", "track",
        "verify", "verifyhost", "weight",
    }
)

LOG_FACILITIES = frozenset(
    {
        "kern", "user", "mail", "daemon", "auth", "syslog", "lpr", "news", "uucp", "cron", "auth2",
        "ftp", "ntp", "audit", "alert", "cron2", "local0", "local1", "local2", "local3", "local4",
        "local5", "local6", "local7",
    }
)


def parse_params(tokens: Sequence[str], value_params: Iterable[str]) -> list[Param]:
    """Pair each keyword with its value when the keyword takes one."""
    value_params = frozenset(value_params)
    params: list[Param] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token in value_params:
            if index + 1 >= len(tokens):
                raise ValueError(f"{token} requires a value")
            params.append(Param(name=token, value=tokens[index + 1]))
            index += 2
            continue
        params.append(Param(name=token))
        index += 1
    return params


def format_params(params: Iterable[Param]) -> str:
    return " ".join(str(param) for param in params)


class BindParser(DirectiveParser):
    name = "bind"
    multiple = True

    def parse_line(self, line: Line, previous: Sequence[str]) -> Bind:
        _, args = self.args(line)
        if not args:
            raise self.not_enough(line)
        try:
            params = parse_params(args[1:], BIND_VALUE_PARAMS)
        except ValueError as exc:
            raise self.invalid(line, str(exc)) from None
        return Bind(address=args[0], params=params)

    def format(self, record: Bind) -> str:
        return " ".join(filter(None, [self.name, record.address, format_params(record.params)]))


class ServerParser(DirectiveParser):
    name = "server"
    multiple = True

    def parse_line(self, line: Line, previous: Sequence[str]) -> Server:
        _, args = self.args(line)
        if len(args) < 2:
            raise self.not_enough(line)
        try:
            params = parse_params(args[2:], SERVER_VALUE_PARAMS)
        except ValueError as exc:
            raise self.invalid(line, str(exc)) from None
        return Server(name=args[0], address=args[1], params=params)

    def format(self, record: Server) -> str:
        return " ".join(filter(None, [self.name, record.name, record.address, format_params(record.params)]))


class DefaultServerParser(DirectiveParser):
    name = "default-server"

    def parse_line(self, line: Line, previous: Sequence[str]) -> DefaultServer:
        _, args = self.args(line)
        if not args:
            raise self.not_enough(line)
        try:
            return DefaultServer(params=parse_params(args, SERVER_VALUE_PARAMS))
        except ValueError as exc:
            raise self.invalid(line, str(exc)) from None

    def format(self, record: DefaultServer) -> str:
        return f"{self.name} {format_params(record.params)}"


class LogParser(DirectiveParser):
    """``log global``, ``no log`` or
    ``log <target> [len <n>] [format <fmt>] [sample <ranges>:<size>] <facility> [level [minlevel]]``.
    """

    name = "log"
    multiple = True
    negatable = True

    def parse_line(self, line: Line, previous: Sequence[str]) -> Log:
        negated, args = self.args(line)
        if negated:
            if args:
                raise self.invalid(line, "no log takes no arguments")
            return Log(no=True)
        if not args:
            raise self.not_enough(line)
        if args == ["global"]:
            return Log(global_=True)
        record = Log(address=args[0])
        rest = args[1:]
        while rest and rest[0] in ("len", "format", "sample"):
            if len(rest) < 2:
                raise self.not_enough(line)
            keyword, value, rest = rest[0], rest[1], rest[2:]
            if keyword == "len":
                record.length = self._number(line, value)
            elif keyword == "format":
                record.format = value
            else:
                ranges, _, size = value.rpartition(":")
                if not ranges:
                    raise self.invalid(line, f"sample {value!r} must be <ranges>:<size>")
                record.sample_range = ranges
                record.sample_size = self._number(line, size)
        if not rest:
            raise self.not_enough(line)
        if rest[0] not in LOG_FACILITIES:
            raise self.invalid(line, f"unknown facility {rest[0]!r}")
        if len(rest) > 3:
            raise self.invalid(line, "too many arguments")
        record.facility = rest[0]
        if len(rest) > 1:
            record.level = rest[1]
        if len(rest) > 2:
            record.min_level = rest[2]
        return record

    def format(self, record: Log) -> str:
        if record.no:
            return "no log"
        if record.global_:
            return "log global"
        words = [self.name, record.address]
        if record.length is not None:
            words += ["len", str(record.length)]
        if record.format:
            words += ["format", record.format]
        if record.sample_range:
            words += ["sample", f"{record.sample_range}:{record.sample_size}"]
        words += [record.facility, record.level, record.min_level]
        return " ".join(word for word in words if word)

    def _number(self, line: Line, value: str) -> int:
        try:
            return int(value)
        except ValueError:
            raise self.invalid(line, f"{value!r} is not a number") from None


class AclParser(DirectiveParser):
    name = "acl"
    multiple = True

    def parse_line(self, line: Line, previous: Sequence[str]) -> Acl:
        _, args = self.args(line)
        if len(args) < 2:
            raise self.not_enough(line)
        return Acl(name=args[0], criterion=args[1], value=" ".join(args[2:]))

    def format(self, record: Acl) -> str:
        return " ".join(filter(None, [self.name, record.name, record.criterion, record.value]))


class UseBackendParser(DirectiveParser):
    name = "use_backend"
    multiple = True

    def parse_line(self, line: Line, previous: Sequence[str]) -> UseBackend:
        _, args = self.args(line)
        command, condition = split_condition(args)
        if len(command) != 1:
            raise self.not_enough(line) if not command else self.invalid(line, "expected one backend name")
        record = UseBackend(name=command[0])
        if condition:
            if len(condition) < 2:
                raise self.not_enough(line)
            record.cond = condition[0]
            record.cond_test = " ".join(condition[1:])
        return record

    def format(self, record: UseBackend) -> str:
        return f"{self.name} {record.name}{format_condition(record.cond, record.cond_test)}"
