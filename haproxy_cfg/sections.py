"""Section instances, the per-kind parser templates and the section store."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator

from .directives.base import DirectiveParser
from .directives.extra import (
    CommentsParser,
    ConfigHashParser,
    ConfigSnippetParser,
    ConfigVersionParser,
    SectionParser,
    UnProcessedParser,
)
from .directives.network import (
    AclParser,
    BindParser,
    DefaultServerParser,
    LogParser,
    ServerParser,
    UseBackendParser,
)
from .directives.rules import http_request, http_response, tcp_check, tcp_request, tcp_response
from .directives.simple import (
    FlagParser,
    NamedParser,
    NumberParser,
    OptionParser,
    StringParser,
    TimeoutParser,
    WordsParser,
)
from .errors import SectionAlreadyExistsError, SectionMissingError
from .registry import DirectiveRegistry
from .state import BOUNDARY_KINDS, SectionKind


@dataclass(slots=True)
class Section:
    kind: SectionKind
    name: str
    registry: DirectiveRegistry
    comment: str = ""
    from_defaults: str = ""
    pre_comments: list[str] = field(default_factory=list)
    post_comments: list[str] = field(default_factory=list)

    @property
    def key(self) -> tuple[SectionKind, str]:
        return (self.kind, "" if self.kind.is_singleton else self.name)

    def has_content(self) -> bool:
        if self.pre_comments or self.post_comments or self.comment:
            return True
        return any(parser.data for parser in self.registry)

    def parser(self, keyword: str) -> DirectiveParser | None:
        return self.registry.get(keyword)


# Templates

OPTIONS: tuple[tuple[str, bool], ...] = (
    ("httplog", True),
    ("tcplog", False),
    ("dontlognull", False),
    ("forwardfor", True),
    ("http-server-close", False),
    ("httpclose", False),
    ("http-keep-alive", False),
    ("redispatch", False),
    ("abortonclose", False),
    ("log-health-checks", False),
    ("tcpka", False),
    ("httpchk", True),
    ("tcp-check", False),
    ("ssl-hello-chk", False),
)

PROXY_TIMEOUTS = ("connect", "client", "server", "queue", "check", "tunnel", "http-request", "http-keep-alive")


def _options() -> list[DirectiveParser]:
    return [OptionParser(option, takes_params=takes_params) for option, takes_params in OPTIONS]


def _timeouts(*names: str) -> list[DirectiveParser]:
    return [TimeoutParser(name) for name in names]


def _boundaries() -> list[DirectiveParser]:
    return [SectionParser(kind) for kind in BOUNDARY_KINDS]


def _with_common(parsers: list[DirectiveParser]) -> list[DirectiveParser]:
    return [*_boundaries(), *parsers, UnProcessedParser(), ConfigSnippetParser()]


def _root_parsers() -> list[DirectiveParser]:
    return [*_boundaries(), ConfigHashParser(), ConfigVersionParser(), CommentsParser()]


def _global_parsers() -> list[DirectiveParser]:
    return _with_common(
        [
            FlagParser("daemon"),
            FlagParser("master-worker"),
            StringParser("chroot"),
            StringParser("user"),
            StringParser("group"),
            StringParser("pidfile"),
            NumberParser("nbthread"),
            NumberParser("maxconn"),
            WordsParser("cpu-map", multiple=True),
            LogParser(),
            WordsParser("stats socket", multiple=True),
            StringParser("stats timeout"),
            WordsParser("ssl-default-bind-ciphers"),
            WordsParser("ssl-default-bind-options"),
            WordsParser("ssl-default-server-ciphers"),
            WordsParser("ssl-default-server-options"),
            NumberParser("tune.ssl.default-dh-param"),
            WordsParser("lua-load", multiple=True),
        ]
    )


def _defaults_parsers() -> list[DirectiveParser]:
    return _with_common(
        [
            StringParser("mode"),
            WordsParser("balance"),
            NumberParser("maxconn"),
            LogParser(),
            WordsParser("log-format"),
            *_options(),
            *_timeouts(*PROXY_TIMEOUTS),
            NumberParser("retries"),
            DefaultServerParser(),
            NamedParser("errorfile"),
        ]
    )


def _frontend_parsers() -> list[DirectiveParser]:
    return _with_common(
        [
            StringParser("mode"),
            WordsParser("description"),
            NumberParser("maxconn"),
            LogParser(),
            WordsParser("log-format"),
            *_options(),
            *_timeouts("client", "http-request", "http-keep-alive"),
            BindParser(),
            AclParser(),
            http_request(),
            http_response(),
            tcp_request(),
            UseBackendParser(),
            StringParser("default_backend"),
        ]
    )


def _backend_parsers() -> list[DirectiveParser]:
    return _with_common(
        [
            StringParser("mode"),
            WordsParser("description"),
            WordsParser("balance"),
            LogParser(),
            *_options(),
            *_timeouts("connect", "server", "queue", "check", "tunnel"),
            NumberParser("retries"),
            WordsParser("cookie"),
            DefaultServerParser(),
            AclParser(),
            http_request(),
            http_response(),
            tcp_request(),
            tcp_response(),
            WordsParser("http-check", multiple=True),
            tcp_check(),
            ServerParser(),
        ]
    )


def _listen_parsers() -> list[DirectiveParser]:
    return _with_common(
        [
            StringParser("mode"),
            WordsParser("description"),
            WordsParser("balance"),
            NumberParser("maxconn"),
            LogParser(),
            WordsParser("log-format"),
            *_options(),
            *_timeouts(*PROXY_TIMEOUTS),
            NumberParser("retries"),
            BindParser(),
            AclParser(),
            http_request(),
            http_response(),
            tcp_request(),
            tcp_response(),
            UseBackendParser(),
            StringParser("default_backend"),
            WordsParser("cookie"),
            DefaultServerParser(),
            WordsParser("http-check", multiple=True),
            tcp_check(),
            ServerParser(),
        ]
    )


def _resolvers_parsers() -> list[DirectiveParser]:
    return _with_common(
        [
            NamedParser("nameserver"),
            FlagParser("parse-resolv-conf"),
            NumberParser("resolve_retries"),
            *_timeouts("resolve", "retry"),
            WordsParser("hold", multiple=True),
            NumberParser("accepted_payload_size"),
        ]
    )


def _userlist_parsers() -> list[DirectiveParser]:
    return _with_common([NamedParser("group", min_args=0), NamedParser("user", min_args=0)])


def _peers_parsers() -> list[DirectiveParser]:
    return _with_common([FlagParser("disabled"), BindParser(), NamedParser("peer")])


def _mailers_parsers() -> list[DirectiveParser]:
    return _with_common([*_timeouts("mail"), NamedParser("mailer")])


def _cache_parsers() -> list[DirectiveParser]:
    return _with_common(
        [
            NumberParser("total-max-size"),
            NumberParser("max-object-size"),
            NumberParser("max-age"),
            StringParser("process-vary"),
        ]
    )


def _program_parsers() -> list[DirectiveParser]:
    return _with_common(
        [
            WordsParser("command"),
            StringParser("user"),
            StringParser("group"),
            OptionParser("start-on-reload"),
        ]
    )


def _http_errors_parsers() -> list[DirectiveParser]:
    return _with_common([NamedParser("errorfile")])


def _ring_parsers() -> list[DirectiveParser]:
    return _with_common(
        [
            WordsParser("description"),
            StringParser("format"),
            NumberParser("maxlen"),
            StringParser("size"),
            *_timeouts("connect", "server"),
            ServerParser(),
        ]
    )


SECTION_TEMPLATES: dict[SectionKind, Callable[[], list[DirectiveParser]]] = {
    SectionKind.ROOT: _root_parsers,
    SectionKind.COMMENTS: _root_parsers,
    SectionKind.GLOBAL: _global_parsers,
    SectionKind.DEFAULTS: _defaults_parsers,
    SectionKind.FRONTEND: _frontend_parsers,
    SectionKind.BACKEND: _backend_parsers,
    SectionKind.LISTEN: _listen_parsers,
    SectionKind.RESOLVERS: _resolvers_parsers,
    SectionKind.USERLIST: _userlist_parsers,
    SectionKind.PEERS: _peers_parsers,
    SectionKind.MAILERS: _mailers_parsers,
    SectionKind.CACHE: _cache_parsers,
    SectionKind.PROGRAM: _program_parsers,
    SectionKind.HTTP_ERRORS: _http_errors_parsers,
    SectionKind.RING: _ring_parsers,
}


def _check_templates() -> None:
    missing = [kind.value for kind in SectionKind if not kind.is_snippet and kind not in SECTION_TEMPLATES]
    if missing:
        raise RuntimeError(f"no parser template for section kind(s): {', '.join(missing)}")


_check_templates()


def new_section(kind: SectionKind, name: str = "") -> Section:
    return Section(kind=kind, name=name, registry=DirectiveRegistry(SECTION_TEMPLATES[kind]()))


def snippet_section(parser: DirectiveParser) -> Section:
    """Synthetic section whose only parser captures snippet lines."""
    return Section(kind=SectionKind.SNIPPET_BEGIN, name="", registry=DirectiveRegistry([parser]))


class SectionStore:
    """Owns every section of one configuration, keyed by ``(kind, name)``.

    Sections are kept in the order they were first entered; redefining a
    named section replaces the earlier one and takes the new position.
    """

    def __init__(self) -> None:
        self.root = new_section(SectionKind.ROOT)
        self._singletons: dict[SectionKind, Section] = {
            SectionKind.GLOBAL: new_section(SectionKind.GLOBAL),
            SectionKind.DEFAULTS: new_section(SectionKind.DEFAULTS),
        }
        self._named: dict[tuple[SectionKind, str], Section] = {}
        self._order: list[tuple[SectionKind, str]] = []

    def singleton(self, kind: SectionKind) -> Section:
        if kind.is_root:
            return self.root
        return self._singletons[kind]

    def enter(self, kind: SectionKind, name: str = "") -> Section:
        """Section made active by a boundary line."""
        if kind.is_root:
            return self.root
        if kind.is_singleton:
            section = self._singletons[kind]
            if name:
                section.name = name
            if section.key not in self._order:
                self._order.append(section.key)
            return section
        return self.create(kind, name, replace=True)

    def create(self, kind: SectionKind, name: str, *, replace: bool = False) -> Section:
        if not kind.is_named:
            raise SectionAlreadyExistsError(f"{kind.value or 'root'} section always exists")
        key = (kind, name)
        if key in self._named:
            if not replace:
                raise SectionAlreadyExistsError(f"{kind.value} {name} already exists")
            self._order.remove(key)
        section = new_section(kind, name)
        self._named[key] = section
        self._order.append(key)
        return section

    def get(self, kind: SectionKind, name: str | None = None) -> Section | None:
        if kind.is_singleton:
            return self.singleton(kind)
        return self._named.get((kind, name or ""))

    def require(self, kind: SectionKind, name: str | None = None) -> Section:
        section = self.get(kind, name)
        if section is None:
            raise SectionMissingError(f"{kind.value} {name} does not exist")
        return section

    def delete(self, kind: SectionKind, name: str) -> None:
        key = (kind, name)
        if key not in self._named:
            raise SectionMissingError(f"{kind.value} {name} does not exist")
        del self._named[key]
        self._order.remove(key)

    def names(self, kind: SectionKind) -> list[str]:
        if kind.is_singleton:
            return [self.singleton(kind).name]
        return [name for section_kind, name in self._order if section_kind is kind]

    def sections(self) -> list[Section]:
        """Every non-root section in output order."""
        untouched = [
            section
            for section in self._singletons.values()
            if section.key not in self._order and section.has_content()
        ]
        return untouched + [self._lookup(key) for key in self._order]

    def __iter__(self) -> Iterator[Section]:
        yield self.root
        yield from self.sections()

    def _lookup(self, key: tuple[SectionKind, str]) -> Section:
        kind, name = key
        if kind.is_singleton:
            return self._singletons[kind]
        return self._named[key]
