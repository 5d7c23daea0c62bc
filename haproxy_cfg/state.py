"""Section kinds and the transition payload reported by boundary lines."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SectionKind(str, Enum):
    ROOT = ""
    COMMENTS = "#"
    DEFAULTS = "defaults"
    GLOBAL = "global"
    FRONTEND = "frontend"
    BACKEND = "backend"
    LISTEN = "listen"
    RESOLVERS = "resolvers"
    USERLIST = "userlist"
    PEERS = "peers"
    MAILERS = "mailers"
    CACHE = "cache"
    PROGRAM = "program"
    HTTP_ERRORS = "http-errors"
    RING = "ring"
    SNIPPET_BEGIN = "snippet_beg"
    SNIPPET_END = "snippet_end"

    @property
    def is_snippet(self) -> bool:
        return self in (SectionKind.SNIPPET_BEGIN, SectionKind.SNIPPET_END)

    @property
    def is_root(self) -> bool:
        return self in (SectionKind.ROOT, SectionKind.COMMENTS)

    @property
    def is_singleton(self) -> bool:
        return self.is_root or self in (SectionKind.DEFAULTS, SectionKind.GLOBAL)

    @property
    def is_named(self) -> bool:
        return not self.is_singleton and not self.is_snippet


BOUNDARY_KINDS: tuple[SectionKind, ...] = tuple(
    kind for kind in SectionKind if not kind.is_root and not kind.is_snippet
)


@dataclass(frozen=True, slots=True)
class Transition:
    kind: SectionKind
    name: str = ""
    from_defaults: str = ""
    comment: str = ""
