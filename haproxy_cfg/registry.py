"""Per-section mapping from directive keywords to parser instances."""
from __future__ import annotations

from typing import Iterable, Iterator, Sequence

from .directives.base import DirectiveParser


class DirectiveRegistry:
    """Keyword lookup plus the declared serialization order.

    Keywords may span several fields (``option httplog``, ``timeout
    client``). The first parser in the sequence is the default parser used
    when keyword matching is bypassed.
    """

    def __init__(self, parsers: Iterable[DirectiveParser] = ()):
        self._parsers: dict[str, DirectiveParser] = {}
        self.sequence: list[str] = []
        for parser in parsers:
            self.register(parser)

    def register(self, parser: DirectiveParser) -> None:
        if parser.name in self._parsers:
            raise ValueError(f"duplicate directive keyword {parser.name!r}")
        self._parsers[parser.name] = parser
        self.sequence.append(parser.name)

    def get(self, keyword: str) -> DirectiveParser | None:
        return self._parsers.get(keyword)

    def __getitem__(self, keyword: str) -> DirectiveParser:
        return self._parsers[keyword]

    def __contains__(self, keyword: object) -> bool:
        return keyword in self._parsers

    def __iter__(self) -> Iterator[DirectiveParser]:
        for keyword in self.sequence:
            yield self._parsers[keyword]

    def __len__(self) -> int:
        return len(self._parsers)

    @property
    def default(self) -> DirectiveParser:
        return self._parsers[self.sequence[0]]

    def match(self, parts: Sequence[str]) -> DirectiveParser | None:
        """Return the parser registered for the shortest matching keyword prefix."""
        for length in range(1, len(parts) + 1):
            parser = self._parsers.get(" ".join(parts[:length]))
            if parser is not None:
                return parser
        return None
