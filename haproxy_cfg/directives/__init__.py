"""Directive parsers: the engine-owned ones and a small keyword catalog."""
from .base import DirectiveParser, ResultLine
from .extra import (
    CommentsParser,
    ConfigHashParser,
    ConfigSnippetParser,
    ConfigVersionParser,
    SectionParser,
    UnProcessedParser,
)

__all__ = [
    "CommentsParser",
    "ConfigHashParser",
    "ConfigSnippetParser",
    "ConfigVersionParser",
    "DirectiveParser",
    "ResultLine",
    "SectionParser",
    "UnProcessedParser",
]
