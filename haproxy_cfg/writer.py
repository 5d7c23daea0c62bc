"""Render a section store back to configuration text."""
from __future__ import annotations

from hashlib import md5
from typing import Iterable

from .config import FILE_ENCODING, FILE_ERRORS
from .directives.base import ResultLine
from .sections import Section, SectionStore
from .tokenizer import HASH_MARKER

INDENT = "  "


def comment_line(text: str, indent: str = "") -> str:
    return f"{indent}# {text}" if text else f"{indent}#"


def _directive_lines(results: Iterable[ResultLine], indent: str) -> list[str]:
    lines: list[str] = []
    for result in results:
        lines.extend(comment_line(text, indent) for text in result.pre_comments)
        if result.raw:
            lines.append(result.data)
            continue
        trailer = f" # {result.comment}" if result.comment else ""
        lines.append(f"{indent}{result.data}{trailer}")
    return lines


def section_header(section: Section) -> str:
    words = [section.kind.value]
    if section.name:
        words.append(section.name)
    if section.from_defaults:
        words.extend(["from", section.from_defaults])
    header = " ".join(words)
    if section.comment:
        header += f" # {section.comment}"
    return header


def render_root(section: Section, *, skip_hash: bool = False) -> list[str]:
    lines: list[str] = []
    for parser in section.registry:
        if skip_hash and parser.name == HASH_MARKER:
            continue
        lines.extend(_directive_lines(parser.result(), ""))
    lines.extend(comment_line(text) for text in section.post_comments)
    return lines


def render_section(section: Section) -> list[str]:
    """Lines of one non-root section, starting with its header."""
    lines = [comment_line(text) for text in section.pre_comments]
    lines.append(section_header(section))
    for parser in section.registry:
        lines.extend(_directive_lines(parser.result(), INDENT))
    lines.extend(comment_line(text, INDENT) for text in section.post_comments)
    return lines


def content_hash(text: str) -> str:
    return md5(text.encode(FILE_ENCODING, FILE_ERRORS)).hexdigest()


def join_blocks(root: list[str], sections: Iterable[list[str]]) -> str:
    """Assemble rendered blocks: root lines, then one blank line before each section."""
    lines = list(root)
    for block in sections:
        lines.append("")
        lines.extend(block)
    body = "\n".join(lines) + "\n" if lines else ""
    return body[1:] if body.startswith("\n") else body


def render(store: SectionStore, *, use_md5_hash: bool = False) -> str:
    root = render_root(store.root, skip_hash=use_md5_hash)
    body = join_blocks(root, (render_section(section) for section in store.sections()))
    if use_md5_hash:
        return f"{HASH_MARKER}={content_hash(body)}\n{body}"
    return body
