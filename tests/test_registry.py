import pytest

from haproxy_cfg.directives.extra import ConfigSnippetParser
from haproxy_cfg.directives.simple import StringParser, WordsParser
from haproxy_cfg.engine import DispatchResolver
from haproxy_cfg.registry import DirectiveRegistry
from haproxy_cfg.sections import new_section, snippet_section
from haproxy_cfg.state import SectionKind
from haproxy_cfg.tokenizer import split_line


def test_shortest_prefix_wins():
    short = StringParser("bind")
    long = WordsParser("bind name")
    registry = DirectiveRegistry([long, short])
    assert registry.match(["bind", "name", "x"]) is short


def test_multi_word_keyword_matches_when_shorter_prefix_is_unknown():
    option = WordsParser("option httplog")
    registry = DirectiveRegistry([option])
    assert registry.match(["option", "httplog"]) is option
    assert registry.match(["option"]) is None


def test_duplicate_keyword_is_rejected():
    with pytest.raises(ValueError):
        DirectiveRegistry([StringParser("mode"), StringParser("mode")])


def test_iteration_follows_registration_order():
    registry = DirectiveRegistry([StringParser("b"), StringParser("a")])
    assert [parser.name for parser in registry] == ["b", "a"]
    assert registry.default.name == "b"
    assert len(registry) == 2
    assert "a" in registry


def test_candidates_put_catch_all_last_in_priority():
    section = new_section(SectionKind.FRONTEND)
    found = DispatchResolver().candidates(
        split_line("  bind :80"), section, snippet_mode=False, root_state=False
    )
    assert [parser.name for parser in found] == ["", "bind"]


def test_candidates_without_unprocessed():
    section = new_section(SectionKind.FRONTEND)
    found = DispatchResolver(unprocessed=False).candidates(
        split_line("  bind :80"), section, snippet_mode=False, root_state=False
    )
    assert [parser.name for parser in found] == ["bind"]


def test_candidates_retry_after_negation_keyword():
    section = new_section(SectionKind.DEFAULTS)
    found = DispatchResolver().candidates(
        split_line("  no option httplog"), section, snippet_mode=False, root_state=False
    )
    assert [parser.name for parser in found] == ["", "option httplog"]


def test_snippet_mode_bypasses_keyword_matching():
    section = snippet_section(ConfigSnippetParser())
    found = DispatchResolver().candidates(
        split_line("frontend sneaky"), section, snippet_mode=True, root_state=False
    )
    assert [parser.name for parser in found] == ["config-snippet"]


def test_unmatched_root_line_falls_back_to_comments():
    section = new_section(SectionKind.ROOT)
    found = DispatchResolver().candidates(
        split_line("stray words"), section, snippet_mode=False, root_state=True
    )
    assert [parser.name for parser in found] == ["#"]
