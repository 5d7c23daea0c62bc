from haproxy_cfg.config import ParserOptions
from haproxy_cfg.engine import (
    BlankLine,
    CommentCollected,
    DirectiveApplied,
    Engine,
    LineDropped,
    SectionEntered,
    SnippetEntered,
    SnippetExited,
)
from haproxy_cfg.sections import SectionStore
from haproxy_cfg.state import SectionKind


def _engine(**options) -> Engine:
    return Engine(SectionStore(), ParserOptions(**options))


def _feed(engine: Engine, text: str) -> list:
    return [engine.advance(line) for line in text.splitlines()]


def test_section_boundary_then_directive():
    engine = _engine()
    events = _feed(engine, "frontend http\nbind 0.0.0.0:80 name bind_1")
    assert events[0] == SectionEntered(kind=SectionKind.FRONTEND, name="http")
    assert isinstance(events[1], DirectiveApplied)
    assert events[1].parser.name == "bind"
    bind = engine.store.get(SectionKind.FRONTEND, "http").registry["bind"].data[0]
    assert bind.address == "0.0.0.0:80"
    assert bind.param("name") == "bind_1"


def test_blank_line_moves_root_to_comment_state():
    engine = _engine()
    assert engine.advance("") == BlankLine()
    assert engine.cursor.state is SectionKind.COMMENTS


def test_root_comments_are_stored_before_first_blank_line():
    engine = _engine()
    events = _feed(engine, "# header one\n# header two")
    assert all(isinstance(event, DirectiveApplied) for event in events)
    assert [record.value for record in engine.store.root.registry["#"].data] == ["header one", "header two"]


def test_indented_comment_attaches_to_next_directive():
    engine = _engine()
    events = _feed(engine, "global\n  # stay in foreground\n  daemon")
    assert events[1] == CommentCollected(text="stay in foreground", section_level=False)
    record = engine.store.singleton(SectionKind.GLOBAL).registry["daemon"].data[0]
    assert record.pre_comments == ["stay in foreground"]
    assert engine.cursor.active_comments == []


def test_unindented_comment_attaches_to_next_section():
    engine = _engine()
    _feed(engine, "\n# public entry point\nfrontend web\n  mode http")
    section = engine.store.get(SectionKind.FRONTEND, "web")
    assert section.pre_comments == ["public entry point"]


def test_pending_directive_comments_close_the_outgoing_section():
    engine = _engine()
    _feed(engine, "backend a\n  mode http\n  # end of a\nbackend b")
    assert engine.store.get(SectionKind.BACKEND, "a").post_comments == ["end of a"]
    assert engine.store.get(SectionKind.BACKEND, "b").post_comments == []


def test_finish_flushes_pending_comments_onto_active_section():
    engine = _engine()
    _feed(engine, "backend a\n  mode http\n  # trailing\n# dangling")
    engine.finish()
    assert engine.store.get(SectionKind.BACKEND, "a").post_comments == ["trailing", "dangling"]


def test_header_comment_and_from_defaults_travel_with_transition():
    engine = _engine()
    _feed(engine, "defaults base\nbackend app from base # apps")
    section = engine.store.get(SectionKind.BACKEND, "app")
    assert section.from_defaults == "base"
    assert section.comment == "apps"
    assert engine.store.singleton(SectionKind.DEFAULTS).name == "base"


def test_snippet_captures_everything_verbatim():
    engine = _engine()
    events = _feed(
        engine,
        "backend app\n"
        "  # before snippet\n"
        "  ###_config-snippet_### BEGIN\n"
        "    server s1 127.0.0.1:80\n"
        "frontend fake\n"
        "\n"
        "  # inner comment\n"
        "  ###_config-snippet_### END\n"
        "  mode http",
    )
    assert isinstance(events[2], SnippetEntered)
    assert isinstance(events[7], SnippetExited)
    assert engine.store.get(SectionKind.FRONTEND, "fake") is None

    backend = engine.store.get(SectionKind.BACKEND, "app")
    snippet = backend.registry["config-snippet"].data[0]
    assert snippet.lines == ["    server s1 127.0.0.1:80", "frontend fake", "", "  # inner comment"]
    assert snippet.pre_comments == ["before snippet"]
    assert backend.registry["mode"].data[0].value == "http"
    assert backend.post_comments == []
    assert engine.cursor.state is SectionKind.BACKEND


def test_unterminated_snippet_is_reported():
    engine = _engine()
    _feed(engine, "backend app\n  ###_config-snippet_### BEGIN\n  raw line")
    engine.finish()
    assert engine.diagnostics[-1].message == "unterminated config snippet"
    assert engine.cursor.active is engine.store.get(SectionKind.BACKEND, "app")


def test_rejected_line_falls_back_to_catch_all():
    engine = _engine()
    events = _feed(engine, "global\n  maxconn lots")
    assert isinstance(events[1], DirectiveApplied)
    assert events[1].parser.name == ""
    assert len(engine.diagnostics) == 1
    diagnostic = engine.diagnostics[0]
    assert diagnostic.parser == "maxconn"
    assert diagnostic.line_number == 2
    assert not diagnostic.dropped


def test_unmatched_line_is_dropped_without_catch_all():
    engine = _engine(disable_unprocessed=True)
    events = _feed(engine, "frontend web\n  frobnicate now")
    assert events[1] == LineDropped(reason="no parser matched")
    assert engine.diagnostics[-1].dropped


def test_duplicate_section_last_definition_wins():
    engine = _engine()
    _feed(engine, "backend b\n  mode http\nbackend other\nbackend b\n  mode tcp")
    assert engine.store.names(SectionKind.BACKEND) == ["other", "b"]
    assert engine.store.get(SectionKind.BACKEND, "b").registry["mode"].data[0].value == "tcp"


def test_negated_option():
    engine = _engine()
    _feed(engine, "defaults\n  no option httplog")
    record = engine.store.singleton(SectionKind.DEFAULTS).registry["option httplog"].data[0]
    assert record.no is True


def test_line_endings_are_stripped():
    engine = _engine()
    assert engine.advance("global\r\n") == SectionEntered(kind=SectionKind.GLOBAL, name="")
    assert isinstance(engine.advance("  daemon\r\n"), DirectiveApplied)


def test_run_returns_diagnostics():
    engine = _engine()
    diagnostics = engine.run(["global\n", "  nbthread many\n"])
    assert [item.parser for item in diagnostics] == ["nbthread"]
