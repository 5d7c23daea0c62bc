from haproxy_cfg.tokenizer import (
    HASH_MARKER,
    SNIPPET_MARKER,
    VERSION_MARKER,
    format_condition,
    split_condition,
    split_line,
)


def test_split_line_fields_and_trailing_comment():
    line = split_line("  bind :80 name bind_1   # public entry ")
    assert line.parts == ["bind", ":80", "name", "bind_1"]
    assert line.comment == "public entry"
    assert line.indented
    assert not line.is_comment


def test_blank_and_whitespace_only_lines():
    assert split_line("").is_blank
    assert split_line("    ").is_blank


def test_comment_only_line():
    line = split_line("# just a note")
    assert line.parts == []
    assert line.comment == "just a note"
    assert line.is_comment
    assert not line.indented


def test_bare_hash_is_an_empty_comment():
    line = split_line("  #")
    assert line.is_comment
    assert line.comment == ""


def test_escaped_hash_and_space_stay_in_the_token():
    line = split_line(r"http-request set-header X-Tag a\#b\ c # real")
    assert line.parts == ["http-request", "set-header", "X-Tag", r"a\#b\ c"]
    assert line.comment == "real"


def test_metadata_markers_become_single_fields():
    assert split_line("# _version=3").parts == [VERSION_MARKER]
    assert split_line("# _md5hash=abc").parts == [HASH_MARKER]
    marker = split_line("  ###_config-snippet_### BEGIN")
    assert marker.parts == [SNIPPET_MARKER]
    assert marker.is_snippet_marker
    assert not marker.is_comment


def test_markers_only_apply_to_comment_only_lines():
    line = split_line("mode http # _version=3")
    assert line.parts == ["mode", "http"]


def test_split_condition_at_first_keyword():
    command, condition = split_condition(["deny", "deny_status", "400", "if", "bad", "unless", "ok"])
    assert command == ["deny", "deny_status", "400"]
    assert condition == ["if", "bad", "unless", "ok"]


def test_split_condition_without_condition():
    assert split_condition(["allow"]) == (["allow"], [])


def test_format_condition():
    assert format_condition("", "") == ""
    assert format_condition("unless", "{ src 10.0.0.1 }") == " unless { src 10.0.0.1 }"
