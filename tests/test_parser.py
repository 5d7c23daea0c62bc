from hashlib import md5
import io

import pytest

from haproxy_cfg import ConfigParser, SectionKind
from haproxy_cfg.errors import (
    AttributeNotFoundError,
    ConfigError,
    FetchError,
    IndexOutOfRangeError,
    SectionAlreadyExistsError,
    SectionMissingError,
    StrictModeError,
)
from haproxy_cfg.types import Server, StringC

BASIC = """# _md5hash=4cadde7159beea87ba17ba043201d3ad
# _version=1
# HAProxy Technologies
# https://www.haproxy.com/

global
  master-worker

defaults
  log global

frontend http
  mode http
  bind 0.0.0.0:80 name bind_1
  bind :::80 v4v6 name bind_2
  default_backend default_backend

backend default_backend
  mode http
  http-request deny deny_status 400 # deny
"""


def _parsed(text: str = BASIC, **options) -> ConfigParser:
    parser = ConfigParser(**options)
    parser.process_text(text)
    return parser


def test_round_trip_reproduces_basic_config():
    parser = _parsed()
    assert parser.diagnostics == []
    assert str(parser) == BASIC


def test_round_trip_is_idempotent():
    first = _parsed().string()
    assert _parsed(first).string() == first


def test_md5_hash_is_recomputed_over_the_body():
    output = _parsed(use_md5_hash=True).string()
    header, body = output.split("\n", 1)
    assert header == f"# _md5hash={md5(body.encode('utf-8')).hexdigest()}"
    assert body == BASIC.split("\n", 1)[1]


def test_frontend_with_single_bind():
    parser = _parsed("frontend http\nbind 0.0.0.0:80 name bind_1\n")
    assert parser.section_names("frontend") == ["http"]
    bind = parser.get_one("frontend", "http", "bind")
    assert bind.address == "0.0.0.0:80"
    assert bind.param("name") == "bind_1"
    assert parser.string() == "frontend http\n  bind 0.0.0.0:80 name bind_1\n"


def test_directives_are_scoped_to_their_section():
    parser = _parsed("global\n  maxconn 100\nfrontend a\n  maxconn 10\nfrontend b\n  maxconn 20\n")
    assert parser.get("global", None, "maxconn").value == 100
    assert parser.get("frontend", "a", "maxconn").value == 10
    assert parser.get("frontend", "b", "maxconn").value == 20


def test_comments_survive_round_trip():
    text = (
        "global\n"
        "  # keep in foreground\n"
        "  daemon\n"
        "\n"
        "# public entry\n"
        "frontend web # edge\n"
        "  mode http\n"
    )
    parser = _parsed(text)
    assert parser.get("global", None, "daemon").pre_comments == ["keep in foreground"]
    assert parser.section("frontend", "web").pre_comments == ["public entry"]
    assert parser.string() == text


def test_snippet_round_trip():
    text = (
        "backend app\n"
        "  mode http\n"
        "  ###_config-snippet_### BEGIN\n"
        "    http-request set-var(txn.x) str(y)\n"
        "frontend not_a_section\n"
        "  ###_config-snippet_### END\n"
    )
    parser = _parsed(text)
    assert not parser.section_exists("frontend", "not_a_section")
    assert parser.string() == text


def test_unknown_directives_pass_through():
    text = "frontend web\n  mode http\n  compression algo gzip # zip\n"
    parser = _parsed(text)
    assert parser.entries("frontend", "web", "")[0].value == "compression algo gzip"
    assert parser.string() == text


def test_rules_outside_the_catalog_keep_their_order():
    text = (
        "frontend web\n"
        "  mode http\n"
        "  http-request track-sc0 src\n"
        "  http-request deny if { sc_http_req_rate(0) gt 10 }\n"
        "  http-request redirect scheme https unless { ssl_fc }\n"
        "  tcp-request inspect-delay 5s\n"
        "  tcp-request content accept if { req_ssl_hello_type 1 }\n"
        "  tcp-request content reject\n"
    )
    parser = _parsed(text)
    assert parser.diagnostics == []
    assert parser.entries("frontend", "web", "") == []
    out = parser.string()
    assert out == text
    assert out.index("track-sc0") < out.index("deny") < out.index("redirect")
    assert out.index("inspect-delay") < out.index("content accept")


def test_undecodable_bytes_are_kept():
    data = b"global\n  daemon # caf\xe9\n  maxconn 10\n"
    parser = ConfigParser()
    assert parser.process(io.BytesIO(data)) == []
    assert parser.get("global", None, "maxconn").value == 10
    assert parser.string().encode("utf-8", "surrogateescape") == data


def test_load_and_save_keep_undecodable_bytes(tmp_path):
    source = tmp_path / "haproxy.cfg"
    source.write_bytes(b"# r\xe9seau\n\nfrontend web\n  mode http\n")
    parser = ConfigParser()
    parser.load(source)
    target = parser.save(tmp_path / "copy.cfg")
    assert target.read_bytes() == source.read_bytes()


def test_serialization_follows_parser_order():
    parser = _parsed("backend app\n  server s1 10.0.0.1:80 check\n  mode http\n")
    assert parser.string() == "backend app\n  mode http\n  server s1 10.0.0.1:80 check\n"


def test_defaults_reference_round_trip():
    text = "defaults base\n  mode http\n\nbackend app from base\n  mode tcp\n"
    parser = _parsed(text)
    assert parser.section("backend", "app").from_defaults == "base"
    assert parser.string() == text


def test_last_line_without_newline_is_processed():
    parser = _parsed("global\n  daemon")
    assert parser.get("global", None, "daemon") is not None


def test_crlf_input():
    assert _parsed(BASIC.replace("\n", "\r\n")).string() == BASIC


def test_process_accepts_byte_streams():
    parser = ConfigParser()
    parser.process(io.BytesIO(BASIC.encode("utf-8")))
    assert parser.string() == BASIC


def test_duplicate_backend_keeps_last_body():
    parser = _parsed("backend b\n  mode http\n\nbackend b\n  mode tcp\n")
    assert parser.section_names("backend") == ["b"]
    assert parser.get("backend", "b", "mode").value == "tcp"


def test_section_create_and_edit():
    parser = _parsed()
    parser.section_create(SectionKind.BACKEND, "api")
    parser.set("backend", "api", "mode", StringC(value="tcp"))
    parser.insert("backend", "api", "server", Server(name="a1", address="10.0.0.1:8080"))
    assert parser.section_exists("backend", "api")
    assert parser.string().endswith("backend api\n  mode tcp\n  server a1 10.0.0.1:8080\n")


def test_section_create_existing_fails():
    parser = _parsed()
    with pytest.raises(SectionAlreadyExistsError):
        parser.section_create("backend", "default_backend")


def test_section_delete():
    parser = _parsed()
    parser.section_delete("frontend", "http")
    assert parser.section_names("frontend") == []
    assert "frontend http" not in parser.string()
    with pytest.raises(SectionMissingError):
        parser.section_delete("frontend", "http")


def test_unknown_section_kind():
    with pytest.raises(SectionMissingError):
        _parsed().section("castle", "x")


def test_insert_and_delete_entries():
    parser = _parsed()
    parser.insert("frontend", "http", "bind", parser.get_one("frontend", "http", "bind", 1), 0)
    assert [bind.param("name") for bind in parser.entries("frontend", "http", "bind")] == [
        "bind_2",
        "bind_1",
        "bind_2",
    ]
    parser.delete("frontend", "http", "bind", 2)
    parser.delete("frontend", "http", "bind", 0)
    assert [bind.param("name") for bind in parser.entries("frontend", "http", "bind")] == ["bind_1"]
    with pytest.raises(IndexOutOfRangeError):
        parser.delete("frontend", "http", "bind", 5)


def test_missing_data_and_attributes():
    parser = _parsed()
    with pytest.raises(FetchError):
        parser.get("backend", "default_backend", "server")
    assert parser.get("backend", "default_backend", "server", create=True) == []
    with pytest.raises(AttributeNotFoundError):
        parser.get("backend", "default_backend", "no-such-keyword")


def test_set_none_deletes():
    parser = _parsed()
    parser.set("frontend", "http", "default_backend", None)
    assert "default_backend default_backend" not in parser.string()


def test_version_helpers():
    parser = _parsed()
    assert parser.get_version() == 1
    assert parser.increment_version() == 2
    assert "# _version=2\n" in parser.string()

    fresh = ConfigParser()
    with pytest.raises(FetchError):
        fresh.get_version()
    assert fresh.increment_version() == 1


def test_diagnostics_are_returned_without_strict_mode():
    diagnostics = ConfigParser().process_text("global\n  maxconn lots\n")
    assert [item.parser for item in diagnostics] == ["maxconn"]


def test_strict_mode_raises_after_processing():
    parser = ConfigParser(strict=True)
    with pytest.raises(StrictModeError) as excinfo:
        parser.process_text("global\n  maxconn lots\n  daemon\n")
    assert excinfo.value.diagnostics[0].line_number == 2
    assert parser.get("global", None, "daemon") is not None


def test_load_and_save(tmp_path):
    path = tmp_path / "haproxy.cfg"
    path.write_text(BASIC)
    parser = ConfigParser()
    parser.load(path)
    parser.set("frontend", "http", "mode", StringC(value="tcp"))
    parser.save()
    assert "  mode tcp\n  bind 0.0.0.0:80" in path.read_text()


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigParser().load(tmp_path / "missing.cfg")


def test_save_without_path():
    with pytest.raises(ConfigError):
        ConfigParser().save()
