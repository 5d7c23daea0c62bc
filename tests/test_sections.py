import pytest

from haproxy_cfg.errors import SectionAlreadyExistsError, SectionMissingError
from haproxy_cfg.sections import SECTION_TEMPLATES, SectionStore, new_section
from haproxy_cfg.state import BOUNDARY_KINDS, SectionKind
from haproxy_cfg.types import Enabled


def test_every_section_kind_has_a_template():
    for kind in SectionKind:
        if kind.is_snippet:
            continue
        assert kind in SECTION_TEMPLATES


@pytest.mark.parametrize("kind", BOUNDARY_KINDS)
def test_templates_recognize_every_boundary(kind):
    registry = new_section(kind).registry
    for boundary in BOUNDARY_KINDS:
        assert boundary.value in registry
    assert registry.sequence[-2:] == ["", "config-snippet"]


def test_root_template_has_no_catch_all():
    registry = new_section(SectionKind.ROOT).registry
    assert "" not in registry
    assert "#" in registry
    assert "# _version" in registry


def test_each_section_owns_its_parsers():
    first = new_section(SectionKind.BACKEND, "a")
    second = new_section(SectionKind.BACKEND, "b")
    assert first.registry["mode"] is not second.registry["mode"]


def test_store_orders_sections_by_first_entry():
    store = SectionStore()
    store.enter(SectionKind.FRONTEND, "web")
    store.enter(SectionKind.GLOBAL)
    store.enter(SectionKind.BACKEND, "app")
    assert [section.key for section in store.sections()] == [
        (SectionKind.FRONTEND, "web"),
        (SectionKind.GLOBAL, ""),
        (SectionKind.BACKEND, "app"),
    ]


def test_redefinition_replaces_and_moves_section():
    store = SectionStore()
    first = store.enter(SectionKind.BACKEND, "app")
    store.enter(SectionKind.BACKEND, "other")
    second = store.enter(SectionKind.BACKEND, "app")
    assert first is not second
    assert store.get(SectionKind.BACKEND, "app") is second
    assert store.names(SectionKind.BACKEND) == ["other", "app"]


def test_untouched_singletons_are_hidden_until_they_hold_data():
    store = SectionStore()
    assert store.sections() == []
    store.singleton(SectionKind.GLOBAL).registry["daemon"].set(Enabled())
    assert [section.kind for section in store.sections()] == [SectionKind.GLOBAL]


def test_create_and_delete():
    store = SectionStore()
    store.create(SectionKind.CACHE, "static")
    with pytest.raises(SectionAlreadyExistsError):
        store.create(SectionKind.CACHE, "static")
    with pytest.raises(SectionAlreadyExistsError):
        store.create(SectionKind.GLOBAL, "")
    store.delete(SectionKind.CACHE, "static")
    assert store.get(SectionKind.CACHE, "static") is None
    with pytest.raises(SectionMissingError):
        store.require(SectionKind.CACHE, "static")
