"""Unit tests for record flattening."""

import copy

import pytest

from mcp_connectors.search.flatten import MAX_DEPTH, MalformedRecordError, flatten_record, leaf_text, resolve_path


pytestmark = pytest.mark.unit


def test_leaf_text_stringifies_scalars():
    assert leaf_text("x") == "x"
    assert leaf_text(3) == "3"
    assert leaf_text(1.5) == "1.5"
    assert leaf_text(True) == "true"
    assert leaf_text(False) == "false"
    assert leaf_text(None) is None
    assert leaf_text(object()) is None


def test_flattens_nested_values_without_mutation():
    record = {
        "title": "Router",
        "port": 8080,
        "enabled": True,
        "notes": None,
        "empty": "",
        "meta": {"tags": ["home", {"label": "lan"}]},
    }
    snapshot = copy.deepcopy(record)

    pairs = flatten_record(record)

    assert pairs == [
        ("title", "Router"),
        ("port", "8080"),
        ("enabled", "true"),
        ("meta.tags", "home"),
        ("meta.tags.label", "lan"),
    ]
    assert record == snapshot


def test_circular_references_are_skipped():
    record = {"name": "test"}
    record["self"] = record
    record["items"] = [record, "leaf"]

    assert flatten_record(record) == [("name", "test"), ("items", "leaf")]


def test_shared_non_circular_children_are_read_twice():
    shared = {"name": "shared"}
    record = {"a": shared, "b": shared}

    assert flatten_record(record) == [("a.name", "shared"), ("b.name", "shared")]


def test_fields_restrict_to_dotted_paths():
    record = {"title": "Test", "content": "Description", "user": {"profile": {"name": "John"}}}

    assert flatten_record(record, ["title", "user.profile.name", "missing.path"]) == [
        ("title", "Test"),
        ("user.profile.name", "John"),
    ]


def test_resolve_path():
    assert resolve_path({"a": {"b": 1}}, "a.b") == (True, 1)
    assert resolve_path({"a": {"b": 1}}, "a.c") == (False, None)
    assert resolve_path({"a": "text"}, "a.b") == (False, None)


def test_non_mapping_record_is_malformed():
    with pytest.raises(MalformedRecordError):
        flatten_record(["not", "a", "mapping"])


def test_excessive_nesting_is_malformed():
    record: dict = {"leaf": "deep"}
    for _ in range(MAX_DEPTH + 5):
        record = {"child": record}

    with pytest.raises(MalformedRecordError):
        flatten_record(record)
