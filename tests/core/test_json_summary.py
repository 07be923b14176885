"""Structural Summary — shape-preserving previews, schemas and truncation.

Tests cover:
    - Arrays collapse to their first element (recursively summarized)
    - Long strings cut with a length marker; short ones untouched
    - Depth cutoff replaces deep values with the marker
    - Idempotence on its own output
    - Never raises on awkward input (empty containers, very deep nesting)
"""

import pytest

from app.core.json_summary import (
    DEPTH_MARKER, MAX_DEPTH, describe_schema, parse_json_body,
    summarize_structure, truncate_content,
)


def _nested(levels):
    value = "leaf"
    for _ in range(levels):
        value = {"child": value}
    return value


def test_array_keeps_first_element_only():
    assert summarize_structure([{"a": 1}, {"a": 2}, {"a": 3}]) == [{"a": 1}]


def test_object_keys_preserved():
    value = {"id": 7, "name": "x", "tags": ["a", "b"], "meta": None}
    assert summarize_structure(value) == {"id": 7, "name": "x", "tags": ["a"], "meta": None}


def test_long_string_truncated_with_length():
    out = summarize_structure("z" * 150)
    assert out == "z" * 50 + "... (truncated, 150 chars)"


def test_string_at_limit_untouched():
    assert summarize_structure("y" * 100) == "y" * 100


def test_empty_containers():
    assert summarize_structure([]) == []
    assert summarize_structure({}) == {}


def test_depth_cutoff():
    out = summarize_structure(_nested(MAX_DEPTH + 3))
    node = out
    for _ in range(MAX_DEPTH + 1):
        node = node["child"]
    assert node == DEPTH_MARKER


def test_very_deep_input_does_not_raise():
    summarize_structure(_nested(60))
    describe_schema(_nested(60))


@pytest.mark.parametrize("value", [
    {"rows": [[{"k": "v" * 300}] * 4] * 3},
    _nested(12),
    [1, "two", None, True],
    {"a": {"b": [{"c": "d" * 101}]}},
])
def test_idempotent(value):
    once = summarize_structure(value)
    assert summarize_structure(once) == once


def test_describe_schema_type_names():
    value = {"id": 1, "ok": True, "name": "n", "gone": None, "list": [{"x": 1.5}]}
    assert describe_schema(value) == {
        "id": "number", "ok": "boolean", "name": "string", "gone": "null",
        "list": [{"x": "number"}],
    }


def test_truncate_content():
    assert truncate_content(None, 10) == ""
    assert truncate_content("short", 10) == "short"
    out = truncate_content("a" * 20, 5)
    assert out.startswith("aaaaa... [content trimmed, total: 20 chars.")


def test_parse_json_body():
    assert parse_json_body('{"a": 1}') == {"a": 1}
    assert parse_json_body("<html>") is None
    assert parse_json_body("") is None
