"""Structural Summary — shape-preserving, size-bounded previews of arbitrary JSON.

Invariants:
    - All functions are PURE and total over JSON values (never raise)
    - Object keys preserved; every non-empty array becomes exactly one summarized element
    - Strings longer than MAX_STRING_LENGTH are cut with a marker stating the original length
    - Beyond MAX_DEPTH the value is replaced by DEPTH_MARKER
    - summarize_structure(summarize_structure(x)) == summarize_structure(x)

Design Decisions:
    - No "N more items" slot in summarized arrays: a second element would
      break the length-1 shape and the idempotence property
    - Marker strings are short enough that truncated output is never re-truncated
"""

import json
from typing import Any

MAX_DEPTH = 5
MAX_STRING_LENGTH = 100
STRING_PREVIEW_LENGTH = 50
DEPTH_MARKER = "... (max depth)"


def summarize_structure(value: Any, depth: int = 0) -> Any:
    """Compress value into a same-shaped preview (arrays keep their first item)."""
    if depth > MAX_DEPTH:
        return DEPTH_MARKER
    if isinstance(value, (list, tuple)):
        if not value:
            return []
        return [summarize_structure(value[0], depth + 1)]
    if isinstance(value, dict):
        return {
            str(key): summarize_structure(item, depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, str) and len(value) > MAX_STRING_LENGTH:
        return _truncate_string(value)
    return value


def describe_schema(value: Any, depth: int = 0) -> Any:
    """Like summarize_structure, but leaves become their JSON type names."""
    if depth > MAX_DEPTH:
        return DEPTH_MARKER
    if isinstance(value, (list, tuple)):
        if not value:
            return []
        return [describe_schema(value[0], depth + 1)]
    if isinstance(value, dict):
        return {
            str(key): describe_schema(item, depth + 1)
            for key, item in value.items()
        }
    return _json_type_name(value)


def truncate_content(text: str | None, max_length: int) -> str:
    """Cap raw text, inviting a follow-up call with a larger bound."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return (
        text[:max_length]
        + f"... [content trimmed, total: {len(text)} chars. "
        "Call again with higher limit if needed]"
    )


def parse_json_body(text: str | None) -> Any:
    """Parse a body as JSON; None when empty or not JSON."""
    if not text:
        return None
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def _truncate_string(value: str) -> str:
    return value[:STRING_PREVIEW_LENGTH] + f"... (truncated, {len(value)} chars)"


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__
