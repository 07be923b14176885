"""Agent Runner Helpers — pure event builders and response introspection.

Invariants:
    - All functions are pure (stateless, deterministic)
    - Event dicts follow the stream protocol: {"type": ..., "data": ...}
    - A tool result counts as an error when it has "error", success is False,
      or status == "error"
"""

import json
from typing import Any

from app.core.domain_models import ToolCall
from app.core.domain_types import ToolCallStatus
from app.core.errors import ErrorSeverity


# -- Stream event builders -----------------------------------------------------

def tool_call_event(call: ToolCall) -> dict:
    return {"type": "tool_call", "data": call.model_dump(mode="json")}


def done_event(text: str, turns: int, error: bool = False) -> dict:
    return {
        "type": "done",
        "data": {"text": text, "turns": turns, "error": error},
    }


def unexpected_error_event() -> dict:
    return {
        "type": "error",
        "data": {
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "severity": ErrorSeverity.CRITICAL.value,
            "recoverable": False,
        },
    }


# -- Response introspection ----------------------------------------------------

def tool_use_blocks(response: Any) -> list[Any]:
    return [
        b for b in response.content
        if getattr(b, "type", None) == "tool_use"
    ]


def has_tool_use(response: Any) -> bool:
    return bool(tool_use_blocks(response))


def final_text(response: Any) -> str:
    """Concatenated text blocks of a response."""
    return "".join(
        b.text for b in response.content
        if getattr(b, "type", None) == "text" and b.text
    ).strip()


def serialize_content(response: Any) -> list[dict]:
    return [b.model_dump(exclude_none=True) for b in response.content]


# -- Tool results --------------------------------------------------------------

def result_status(result: Any) -> ToolCallStatus:
    if isinstance(result, dict) and (
        result.get("error")
        or result.get("success") is False
        or result.get("status") == "error"
    ):
        return ToolCallStatus.ERROR
    return ToolCallStatus.SUCCESS


def tool_result_block(tool_use_id: str, call: ToolCall) -> dict:
    """tool_result content block carrying {id, name, response: {result}}."""
    payload = {"id": call.id, "name": call.name, "response": {"result": call.result}}
    return {
        "type": "tool_result",
        "tool_use_id": tool_use_id,
        "content": json.dumps(payload, ensure_ascii=False, default=str),
        "is_error": call.status == ToolCallStatus.ERROR,
    }
