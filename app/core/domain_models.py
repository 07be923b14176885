"""Domain Models — pydantic shapes for records, graph entities, chat log and Knowledge DB rows.

Invariants:
    - DatasetRecord is read-only inside the core (frozen)
    - Wire/backup field names are camelCase (aliases); Python attributes are snake_case
    - ScrapingEntry timestamps are ISO-8601 UTC strings

Design Decisions:
    - populate_by_name=True: the same models load from backups (camelCase)
      and from Python call sites (snake_case)
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.core.domain_types import MessageRole, ProcessingStatus, ToolCallStatus


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def now_ms() -> int:
    return int(time.time() * 1000)


class DatasetRecord(BaseModel):
    """One flattened HAR entry as the core sees it."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    index: int
    id: str
    method: str
    url: str
    status: int = 0
    size: int = 0
    mime_type: str = Field("", alias="mimeType")
    response_body_text: str | None = Field(None, alias="responseBodyText")
    request_body_text: str | None = Field(None, alias="requestBodyText")
    selected: bool = False

    def to_script_dict(self) -> dict:
        """Plain dict handed to the sandbox (camelCase, JSON-safe)."""
        return self.model_dump(by_alias=True)


class ExtractedEntity(BaseModel):
    """Graph node. Identity is id."""
    id: str
    type: str
    label: str
    data: dict[str, Any] = Field(default_factory=dict)


class KnowledgeLink(BaseModel):
    """Directed graph edge. Duplicates are allowed."""
    source: str
    target: str
    label: str


class ToolCall(BaseModel):
    id: str
    name: str
    args: dict[str, Any] = Field(default_factory=dict)
    status: ToolCallStatus = ToolCallStatus.PENDING
    result: Any = None
    timestamp: int = Field(default_factory=now_ms)


class ChatMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: MessageRole
    text: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list, alias="toolCalls")


class ScrapingEntry(BaseModel):
    """Knowledge DB row: one dataset record pulled into the working set."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    source_type_key: str
    url: str
    request: dict[str, Any] = Field(default_factory=dict)
    response: dict[str, Any] = Field(default_factory=dict)
    filterer_json: dict[str, Any] = Field(default_factory=dict)
    converter_code: str = ""
    final_clean_response: dict[str, Any] = Field(default_factory=dict)
    processing_status: ProcessingStatus = ProcessingStatus.UNPROCESSED
    is_deleted: bool = False
    notes: str | None = None
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
