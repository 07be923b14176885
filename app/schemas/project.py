"""Project Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - ProjectCreate.name: 1-200 chars, stripped, non-empty
    - RecordsUpload indices are unique within one upload
    - ChatRequest.message: 1-20000 chars, stripped, non-empty

Design Decisions:
    - Records reuse core DatasetRecord: the route stores exactly what it validates
    - field_validator for side-effect-free transforms (strip), keeps models pure
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.core.domain_models import DatasetRecord


def _strip_required(v: str, field_name: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError(f"{field_name} cannot be empty or whitespace")
    return v


class ProjectCreate(BaseModel):
    """Project creation: a name and an optional proxy backend override."""
    name: str = Field(min_length=1, max_length=200)
    backend_url: str | None = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_required(v, "name")


class ProjectUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    backend_url: str | None = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return _strip_required(v, "name") if v is not None else v


class ProjectResponse(BaseModel):
    """Project response — row metadata plus working-set counts."""
    id: UUID
    name: str
    backend_url: str | None = None
    record_count: int = 0
    node_count: int = 0
    link_count: int = 0
    entry_count: int = 0
    created_at: datetime
    updated_at: datetime


class RecordsUpload(BaseModel):
    """Dataset records from the HAR loader. replace=False appends."""
    records: list[DatasetRecord]
    replace: bool = True

    @field_validator("records")
    @classmethod
    def unique_indices(cls, v: list[DatasetRecord]) -> list[DatasetRecord]:
        seen: set[int] = set()
        for record in v:
            if record.index in seen:
                raise ValueError(f"duplicate record index {record.index}")
            seen.add(record.index)
        return v


class SelectionUpdate(BaseModel):
    indices: list[int] = Field(default_factory=list)
    selected: bool = True
    clear_others: bool = False


class ChatRequest(BaseModel):
    """One user message for the agent."""
    message: str = Field(min_length=1, max_length=20_000)

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        return _strip_required(v, "message")
