"""Knowledge DB Schemas — request bodies for scraping entry routes.

Invariants:
    - EntryUpdate.status is validated against ProcessingStatus by pydantic
    - An empty EntryUpdate is a no-op, not an error
"""

from typing import Any

from pydantic import BaseModel, Field

from app.core.domain_types import ProcessingStatus


class SyncRequest(BaseModel):
    """Record indices to pull in. None = the current selection."""
    indices: list[int] | None = None


class EntryUpdate(BaseModel):
    status: ProcessingStatus | None = None
    filterer_json: dict[str, Any] | None = None
    converter_code: str | None = Field(None, max_length=100_000)
    final_clean_response: dict[str, Any] | None = None
    notes: str | None = Field(None, max_length=5000)
    allow_regression: bool = False
