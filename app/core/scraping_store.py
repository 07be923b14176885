"""Scraping Store — ScrapingEntryStore implementation over a ProjectState.

Invariants:
    - Rows are never removed; delete is a soft flag
    - update() refreshes updated_at on every write
    - list_groups() delegates to scraping_pipeline.group_entries (deleted rows excluded)
"""

from typing import Any

from app.core.domain_models import DatasetRecord, ScrapingEntry, utc_now_iso
from app.core.domain_types import EntryId
from app.core.errors import ResourceNotFoundError
from app.core.project_state import ProjectState
from app.core.scraping_pipeline import build_entry, group_entries


class InMemoryScrapingStore:

    def __init__(self, state: ProjectState):
        self._state = state

    def add(self, entry: ScrapingEntry) -> ScrapingEntry:
        self._state.scraping_entries.append(entry)
        return entry

    def get(self, entry_id: EntryId) -> ScrapingEntry | None:
        return next(
            (e for e in self._state.scraping_entries if e.id == entry_id), None,
        )

    def update(self, entry_id: EntryId, **changes: Any) -> ScrapingEntry:
        for pos, entry in enumerate(self._state.scraping_entries):
            if entry.id == entry_id:
                updated = entry.model_copy(
                    update={**changes, "updated_at": utc_now_iso()},
                )
                self._state.scraping_entries[pos] = updated
                return updated
        raise ResourceNotFoundError("Scraping entry", entry_id)

    def sync_records(self, records: list[DatasetRecord]) -> list[ScrapingEntry]:
        """Append one fresh `unprocessed` row per record (no dedupe)."""
        return [self.add(build_entry(r)) for r in records]

    def soft_delete(self, entry_id: EntryId) -> ScrapingEntry:
        return self.update(entry_id, is_deleted=True)

    def list_all(self, include_deleted: bool = False) -> list[ScrapingEntry]:
        return [
            e for e in self._state.scraping_entries
            if include_deleted or not e.is_deleted
        ]

    def list_groups(self) -> list[dict]:
        return group_entries(self._state.scraping_entries)
