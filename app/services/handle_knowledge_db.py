"""Knowledge DB Handlers — look, update, delete, sync and parser reuse over scraping entries.

Invariants:
    - Status changes go through scraping_pipeline.plan_update (no silent regression)
    - db_update_row and update_scraping_entry differ only in argument names
    - Deleted rows stay readable by id (db_look_request) but leave group listings
"""

import logging

from app.core.domain_models import ScrapingEntry
from app.core.domain_types import LookMode
from app.core.errors import ResourceNotFoundError, ToolValidationError
from app.core.json_summary import (
    describe_schema, parse_json_body, summarize_structure, truncate_content,
)
from app.core.project_context import ProjectContext
from app.core.scraping_pipeline import find_best_match, plan_update
from app.services.handle_dataset import read_indices

logger = logging.getLogger(__name__)

RAW_PREVIEW_CHARS = 200


class KnowledgeDbHandlers:
    """Scraping pipeline tool handlers."""

    def __init__(self, ctx: ProjectContext):
        self.ctx = ctx

    async def db_look_tables(self, input_data: dict) -> dict:
        tables = self.ctx.scraping.list_groups()
        return {"count": len(tables), "tables": tables}

    async def db_look_request(self, input_data: dict) -> dict:
        entry = self._require_entry(input_data.get("row_id"))
        try:
            mode = LookMode(input_data.get("mode"))
        except ValueError:
            raise ToolValidationError(
                "mode must be one of: structure, sample, content", "mode",
            )
        body = self._response_json(entry)
        if mode == LookMode.STRUCTURE:
            return {"id": entry.id, "url": entry.url, "data": describe_schema(body)}
        if mode == LookMode.SAMPLE:
            return {"id": entry.id, "url": entry.url, "data": summarize_structure(body)}
        return {"id": entry.id, "json_structure": body, "full_response": True}

    async def db_update_row(self, input_data: dict) -> dict:
        return self._update(input_data.get("row_id"), input_data.get("step"), input_data)

    async def update_scraping_entry(self, input_data: dict) -> dict:
        return self._update(input_data.get("id"), input_data.get("status"), input_data)

    async def db_delete_row(self, input_data: dict) -> dict:
        entry = self._require_entry(input_data.get("row_id"))
        self.ctx.scraping.soft_delete(entry.id)
        return {"success": True, "row_id": entry.id, "message": "Row marked as deleted."}

    async def db_sync_records(self, input_data: dict) -> dict:
        indices = read_indices(input_data, required=False)
        if indices:
            records = [
                r for r in (self.ctx.state.record_by_index(i) for i in indices)
                if r is not None
            ]
        else:
            records = [r for r in self.ctx.state.records if r.selected]
        if not records:
            raise ToolValidationError(
                "No records to sync: pass indices or select entries first", "indices",
            )
        entries = self.ctx.scraping.sync_records(records)
        return {
            "success": True,
            "count": len(entries),
            "row_ids": [e.id for e in entries],
        }

    async def find_similar_parser(self, input_data: dict) -> dict:
        url = input_data.get("url") or ""
        method = input_data.get("method") or ""
        match = find_best_match(self.ctx.scraping.list_all(), url, method)
        if match is None:
            return {"found": False, "message": "No similar processed entries found."}
        return {
            "found": True,
            "row_id": match.id,
            "source_type_key": match.source_type_key,
            "filterer_json": match.filterer_json,
            "converter_code": match.converter_code,
        }

    def _update(self, entry_id: str | None, status: str | None, input_data: dict) -> dict:
        entry = self._require_entry(entry_id)
        changes = plan_update(
            entry,
            status=status,
            filterer_json=input_data.get("filterer_json"),
            converter_code=input_data.get("converter_code"),
            final_clean_response=input_data.get("final_clean_response"),
            allow_regression=bool(input_data.get("allow_regression")),
        )
        if changes:
            entry = self.ctx.scraping.update(entry.id, **changes)
            logger.info(
                f"Scraping entry {entry.id} updated: {sorted(changes)}",
                extra={"project_id": self.ctx.project_id},
            )
        return {
            "success": True,
            "row_id": entry.id,
            "processing_status": entry.processing_status.value,
            "updated_fields": sorted(changes),
        }

    def _require_entry(self, entry_id: str | None) -> ScrapingEntry:
        if not entry_id:
            raise ToolValidationError("row id is required", "row_id")
        entry = self.ctx.scraping.get(entry_id)
        if entry is None:
            raise ResourceNotFoundError("Scraping entry", entry_id)
        return entry

    @staticmethod
    def _response_json(entry: ScrapingEntry):
        content = entry.response.get("content") or {}
        raw_text = content.get("text") or ""
        body = parse_json_body(raw_text)
        if body is None:
            return {
                "error": "Could not parse JSON",
                "raw": truncate_content(raw_text, RAW_PREVIEW_CHARS),
            }
        return body
