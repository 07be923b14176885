"""Dataset Handlers — get_har_structure, inspect_entry_schema, get_response_content, run_extraction_code.

Invariants:
    - Handlers never return a whole body: summaries, schemas or truncated text only
    - Missing indices produce per-index errors, not a failed call
    - run_extraction_code sees the active subset (selected records, else all)
"""

import logging

from app.core.domain_models import DatasetRecord
from app.core.errors import ToolExecutionError, ToolValidationError
from app.core.json_summary import parse_json_body, summarize_structure, truncate_content
from app.core.project_context import ProjectContext

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
DEFAULT_CONTENT_LENGTH = 500
UNPARSEABLE_BODY = "Could not parse JSON body or body is empty/text."


def read_indices(input_data: dict, required: bool = True) -> list[int]:
    """Coerce the 'indices' argument to ints (models often send floats)."""
    raw = input_data.get("indices")
    if raw is None and not required:
        return []
    if not isinstance(raw, list):
        raise ToolValidationError("'indices' must be an array of integers", "indices")
    try:
        return [int(i) for i in raw]
    except (TypeError, ValueError):
        raise ToolValidationError("'indices' must be an array of integers", "indices")


def _is_graphql(record: DatasetRecord) -> bool:
    return "graphql" in record.url or "query" in (record.request_body_text or "")


class DatasetHandlers:
    """Read-only views over the HAR records plus the script sandbox."""

    def __init__(self, ctx: ProjectContext):
        self.ctx = ctx

    async def get_har_structure(self, input_data: dict) -> dict:
        candidates = self.ctx.state.records
        if input_data.get("only_selected"):
            candidates = [r for r in candidates if r.selected]

        indices = read_indices(input_data, required=False)
        if indices:
            wanted = set(indices)
            candidates = [r for r in candidates if r.index in wanted]
        else:
            if input_data.get("method"):
                method = str(input_data["method"]).upper()
                candidates = [r for r in candidates if r.method.upper() == method]
            if input_data.get("url_contains"):
                needle = str(input_data["url_contains"]).lower()
                candidates = [r for r in candidates if needle in r.url.lower()]
            if input_data.get("status_code") is not None:
                code = int(input_data["status_code"])
                candidates = [r for r in candidates if r.status == code]

        limit = int(input_data.get("limit") or DEFAULT_PAGE_SIZE)
        offset = int(input_data.get("offset") or 0)
        page = candidates[offset:offset + limit]
        return {
            "total": len(candidates),
            "offset": offset,
            "count": len(page),
            "entries": [
                {
                    "index": r.index,
                    "id": r.id,
                    "method": r.method,
                    "url": r.url,
                    "status": r.status,
                    "size": r.size,
                    "mimeType": r.mime_type,
                    "isGraphQL": _is_graphql(r),
                }
                for r in page
            ],
        }

    async def inspect_entry_schema(self, input_data: dict) -> dict:
        results = []
        for idx in read_indices(input_data):
            record = self.ctx.state.record_by_index(idx)
            if record is None:
                results.append({"index": idx, "error": "Entry not found"})
                continue
            results.append({
                "index": idx,
                "url": record.url,
                "method": record.method,
                "status": record.status,
                "requestBodyStructure": self._request_structure(record),
                "responseBodyStructure": self._response_structure(record),
            })
        return {"entries": results}

    async def get_response_content(self, input_data: dict) -> dict:
        max_length = int(input_data.get("max_length") or DEFAULT_CONTENT_LENGTH)
        contents: dict[str, object] = {}
        for idx in read_indices(input_data):
            record = self.ctx.state.record_by_index(idx)
            if record is None:
                contents[str(idx)] = {"error": "Entry not found"}
                continue
            contents[str(idx)] = truncate_content(record.response_body_text, max_length)
        return {"contents": contents}

    async def run_extraction_code(self, input_data: dict) -> dict:
        code = input_data.get("code")
        if not isinstance(code, str) or not code.strip():
            raise ToolValidationError("'code' must be a non-empty string", "code")
        if self.ctx.sandbox is None:
            raise ToolExecutionError(
                "run_extraction_code", "Script sandbox is not available.",
            )
        records = [r.to_script_dict() for r in self.ctx.active_records()]
        result = self.ctx.sandbox.run(records, code)
        logger.info(
            f"Extraction script over {len(records)} records: success={result.success}",
            extra={"project_id": self.ctx.project_id, "tool_name": "run_extraction_code"},
        )
        return result.to_dict()

    @staticmethod
    def _request_structure(record: DatasetRecord):
        if not record.request_body_text:
            return None
        parsed = parse_json_body(record.request_body_text)
        return summarize_structure(
            parsed if parsed is not None else record.request_body_text,
        )

    @staticmethod
    def _response_structure(record: DatasetRecord):
        if not record.response_body_text:
            return None
        parsed = parse_json_body(record.response_body_text)
        if parsed is None:
            return UNPARSEABLE_BODY
        return summarize_structure(parsed)
