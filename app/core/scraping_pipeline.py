"""Scraping Pipeline — Knowledge DB row lifecycle, grouping and parser reuse.

Invariants:
    - All functions are PURE: no IO, no store access, return values or raise HarMindError
    - Status order: unprocessed < sp_filterer < filtered < sp_converter < converted
      < sp_convert < final_response (sp_* are advisory, they gate nothing)
    - A non-empty filterer_json advances a row to at least `filtered`
    - A non-empty converter_code advances a row to at least `converted`
    - An explicit status write may move backwards only with allow_regression=True
    - Deleted rows never appear in groups or parser matches

Design Decisions:
    - Regression is an explicit opt-in rather than forbidden: the agent can
      still correct a row it advanced by mistake, but never silently
"""

from urllib.parse import urlsplit

from app.core.domain_models import DatasetRecord, ScrapingEntry
from app.core.domain_types import ProcessingStatus
from app.core.errors import InvalidTransitionError, ToolValidationError

RESPONSE_PREVIEW_CHARS = 1000


def source_type_key(method: str, url: str) -> str:
    """Grouping key: upper-cased method + URL path, e.g. 'POST:/api/v1/data'."""
    try:
        path = urlsplit(url).path or "/"
    except ValueError as e:
        raise ToolValidationError(f"Invalid URL '{url}': {e}", "url")
    return f"{method.upper()}:{path}"


def build_entry(record: DatasetRecord) -> ScrapingEntry:
    """New `unprocessed` row snapshotting the record's request and response."""
    return ScrapingEntry(
        source_type_key=source_type_key(record.method, record.url),
        url=record.url,
        request={
            "method": record.method,
            "url": record.url,
            "postData": {"text": record.request_body_text}
            if record.request_body_text else None,
        },
        response={
            "status": record.status,
            "content": {
                "size": record.size,
                "mimeType": record.mime_type,
                "text": preview_body(record.response_body_text),
            },
        },
    )


def preview_body(text: str | None) -> str:
    if not text:
        return ""
    if len(text) <= RESPONSE_PREVIEW_CHARS:
        return text
    return text[:RESPONSE_PREVIEW_CHARS] + "... (truncated for preview)"


def coerce_status(value: str | ProcessingStatus) -> ProcessingStatus:
    try:
        return ProcessingStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in ProcessingStatus)
        raise ToolValidationError(
            f"Unknown processing status '{value}'. Valid: {valid}", "status",
        )


def allowed_transitions(current: ProcessingStatus) -> list[str]:
    """Statuses reachable without allow_regression (current included)."""
    return [s.value for s in ProcessingStatus if s.rank >= current.rank]


def plan_update(
    entry: ScrapingEntry,
    *,
    status: str | None = None,
    filterer_json: dict | None = None,
    converter_code: str | None = None,
    final_clean_response: dict | None = None,
    allow_regression: bool = False,
) -> dict:
    """Compute the field changes for an update request. Raises on bad status."""
    current = entry.processing_status
    target = current
    changes: dict = {}

    if filterer_json:
        changes["filterer_json"] = filterer_json
        target = _furthest(target, ProcessingStatus.FILTERED)
    if converter_code:
        changes["converter_code"] = converter_code
        target = _furthest(target, ProcessingStatus.CONVERTED)
    if final_clean_response:
        changes["final_clean_response"] = final_clean_response

    if status:
        requested = coerce_status(status)
        if requested.rank < current.rank and not allow_regression:
            raise InvalidTransitionError(current.value, requested.value)
        target = requested

    if target != current:
        changes["processing_status"] = target
    return changes


def group_entries(entries: list[ScrapingEntry]) -> list[dict]:
    """One summary per source_type_key; final_response rows win the representative slot."""
    groups: dict[str, dict] = {}
    for entry in entries:
        if entry.is_deleted:
            continue
        group = groups.setdefault(entry.source_type_key, {
            "count": 0,
            "status": entry.processing_status.value,
            "primary_filter_json": entry.filterer_json or {},
        })
        group["count"] += 1
        if entry.processing_status == ProcessingStatus.FINAL_RESPONSE:
            group["status"] = ProcessingStatus.FINAL_RESPONSE.value
            group["primary_filter_json"] = entry.filterer_json
    return [{"group_slug": slug, **data} for slug, data in groups.items()]


def find_best_match(
    entries: list[ScrapingEntry], url: str, method: str,
) -> ScrapingEntry | None:
    """First finished row sharing the request's source_type_key."""
    key = source_type_key(method, url)
    return next(
        (e for e in entries
         if not e.is_deleted
         and e.source_type_key == key
         and e.processing_status == ProcessingStatus.FINAL_RESPONSE),
        None,
    )


def _furthest(a: ProcessingStatus, b: ProcessingStatus) -> ProcessingStatus:
    return a if a.rank >= b.rank else b
