"""Knowledge DB Tool Schemas — working set of requests moving through the scraping pipeline.

Invariants:
    - Rows are addressed by their UUID (row_id / id)
    - db_update_row and update_scraping_entry share one implementation
    - Status writes that move a row backwards need allow_regression=true
"""

from app.core.domain_types import LookMode, ProcessingStatus
from app.core.tool_schema import ToolDefinition, ToolParameter

_STATUS_VALUES = tuple(s.value for s in ProcessingStatus)

_UPDATE_FIELDS = (
    ToolParameter(
        "filterer_json", "object", "Schema describing which response fields to keep.",
    ),
    ToolParameter("converter_code", "string", "JS code converting the filtered response."),
    ToolParameter(
        "final_clean_response", "object", "The cleaned response produced by the converter.",
    ),
    ToolParameter(
        "allow_regression", "boolean",
        "Set true to move the row to an earlier status.", default=False,
    ),
)

DB_LOOK_TABLES = ToolDefinition(
    name="db_look_tables",
    description=(
        "List grouping tables (group_slugs = METHOD:/path) of the Knowledge DB "
        "with row count, representative status and primary filter."
    ),
)

DB_LOOK_REQUEST = ToolDefinition(
    name="db_look_request",
    description=(
        "Inspect one Knowledge DB row. 'structure' returns the response schema "
        "(types only), 'sample' returns simplified data (arrays = 1 item), "
        "'content' returns the stored response JSON (use carefully)."
    ),
    parameters=(
        ToolParameter("row_id", "string", "UUID of the scraping entry.", required=True),
        ToolParameter(
            "mode", "string", "One of: structure, sample, content.",
            required=True, enum=tuple(m.value for m in LookMode),
        ),
    ),
)

DB_UPDATE_ROW = ToolDefinition(
    name="db_update_row",
    description=(
        "Update a Knowledge DB row: processing step, converter code or filter "
        "JSON. Saving a filter advances the row to at least 'filtered', saving "
        "converter code to at least 'converted'."
    ),
    parameters=(
        ToolParameter("row_id", "string", "Entry UUID.", required=True),
        ToolParameter(
            "step", "string", "New processing status.", enum=_STATUS_VALUES,
        ),
    ) + _UPDATE_FIELDS,
)

UPDATE_SCRAPING_ENTRY = ToolDefinition(
    name="update_scraping_entry",
    description=(
        "Update a scraping entry. Use this to save the 'filterer_json' or "
        "'converter_code' you generated."
    ),
    parameters=(
        ToolParameter("id", "string", "UUID of the scraping entry.", required=True),
        ToolParameter(
            "status", "string", "New processing status.", enum=_STATUS_VALUES,
        ),
    ) + _UPDATE_FIELDS,
)

DB_DELETE_ROW = ToolDefinition(
    name="db_delete_row",
    description="Soft delete a Knowledge DB row (sets is_deleted=true).",
    parameters=(
        ToolParameter("row_id", "string", "Entry UUID.", required=True),
    ),
)

DB_SYNC_RECORDS = ToolDefinition(
    name="db_sync_records",
    description=(
        "Copy HAR entries into the Knowledge DB as new 'unprocessed' rows. "
        "Without indices, the selected entries are synced."
    ),
    parameters=(
        ToolParameter(
            "indices", "array", "Entry indices to sync.", items_type="integer",
        ),
    ),
)

FIND_SIMILAR_PARSER = ToolDefinition(
    name="find_similar_parser",
    description=(
        "Search the Knowledge DB for a finished row with the same "
        "source_type_key (method + URL path) to reuse its filterer_json and "
        "converter_code."
    ),
    parameters=(
        ToolParameter("url", "string", "Full URL of the request to match.", required=True),
        ToolParameter("method", "string", "HTTP method (GET, POST, ...).", required=True),
    ),
)

TOOLS_KNOWLEDGE_DB = [
    DB_LOOK_TABLES,
    DB_LOOK_REQUEST,
    DB_UPDATE_ROW,
    UPDATE_SCRAPING_ENTRY,
    DB_DELETE_ROW,
    DB_SYNC_RECORDS,
    FIND_SIMILAR_PARSER,
]
