"""Dataset Tool Schemas — read and transform the uploaded HAR records.

Invariants:
    - Read tools return summaries, schemas or truncated bodies, never whole datasets
    - run_extraction_code operates on the active subset (selected records, else all)

Design Decisions:
    - get_har_structure paginates (limit 20 by default): the model pages through
      large captures instead of receiving them at once
"""

from app.core.tool_schema import ToolDefinition, ToolParameter

GET_HAR_STRUCTURE = ToolDefinition(
    name="get_har_structure",
    description=(
        "Query and filter requests in the HAR file. Returns a summary list "
        "(index, method, url, status, size, mimeType, isGraphQL). Use 'indices' "
        "to fetch specific items, or filters like 'url_contains' to search."
    ),
    parameters=(
        ToolParameter(
            "indices", "array", "Specific entry indices to retrieve.",
            items_type="integer",
        ),
        ToolParameter(
            "method", "string",
            "Filter by HTTP method (e.g. 'POST', 'GET'). Case insensitive.",
        ),
        ToolParameter("url_contains", "string", "Filter URLs containing this string."),
        ToolParameter("status_code", "integer", "Filter by exact status code."),
        ToolParameter("limit", "integer", "Max number of results. Default 20.", default=20),
        ToolParameter("offset", "integer", "Pagination offset. Default 0.", default=0),
        ToolParameter(
            "only_selected", "boolean",
            "If true, only search within user-selected entries.", default=False,
        ),
    ),
)

INSPECT_ENTRY_SCHEMA = ToolDefinition(
    name="inspect_entry_schema",
    description=(
        "Get the JSON structure of the request and response bodies of several "
        "entries. Arrays are shown with their first item only and long strings "
        "are truncated. Use this to understand the data shape before extracting."
    ),
    parameters=(
        ToolParameter(
            "indices", "array", "Entry indices to inspect.",
            required=True, items_type="integer",
        ),
    ),
)

GET_RESPONSE_CONTENT = ToolDefinition(
    name="get_response_content",
    description=(
        "Get the raw text of response bodies for specific entries, as a map of "
        "index -> content. Content is truncated beyond max_length."
    ),
    parameters=(
        ToolParameter(
            "indices", "array", "Entry indices to fetch.",
            required=True, items_type="integer",
        ),
        ToolParameter(
            "max_length", "integer",
            "Maximum characters per entry. Default 500.", default=500,
        ),
    ),
)

RUN_EXTRACTION_CODE = ToolDefinition(
    name="run_extraction_code",
    description=(
        "Execute JavaScript over the HAR entries (selected ones if any are "
        "selected). The code sees an `entries` array of objects with index, id, "
        "method, url, status, size, mimeType, responseBodyText, requestBodyText. "
        "Either `return` an array or push objects onto `results`; `log(...)` "
        "collects debug output. Returned objects are added to the Knowledge "
        "Graph: give them id, type, label and data to control the nodes."
    ),
    parameters=(
        ToolParameter(
            "code", "string",
            "JavaScript body. Example: return entries.filter(e => "
            "e.url.includes('api')).map(e => ({ id: e.id, type: 'Request', "
            "label: e.url, data: JSON.parse(e.responseBodyText) }));",
            required=True,
        ),
    ),
)

TOOLS_DATASET = [
    GET_HAR_STRUCTURE,
    INSPECT_ENTRY_SCHEMA,
    GET_RESPONSE_CONTENT,
    RUN_EXTRACTION_CODE,
]
