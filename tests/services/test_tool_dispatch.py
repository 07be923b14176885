"""Tool Dispatch — tests for explicit tool routing.

Tests cover:
    - Unknown tools return UNKNOWN_TOOL error (no exception)
    - Missing required arguments are rejected before the handler runs
    - Handler crashes become TOOL_EXECUTION_ERROR results
    - Dispatch table and registry agree in both directions
    - ToolCallLog rows are added when a DB session is given
"""

import uuid
from unittest.mock import MagicMock

from app.models.tool_call import ToolCallLog
from app.services.tool_dispatch import ToolDispatch
from app.services.tools_registry import TOOL_NAMES


async def test_dispatch_returns_error_for_unknown_tool(ctx):
    result = await ToolDispatch(ctx).execute("nonexistent_tool", {})
    assert result["status"] == "error"
    assert result["error_code"] == "UNKNOWN_TOOL"
    assert "nonexistent_tool" in result["error"]


async def test_missing_required_argument_is_validation_error(ctx):
    result = await ToolDispatch(ctx).execute("inspect_entry_schema", {})
    assert result["error_code"] == "VALIDATION_ERROR"
    assert "indices" in result["error"]


async def test_non_dict_input_treated_as_empty(ctx):
    result = await ToolDispatch(ctx).execute("db_look_tables", None)
    assert result == {"count": 0, "tables": []}


async def test_handler_crash_becomes_execution_error(ctx, monkeypatch):
    dispatch = ToolDispatch(ctx)

    async def _boom(input_data):
        raise KeyError("surprise")

    monkeypatch.setitem(dispatch._handlers, "db_look_tables", _boom)
    result = await dispatch.execute("db_look_tables", {})
    assert result["error_code"] == "TOOL_EXECUTION_ERROR"


async def test_domain_error_keeps_its_code(ctx):
    result = await ToolDispatch(ctx).execute(
        "db_delete_row", {"row_id": "missing"},
    )
    assert result["error_code"] == "RESOURCE_NOT_FOUND"


async def test_dispatch_covers_every_registered_tool(ctx):
    assert ToolDispatch(ctx).tool_names == TOOL_NAMES


async def test_dispatch_has_all_18_tools(ctx):
    expected = {
        "get_har_structure", "inspect_entry_schema", "get_response_content",
        "run_extraction_code", "db_look_tables", "db_look_request",
        "db_update_row", "update_scraping_entry", "db_delete_row",
        "db_sync_records", "find_similar_parser", "kg_look_entities",
        "kg_look_entity_element", "kg_create_node", "kg_update_node",
        "kg_create_relation", "kg_fetch_nodes", "execute_proxy_request",
    }
    assert ToolDispatch(ctx).tool_names == expected


async def test_tool_call_logged_to_db_session(ctx):
    db = MagicMock()
    project_uuid = uuid.uuid4()
    await ToolDispatch(ctx, db, project_uuid).execute(
        "get_har_structure", {}, tool_call_id="call_1",
    )
    db.add.assert_called_once()
    row = db.add.call_args.args[0]
    assert isinstance(row, ToolCallLog)
    assert row.project_id == project_uuid
    assert row.tool_name == "get_har_structure"
    assert row.tool_call_id == "call_1"
    assert row.error_code is None


async def test_error_code_logged_to_db_session(ctx):
    db = MagicMock()
    await ToolDispatch(ctx, db, uuid.uuid4()).execute("nope", {})
    assert db.add.call_args.args[0].error_code == "UNKNOWN_TOOL"
