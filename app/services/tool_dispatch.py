"""Tool Dispatch — explicit routing from tool_name to handler function.

Invariants:
    - Every tool->handler mapping is visible: no getattr magic, no auto-discovery
    - Unknown tools return an UNKNOWN_TOOL error result (never raises)
    - Missing required arguments return a VALIDATION_ERROR result before the handler runs
    - Handler exceptions become {"status": "error", "error_code", "error"} results
    - Every call is logged; with a DB session it is also added to the ToolCallLog table

Design Decisions:
    - Explicit dict over getattr: every mapping visible in one place
    - Split handlers by tool group: dataset, Knowledge DB, graph, proxy
    - ToolCallLog rows are added without flush: committed with the project snapshot
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ErrorContext, HarMindError, ToolExecutionError, ToolNotFoundError,
    ToolValidationError,
)
from app.core.project_context import ProjectContext
from app.core.tool_schema import missing_required
from app.models.tool_call import ToolCallLog
from app.services.handle_dataset import DatasetHandlers
from app.services.handle_knowledge_db import KnowledgeDbHandlers
from app.services.handle_knowledge_graph import KnowledgeGraphHandlers
from app.services.handle_proxy import ProxyHandlers
from app.services.tools_registry import get_tool

logger = logging.getLogger(__name__)


class ToolDispatch:
    """Routes tool_name -> handler. Explicit registration, no auto-discovery."""

    def __init__(
        self, ctx: ProjectContext,
        db: AsyncSession | None = None,
        project_uuid: uuid.UUID | None = None,
    ):
        self._ctx = ctx
        self._db = db
        self._project_uuid = project_uuid
        dataset = DatasetHandlers(ctx)
        knowledge_db = KnowledgeDbHandlers(ctx)
        graph = KnowledgeGraphHandlers(ctx)
        proxy = ProxyHandlers(ctx)

        # Adding a tool requires editing this dict
        self._handlers = {
            # Dataset (4 tools)
            "get_har_structure": dataset.get_har_structure,
            "inspect_entry_schema": dataset.inspect_entry_schema,
            "get_response_content": dataset.get_response_content,
            "run_extraction_code": dataset.run_extraction_code,

            # Knowledge DB (7 tools)
            "db_look_tables": knowledge_db.db_look_tables,
            "db_look_request": knowledge_db.db_look_request,
            "db_update_row": knowledge_db.db_update_row,
            "update_scraping_entry": knowledge_db.update_scraping_entry,
            "db_delete_row": knowledge_db.db_delete_row,
            "db_sync_records": knowledge_db.db_sync_records,
            "find_similar_parser": knowledge_db.find_similar_parser,

            # Knowledge graph (6 tools)
            "kg_look_entities": graph.kg_look_entities,
            "kg_look_entity_element": graph.kg_look_entity_element,
            "kg_create_node": graph.kg_create_node,
            "kg_update_node": graph.kg_update_node,
            "kg_create_relation": graph.kg_create_relation,
            "kg_fetch_nodes": graph.kg_fetch_nodes,

            # Proxy (1 tool)
            "execute_proxy_request": proxy.execute_proxy_request,
        }

    @property
    def tool_names(self) -> frozenset[str]:
        return frozenset(self._handlers)

    async def execute(
        self, tool_name: str, input_data: dict | None,
        tool_call_id: str | None = None,
    ) -> dict:
        """Route tool_name to handler. Returns a result dict, never raises."""
        input_data = input_data if isinstance(input_data, dict) else {}
        context = ErrorContext(project_id=self._ctx.project_id, tool_name=tool_name)
        handler = self._handlers.get(tool_name)
        if handler is None:
            result = ToolNotFoundError(tool_name, context).to_tool_result()
            self._log_tool_call(tool_name, tool_call_id, input_data, result)
            return result

        try:
            definition = get_tool(tool_name)
            missing = missing_required(definition, input_data) if definition else []
            if missing:
                raise ToolValidationError(
                    f"Missing required parameter(s): {', '.join(missing)}",
                    missing[0], context,
                )
            result = await handler(input_data)
        except HarMindError as e:
            result = e.to_tool_result()
        except Exception as e:
            logger.error(
                f"Tool '{tool_name}' crashed: {e}",
                exc_info=True,
                extra={"project_id": self._ctx.project_id, "tool_name": tool_name},
            )
            result = ToolExecutionError(tool_name, str(e), context).to_tool_result()

        self._log_tool_call(tool_name, tool_call_id, input_data, result)
        return result

    def _log_tool_call(
        self, tool_name: str, tool_call_id: str | None,
        input_data: dict, result: dict,
    ) -> None:
        is_error = result.get("status") == "error"
        logger.info(
            f"Tool call {tool_name}: {'error' if is_error else 'ok'}",
            extra={
                "project_id": self._ctx.project_id,
                "tool_name": tool_name,
                "tool_call_id": tool_call_id,
                "error_code": result.get("error_code") if is_error else None,
            },
        )
        if self._db is None or self._project_uuid is None:
            return
        self._db.add(ToolCallLog(
            project_id=self._project_uuid,
            tool_call_id=tool_call_id,
            tool_name=tool_name[:50],
            tool_input=input_data,
            tool_output=None if is_error else result,
            error_code=result.get("error_code") if is_error else None,
        ))
