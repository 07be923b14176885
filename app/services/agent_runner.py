"""Agent Runner — bounded tool-calling loop between the model and the project tools.

Invariants:
    - At most max_turns tool round-trips per user message (silent cutoff, logged)
    - Tool calls within a turn run strictly in order; results go back in one message
    - Each call emits a pending tool_call event, then a success/error snapshot
    - Successful extraction output is merged into the knowledge graph before the
      result is returned to the model
    - run() never raises on model or tool failure: an error event and the
      fallback text end the stream
    - Chat log and text history are written back to the ProjectState at the end

Design Decisions:
    - Non-streaming create_message: the turn result is a final text, tool
      progress is reported through tool_call events
    - Persisted model history is text-only (user message, final answer): a cut-off
      turn may end on unanswered tool_use blocks, which the API would reject on replay
"""

import asyncio
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auto_link import link_entities
from app.core.domain_models import ChatMessage, ToolCall, now_ms
from app.core.domain_types import (
    MAX_AGENT_TURNS, NO_TEXT_FALLBACK, MessageRole, ToolCallId, ToolCallStatus,
)
from app.core.errors import ErrorContext, HarMindError
from app.core.project_context import ProjectContext
from app.services.agent_runner_helpers import (
    done_event, final_text, has_tool_use, result_status, serialize_content,
    tool_call_event, tool_result_block, tool_use_blocks, unexpected_error_event,
)
from app.services.system_prompt import build_system_prompt
from app.services.tool_dispatch import ToolDispatch
from app.services.tools_registry import EXTRACTION_TOOLS, anthropic_tools

logger = logging.getLogger(__name__)


class AgentRunner:
    """Runs one user message through the model/tool loop, yielding stream events."""

    def __init__(
        self,
        anthropic_client,
        model: str,
        max_turns: int = MAX_AGENT_TURNS,
        max_tokens: int = 8192,
    ):
        self.client = anthropic_client
        self.model = model
        self.max_turns = max_turns
        self.max_tokens = max_tokens

    async def run(
        self,
        ctx: ProjectContext,
        user_message: str,
        db: AsyncSession | None = None,
        project_uuid: uuid.UUID | None = None,
    ):
        """Async generator of tool_call / error / done events."""
        dispatch = ToolDispatch(ctx, db, project_uuid)
        err_ctx = ErrorContext(project_id=ctx.project_id, turn=0)
        ctx.state.chat_history.append(
            ChatMessage(role=MessageRole.USER, text=user_message),
        )
        reply = ChatMessage(role=MessageRole.MODEL)
        messages = list(ctx.state.message_history)
        messages.append({"role": "user", "content": user_message})

        used_ids = {c.id for m in ctx.state.chat_history for c in m.tool_calls}
        turns = 0
        error = False
        text = NO_TEXT_FALLBACK
        try:
            response = await self._call_model(messages, err_ctx)
            while has_tool_use(response) and turns < self.max_turns:
                turns += 1
                messages.append({"role": "assistant", "content": serialize_content(response)})
                results = []
                for block in tool_use_blocks(response):
                    call = ToolCall(
                        id=self._call_id(block, used_ids),
                        name=block.name,
                        args=dict(block.input or {}),
                    )
                    yield tool_call_event(call)
                    finished = await self._execute(ctx, dispatch, call)
                    reply.tool_calls.append(finished)
                    yield tool_call_event(finished)
                    results.append(tool_result_block(block.id, finished))
                messages.append({"role": "user", "content": results})
                err_ctx.turn = turns
                response = await self._call_model(messages, err_ctx)

            if has_tool_use(response):
                logger.warning(
                    f"Tool loop stopped after {turns} turns with calls pending",
                    extra={"project_id": ctx.project_id, "turn": turns},
                )
            text = final_text(response) or NO_TEXT_FALLBACK

        except asyncio.CancelledError:
            logger.info(
                "Agent run cancelled (client disconnect)",
                extra={"project_id": ctx.project_id},
            )
            raise
        except HarMindError as e:
            logger.error(
                f"Agent run failed: {e.message}",
                extra={"project_id": ctx.project_id, "error_code": e.code, "turn": turns},
            )
            error = True
            yield e.to_event()
        except Exception as e:
            logger.error(
                f"Unexpected error in agent runner: {e}",
                extra={"project_id": ctx.project_id}, exc_info=True,
            )
            error = True
            yield unexpected_error_event()

        reply.text = text
        ctx.state.chat_history.append(reply)
        ctx.state.message_history.extend([
            {"role": "user", "content": user_message},
            {"role": "assistant", "content": text},
        ])
        yield done_event(text, turns, error=error)

    async def respond(
        self,
        ctx: ProjectContext,
        user_message: str,
        db: AsyncSession | None = None,
        project_uuid: uuid.UUID | None = None,
    ) -> str:
        """Run to completion and return the final text."""
        text = NO_TEXT_FALLBACK
        async for event in self.run(ctx, user_message, db, project_uuid):
            if event["type"] == "done":
                text = event["data"]["text"]
        return text

    async def _call_model(self, messages: list, err_ctx: ErrorContext):
        return await self.client.create_message(
            model=self.model,
            max_tokens=self.max_tokens,
            system=build_system_prompt(),
            tools=anthropic_tools(),
            messages=messages,
            context=err_ctx,
        )

    async def _execute(
        self, ctx: ProjectContext, dispatch: ToolDispatch, call: ToolCall,
    ) -> ToolCall:
        result = await dispatch.execute(call.name, call.args, call.id)
        status = result_status(result)
        if call.name in EXTRACTION_TOOLS and status == ToolCallStatus.SUCCESS:
            merge = link_entities(ctx.graph, result.get("data") or [])
            result = {**result, "graph": merge.to_dict()}
            logger.info(
                f"Extraction merged: {merge.nodes_added} nodes, {merge.links_added} links",
                extra={"project_id": ctx.project_id, "tool_call_id": call.id},
            )
        return call.model_copy(update={
            "status": status, "result": result, "timestamp": now_ms(),
        })

    @staticmethod
    def _call_id(block, used_ids: set[str]) -> ToolCallId:
        """Model-provided id, or a generated one when missing or already used."""
        call_id = getattr(block, "id", None)
        if not call_id or call_id in used_ids:
            call_id = f"call_{uuid.uuid4().hex}"
        used_ids.add(call_id)
        return ToolCallId(call_id)
