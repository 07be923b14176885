"""Chat Stream — SSE endpoint running one user message through the agent.

Invariants:
    - The project lock is held for the whole turn: one writer per project
    - Every event from AgentRunner.run is forwarded as one SSE data line
    - The snapshot is written once the runner finishes (chat log, graph, Knowledge DB)

Design Decisions:
    - StreamingResponse for SSE: event_generator yields formatted SSE lines
    - A client disconnect cancels the generator; the partial turn is not saved
"""

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DatabaseError
from app.infrastructure.database import get_db
from app.schemas.project import ChatRequest
from app.api.routes.projects import (
    get_or_restore_state, get_project_or_404, project_lock, save_snapshot,
)
from app.api.routes.chat_stream_helpers import (
    SSE_HEADERS, build_project_context, create_runner, sse_line,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["chat"])


@router.post("/{project_id}/chat")
async def chat(
    project_id: UUID, body: ChatRequest, db: AsyncSession = Depends(get_db),
):
    """Send a message; streams tool_call, error and done events."""
    project = await get_project_or_404(project_id, db)
    runner = create_runner()

    async def event_generator():
        try:
            async with project_lock(project_id):
                state = get_or_restore_state(project)
                ctx = build_project_context(project, state)
                async for event in runner.run(ctx, body.message, db, project.id):
                    yield sse_line(event)
                try:
                    await save_snapshot(project, state, db)
                except SQLAlchemyError as exc:
                    await db.rollback()
                    logger.error(
                        "Failed to save project snapshot: %s", exc,
                        extra={"project_id": str(project_id)},
                    )
                    yield sse_line(DatabaseError(str(exc), "commit").to_event())
        except asyncio.CancelledError:
            logger.info("Client disconnected from chat stream (project=%s)", project_id)
            return

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
