"""Knowledge Graph Route — current graph state and manual entity ingest.

Invariants:
    - Returns the project's in-memory graph (restored from snapshot when cold)
    - Scoped by project_id — never returns cross-project data
    - Manual ingest runs the same auto-linker as extraction output
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auto_link import link_entities
from app.core.graph_store import InMemoryGraphStore
from app.infrastructure.database import get_db
from app.schemas.graph import EntitiesIngest, GraphData, MergeSummary
from app.api.routes.projects import (
    get_or_restore_state, get_project_or_404, project_lock, save_snapshot,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["knowledge-graph"])


@router.get("/{project_id}/graph", response_model=GraphData)
async def get_knowledge_graph(
    project_id: UUID, db: AsyncSession = Depends(get_db),
):
    """Get current Knowledge Graph for rendering."""
    project = await get_project_or_404(project_id, db)
    state = get_or_restore_state(project)
    return GraphData(nodes=state.nodes, links=state.links)


@router.post("/{project_id}/graph/entities", response_model=MergeSummary)
async def ingest_entities(
    project_id: UUID, body: EntitiesIngest, db: AsyncSession = Depends(get_db),
):
    """Merge entity dicts into the graph and infer reference links."""
    project = await get_project_or_404(project_id, db)
    async with project_lock(project_id):
        state = get_or_restore_state(project)
        merge = link_entities(InMemoryGraphStore(state), body.entities)
        if merge.nodes_added or merge.links_added:
            await save_snapshot(project, state, db)
    logger.info(
        "Entities ingested (project=%s, nodes=%d, links=%d, skipped=%d)",
        project_id, merge.nodes_added, merge.links_added, merge.skipped,
    )
    return MergeSummary(**merge.to_dict())
