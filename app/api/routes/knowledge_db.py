"""Knowledge DB Routes — scraping entry sync, listing, updates and soft delete.

Invariants:
    - Same pipeline rules as the agent tools (scraping_pipeline.plan_update)
    - Deleted rows stay retrievable by id; listings hide them unless asked
    - Mutations hold the project lock and persist the snapshot
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_models import ScrapingEntry
from app.core.errors import ResourceNotFoundError, ToolValidationError
from app.core.project_context import ProjectContext
from app.core.scraping_pipeline import plan_update
from app.infrastructure.database import get_db
from app.schemas.knowledge_db import EntryUpdate, SyncRequest
from app.api.routes.projects import (
    get_or_restore_state, get_project_or_404, project_lock, save_snapshot,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["knowledge-db"])


def _entry_or_raise(ctx: ProjectContext, entry_id: str) -> ScrapingEntry:
    entry = ctx.scraping.get(entry_id)
    if entry is None:
        raise ResourceNotFoundError("Scraping entry", entry_id)
    return entry


@router.post(
    "/{project_id}/knowledge-db/sync", status_code=status.HTTP_201_CREATED,
)
async def sync_records(
    project_id: UUID, body: SyncRequest, db: AsyncSession = Depends(get_db),
):
    """Pull records into the Knowledge DB as fresh `unprocessed` rows."""
    project = await get_project_or_404(project_id, db)
    async with project_lock(project_id):
        ctx = ProjectContext(str(project_id), get_or_restore_state(project))
        if body.indices is None:
            records = [r for r in ctx.state.records if r.selected]
        else:
            wanted = set(body.indices)
            records = [r for r in ctx.state.records if r.index in wanted]
        if not records:
            raise ToolValidationError("No records selected to sync", "indices")
        rows = ctx.scraping.sync_records(records)
        await save_snapshot(project, ctx.state, db)
    logger.info("Synced %d records (project=%s)", len(rows), project_id)
    return {"count": len(rows), "row_ids": [r.id for r in rows]}


@router.get("/{project_id}/knowledge-db")
async def list_entries(
    project_id: UUID,
    view: str = Query("groups", pattern="^(groups|rows)$"),
    include_deleted: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """Grouped summary (default) or the individual rows."""
    project = await get_project_or_404(project_id, db)
    ctx = ProjectContext(str(project_id), get_or_restore_state(project))
    if view == "groups":
        return {"groups": ctx.scraping.list_groups()}
    return {
        "rows": [
            e.model_dump(mode="json")
            for e in ctx.scraping.list_all(include_deleted=include_deleted)
        ],
    }


@router.get("/{project_id}/knowledge-db/{entry_id}")
async def get_entry(
    project_id: UUID, entry_id: str, db: AsyncSession = Depends(get_db),
):
    project = await get_project_or_404(project_id, db)
    ctx = ProjectContext(str(project_id), get_or_restore_state(project))
    return _entry_or_raise(ctx, entry_id).model_dump(mode="json")


@router.patch("/{project_id}/knowledge-db/{entry_id}")
async def update_entry(
    project_id: UUID,
    entry_id: str,
    body: EntryUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Manual pipeline edit. Regressions need allow_regression=true (else 409)."""
    project = await get_project_or_404(project_id, db)
    async with project_lock(project_id):
        ctx = ProjectContext(str(project_id), get_or_restore_state(project))
        entry = _entry_or_raise(ctx, entry_id)
        changes = plan_update(
            entry,
            status=body.status.value if body.status else None,
            filterer_json=body.filterer_json,
            converter_code=body.converter_code,
            final_clean_response=body.final_clean_response,
            allow_regression=body.allow_regression,
        )
        if body.notes is not None:
            changes["notes"] = body.notes
        if changes:
            entry = ctx.scraping.update(entry_id, **changes)
            await save_snapshot(project, ctx.state, db)
    return entry.model_dump(mode="json")


@router.delete("/{project_id}/knowledge-db/{entry_id}")
async def delete_entry(
    project_id: UUID, entry_id: str, db: AsyncSession = Depends(get_db),
):
    """Soft delete: the row leaves listings but keeps its data."""
    project = await get_project_or_404(project_id, db)
    async with project_lock(project_id):
        ctx = ProjectContext(str(project_id), get_or_restore_state(project))
        entry = ctx.scraping.soft_delete(entry_id)
        await save_snapshot(project, ctx.state, db)
    return {"success": True, "row_id": entry.id}
