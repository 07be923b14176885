"""Project Lifecycle — CRUD, dataset upload, selection, backup, and in-memory ProjectState management.

Invariants:
    - ProjectState is per-project, in-memory (module-level dict), restored from
      Project.state_snapshot on first access after a restart
    - Every mutating route holds the project lock and writes the snapshot before returning
    - Backup import validates the whole document before anything is replaced

Design Decisions:
    - _project_states as module-level dict: single-process uvicorn, the snapshot
      column is the durable copy
    - get_project_or_404 / get_or_restore_state / project_lock exported for the
      knowledge DB, graph and chat routes
"""

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ResourceNotFoundError
from app.core.project_backup import build_backup, restore_backup
from app.core.project_state import (
    ProjectState, project_state_from_snapshot, project_state_to_snapshot,
)
from app.infrastructure.database import get_db
from app.models.project import Project
from app.schemas.project import (
    ProjectCreate, ProjectResponse, ProjectUpdate, RecordsUpload, SelectionUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/projects", tags=["projects"])

_project_states: dict[UUID, ProjectState] = {}
_project_locks: dict[UUID, asyncio.Lock] = {}


def project_lock(project_id: UUID) -> asyncio.Lock:
    """Single-writer lock for one project's stores."""
    return _project_locks.setdefault(project_id, asyncio.Lock())


async def get_project_or_404(project_id: UUID, db: AsyncSession) -> Project:
    """Get project or raise 404."""
    result = await db.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if not project:
        raise HTTPException(
            status.HTTP_404_NOT_FOUND,
            detail=ResourceNotFoundError("Project", str(project_id)).to_response(),
        )
    return project


def get_or_restore_state(project: Project) -> ProjectState:
    """Return in-memory ProjectState or restore it from the DB snapshot."""
    state = _project_states.get(project.id)
    if state is None:
        state = project_state_from_snapshot(project.state_snapshot)
        _project_states[project.id] = state
        if project.state_snapshot:
            logger.info("Restored ProjectState from DB snapshot (project=%s)", project.id)
    return state


async def save_snapshot(
    project: Project, state: ProjectState, db: AsyncSession,
) -> None:
    project.state_snapshot = project_state_to_snapshot(state)
    db.add(project)
    await db.commit()
    await db.refresh(project)


def to_response(project: Project, state: ProjectState) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        name=project.name,
        backend_url=project.backend_url,
        record_count=len(state.records),
        node_count=len(state.nodes),
        link_count=len(state.links),
        entry_count=len([e for e in state.scraping_entries if not e.is_deleted]),
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(body: ProjectCreate, db: AsyncSession = Depends(get_db)):
    """Create an empty project."""
    project = Project(name=body.name, backend_url=body.backend_url, state_snapshot={})
    db.add(project)
    await db.commit()
    await db.refresh(project)
    state = ProjectState()
    _project_states[project.id] = state
    logger.info("Project created (project=%s)", project.id)
    return to_response(project, state)


@router.get("")
async def list_projects(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List projects with pagination, newest first."""
    result = await db.execute(
        select(Project).order_by(Project.created_at.desc())
        .limit(limit).offset(offset),
    )
    return {
        "projects": [
            to_response(p, get_or_restore_state(p)).model_dump(mode="json")
            for p in result.scalars().all()
        ],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: UUID, db: AsyncSession = Depends(get_db)):
    project = await get_project_or_404(project_id, db)
    return to_response(project, get_or_restore_state(project))


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID, body: ProjectUpdate, db: AsyncSession = Depends(get_db),
):
    """Rename a project or change its proxy backend."""
    project = await get_project_or_404(project_id, db)
    changes = body.model_dump(exclude_unset=True)
    for key, value in changes.items():
        if key == "name" and value is None:
            continue
        setattr(project, key, value)
    await db.commit()
    await db.refresh(project)
    return to_response(project, get_or_restore_state(project))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: UUID, db: AsyncSession = Depends(get_db)):
    """Delete a project, its tool call log and its in-memory state."""
    project = await get_project_or_404(project_id, db)
    async with project_lock(project_id):
        await db.delete(project)
        await db.commit()
        _project_states.pop(project_id, None)
    _project_locks.pop(project_id, None)
    logger.info("Project deleted (project=%s)", project_id)


# -- Dataset records -----------------------------------------------------------

@router.post("/{project_id}/records")
async def upload_records(
    project_id: UUID, body: RecordsUpload, db: AsyncSession = Depends(get_db),
):
    """Load flattened HAR records. Replacing also clears the selection."""
    project = await get_project_or_404(project_id, db)
    async with project_lock(project_id):
        state = get_or_restore_state(project)
        if body.replace:
            state.records = list(body.records)
        else:
            taken = {r.index for r in state.records}
            clashes = sorted(r.index for r in body.records if r.index in taken)
            if clashes:
                raise HTTPException(
                    status.HTTP_409_CONFLICT,
                    detail=f"Record indices already loaded: {clashes[:10]}",
                )
            state.records.extend(body.records)
        await save_snapshot(project, state, db)
    logger.info(
        "Records loaded (project=%s, count=%d, replace=%s)",
        project_id, len(body.records), body.replace,
    )
    return {"count": len(state.records), "selected": len(
        [r for r in state.records if r.selected],
    )}


@router.get("/{project_id}/records")
async def list_records(
    project_id: UUID,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Record metadata without bodies."""
    project = await get_project_or_404(project_id, db)
    state = get_or_restore_state(project)
    page = state.records[offset:offset + limit]
    return {
        "total": len(state.records),
        "records": [
            r.model_dump(
                mode="json", by_alias=True,
                exclude={"response_body_text", "request_body_text"},
            )
            for r in page
        ],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.put("/{project_id}/selection")
async def update_selection(
    project_id: UUID, body: SelectionUpdate, db: AsyncSession = Depends(get_db),
):
    """Select or deselect records; tools default to the selection when one exists."""
    project = await get_project_or_404(project_id, db)
    async with project_lock(project_id):
        state = get_or_restore_state(project)
        known = {r.index for r in state.records}
        missing = sorted(set(body.indices) - known)
        if missing:
            raise HTTPException(
                status.HTTP_404_NOT_FOUND,
                detail=ResourceNotFoundError(
                    "Record", ",".join(str(i) for i in missing[:10]),
                ).to_response(),
            )
        if body.clear_others:
            state.clear_selection()
        changed = state.set_selection(body.indices, body.selected)
        await save_snapshot(project, state, db)
    return {
        "changed": changed,
        "selected": [r.index for r in state.records if r.selected],
    }


# -- Chat log ------------------------------------------------------------------

@router.get("/{project_id}/chat")
async def get_chat_history(project_id: UUID, db: AsyncSession = Depends(get_db)):
    project = await get_project_or_404(project_id, db)
    state = get_or_restore_state(project)
    return {
        "messages": [
            m.model_dump(mode="json", by_alias=True) for m in state.chat_history
        ],
    }


# -- Backup --------------------------------------------------------------------

@router.get("/{project_id}/backup")
async def export_backup(project_id: UUID, db: AsyncSession = Depends(get_db)):
    """Full project backup (records, graph, chat log, Knowledge DB)."""
    project = await get_project_or_404(project_id, db)
    return build_backup(get_or_restore_state(project), project.name)


@router.post("/{project_id}/backup", response_model=ProjectResponse)
async def import_backup(
    project_id: UUID, body: dict, db: AsyncSession = Depends(get_db),
):
    """Replace the project's working set with a backup. All-or-nothing."""
    project = await get_project_or_404(project_id, db)
    restored = restore_backup(body)
    async with project_lock(project_id):
        _project_states[project_id] = restored
        await save_snapshot(project, restored, db)
    logger.info(
        "Backup restored (project=%s, records=%d, nodes=%d)",
        project_id, len(restored.records), len(restored.nodes),
    )
    return to_response(project, restored)
