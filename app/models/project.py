"""Project ORM — persists one HAR-analysis workspace.

Invariants:
    - id is UUID primary key
    - state_snapshot holds the serialized ProjectState (records, graph, Knowledge DB, chat)
    - updated_at moves on every snapshot write

Design Decisions:
    - JSON column for the whole working set: the agent mutates it as one unit
      per turn, nothing queries inside it
    - Generic Uuid type: same model runs on Postgres and SQLite
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Project(Base):
    """Project aggregate root: owns its snapshot and tool call log."""
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    backend_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    state_snapshot: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=_utc_now, onupdate=_utc_now,
    )

    tool_calls: Mapped[list["ToolCallLog"]] = relationship(
        "ToolCallLog", back_populates="project",
        cascade="all, delete-orphan", lazy="raise", passive_deletes=True,
    )
