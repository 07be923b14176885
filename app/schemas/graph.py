"""Graph Schemas — Pydantic models for Knowledge Graph API requests and responses.

Invariants:
    - GraphData mirrors the in-memory graph: nodes keyed by id, links as directed triples
    - EntitiesIngest items go through the same auto-linker as extraction output

Design Decisions:
    - Separate from project schemas: graph data is consumed by the graph view,
      project data by the REST API
"""

from typing import Any

from pydantic import BaseModel, Field

from app.core.domain_models import ExtractedEntity, KnowledgeLink


class GraphData(BaseModel):
    nodes: list[ExtractedEntity] = Field(default_factory=list)
    links: list[KnowledgeLink] = Field(default_factory=list)


class EntitiesIngest(BaseModel):
    """Loose entity dicts (id/type/label/data or flat fields) to merge."""
    entities: list[dict[str, Any]] = Field(min_length=1, max_length=5000)


class MergeSummary(BaseModel):
    nodes_added: int
    links_added: int
    skipped: int
