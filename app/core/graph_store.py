"""Graph Store — GraphStore implementation over a ProjectState's node/link lists."""

import json
from typing import Any

from app.core.domain_models import ExtractedEntity, KnowledgeLink
from app.core.domain_types import NodeId
from app.core.errors import ResourceNotFoundError
from app.core.project_state import ProjectState


class InMemoryGraphStore:
    """Nodes are unique by id; links are append-only."""

    def __init__(self, state: ProjectState):
        self._state = state

    def get_nodes(self) -> list[ExtractedEntity]:
        return list(self._state.nodes)

    def get_links(self) -> list[KnowledgeLink]:
        return list(self._state.links)

    def get_node(self, node_id: NodeId) -> ExtractedEntity | None:
        return next((n for n in self._state.nodes if n.id == node_id), None)

    def upsert_node(self, entity: ExtractedEntity) -> None:
        for pos, node in enumerate(self._state.nodes):
            if node.id == entity.id:
                self._state.nodes[pos] = entity
                return
        self._state.nodes.append(entity)

    def append_link(self, link: KnowledgeLink) -> None:
        self._state.links.append(link)

    def update_node(
        self,
        node_id: NodeId,
        label: str | None = None,
        type: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> ExtractedEntity:
        """Overwrite label/type and merge data keys into an existing node."""
        node = self.get_node(node_id)
        if node is None:
            raise ResourceNotFoundError("Node", node_id)
        updated = node.model_copy(update={
            "label": label if label is not None else node.label,
            "type": type if type is not None else node.type,
            "data": {**node.data, **(data or {})},
        })
        self.upsert_node(updated)
        return updated

    def search(self, query: str, limit: int = 20) -> list[ExtractedEntity]:
        """Case-insensitive match on label, type, or serialized data."""
        needle = query.lower()
        hits = [
            n for n in self._state.nodes
            if needle in n.label.lower()
            or needle in n.type.lower()
            or needle in json.dumps(n.data, default=str).lower()
        ]
        return hits[:limit]

    def links_for(self, node_id: NodeId) -> list[KnowledgeLink]:
        return [
            link for link in self._state.links
            if node_id in (link.source, link.target)
        ]
