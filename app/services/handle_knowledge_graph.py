"""Knowledge Graph Handlers — list, inspect, create, update, relate and query nodes.

Invariants:
    - Node ids are unique: kg_create_node refuses an existing id
    - kg_create_node runs the same auto-linking as extraction output
    - kg_create_relation requires both endpoints to exist
    - cypher queries need a configured Neo4j runner
"""

import logging

from app.core.auto_link import generate_node_id, link_entities
from app.core.domain_models import ExtractedEntity, KnowledgeLink
from app.core.domain_types import EntityListMode, GraphQueryType
from app.core.errors import ResourceNotFoundError, ToolExecutionError, ToolValidationError
from app.core.project_context import ProjectContext

logger = logging.getLogger(__name__)


class KnowledgeGraphHandlers:

    def __init__(self, ctx: ProjectContext):
        self.ctx = ctx

    async def kg_look_entities(self, input_data: dict) -> dict:
        nodes = self.ctx.graph.get_nodes()
        links = self.ctx.graph.get_links()
        if input_data.get("mode") == EntityListMode.STRUCTURE.value:
            return {
                "nodes": [
                    {"id": n.id, "type": n.type, "label": n.label,
                     "data_keys": list(n.data)}
                    for n in nodes
                ],
                "link_count": len(links),
            }
        return {
            "nodes": [{"id": n.id, "label": n.label, "type": n.type} for n in nodes],
            "links": [
                {"s": link.source, "t": link.target, "rel": link.label}
                for link in links
            ],
        }

    async def kg_look_entity_element(self, input_data: dict) -> dict:
        node = self._require_node(input_data.get("id"))
        return {
            **node.model_dump(mode="json"),
            "links": [
                link.model_dump(mode="json")
                for link in self.ctx.graph.links_for(node.id)
            ],
        }

    async def kg_create_node(self, input_data: dict) -> dict:
        node_id = str(input_data.get("id") or generate_node_id())
        if self.ctx.graph.get_node(node_id) is not None:
            raise ToolValidationError(
                f"Node '{node_id}' already exists. Use kg_update_node to change it.",
                "id",
            )
        data = input_data.get("data") or {}
        if not isinstance(data, dict):
            raise ToolValidationError("'data' must be an object", "data")
        entity = ExtractedEntity(
            id=node_id,
            type=str(input_data.get("type") or "Entity"),
            label=str(input_data.get("label") or node_id),
            data=data,
        )
        merge = link_entities(self.ctx.graph, [entity])
        return {"success": True, "id": node_id, "links_added": merge.links_added}

    async def kg_update_node(self, input_data: dict) -> dict:
        data = input_data.get("data")
        if data is not None and not isinstance(data, dict):
            raise ToolValidationError("'data' must be an object", "data")
        node = self.ctx.graph.update_node(
            self._require_node(input_data.get("id")).id,
            label=input_data.get("label"),
            type=input_data.get("type"),
            data=data,
        )
        return {"success": True, "node": node.model_dump(mode="json")}

    async def kg_create_relation(self, input_data: dict) -> dict:
        source = self._require_node(input_data.get("source_id"))
        target = self._require_node(input_data.get("target_id"))
        link = KnowledgeLink(
            source=source.id, target=target.id,
            label=str(input_data.get("relation") or "related_to"),
        )
        self.ctx.graph.append_link(link)
        return {"success": True, "link": link.model_dump(mode="json")}

    async def kg_fetch_nodes(self, input_data: dict) -> dict:
        query = input_data.get("query_str") or ""
        try:
            query_type = GraphQueryType(input_data.get("query_type") or "simple")
        except ValueError:
            raise ToolValidationError("query_type must be 'simple' or 'cypher'", "query_type")

        if query_type == GraphQueryType.CYPHER:
            if self.ctx.cypher is None:
                raise ToolExecutionError(
                    "kg_fetch_nodes", "Neo4j is not configured for this deployment.",
                )
            rows = await self.ctx.cypher.run(query)
            return {"type": "cypher_result", "count": len(rows), "data": rows}

        matches = self.ctx.graph.search(query)
        return {
            "type": "local_search",
            "count": len(matches),
            "nodes": [{"id": n.id, "label": n.label, "type": n.type} for n in matches],
        }

    def _require_node(self, node_id: str | None) -> ExtractedEntity:
        if not node_id:
            raise ToolValidationError("node id is required", "id")
        node = self.ctx.graph.get_node(str(node_id))
        if node is None:
            raise ResourceNotFoundError("Node", str(node_id))
        return node
