"""Auto-Linking — merge extracted entities into the graph and infer edges from id-like fields.

Invariants:
    - Insert-if-absent by id: an existing node's fields are never overwritten here
    - Reference keys are "id" or end with "Id"; only string values are considered
    - Forward edge: entity -> node whose id equals the value (label = key)
    - Reverse edge: node whose data.id equals the value -> entity (label = key)
    - Both directions checked independently against the FULL node set
    - A match whose id equals the entity's own id is ignored
    - Edges are appended without dedupe (the store tolerates duplicates)
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable

from app.core.domain_models import ExtractedEntity, KnowledgeLink
from app.core.repository_protocols import GraphStore

DEFAULT_ENTITY_TYPE = "Entity"
_ENVELOPE_KEYS = frozenset({"id", "type", "label", "data"})


@dataclass
class MergeResult:
    nodes_added: int = 0
    links_added: int = 0
    skipped: int = 0
    node_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodes_added": self.nodes_added,
            "links_added": self.links_added,
            "skipped": self.skipped,
        }


def generate_node_id() -> str:
    return f"node-{uuid.uuid4().hex[:12]}"


def coerce_entity(item: Any) -> ExtractedEntity | None:
    """Best-effort conversion of a script output item into a graph node."""
    if isinstance(item, ExtractedEntity):
        return item
    if not isinstance(item, dict):
        return None
    raw_id = item.get("id")
    node_id = str(raw_id) if raw_id not in (None, "") else generate_node_id()
    data = item.get("data")
    if not isinstance(data, dict):
        data = {k: v for k, v in item.items() if k not in _ENVELOPE_KEYS}
    label = item.get("label") or item.get("name") or item.get("title") or node_id
    return ExtractedEntity(
        id=node_id,
        type=str(item.get("type") or DEFAULT_ENTITY_TYPE),
        label=str(label),
        data=data,
    )


def is_reference_key(key: str) -> bool:
    return key == "id" or key.endswith("Id")


def infer_links(
    entity: ExtractedEntity, nodes: list[ExtractedEntity],
) -> list[KnowledgeLink]:
    """Edges implied by entity.data's id-like fields."""
    links = []
    for key, value in entity.data.items():
        if not isinstance(value, str) or not is_reference_key(key):
            continue
        target = next(
            (n for n in nodes if n.id == value and n.id != entity.id), None,
        )
        if target:
            links.append(KnowledgeLink(source=entity.id, target=target.id, label=key))
        source = next(
            (n for n in nodes
             if n.data.get("id") == value and n.id != entity.id),
            None,
        )
        if source:
            links.append(KnowledgeLink(source=source.id, target=entity.id, label=key))
    return links


def link_entities(store: GraphStore, items: Iterable[Any]) -> MergeResult:
    """Merge a batch of extracted items into store, then auto-link each one."""
    result = MergeResult()
    for item in items:
        entity = coerce_entity(item)
        if entity is None:
            result.skipped += 1
            continue
        if store.get_node(entity.id) is None:
            store.upsert_node(entity)
            result.nodes_added += 1
            result.node_ids.append(entity.id)
        for link in infer_links(entity, store.get_nodes()):
            store.append_link(link)
            result.links_added += 1
    return result
