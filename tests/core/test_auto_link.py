"""Auto-Linking — entity coercion, insert-if-absent and reference edge inference.

Tests cover:
    - Forward edge from an id-like field to an existing node
    - Reverse edge from a node whose data.id matches
    - Existing ids are never overwritten or duplicated
    - Non-dict items are skipped; missing ids are generated
    - Self references ignored
"""

from app.core.auto_link import (
    DEFAULT_ENTITY_TYPE, coerce_entity, infer_links, is_reference_key, link_entities,
)
from app.core.domain_models import ExtractedEntity
from app.core.graph_store import InMemoryGraphStore
from app.core.project_state import ProjectState


def _store():
    return InMemoryGraphStore(ProjectState())


def _edges(store):
    return [(link.source, link.target, link.label) for link in store.get_links()]


def test_project_task_yields_exactly_one_edge():
    store = _store()
    result = link_entities(store, [
        {"id": "p1"},
        {"id": "t1", "data": {"projectId": "p1"}},
    ])
    assert result.nodes_added == 2
    assert result.links_added == 1
    assert _edges(store) == [("t1", "p1", "projectId")]


def test_existing_id_left_untouched():
    store = _store()
    store.upsert_node(ExtractedEntity(id="a", type="Thing", label="Original"))
    result = link_entities(store, [{"id": "a", "label": "Replacement"}])
    assert result.nodes_added == 0
    assert len(store.get_nodes()) == 1
    assert store.get_node("a").label == "Original"


def test_reverse_edge_from_data_id():
    store = _store()
    store.upsert_node(ExtractedEntity(
        id="node-x", type="User", label="Ann", data={"id": "u-42"},
    ))
    link_entities(store, [{"id": "post-1", "authorId": "u-42"}])
    assert _edges(store) == [("node-x", "post-1", "authorId")]


def test_flat_item_fields_become_data():
    entity = coerce_entity({"id": "o1", "name": "Order", "customerId": "c1"})
    assert entity.label == "Order"
    assert entity.type == DEFAULT_ENTITY_TYPE
    assert entity.data == {"name": "Order", "customerId": "c1"}


def test_missing_id_generated():
    entity = coerce_entity({"title": "Untitled"})
    assert entity.id.startswith("node-")
    assert entity.label == "Untitled"


def test_non_dict_items_skipped():
    store = _store()
    result = link_entities(store, ["text", 3, None, {"id": "ok"}])
    assert result.skipped == 3
    assert result.nodes_added == 1


def test_self_reference_ignored():
    entity = ExtractedEntity(id="n1", type="T", label="n1", data={"id": "n1", "parentId": "n1"})
    assert infer_links(entity, [entity]) == []


def test_non_string_references_ignored():
    store = _store()
    link_entities(store, [{"id": "1"}, {"id": "2", "parentId": 1}])
    assert store.get_links() == []


def test_reference_key_rule():
    assert is_reference_key("id")
    assert is_reference_key("ownerId")
    assert not is_reference_key("identity")
    assert not is_reference_key("ID")


def test_edges_appended_without_dedupe():
    store = _store()
    link_entities(store, [{"id": "p1"}, {"id": "t1", "projectId": "p1"}])
    link_entities(store, [{"id": "t1", "projectId": "p1"}])
    assert _edges(store) == [("t1", "p1", "projectId")] * 2
