"""ProjectState — selection semantics, snapshot codec and the in-memory stores."""

import pytest

from app.core.domain_models import (
    ChatMessage, DatasetRecord, ExtractedEntity, KnowledgeLink, ToolCall,
)
from app.core.domain_types import MessageRole, ToolCallStatus
from app.core.errors import ResourceNotFoundError
from app.core.graph_store import InMemoryGraphStore
from app.core.project_state import (
    ProjectState, project_state_from_snapshot, project_state_to_snapshot,
)
from app.core.scraping_store import InMemoryScrapingStore


def _records(n=3):
    return [
        DatasetRecord(index=i, id=f"r{i}", method="GET", url=f"https://x.test/{i}")
        for i in range(n)
    ]


class TestSelection:

    def test_active_records_default_to_all(self):
        state = ProjectState(records=_records())
        assert not state.has_selection
        assert len(state.active_records()) == 3

    def test_selection_narrows_active_records(self):
        state = ProjectState(records=_records())
        assert state.set_selection([0, 2]) == 2
        assert [r.index for r in state.active_records()] == [0, 2]

    def test_set_selection_counts_only_changes(self):
        state = ProjectState(records=_records())
        state.set_selection([0])
        assert state.set_selection([0, 1]) == 1
        assert state.set_selection([1], selected=False) == 1

    def test_clear_selection(self):
        state = ProjectState(records=_records())
        state.set_selection([0, 1])
        state.clear_selection()
        assert not state.has_selection

    def test_record_by_index(self):
        state = ProjectState(records=_records())
        assert state.record_by_index(1).id == "r1"
        assert state.record_by_index(9) is None


class TestSnapshot:

    def test_round_trip(self):
        state = ProjectState(
            records=_records(1),
            nodes=[ExtractedEntity(id="n", type="T", label="L", data={"k": [1]})],
            links=[KnowledgeLink(source="n", target="n", label="self")],
            chat_history=[ChatMessage(
                role=MessageRole.MODEL, text="ok",
                tool_calls=[ToolCall(id="c1", name="db_look_tables",
                                     status=ToolCallStatus.SUCCESS, result={"count": 0})],
            )],
            message_history=[{"role": "user", "content": "hi"}],
        )
        restored = project_state_from_snapshot(project_state_to_snapshot(state))
        assert restored.records == state.records
        assert restored.nodes == state.nodes
        assert restored.links == state.links
        assert restored.chat_history[0].tool_calls[0].result == {"count": 0}
        assert restored.message_history == state.message_history

    def test_snapshot_uses_camel_case(self):
        snap = project_state_to_snapshot(ProjectState(
            records=_records(1),
            chat_history=[ChatMessage(role=MessageRole.USER, text="x")],
        ))
        assert "mimeType" in snap["records"][0]
        assert "toolCalls" in snap["chat_history"][0]

    def test_empty_or_missing_snapshot(self):
        assert project_state_from_snapshot(None).records == []
        assert project_state_from_snapshot({"nodes": []}).chat_history == []


class TestGraphStore:

    def test_update_node_merges(self):
        store = InMemoryGraphStore(ProjectState())
        store.upsert_node(ExtractedEntity(id="a", type="T", label="A", data={"x": 1}))
        updated = store.update_node("a", data={"y": 2})
        assert updated.data == {"x": 1, "y": 2}
        assert updated.label == "A"

    def test_update_missing_node(self):
        with pytest.raises(ResourceNotFoundError):
            InMemoryGraphStore(ProjectState()).update_node("nope", label="x")

    def test_search_limit(self):
        store = InMemoryGraphStore(ProjectState())
        for i in range(30):
            store.upsert_node(ExtractedEntity(id=f"n{i}", type="Item", label=f"Item {i}"))
        assert len(store.search("item")) == 20
        assert len(store.search("item", limit=5)) == 5


class TestScrapingStore:

    def test_sync_then_soft_delete(self):
        state = ProjectState(records=_records(2))
        store = InMemoryScrapingStore(state)
        rows = store.sync_records(state.records)
        store.soft_delete(rows[0].id)
        assert [e.id for e in store.list_all()] == [rows[1].id]
        assert len(store.list_all(include_deleted=True)) == 2
        assert store.get(rows[0].id).is_deleted

    def test_update_refreshes_timestamp(self):
        state = ProjectState(records=_records(1))
        store = InMemoryScrapingStore(state)
        (row,) = store.sync_records(state.records)
        updated = store.update(row.id, notes="checked")
        assert updated.notes == "checked"
        assert updated.updated_at >= row.updated_at

    def test_update_missing_row(self):
        with pytest.raises(ResourceNotFoundError):
            InMemoryScrapingStore(ProjectState()).update("nope", notes="x")
