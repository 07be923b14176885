"""Project State — in-memory working set of one project, plus its snapshot codec.

Invariants:
    - Pure dataclass, no IO: routes and the runner persist it through snapshots
    - Records keep upload order; index is the record's identity for tools
    - to_snapshot output is JSON-safe (pydantic mode="json"), camelCase for records
    - from_snapshot tolerates missing keys (older snapshots load with empty lists)

Design Decisions:
    - In-memory dict cache keyed by project id, snapshot column on the ORM row
      for durability (single-process uvicorn)
"""

from dataclasses import dataclass, field

from app.core.domain_models import (
    ChatMessage, DatasetRecord, ExtractedEntity, KnowledgeLink, ScrapingEntry,
)


@dataclass
class ProjectState:
    """Per-project data the agent tools read and mutate."""

    records: list[DatasetRecord] = field(default_factory=list)
    nodes: list[ExtractedEntity] = field(default_factory=list)
    links: list[KnowledgeLink] = field(default_factory=list)
    scraping_entries: list[ScrapingEntry] = field(default_factory=list)

    # User-visible chat log (with tool call snapshots)
    chat_history: list[ChatMessage] = field(default_factory=list)
    # Anthropic-format conversation replayed to the model
    message_history: list[dict] = field(default_factory=list)

    @property
    def has_selection(self) -> bool:
        return any(r.selected for r in self.records)

    def active_records(self) -> list[DatasetRecord]:
        """Selected records when any are selected, else every record."""
        if self.has_selection:
            return [r for r in self.records if r.selected]
        return list(self.records)

    def record_by_index(self, index: int) -> DatasetRecord | None:
        return next((r for r in self.records if r.index == index), None)

    def set_selection(self, indices: list[int], selected: bool = True) -> int:
        """Flip the selected flag on the given indices. Returns how many changed."""
        wanted = set(indices)
        changed = 0
        for pos, record in enumerate(self.records):
            if record.index in wanted and record.selected != selected:
                self.records[pos] = record.model_copy(update={"selected": selected})
                changed += 1
        return changed

    def clear_selection(self) -> None:
        self.records = [
            r.model_copy(update={"selected": False}) if r.selected else r
            for r in self.records
        ]


def project_state_to_snapshot(state: ProjectState) -> dict:
    """Serialize ProjectState to a JSON-safe dict. Pure, no IO."""
    return {
        "records": [r.model_dump(mode="json", by_alias=True) for r in state.records],
        "nodes": [n.model_dump(mode="json") for n in state.nodes],
        "links": [link.model_dump(mode="json") for link in state.links],
        "scraping_entries": [
            e.model_dump(mode="json") for e in state.scraping_entries
        ],
        "chat_history": [
            m.model_dump(mode="json", by_alias=True) for m in state.chat_history
        ],
        "message_history": state.message_history,
    }


def project_state_from_snapshot(data: dict | None) -> ProjectState:
    """Reconstruct ProjectState from a snapshot dict. Pure, no IO."""
    data = data or {}
    return ProjectState(
        records=[DatasetRecord.model_validate(r) for r in data.get("records", [])],
        nodes=[ExtractedEntity.model_validate(n) for n in data.get("nodes", [])],
        links=[KnowledgeLink.model_validate(x) for x in data.get("links", [])],
        scraping_entries=[
            ScrapingEntry.model_validate(e)
            for e in data.get("scraping_entries", [])
        ],
        chat_history=[
            ChatMessage.model_validate(m) for m in data.get("chat_history", [])
        ],
        message_history=list(data.get("message_history", [])),
    )
