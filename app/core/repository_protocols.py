"""Boundary Protocols — contracts between the core and its collaborators.

Invariants:
    - Core NEVER imports from infrastructure; dependency arrows point inward only
    - Graph and Knowledge DB stores are synchronous (in-memory, single writer)
    - Proxy and Cypher collaborators are async because their implementations do IO

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
"""

from typing import Any, Protocol

from app.core.domain_models import ExtractedEntity, KnowledgeLink, ScrapingEntry
from app.core.domain_types import EntryId, NodeId


class GraphStore(Protocol):
    """Knowledge graph nodes + links."""
    def get_nodes(self) -> list[ExtractedEntity]: ...
    def get_links(self) -> list[KnowledgeLink]: ...
    def get_node(self, node_id: NodeId) -> ExtractedEntity | None: ...
    def upsert_node(self, entity: ExtractedEntity) -> None: ...
    def append_link(self, link: KnowledgeLink) -> None: ...


class ScrapingEntryStore(Protocol):
    """Knowledge DB rows: CRUD by id plus group listing."""
    def add(self, entry: ScrapingEntry) -> ScrapingEntry: ...
    def get(self, entry_id: EntryId) -> ScrapingEntry | None: ...
    def update(self, entry_id: EntryId, **changes: Any) -> ScrapingEntry: ...
    def list_all(self, include_deleted: bool = False) -> list[ScrapingEntry]: ...
    def list_groups(self) -> list[dict]: ...


class ProxyClient(Protocol):
    """Executes an HTTP request through the external proxy backend."""
    async def execute(
        self, url: str, method: str,
        headers: dict[str, str] | None = None, body: str | None = None,
    ) -> dict: ...


class CypherRunner(Protocol):
    """Runs a Cypher query against the external graph database."""
    async def run(
        self, query: str, params: dict[str, Any] | None = None,
    ) -> list[dict]: ...


class ScriptRunner(Protocol):
    """Runs a transformation script over record dicts; result has .success and .to_dict()."""
    def run(self, records: list[dict], code: str) -> Any: ...
