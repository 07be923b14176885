"""Project Context — everything a tool handler may touch for one project.

Invariants:
    - Handlers receive (ctx, args) and reach state only through ctx
    - graph and scraping stores wrap the same ProjectState instance
    - proxy / cypher / sandbox are None when not configured; handlers report that
"""

from dataclasses import dataclass, field

from app.core.domain_models import DatasetRecord
from app.core.domain_types import ProjectId
from app.core.graph_store import InMemoryGraphStore
from app.core.project_state import ProjectState
from app.core.repository_protocols import CypherRunner, ProxyClient, ScriptRunner
from app.core.scraping_store import InMemoryScrapingStore


@dataclass
class ProjectContext:
    project_id: ProjectId
    state: ProjectState
    sandbox: ScriptRunner | None = None
    proxy: ProxyClient | None = None
    cypher: CypherRunner | None = None
    graph: InMemoryGraphStore = field(init=False)
    scraping: InMemoryScrapingStore = field(init=False)

    def __post_init__(self):
        self.graph = InMemoryGraphStore(self.state)
        self.scraping = InMemoryScrapingStore(self.state)

    def active_records(self) -> list[DatasetRecord]:
        return self.state.active_records()
