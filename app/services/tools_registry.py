"""Tools Registry — the static, ordered catalogue of agent tools.

Invariants:
    - Tool names are unique across all groups
    - Order is stable: dataset, Knowledge DB, knowledge graph, proxy
    - Every name here has a handler in tool_dispatch (tests enforce both directions)

Design Decisions:
    - Explicit imports from each define_*_tools.py: no auto-discovery
    - One catalogue for every turn: the tool list is identical across requests
"""

from app.core.tool_schema import ToolDefinition
from app.services.define_dataset_tools import TOOLS_DATASET
from app.services.define_knowledge_db_tools import TOOLS_KNOWLEDGE_DB
from app.services.define_knowledge_graph_tools import TOOLS_KNOWLEDGE_GRAPH
from app.services.define_proxy_tools import TOOLS_PROXY

ALL_TOOLS: list[ToolDefinition] = [
    *TOOLS_DATASET,
    *TOOLS_KNOWLEDGE_DB,
    *TOOLS_KNOWLEDGE_GRAPH,
    *TOOLS_PROXY,
]

_BY_NAME: dict[str, ToolDefinition] = {t.name: t for t in ALL_TOOLS}

if len(_BY_NAME) != len(ALL_TOOLS):
    raise RuntimeError("Duplicate tool names in ALL_TOOLS")

TOOL_NAMES: frozenset[str] = frozenset(_BY_NAME)

# Tools whose successful output is merged into the knowledge graph
EXTRACTION_TOOLS: frozenset[str] = frozenset({"run_extraction_code"})


def get_tool(name: str) -> ToolDefinition | None:
    return _BY_NAME.get(name)


def anthropic_tools() -> list[dict]:
    """Catalogue in Anthropic Messages API format."""
    return [t.to_anthropic() for t in ALL_TOOLS]


def tool_declarations() -> list[dict]:
    """Catalogue as provider-neutral function declarations."""
    return [t.to_declaration() for t in ALL_TOOLS]
