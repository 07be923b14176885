"""Knowledge Graph Tool Schemas — inspect and edit the project's entity graph."""

from app.core.domain_types import EntityListMode, GraphQueryType
from app.core.tool_schema import ToolDefinition, ToolParameter

KG_LOOK_ENTITIES = ToolDefinition(
    name="kg_look_entities",
    description=(
        "List all nodes. 'basic' returns ids, labels, types and links; "
        "'structure' returns each node's data keys and the link count."
    ),
    parameters=(
        ToolParameter(
            "mode", "string", "'basic' or 'structure'.",
            enum=tuple(m.value for m in EntityListMode), default="basic",
        ),
    ),
)

KG_LOOK_ENTITY_ELEMENT = ToolDefinition(
    name="kg_look_entity_element",
    description="Inspect the full data of one node, plus the links touching it.",
    parameters=(
        ToolParameter("id", "string", "Node id.", required=True),
    ),
)

KG_CREATE_NODE = ToolDefinition(
    name="kg_create_node",
    description=(
        "Add a node to the Knowledge Graph. Links to existing nodes are "
        "inferred from id-like fields in data (keys 'id' or ending in 'Id')."
    ),
    parameters=(
        ToolParameter("label", "string", "Display name.", required=True),
        ToolParameter("type", "string", "Category/type.", required=True),
        ToolParameter("data", "object", "Properties.", required=True),
        ToolParameter("id", "string", "Optional id (generated when missing)."),
    ),
)

KG_UPDATE_NODE = ToolDefinition(
    name="kg_update_node",
    description=(
        "Update an existing node: replace label/type, merge the given data "
        "keys into its data."
    ),
    parameters=(
        ToolParameter("id", "string", "Node id.", required=True),
        ToolParameter("label", "string", "New display name."),
        ToolParameter("type", "string", "New category/type."),
        ToolParameter("data", "object", "Keys to merge into the node's data."),
    ),
)

KG_CREATE_RELATION = ToolDefinition(
    name="kg_create_relation",
    description="Create a directed link between two nodes.",
    parameters=(
        ToolParameter("source_id", "string", "Source node id.", required=True),
        ToolParameter("target_id", "string", "Target node id.", required=True),
        ToolParameter("relation", "string", "Relationship label.", required=True),
    ),
)

KG_FETCH_NODES = ToolDefinition(
    name="kg_fetch_nodes",
    description=(
        "Query the graph. 'simple' searches labels, types and data of the "
        "local graph; 'cypher' runs a query against the connected Neo4j instance."
    ),
    parameters=(
        ToolParameter("query_str", "string", "Search term or Cypher query.", required=True),
        ToolParameter(
            "query_type", "string", "'simple' or 'cypher'.",
            enum=tuple(q.value for q in GraphQueryType), default="simple",
        ),
    ),
)

TOOLS_KNOWLEDGE_GRAPH = [
    KG_LOOK_ENTITIES,
    KG_LOOK_ENTITY_ELEMENT,
    KG_CREATE_NODE,
    KG_UPDATE_NODE,
    KG_CREATE_RELATION,
    KG_FETCH_NODES,
]
