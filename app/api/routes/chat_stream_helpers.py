"""Chat Stream Helpers — SSE formatting, shared clients, and ProjectContext wiring.

Invariants:
    - One ResilientAnthropicClient and one Neo4j driver per process (lazy singletons)
    - Proxy backend: project.backend_url wins over settings.proxy_backend_url;
      neither set = no proxy client (the tool reports "not configured")
    - A fresh ScriptSandbox per context, budgets from settings

Design Decisions:
    - SSE wiring lives here so the chat route stays thin
    - close_shared_clients() is called from the app lifespan on shutdown
"""

import json
import logging

from app.config import get_settings
from app.core.project_context import ProjectContext
from app.core.project_state import ProjectState
from app.infrastructure.anthropic_client import ResilientAnthropicClient
from app.infrastructure.neo4j_client import Neo4jCypherRunner
from app.infrastructure.proxy_client import HttpProxyClient
from app.infrastructure.script_sandbox import ScriptSandbox
from app.models.project import Project
from app.services.agent_runner import AgentRunner

logger = logging.getLogger(__name__)

# Prevent proxy/browser buffering of streamed events
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


def sse_line(event: dict) -> str:
    """Format event as SSE data line."""
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


# -- Shared clients ------------------------------------------------------------

_anthropic_client: ResilientAnthropicClient | None = None
_cypher_runner: Neo4jCypherRunner | None = None


def create_runner() -> AgentRunner:
    """Create AgentRunner with shared Anthropic client singleton."""
    global _anthropic_client
    settings = get_settings()
    if _anthropic_client is None:
        _anthropic_client = ResilientAnthropicClient(
            api_key=settings.anthropic_api_key,
            max_retries=settings.anthropic_max_retries,
            base_delay_ms=settings.anthropic_base_delay_ms,
            max_delay_ms=settings.anthropic_max_delay_ms,
            timeout_seconds=settings.anthropic_timeout_seconds,
        )
    return AgentRunner(
        _anthropic_client,
        model=settings.agent_model,
        max_turns=settings.agent_max_turns,
        max_tokens=settings.agent_max_tokens,
    )


def _get_cypher_runner() -> Neo4jCypherRunner | None:
    global _cypher_runner
    settings = get_settings()
    if not settings.neo4j_uri:
        return None
    if _cypher_runner is None:
        _cypher_runner = Neo4jCypherRunner(
            settings.neo4j_uri, settings.neo4j_user, settings.neo4j_password,
        )
    return _cypher_runner


async def close_shared_clients() -> None:
    global _cypher_runner
    if _cypher_runner is not None:
        await _cypher_runner.close()
        _cypher_runner = None


def build_project_context(project: Project, state: ProjectState) -> ProjectContext:
    """Wire a ProjectContext with the collaborators configured for this project."""
    settings = get_settings()
    backend_url = project.backend_url or settings.proxy_backend_url
    return ProjectContext(
        project_id=str(project.id),
        state=state,
        sandbox=ScriptSandbox(
            time_limit_seconds=settings.sandbox_time_limit_seconds,
            memory_limit_bytes=settings.sandbox_memory_limit_bytes,
            max_output_chars=settings.sandbox_max_output_chars,
        ),
        proxy=HttpProxyClient(
            backend_url, timeout_seconds=settings.proxy_timeout_seconds,
        ) if backend_url else None,
        cypher=_get_cypher_runner(),
    )
