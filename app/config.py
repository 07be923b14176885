"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache), single instance per process
    - agent_max_turns bounds tool round-trips per user message

Design Decisions:
    - Defaults provided for all non-secret settings: runs locally on SQLite
      with no extra services; proxy and Neo4j stay disabled until configured
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite+aiosqlite:///./harmind.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres URLs come as postgresql://, asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Anthropic
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 120
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 60_000

    # Agent
    agent_model: str = "claude-sonnet-4-5"
    agent_max_turns: int = 5
    agent_max_tokens: int = 8192

    # Script sandbox
    sandbox_time_limit_seconds: float = 2.0
    sandbox_memory_limit_bytes: int = 64 * 1024 * 1024
    sandbox_max_output_chars: int = 2_000_000

    # Proxy backend (empty = proxy tool reports "not configured")
    proxy_backend_url: str = ""
    proxy_timeout_seconds: float = 30.0

    # Neo4j (empty uri = cypher queries report "not configured")
    neo4j_uri: str = ""
    neo4j_user: str = "neo4j"
    neo4j_password: str = ""

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
