"""Domain Types — enums and identity types shared across the codebase.

Invariants:
    - All valid states encoded as Enums, no raw string matching
    - ProcessingStatus declaration order IS the pipeline order (rank = position)

Design Decisions:
    - str Enums: serialize to JSON without custom encoders (tool results are JSON)
    - NewType over wrappers: zero runtime cost, full type-checker support
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ProjectId = NewType("ProjectId", str)
NodeId = NewType("NodeId", str)
EntryId = NewType("EntryId", str)
ToolCallId = NewType("ToolCallId", str)


# ─── Constants ───────────────────────────────────────────────────

MAX_AGENT_TURNS = 5
NO_TEXT_FALLBACK = "I processed the actions but have no text response."


# ─── Enums ───────────────────────────────────────────────────────

class ProcessingStatus(str, Enum):
    """Knowledge DB row lifecycle. sp_* values are advisory markers."""
    UNPROCESSED = "unprocessed"
    SP_FILTERER = "sp_filterer"
    FILTERED = "filtered"
    SP_CONVERTER = "sp_converter"
    CONVERTED = "converted"
    SP_CONVERT = "sp_convert"
    FINAL_RESPONSE = "final_response"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = list(ProcessingStatus)


class ToolCallStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class MessageRole(str, Enum):
    USER = "user"
    MODEL = "model"
    SYSTEM = "system"


class LookMode(str, Enum):
    """db_look_request modes."""
    STRUCTURE = "structure"
    SAMPLE = "sample"
    CONTENT = "content"


class EntityListMode(str, Enum):
    """kg_look_entities modes."""
    BASIC = "basic"
    STRUCTURE = "structure"


class GraphQueryType(str, Enum):
    """kg_fetch_nodes query types."""
    SIMPLE = "simple"
    CYPHER = "cypher"
