"""Project Backup — validate, build and restore portable project documents.

Invariants:
    - A backup must carry harEntries (list) and knowledgeData with nodes/links lists
    - Validation collects every problem before raising BackupValidationError
    - restore_backup applies nothing unless the whole document validates
"""

from pydantic import ValidationError

from app.core.domain_models import (
    ChatMessage, DatasetRecord, ExtractedEntity, KnowledgeLink, ScrapingEntry,
    utc_now_iso,
)
from app.core.errors import BackupValidationError
from app.core.project_state import ProjectState

BACKUP_VERSION = "1.0"
DEFAULT_BACKUP_NAME = "HarMind_Backup"


def validate_backup(doc: object) -> list[str]:
    """Structural problems in doc (empty list = valid)."""
    if not isinstance(doc, dict):
        return ["document must be a JSON object"]
    problems = []
    if not isinstance(doc.get("harEntries"), list):
        problems.append("missing HAR entries")
    knowledge = doc.get("knowledgeData")
    if not isinstance(knowledge, dict):
        problems.append("missing Knowledge Graph")
    else:
        for key in ("nodes", "links"):
            if not isinstance(knowledge.get(key), list):
                problems.append(f"knowledgeData.{key} must be a list")
    for key in ("chatHistory", "scrapingEntries"):
        if doc.get(key) is not None and not isinstance(doc[key], list):
            problems.append(f"{key} must be a list")
    return problems


def build_backup(state: ProjectState, name: str | None = None) -> dict:
    return {
        "version": BACKUP_VERSION,
        "timestamp": utc_now_iso(),
        "name": name or DEFAULT_BACKUP_NAME,
        "harEntries": [
            r.model_dump(mode="json", by_alias=True) for r in state.records
        ],
        "knowledgeData": {
            "nodes": [n.model_dump(mode="json") for n in state.nodes],
            "links": [link.model_dump(mode="json") for link in state.links],
        },
        "chatHistory": [
            m.model_dump(mode="json", by_alias=True) for m in state.chat_history
        ],
        "scrapingEntries": [
            e.model_dump(mode="json") for e in state.scraping_entries
        ],
    }


def restore_backup(doc: object) -> ProjectState:
    """New ProjectState from a backup. Raises BackupValidationError."""
    problems = validate_backup(doc)
    if problems:
        raise BackupValidationError(problems)
    try:
        return ProjectState(
            records=[DatasetRecord.model_validate(r) for r in doc["harEntries"]],
            nodes=[
                ExtractedEntity.model_validate(n)
                for n in doc["knowledgeData"]["nodes"]
            ],
            links=[
                KnowledgeLink.model_validate(x)
                for x in doc["knowledgeData"]["links"]
            ],
            chat_history=[
                ChatMessage.model_validate(m)
                for m in doc.get("chatHistory") or []
            ],
            scraping_entries=[
                ScrapingEntry.model_validate(e)
                for e in doc.get("scrapingEntries") or []
            ],
        )
    except ValidationError as e:
        raise BackupValidationError([
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ])
