"""Core Layer — domain models, pipeline rules and in-memory stores. No network, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - External collaborators are reached through repository_protocols only

Design Decisions:
    - Functional core separated from imperative shell
"""
