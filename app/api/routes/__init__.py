"""Route Modules — one file per resource.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Shared project state helpers live in projects.py and are imported, not copied
"""
