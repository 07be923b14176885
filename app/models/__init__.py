"""ORM Models — SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)
    - Project is the aggregate root; tool call logs scoped by project_id

Design Decisions:
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references and create_all() sees every table
"""

from app.models.project import Project  # noqa: F401
from app.models.tool_call import ToolCallLog  # noqa: F401
