"""SQLAlchemy Declarative Base — shared by every ORM model in app/models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all HarMind ORM models."""
    pass
