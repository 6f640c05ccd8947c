"""SQLAlchemy ORM models."""

from notevault.models.base import Base
from notevault.models.note import Note
from notevault.models.user import User

__all__ = ["Base", "Note", "User"]
