"""ORM model for user notes."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from notevault.models.base import Base


class Note(Base):
    """
    A short text note owned by the user who created it.

    created_by holds the owner's username and never changes after creation.
    """

    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    created_by = Column(String(50), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
