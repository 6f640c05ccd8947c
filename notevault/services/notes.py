"""Note CRUD and search with the access policy applied to every read and write."""

import logging
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from notevault.core.errors import AuthorizationError, NotFoundError, ValidationError
from notevault.models import Note
from notevault.services.access_policy import ADMIN, can_access, can_modify

logger = logging.getLogger(__name__)

TITLE_MAX_LEN = 200
CONTENT_MAX_LEN = 5000
OWNER_MAX_LEN = 50
QUERY_MAX_LEN = 100


def _clean(value: str | None, max_length: int) -> str:
    """Trim and cap free-text input."""
    if not isinstance(value, str):
        return ""
    return value.strip()[:max_length]


def _clean_title_and_content(title: str | None, content: str | None) -> tuple[str, str]:
    clean_title = _clean(title, TITLE_MAX_LEN)
    clean_content = _clean(content, CONTENT_MAX_LEN)
    if not clean_title or not clean_content:
        raise ValidationError("Title and content are required")
    return clean_title, clean_content


def _get_or_404(db: Session, note_id: int) -> Note:
    note = db.get(Note, note_id)
    if note is None:
        raise NotFoundError("Note not found")
    return note


def list_notes(db: Session, role: str, requester: str) -> list[Note]:
    """All notes for admins, own notes for users; newest first."""
    query = db.query(Note)
    if role != ADMIN:
        query = query.filter(Note.created_by == requester)
    return query.order_by(Note.created_at.desc(), Note.id.desc()).all()


def get_note(db: Session, note_id: int, role: str, requester: str) -> Note:
    note = _get_or_404(db, note_id)
    if not can_access(role, note.created_by, requester):
        raise AuthorizationError("Access denied")
    return note


def create_note(
    db: Session,
    title: str | None,
    content: str | None,
    role: str,
    requester: str,
    now: datetime,
) -> Note:
    clean_title, clean_content = _clean_title_and_content(title, content)
    note = Note(
        title=clean_title,
        content=clean_content,
        created_by=requester[:OWNER_MAX_LEN],
        created_at=now,
        updated_at=now,
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    logger.info("Note created: note_id=%s role=%s", note.id, role)
    return note


def update_note(
    db: Session,
    note_id: int,
    title: str | None,
    content: str | None,
    role: str,
    requester: str,
    now: datetime,
) -> Note:
    note = _get_or_404(db, note_id)
    if not can_modify(role, note.created_by, requester):
        raise AuthorizationError("Access denied - you can only edit your own notes")
    note.title, note.content = _clean_title_and_content(title, content)
    note.updated_at = now
    db.commit()
    db.refresh(note)
    return note


def delete_note(db: Session, note_id: int, role: str, requester: str) -> int:
    note = _get_or_404(db, note_id)
    if not can_modify(role, note.created_by, requester):
        raise AuthorizationError("Access denied - you can only delete your own notes")
    db.delete(note)
    db.commit()
    logger.info("Note deleted: note_id=%s role=%s", note_id, role)
    return 1


def search_notes(db: Session, query: str | None, role: str, requester: str) -> list[Note]:
    """Substring match on title or content, scoped like list_notes."""
    clean_query = _clean(query, QUERY_MAX_LEN)
    if not clean_query:
        raise ValidationError("Search query is required")
    pattern = f"%{clean_query}%"
    q = db.query(Note).filter(or_(Note.title.like(pattern), Note.content.like(pattern)))
    if role != ADMIN:
        q = q.filter(Note.created_by == requester)
    return q.order_by(Note.created_at.desc(), Note.id.desc()).all()
