"""Note CRUD and search routes. Every route requires a token and a resolvable identity."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from notevault.api.v1.auth import authenticate_request, get_current_user, get_now
from notevault.core.database import get_db
from notevault.core.errors import ValidationError
from notevault.schemas.auth import CurrentUser
from notevault.schemas.notes import (
    NoteCreatedResponse,
    NoteDeletedResponse,
    NoteOut,
    NoteUpdatedResponse,
    NoteWriteRequest,
)
from notevault.services import notes as notes_service

router = APIRouter()


def _parse_note_id(note_id: str) -> int:
    try:
        return int(note_id)
    except ValueError:
        raise ValidationError("Invalid note ID")


@router.get("", response_model=list[NoteOut])
def list_notes(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[NoteOut]:
    """All notes for admins; only the requester's own notes for users. Newest first."""
    notes = notes_service.list_notes(db, user.role, user.username)
    return [NoteOut.model_validate(n) for n in notes]


@router.get("/search/{query}", response_model=list[NoteOut])
def search_notes(
    query: str,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[NoteOut]:
    """Match query against title and content, scoped like the list route."""
    notes = notes_service.search_notes(db, query, user.role, user.username)
    return [NoteOut.model_validate(n) for n in notes]


@router.get("/{note_id}", response_model=NoteOut)
def get_note(
    note_id: str,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> NoteOut:
    note = notes_service.get_note(db, _parse_note_id(note_id), user.role, user.username)
    return NoteOut.model_validate(note)


@router.post("", response_model=NoteCreatedResponse)
def create_note(
    body: NoteWriteRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> NoteCreatedResponse:
    """Create a note owned by the requester."""
    user = authenticate_request(request, db, body.role, body.username, body.email)
    note = notes_service.create_note(db, body.title, body.content, user.role, user.username, now)
    return NoteCreatedResponse(note_id=note.id)


@router.put("/{note_id}", response_model=NoteUpdatedResponse)
def update_note(
    note_id: str,
    body: NoteWriteRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> NoteUpdatedResponse:
    """Replace title and content; admins may edit any note, users only their own."""
    user = authenticate_request(request, db, body.role, body.username, body.email)
    notes_service.update_note(
        db, _parse_note_id(note_id), body.title, body.content, user.role, user.username, now
    )
    return NoteUpdatedResponse()


@router.delete("/{note_id}", response_model=NoteDeletedResponse)
def delete_note(
    note_id: str,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> NoteDeletedResponse:
    deleted = notes_service.delete_note(db, _parse_note_id(note_id), user.role, user.username)
    return NoteDeletedResponse(deleted_count=deleted)
