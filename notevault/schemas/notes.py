"""Request/response schemas for note endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NoteOut(BaseModel):
    """A stored note as returned to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    created_by: str
    created_at: datetime
    updated_at: datetime


class NoteWriteRequest(BaseModel):
    """Body for creating or updating a note, carrying the requester's claimed identity."""

    title: str | None = Field(default=None, description="Title (max 200 chars)")
    content: str | None = Field(default=None, description="Content (max 5000 chars)")
    role: str | None = Field(default=None, description="'admin' or 'user'")
    username: str | None = None
    email: str | None = None


class NoteCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Note created"
    note_id: int = Field(alias="noteId")


class NoteUpdatedResponse(BaseModel):
    message: str = "Note updated"
    changes: int = 1


class NoteDeletedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Note deleted"
    deleted_count: int = Field(alias="deletedCount")
