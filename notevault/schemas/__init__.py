"""Pydantic request/response schemas."""

from notevault.schemas.auth import (
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PublicUser,
    SignupRequest,
    SignupResponse,
)
from notevault.schemas.health import HealthResponse
from notevault.schemas.notes import (
    NoteCreatedResponse,
    NoteDeletedResponse,
    NoteOut,
    NoteUpdatedResponse,
    NoteWriteRequest,
)

__all__ = [
    "ChangePasswordRequest",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "NoteCreatedResponse",
    "NoteDeletedResponse",
    "NoteOut",
    "NoteUpdatedResponse",
    "NoteWriteRequest",
    "PublicUser",
    "SignupRequest",
    "SignupResponse",
]
