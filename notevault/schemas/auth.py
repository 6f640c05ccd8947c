"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    """New account details. Shape rules are enforced by the auth service."""

    username: str | None = Field(default=None, description="3-30 chars: letters, numbers, _ or -")
    email: str | None = Field(default=None, description="Unique email (case-insensitive)")
    password: str | None = Field(default=None, description="Password")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str | None = Field(default=None, description="Account email")
    password: str | None = Field(default=None, description="Password")


class ChangePasswordRequest(BaseModel):
    """Body for POST /change-password; the anti-forgery token travels in a header."""

    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    old_password: str | None = Field(default=None, alias="oldPassword")
    new_password: str | None = Field(default=None, alias="newPassword")


class PublicUser(BaseModel):
    """User fields safe to return to the client (no hash, no lockout state)."""

    model_config = ConfigDict(populate_by_name=True)

    username: str
    email: str
    role: str
    last_login: datetime | None = Field(default=None, alias="lastLogin")


class SignupResponse(BaseModel):
    success: bool = True
    user: PublicUser


class LoginResponse(BaseModel):
    """Successful login: the user and the anti-forgery token for later calls."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user: PublicUser
    csrf_token: str = Field(alias="csrfToken", description="Send as X-CSRF-Token header")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class CurrentUser(BaseModel):
    """Resolved requester for note routes: identity plus the effective role."""

    id: int
    username: str
    email: str
    role: str
