"""Signup, login and password change routes plus the request-protection dependencies."""

from collections.abc import Callable
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from notevault.core.database import get_db
from notevault.core.errors import ValidationError
from notevault.models import User
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
from notevault.services import auth as auth_service
from notevault.services.access_policy import ROLES
from notevault.services.identity import ByEmail, claim_from_request, validate_session
from notevault.services.rate_limit import LOGIN, PASSWORD_CHANGE, SIGNUP

router = APIRouter()


def get_now(request: Request) -> datetime:
    """Dependency: current time from the app clock (replaceable in tests)."""
    return request.app.state.clock()


def client_id(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limited(endpoint_class: str) -> Callable[[Request], None]:
    """Dependency factory: count the request against the endpoint class window; 429 when exhausted."""

    def _check(request: Request) -> None:
        request.app.state.rate_limiter.hit(endpoint_class, client_id(request))

    return _check


def csrf_token_from(request: Request) -> str | None:
    return request.headers.get(request.app.state.settings.CSRF_HEADER_NAME)


def authenticate_request(
    request: Request,
    db: Session,
    role: str | None,
    username: str | None,
    email: str | None,
) -> CurrentUser:
    """
    Gate for note routes: role shape, anti-forgery token, then session identity.

    The token must be bound to the email of the resolved user, whichever of
    username or email the client used to claim its identity.
    """
    if role not in ROLES:
        raise ValidationError("Invalid or missing role")
    state = request.app.state
    claim = claim_from_request(username, email)
    bound_identity = state.tokens.validate(
        csrf_token_from(request),
        claim.email if isinstance(claim, ByEmail) else None,
    )
    user = validate_session(db, claim, state.lockout, state.clock(), bound_identity=bound_identity)
    effective_role = role if state.settings.TRUST_CLIENT_ROLE else user.role
    return CurrentUser(id=user.id, username=user.username, email=user.email, role=effective_role)


def get_current_user(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    role: str | None = None,
    username: str | None = None,
    email: str | None = None,
) -> CurrentUser:
    """Dependency for routes that carry role and identity in the query string."""
    return authenticate_request(request, db, role, username, email)


def _public_user(user: User) -> PublicUser:
    return PublicUser(
        username=user.username,
        email=user.email,
        role=user.role,
        last_login=user.last_login_at,
    )


@router.post(
    "/signup",
    response_model=SignupResponse,
    dependencies=[Depends(rate_limited(SIGNUP))],
)
def signup(
    body: SignupRequest,
    db: Annotated[Session, Depends(get_db)],
) -> SignupResponse:
    """Create a 'user'-role account."""
    user = auth_service.signup(db, body.username or "", body.email or "", body.password or "")
    return SignupResponse(user=_public_user(user))


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(rate_limited(LOGIN))],
)
def login(
    body: LoginRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns the user and a csrfToken.

    Send the token as the X-CSRF-Token header on every note and account call.
    Failures answer success:false with accountLocked/minutesLeft, emailNotFound
    or attemptsLeft.
    """
    state = request.app.state
    result = auth_service.login(
        db,
        body.email or "",
        body.password or "",
        lockout=state.lockout,
        tokens=state.tokens,
        now=now,
    )
    return LoginResponse(user=_public_user(result.user), csrf_token=result.csrf_token)


@router.post(
    "/change-password",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limited(PASSWORD_CHANGE))],
)
def change_password(
    body: ChangePasswordRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    now: Annotated[datetime, Depends(get_now)],
) -> MessageResponse:
    """Change the password; every token issued for the account stops working."""
    state = request.app.state
    auth_service.change_password(
        db,
        body.email or "",
        body.old_password or "",
        body.new_password or "",
        csrf_token=csrf_token_from(request),
        lockout=state.lockout,
        tokens=state.tokens,
        now=now,
    )
    return MessageResponse(message="Password changed successfully. Please login again.")
