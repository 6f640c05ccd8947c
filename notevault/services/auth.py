"""Signup, login and password change built on the lockout, token and hashing primitives."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from notevault.core.errors import (
    AccountLockedError,
    AuthenticationError,
    ConflictError,
    LoginFailure,
    ValidationError,
)
from notevault.core.security import (
    hash_password,
    is_valid_email,
    is_valid_username,
    normalize_email,
    password_problems,
    verify_password,
)
from notevault.models import User
from notevault.services.access_policy import USER
from notevault.services.csrf import CsrfTokenRegistry
from notevault.services.lockout import LockoutPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: User
    csrf_token: str


def _require_email(email: str) -> str:
    email = normalize_email(email)
    if not is_valid_email(email):
        raise ValidationError("Please provide a valid email address.")
    return email


def _require_strong_password(password: str, label: str = "Password") -> None:
    problems = password_problems(password)
    if problems:
        raise ValidationError(f"{label} must contain: {', '.join(problems)}.")


def signup(db: Session, username: str, email: str, password: str) -> User:
    """Create a 'user'-role account after shape checks and uniqueness checks."""
    if not username or not email or not password:
        raise ValidationError("Please provide username, email and password.")
    username = username.strip()
    if not is_valid_username(username):
        raise ValidationError(
            "Username must be 3-30 characters (letters, numbers, underscore, hyphen only)"
        )
    email = _require_email(email)
    _require_strong_password(password)

    if db.query(User.id).filter(User.email == email).first() is not None:
        raise ConflictError("Email already registered")
    if db.query(User.id).filter(User.username == username).first() is not None:
        raise ConflictError("Username already taken")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=USER,
        failed_login_count=0,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User signed up: user_id=%s", user.id)
    return user


def login(
    db: Session,
    email: str,
    password: str,
    *,
    lockout: LockoutPolicy,
    tokens: CsrfTokenRegistry,
    now: datetime,
) -> LoginResult:
    """
    Verify credentials and drive the lockout state machine for the account.

    A lapsed lockout is cleared before the attempt is evaluated. On success the
    failed-attempt count is cleared and exactly one anti-forgery token is issued.
    Raises LoginFailure carrying emailNotFound, attemptsLeft or accountLocked.
    """
    if not email or not password:
        raise ValidationError("Please provide email and password.")
    email = _require_email(email)

    found = db.query(User.id).filter(User.email == email).first()
    if found is None:
        raise LoginFailure("Email not found.", {"emailNotFound": True})

    with lockout.serialized(db, found.id) as user:
        status = lockout.check(user, now)
        if status.locked:
            db.commit()
            raise LoginFailure(
                f"Account locked. Try again in {status.minutes_left} minute(s).",
                {"accountLocked": True, "minutesLeft": status.minutes_left},
            )

        if not verify_password(password, user.password_hash):
            status = lockout.register_failure(user, now)
            db.commit()
            if status.locked:
                raise LoginFailure(
                    f"Too many failed attempts. Account locked for {status.minutes_left} minute(s).",
                    {"accountLocked": True, "minutesLeft": status.minutes_left},
                )
            raise LoginFailure(
                f"Invalid password. {status.attempts_left} attempt(s) left.",
                {"attemptsLeft": status.attempts_left},
            )

        lockout.register_success(user, now)
        db.commit()

    db.refresh(user)
    logger.info("Login succeeded: user_id=%s", user.id)
    return LoginResult(user=user, csrf_token=tokens.issue(user.email))


def change_password(
    db: Session,
    email: str,
    old_password: str,
    new_password: str,
    *,
    csrf_token: str | None,
    lockout: LockoutPolicy,
    tokens: CsrfTokenRegistry,
    now: datetime,
) -> User:
    """
    Replace the password after checking the token binding and the old password.

    Every anti-forgery token bound to the account is revoked on success, so all
    sessions must log in again.
    """
    if not email or not old_password or not new_password:
        raise ValidationError("Please provide email, oldPassword and newPassword.")
    email = _require_email(email)
    tokens.validate(csrf_token, email)
    _require_strong_password(new_password, label="New password")
    if old_password == new_password:
        raise ValidationError("New password must be different from current password")

    found = db.query(User.id).filter(User.email == email).first()
    if found is None:
        raise AuthenticationError("Invalid credentials.")

    with lockout.serialized(db, found.id) as user:
        status = lockout.check(user, now)
        if status.locked:
            db.commit()
            raise AccountLockedError(status.minutes_left)
        if not verify_password(old_password, user.password_hash):
            db.commit()
            raise AuthenticationError("Current password is incorrect.")
        user.password_hash = hash_password(new_password)
        db.commit()

    tokens.revoke_all(email)
    logger.info("Password changed: user_id=%s", user.id)
    return user
