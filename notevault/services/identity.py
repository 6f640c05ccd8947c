"""Resolve the identity claimed on a protected request to a stored, unlocked user."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from notevault.core.errors import AccountLockedError, CsrfTokenError, SessionExpiredError
from notevault.core.security import normalize_email
from notevault.models import User
from notevault.services.lockout import LockoutPolicy


@dataclass(frozen=True)
class ByUsername:
    username: str


@dataclass(frozen=True)
class ByEmail:
    email: str


ClaimedIdentity = ByUsername | ByEmail


def claim_from_request(username: str | None, email: str | None) -> ClaimedIdentity | None:
    """
    Build the claim from loosely typed request fields.

    Email wins when both are sent: it is unique and case-normalized.
    """
    if email and email.strip():
        return ByEmail(normalize_email(email))
    if username and username.strip():
        return ByUsername(username.strip())
    return None


def resolve_identity(db: Session, claim: ClaimedIdentity) -> User | None:
    if isinstance(claim, ByEmail):
        return db.query(User).filter(User.email == claim.email).first()
    return db.query(User).filter(User.username == claim.username).first()


def validate_session(
    db: Session,
    claim: ClaimedIdentity | None,
    lockout: LockoutPolicy,
    now: datetime,
    bound_identity: str | None = None,
) -> User:
    """
    Return the user behind claim, or raise.

    SessionExpiredError (401) when nothing is claimed or no user matches;
    CsrfTokenError (403, mismatch) when bound_identity is given and is not the
    resolved user's email, checked before any lockout state is read or touched;
    AccountLockedError (403) while the account is locked. A lapsed lockout is
    cleared and committed before the request proceeds.
    """
    if claim is None:
        raise SessionExpiredError()
    user = resolve_identity(db, claim)
    if user is None:
        raise SessionExpiredError()
    if bound_identity is not None and user.email != bound_identity:
        raise CsrfTokenError("mismatch")
    if user.locked_until is None:
        return user

    with lockout.serialized(db, user.id) as locked_user:
        status = lockout.check(locked_user, now)
        db.commit()
    if status.locked:
        raise AccountLockedError(status.minutes_left)
    return locked_user
