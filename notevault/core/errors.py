"""Error taxonomy shared by services and mapped to HTTP responses in main.py."""

from typing import Any


class NoteVaultError(Exception):
    """
    Base class for service-layer errors.

    status_code is the HTTP status the error maps to; detail holds extra
    response fields (e.g. accountLocked, minutesLeft) merged into the JSON body.
    """

    status_code: int = 400

    def __init__(self, message: str, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class ValidationError(NoteVaultError):
    """Malformed or missing input (400)."""

    status_code = 400


class AuthenticationError(NoteVaultError):
    """Wrong credentials or unresolvable identity (401)."""

    status_code = 401


class LoginFailure(AuthenticationError):
    """Rejected login; reported as success:false with HTTP 200 so the client stays message-driven."""

    status_code = 200


class SessionExpiredError(AuthenticationError):
    def __init__(self, message: str = "Session expired. Please login again.") -> None:
        super().__init__(message, {"sessionExpired": True})


class AuthorizationError(NoteVaultError):
    """Role/ownership mismatch, anti-forgery failure or active lockout (403)."""

    status_code = 403


class AccountLockedError(AuthorizationError):
    def __init__(self, minutes_left: int) -> None:
        super().__init__(
            f"Account locked. Try again in {minutes_left} minute(s).",
            {"accountLocked": True, "minutesLeft": minutes_left},
        )
        self.minutes_left = minutes_left


class CsrfTokenError(AuthorizationError):
    """Anti-forgery token missing, unknown, expired or bound to another identity."""

    MESSAGES = {
        "missing": "Security token missing. Please login again.",
        "invalid": "Invalid or expired security token. Please login again.",
        "expired": "Security token expired. Please login again.",
        "mismatch": "Security token does not match this account.",
    }

    def __init__(self, reason: str) -> None:
        super().__init__(self.MESSAGES[reason], {"csrfError": True, "reason": reason})
        self.reason = reason


class NotFoundError(NoteVaultError):
    status_code = 404


class ConflictError(NoteVaultError):
    status_code = 409


class RateLimitError(NoteVaultError):
    """Too many attempts in the current window (429); always carries the wait time."""

    status_code = 429

    def __init__(self, minutes_left: int) -> None:
        super().__init__(
            f"Too many attempts. Please try again in {minutes_left} minute(s).",
            {"rateLimited": True, "minutesLeft": minutes_left},
        )
        self.minutes_left = minutes_left


class ServerError(NoteVaultError):
    """Underlying store failure (500). Message is always generic."""

    status_code = 500

    def __init__(self, message: str = "Server error") -> None:
        super().__init__(message)
