"""Password hashing and input-shape validation for credentials."""

import re

import bcrypt

from notevault.core.config import settings

# Username/email/password shape rules (input validation).
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{3,30}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
PASSWORD_SPECIAL_CHARS = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_username(username: str) -> bool:
    return bool(USERNAME_PATTERN.match(username))


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def password_problems(password: str) -> list[str]:
    """
    Return the strength rules the password violates (empty list when acceptable).

    Rules: 8-128 characters with an uppercase letter, a lowercase letter, a number
    and a special character.
    """
    problems: list[str] = []
    if len(password) < PASSWORD_MIN_LEN:
        problems.append(f"at least {PASSWORD_MIN_LEN} characters")
    if len(password) > PASSWORD_MAX_LEN:
        problems.append(f"at most {PASSWORD_MAX_LEN} characters")
    if not re.search(r"[A-Z]", password):
        problems.append("an uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("a lowercase letter")
    if not re.search(r"[0-9]", password):
        problems.append("a number")
    if not PASSWORD_SPECIAL_CHARS.search(password):
        problems.append("a special character")
    return problems
