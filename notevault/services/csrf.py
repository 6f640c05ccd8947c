"""
Anti-forgery token registry.

Tokens are issued at login, bound to the account email, echoed by the client in
a custom header on protected calls, and revoked in bulk on password change.
"""

import logging
import secrets
from datetime import timedelta

from notevault.core.clock import Clock, utcnow
from notevault.core.errors import CsrfTokenError
from notevault.services.ttl_store import InMemoryTTLStore, TTLStore

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


class CsrfTokenRegistry:
    def __init__(
        self,
        ttl: timedelta = timedelta(hours=1),
        store: TTLStore | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.ttl = ttl
        self.store = store if store is not None else InMemoryTTLStore()
        self.clock = clock

    def issue(self, identity: str) -> str:
        """Create a random token bound to identity (case-insensitive) for ttl."""
        token = secrets.token_hex(TOKEN_BYTES)
        self.store.put(token, identity.strip().lower(), self.clock() + self.ttl)
        return token

    def validate(self, token: str | None, claimed_identity: str | None = None) -> str:
        """
        Check a presented token and return the identity it is bound to.

        Raises CsrfTokenError with reason missing, invalid, expired or mismatch.
        Expiry is checked here regardless of when the last sweep ran.
        """
        if not token:
            raise CsrfTokenError("missing")
        entry = self.store.get(token)
        if entry is None:
            raise CsrfTokenError("invalid")
        if entry.is_expired(self.clock()):
            self.store.delete(token)
            raise CsrfTokenError("expired")
        bound_identity: str = entry.value
        if claimed_identity is not None and claimed_identity.strip().lower() != bound_identity:
            logger.warning("CSRF token presented for a different identity")
            raise CsrfTokenError("mismatch")
        return bound_identity

    def revoke_all(self, identity: str) -> int:
        """Delete every token bound to identity; returns how many were removed."""
        identity = identity.strip().lower()
        revoked = self.store.delete_matching(lambda _token, entry: entry.value == identity)
        if revoked:
            logger.info("Revoked %s anti-forgery token(s) for %s", revoked, identity)
        return revoked

    def sweep(self) -> int:
        """Purge expired tokens to bound memory."""
        return self.store.sweep(self.clock())
