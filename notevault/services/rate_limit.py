"""
Fixed-window rate limiting per (endpoint class, client identifier).

Advisory flood control for the auth endpoints; it sits in front of, and does not
replace, the account lockout in services.lockout.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from notevault.core.clock import Clock, minutes_until, utcnow
from notevault.core.errors import RateLimitError
from notevault.services.ttl_store import InMemoryTTLStore, StoreEntry, TTLStore

if TYPE_CHECKING:
    from notevault.core.config import Settings

logger = logging.getLogger(__name__)

LOGIN = "login"
SIGNUP = "signup"
PASSWORD_CHANGE = "password-change"


@dataclass(frozen=True)
class RateLimitRule:
    max_requests: int
    window: timedelta


@dataclass(frozen=True)
class WindowCounter:
    """Attempts counted in the window that ends at the entry's expires_at."""

    count: int
    rejected: bool = False


def rules_from_settings(settings: "Settings") -> dict[str, RateLimitRule]:
    """Build the per-endpoint-class limits from configuration."""
    return {
        LOGIN: RateLimitRule(
            settings.RATE_LIMIT_LOGIN_MAX,
            timedelta(minutes=settings.RATE_LIMIT_LOGIN_WINDOW_MINUTES),
        ),
        SIGNUP: RateLimitRule(
            settings.RATE_LIMIT_SIGNUP_MAX,
            timedelta(minutes=settings.RATE_LIMIT_SIGNUP_WINDOW_MINUTES),
        ),
        PASSWORD_CHANGE: RateLimitRule(
            settings.RATE_LIMIT_PASSWORD_CHANGE_MAX,
            timedelta(minutes=settings.RATE_LIMIT_PASSWORD_CHANGE_WINDOW_MINUTES),
        ),
    }


class RateLimiter:
    def __init__(
        self,
        rules: dict[str, RateLimitRule],
        store: TTLStore | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.rules = rules
        self.store = store if store is not None else InMemoryTTLStore()
        self.clock = clock

    def hit(self, endpoint_class: str, client_id: str) -> int:
        """
        Count one request against the window for (endpoint_class, client_id).

        Returns the number of requests left in the window. Raises RateLimitError
        (with minutes until the window resets) once the maximum has been reached.
        """
        rule = self.rules[endpoint_class]
        now = self.clock()

        def _advance(entry: StoreEntry | None) -> StoreEntry:
            if entry is None or entry.is_expired(now):
                return StoreEntry(WindowCounter(count=1), now + rule.window)
            counter: WindowCounter = entry.value
            if counter.count >= rule.max_requests:
                return StoreEntry(WindowCounter(counter.count, rejected=True), entry.expires_at)
            return StoreEntry(WindowCounter(counter.count + 1), entry.expires_at)

        entry = self.store.update((endpoint_class, client_id), _advance)
        counter = entry.value
        if counter.rejected:
            minutes_left = max(1, minutes_until(entry.expires_at, now))
            logger.warning(
                "Rate limit exceeded: endpoint=%s client=%s minutes_left=%s",
                endpoint_class,
                client_id,
                minutes_left,
            )
            raise RateLimitError(minutes_left)
        return rule.max_requests - counter.count

    def sweep(self) -> int:
        """Purge records whose window has elapsed."""
        return self.store.sweep(self.clock())
