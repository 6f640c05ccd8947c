"""
Account lockout after consecutive failed logins.

States per account: ACTIVE (failed_login_count below threshold) and LOCKED
(locked_until in the future). A lapsed lockout is cleared lazily, on the next
access attempt, before that attempt is evaluated. Every read-decide-write
sequence runs under an identity-scoped lock and, where the backend supports it,
a row lock (SELECT ... FOR UPDATE).
"""

import logging
import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from notevault.core.clock import as_utc, minutes_until
from notevault.models import User

if TYPE_CHECKING:
    from notevault.core.config import Settings

logger = logging.getLogger(__name__)


class LockoutState(str, Enum):
    ACTIVE = "active"
    LOCKED = "locked"


@dataclass(frozen=True)
class LockoutStatus:
    """Outcome of a lockout evaluation: remaining lock time or remaining attempts."""

    state: LockoutState
    minutes_left: int = 0
    attempts_left: int | None = None

    @property
    def locked(self) -> bool:
        return self.state is LockoutState.LOCKED


class KeyedLock:
    """Registry of per-key mutexes; a key's mutex is dropped when nobody holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._slots: dict[Hashable, list] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            slot = self._slots.setdefault(key, [threading.Lock(), 0])
            slot[1] += 1
        slot[0].acquire()
        try:
            yield
        finally:
            slot[0].release()
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._slots[key]


class LockoutPolicy:
    def __init__(
        self,
        threshold: int = 3,
        duration: timedelta = timedelta(minutes=5),
    ) -> None:
        self.threshold = threshold
        self.duration = duration
        self._locks = KeyedLock()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "LockoutPolicy":
        return cls(
            threshold=settings.LOCKOUT_THRESHOLD,
            duration=timedelta(minutes=settings.LOCKOUT_MINUTES),
        )

    @contextmanager
    def serialized(self, db: Session, user_id: int) -> Iterator[User]:
        """
        Hold the account's lock and yield a freshly loaded, row-locked User.

        Callers mutate the yielded user through the methods below and commit
        before leaving the block.
        """
        with self._locks.hold(user_id):
            user = (
                db.query(User)
                .filter(User.id == user_id)
                .with_for_update()
                .populate_existing()
                .one()
            )
            try:
                yield user
            except BaseException:
                db.rollback()
                raise

    def check(self, user: User, now: datetime) -> LockoutStatus:
        """Report LOCKED with minutes left, or clear a lapsed lockout and report ACTIVE."""
        if user.locked_until is not None:
            if now < as_utc(user.locked_until):
                return LockoutStatus(
                    LockoutState.LOCKED,
                    minutes_left=minutes_until(user.locked_until, now),
                )
            logger.info("Lockout expired for user_id=%s; clearing", user.id)
            user.locked_until = None
            user.failed_login_count = 0
        return LockoutStatus(LockoutState.ACTIVE)

    def register_failure(self, user: User, now: datetime) -> LockoutStatus:
        """Count a failed login; lock the account when the threshold is reached."""
        user.failed_login_count = (user.failed_login_count or 0) + 1
        if user.failed_login_count >= self.threshold:
            user.locked_until = now + self.duration
            logger.warning(
                "Account locked: user_id=%s failed_attempts=%s until=%s",
                user.id,
                user.failed_login_count,
                user.locked_until.isoformat(),
            )
            return LockoutStatus(
                LockoutState.LOCKED,
                minutes_left=minutes_until(user.locked_until, now),
            )
        return LockoutStatus(
            LockoutState.ACTIVE,
            attempts_left=self.threshold - user.failed_login_count,
        )

    def register_success(self, user: User, now: datetime) -> None:
        user.failed_login_count = 0
        user.locked_until = None
        user.last_login_at = now
