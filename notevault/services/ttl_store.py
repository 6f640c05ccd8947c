"""
Concurrency-safe key-value store with expiry metadata.

Backs the anti-forgery token registry and the rate limiter. Expiry is metadata:
get() returns expired entries so callers can tell "expired" from "unknown";
sweep() removes them to bound memory. A shared store (e.g. Redis) can implement
the same interface for multi-process deployments.
"""

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class StoreEntry:
    """A stored value and the moment it stops being valid."""

    value: Any
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class TTLStore(ABC):
    """Interface for expiring key-value state shared across requests."""

    @abstractmethod
    def get(self, key: Hashable) -> StoreEntry | None:
        ...

    @abstractmethod
    def put(self, key: Hashable, value: Any, expires_at: datetime) -> None:
        ...

    @abstractmethod
    def delete(self, key: Hashable) -> bool:
        ...

    @abstractmethod
    def update(
        self,
        key: Hashable,
        fn: Callable[[StoreEntry | None], StoreEntry | None],
    ) -> StoreEntry | None:
        """Atomically replace the entry at key with fn(current); None deletes it."""

    @abstractmethod
    def delete_matching(self, predicate: Callable[[Hashable, StoreEntry], bool]) -> int:
        ...

    @abstractmethod
    def sweep(self, now: datetime) -> int:
        """Remove every entry expired at now; return how many were removed."""

    @abstractmethod
    def __len__(self) -> int:
        ...


class InMemoryTTLStore(TTLStore):
    """Single-process store guarded by one coarse lock; critical sections are short."""

    def __init__(self) -> None:
        self._entries: dict[Hashable, StoreEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> StoreEntry | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: Hashable, value: Any, expires_at: datetime) -> None:
        with self._lock:
            self._entries[key] = StoreEntry(value=value, expires_at=expires_at)

    def delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def update(
        self,
        key: Hashable,
        fn: Callable[[StoreEntry | None], StoreEntry | None],
    ) -> StoreEntry | None:
        with self._lock:
            new_entry = fn(self._entries.get(key))
            if new_entry is None:
                self._entries.pop(key, None)
            else:
                self._entries[key] = new_entry
            return new_entry

    def delete_matching(self, predicate: Callable[[Hashable, StoreEntry], bool]) -> int:
        with self._lock:
            doomed = [k for k, entry in self._entries.items() if predicate(k, entry)]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def sweep(self, now: datetime) -> int:
        return self.delete_matching(lambda _key, entry: entry.is_expired(now))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
