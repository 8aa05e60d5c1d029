"""Time-to-live cache for probe results.

Entries are idempotent probe outcomes (``True``/``False``), so concurrent
writers need no lock: the last write wins and every write is valid.
The clock is injectable so tests can expire entries without sleeping.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

DEFAULT_TTL: float = 30.0

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')


@dataclass
class CacheEntry(Generic[V]):
    value: V
    expires_at: float


class TTLCache(Generic[K, V]):
    """Per-key memo whose entries are never served at or past ``expires_at``."""

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[K, CacheEntry[V]] = {}

    def get(self, key: K) -> CacheEntry[V] | None:
        """Return the live entry for *key*, or None on miss/expiry."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            return None
        return entry

    def set(self, key: K, value: V) -> CacheEntry[V]:
        entry = CacheEntry(value=value, expires_at=self._clock() + self.ttl)
        self._entries[key] = entry
        return entry

    def invalidate(self, key: K | None = None) -> None:
        """Drop one entry, or every entry when *key* is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]
