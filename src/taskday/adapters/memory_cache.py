"""In-process TTL cache adapter."""

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    value: Any
    expires_at: float


class MemoryCache:
    """
    Dict-backed TTL cache.

    Implements Cache protocol. Entries are immutable and replaced on write,
    so concurrent writers race last-write-wins without locks. Expired entries
    are evicted opportunistically: each read and write samples a few random
    keys and drops the expired ones, so there is no sweeper thread.
    """

    def __init__(
        self,
        sample_size: int = 20,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ):
        self.sample_size = sample_size
        self._clock = clock
        self._rng = rng or random.Random()
        self._entries: dict[Hashable, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable) -> Any | None:
        """Cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        self.sweep()
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._discard(key, entry)
            return None
        return entry.value

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        """Store a value for ``ttl`` seconds, replacing any existing entry."""
        self._entries[key] = _Entry(value, self._clock() + ttl)
        self.sweep()

    def delete(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def sweep(self, sample_size: int | None = None) -> int:
        """Evict expired entries among a random sample. Returns evicted count."""
        size = self.sample_size if sample_size is None else sample_size
        keys = list(self._entries)
        if not keys or size <= 0:
            return 0
        now = self._clock()
        evicted = 0
        for key in self._rng.sample(keys, min(size, len(keys))):
            entry = self._entries.get(key)
            if entry is not None and entry.expires_at <= now and self._discard(key, entry):
                evicted += 1
        if evicted:
            logger.debug(f"Evicted {evicted} expired cache entries ({len(self._entries)} remain)")
        return evicted

    def _discard(self, key: Hashable, entry: _Entry) -> bool:
        # Only drop the entry we inspected; a concurrent writer may have replaced it.
        if self._entries.get(key) is entry:
            self._entries.pop(key, None)
            return True
        return False
