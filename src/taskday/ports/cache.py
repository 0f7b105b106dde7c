"""Cache interface."""

from typing import Any, Hashable, Protocol


class Cache(Protocol):
    """Key-value cache with per-entry TTL."""

    def get(self, key: Hashable) -> Any | None:
        """Cached value, or None if missing or expired."""
        ...

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        """Store a value for ``ttl`` seconds, replacing any existing entry."""
        ...

    def delete(self, key: Hashable) -> None:
        """Evict an entry if present."""
        ...

    def clear(self) -> None:
        """Evict everything."""
        ...
