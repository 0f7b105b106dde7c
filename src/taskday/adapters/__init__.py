"""Adapters - I/O implementations of ports."""

from .memory_cache import MemoryCache
from .memory_store import MemoryTaskStore
from .sqlite_store import SqliteTaskStore
from .json_preferences import JsonPreferencesStore
from .rest_preferences import RestPreferencesAdapter

__all__ = [
    "MemoryCache",
    "MemoryTaskStore",
    "SqliteTaskStore",
    "JsonPreferencesStore",
    "RestPreferencesAdapter",
]
