"""Ports - interfaces/protocols for external dependencies."""

from .task_store import TaskStore
from .preferences import PreferencesRepository
from .cache import Cache

__all__ = [
    "TaskStore",
    "PreferencesRepository",
    "Cache",
]
