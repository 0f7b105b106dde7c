"""Shared fixtures for taskday tests."""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from taskday.adapters.memory_cache import MemoryCache
from taskday.core.tasks import Priority, Task, TaskStatus

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePreferences:
    """In-memory PreferencesRepository that records calls."""

    def __init__(self, timezones: dict | None = None, windows: dict | None = None):
        self.timezones = dict(timezones or {})
        self.windows = dict(windows or {})
        self.timezone_calls = 0
        self.fail = False

    def get_user_timezone(self, user_id):
        self.timezone_calls += 1
        if self.fail:
            raise ConnectionError("preferences unavailable")
        return self.timezones.get(user_id)

    def get_completed_task_retention_days(self, user_id):
        if self.fail:
            raise ConnectionError("preferences unavailable")
        return self.windows.get(user_id, 7)

    def set_user_timezone(self, user_id, timezone):
        self.timezones[user_id] = timezone


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MemoryCache(sample_size=5, clock=clock)


@pytest.fixture
def preferences():
    return FakePreferences()


@pytest.fixture
def make_task():
    """Factory for tasks owned by tenant t1 / user u1 by default."""
    ids = count(1)

    def _make(
        due_at: datetime | None = None,
        status: TaskStatus = TaskStatus.ACTIVE,
        priority: Priority = Priority.MEDIUM,
        created_at: datetime | None = None,
        completed_at: datetime | None = None,
        title: str | None = None,
        id: str | None = None,
        tenant_id: str = "t1",
        user_id: str = "u1",
    ) -> Task:
        task_id = id or f"task-{next(ids):03d}"
        if status is TaskStatus.COMPLETED and completed_at is None:
            completed_at = NOW - timedelta(hours=1)
        return Task(
            id=task_id,
            tenant_id=tenant_id,
            user_id=user_id,
            title=title or task_id,
            status=status,
            priority=priority,
            due_at=due_at,
            created_at=created_at or NOW - timedelta(days=30),
            completed_at=completed_at,
        )

    return _make
