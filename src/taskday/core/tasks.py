"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum


class TaskStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Sort ranks: lower status rank first, higher priority rank first.
STATUS_RANK = {
    TaskStatus.ACTIVE: 0,
    TaskStatus.COMPLETED: 1,
    TaskStatus.ARCHIVED: 2,
}

PRIORITY_RANK = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.URGENT: 4,
}

OPEN_STATUSES = frozenset({TaskStatus.ACTIVE, TaskStatus.ARCHIVED})


def ensure_utc(instant: datetime | None, field_name: str = "instant") -> datetime | None:
    """Normalise an aware datetime to UTC. Naive datetimes are rejected."""
    if instant is None:
        return None
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError(f"{field_name} must be timezone-aware, got naive {instant!r}")
    return instant.astimezone(timezone.utc)


@dataclass(frozen=True)
class Task:
    """A task owned by one user inside one tenant."""

    id: str
    tenant_id: str
    user_id: str
    title: str
    status: TaskStatus
    priority: Priority
    due_at: datetime | None
    created_at: datetime
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.status is TaskStatus.COMPLETED and self.completed_at is None:
            raise ValueError(f"Completed task {self.id} has no completion instant")
        if self.status is TaskStatus.ACTIVE and self.completed_at is not None:
            raise ValueError(f"Active task {self.id} cannot have a completion instant")
        # Frozen dataclass, so normalise through object.__setattr__
        object.__setattr__(self, "due_at", ensure_utc(self.due_at, "due_at"))
        object.__setattr__(self, "created_at", ensure_utc(self.created_at, "created_at"))
        object.__setattr__(self, "completed_at", ensure_utc(self.completed_at, "completed_at"))

    @property
    def is_open(self) -> bool:
        return self.status is not TaskStatus.COMPLETED

    def complete(self, at: datetime) -> "Task":
        """Return a completed copy of this task."""
        return replace(self, status=TaskStatus.COMPLETED, completed_at=at)

    def to_dict(self) -> dict:
        """Serialise to a JSON-friendly dict."""
        return {
            "id": self.id,
            "tenantId": self.tenant_id,
            "userId": self.user_id,
            "title": self.title,
            "status": self.status.value,
            "priority": self.priority.value,
            "dueDate": self.due_at.isoformat() if self.due_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a dict shaped like ``to_dict`` output."""

        def _instant(value: str | None) -> datetime | None:
            return datetime.fromisoformat(value) if value else None

        return cls(
            id=data["id"],
            tenant_id=data["tenantId"],
            user_id=data["userId"],
            title=data["title"],
            status=TaskStatus(data.get("status", "active")),
            priority=Priority(data.get("priority", "medium")),
            due_at=_instant(data.get("dueDate")),
            created_at=_instant(data["createdAt"]),
            completed_at=_instant(data.get("completedAt")),
        )


def sort_key(task: Task) -> tuple:
    """
    Canonical ordering key.

    status (active, completed, archived), priority descending, due date
    ascending with undated tasks last, newest first, then id.
    """
    due = task.due_at.timestamp() if task.due_at else 0.0
    return (
        STATUS_RANK[task.status],
        -PRIORITY_RANK[task.priority],
        task.due_at is None,
        due,
        -task.created_at.timestamp(),
        task.id,
    )


def sort_tasks(tasks: list[Task]) -> list[Task]:
    """
    Sort tasks into the canonical display order.

    Pure function - no I/O.
    """
    return sorted(tasks, key=sort_key)
