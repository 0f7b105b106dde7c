"""Task store interface."""

from typing import Protocol, Sequence

from taskday.core.predicates import TaskPredicate
from taskday.core.tasks import Task


class TaskStore(Protocol):
    """Interface for querying tasks from any backend."""

    def find_tasks(
        self,
        tenant_id: str,
        user_id: str,
        predicate: TaskPredicate,
        order: Sequence[str] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Task]:
        """Fetch tasks matching a predicate, optionally ordered and paged."""
        ...

    def count_tasks(self, tenant_id: str, user_id: str, predicate: TaskPredicate) -> int:
        """Count tasks matching a predicate."""
        ...
