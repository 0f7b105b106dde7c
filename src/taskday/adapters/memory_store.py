"""In-memory task store adapter."""

from typing import Iterable, Sequence

from taskday.core.predicates import TaskPredicate
from taskday.core.query import CANONICAL_ORDER
from taskday.core.tasks import Task, sort_tasks


class MemoryTaskStore:
    """
    List-backed task store.

    Implements TaskStore protocol. Evaluates predicates with
    ``TaskPredicate.matches``. Only the canonical order hint is supported.
    """

    def __init__(self, tasks: Iterable[Task] = ()):
        self._tasks: dict[str, Task] = {t.id: t for t in tasks}

    def __len__(self) -> int:
        return len(self._tasks)

    def add(self, task: Task) -> None:
        """Insert or replace a task by id."""
        self._tasks[task.id] = task

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def _scan(self, tenant_id: str, user_id: str, predicate: TaskPredicate) -> list[Task]:
        return [
            t
            for t in self._tasks.values()
            if t.tenant_id == tenant_id and t.user_id == user_id and predicate.matches(t)
        ]

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
        tasks = self._scan(tenant_id, user_id, predicate)
        if order is not None:
            if tuple(order) != CANONICAL_ORDER:
                raise ValueError(f"Unsupported order hint: {order!r}")
            tasks = sort_tasks(tasks)
        if offset:
            tasks = tasks[offset:]
        if limit is not None:
            tasks = tasks[:limit]
        return tasks

    def count_tasks(self, tenant_id: str, user_id: str, predicate: TaskPredicate) -> int:
        """Count tasks matching a predicate."""
        return len(self._scan(tenant_id, user_id, predicate))
