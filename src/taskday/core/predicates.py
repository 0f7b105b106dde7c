"""Store-neutral task predicates.

A TaskPredicate is an OR of Clauses; each Clause is an AND of simple
conditions. Stores either evaluate ``matches`` directly (in-memory) or
translate the same structure into their query language (SQL).
"""

from dataclasses import dataclass, field
from datetime import datetime

from .tasks import Priority, Task, TaskStatus


@dataclass(frozen=True)
class InstantRange:
    """Half-open range [start, end). Either side may be open-ended."""

    start: datetime | None = None
    end: datetime | None = None

    def contains(self, instant: datetime | None) -> bool:
        if instant is None:
            return False
        if self.start is not None and instant < self.start:
            return False
        if self.end is not None and instant >= self.end:
            return False
        return True


@dataclass(frozen=True)
class Clause:
    """Conjunction of status, due-date and completion conditions."""

    statuses: frozenset[TaskStatus]
    due: InstantRange | None = None
    due_is_null: bool = False
    completed: InstantRange | None = None

    def __post_init__(self) -> None:
        if self.due is not None and self.due_is_null:
            raise ValueError("A clause cannot require both a due range and no due date")

    def matches(self, task: Task) -> bool:
        if task.status not in self.statuses:
            return False
        if self.due_is_null and task.due_at is not None:
            return False
        if self.due is not None and not self.due.contains(task.due_at):
            return False
        if self.completed is not None and not self.completed.contains(task.completed_at):
            return False
        return True


@dataclass(frozen=True)
class TaskPredicate:
    """Disjunction of clauses, narrowed by optional priority and title search."""

    clauses: tuple[Clause, ...]
    priority: Priority | None = None
    search: str | None = None
    description: str = field(default="", compare=False)

    def matches(self, task: Task) -> bool:
        if self.priority is not None and task.priority is not self.priority:
            return False
        if self.search and self.search.casefold() not in task.title.casefold():
            return False
        return any(clause.matches(task) for clause in self.clauses)

    def filter(self, tasks: list[Task]) -> list[Task]:
        return [t for t in tasks if self.matches(t)]
