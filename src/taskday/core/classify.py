"""Pure bucket classification - no I/O dependencies."""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable

from .dates import DateBoundaries
from .tasks import Task


class Bucket(Enum):
    """Named task classifications exposed to the API layer."""

    TODAY = "today"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    NO_DUE_DATE = "no-due-date"
    FOCUS = "focus"
    ALL = "all"

    @classmethod
    def parse(cls, value: "str | Bucket") -> "Bucket":
        """Accept wire names ("no-due-date") and enum names ("NO_DUE_DATE")."""
        if isinstance(value, cls):
            return value
        normalized = value.strip().lower().replace("_", "-")
        for bucket in cls:
            if bucket.value == normalized:
                return bucket
        valid = ", ".join(b.value for b in cls)
        raise ValueError(f"Unknown bucket {value!r} (expected one of: {valid})")


# Mutually exclusive buckets that decide where a task sits on the timeline.
DATE_BUCKETS = (Bucket.OVERDUE, Bucket.TODAY, Bucket.UPCOMING, Bucket.NO_DUE_DATE)


def primary_bucket(task: Task, boundaries: DateBoundaries) -> Bucket | None:
    """
    The single date bucket an open task belongs to.

    Returns None for completed tasks and for tasks due on or after
    ``week_from_now`` (they only match ALL).
    """
    if not task.is_open:
        return None
    if task.due_at is None:
        return Bucket.NO_DUE_DATE
    if task.due_at < boundaries.today_start:
        return Bucket.OVERDUE
    if task.due_at < boundaries.today_end:
        return Bucket.TODAY
    if task.due_at < boundaries.week_from_now:
        return Bucket.UPCOMING
    return None


def classify(task: Task, boundaries: DateBoundaries) -> frozenset[Bucket]:
    """
    All buckets a task matches.

    Open tasks match ALL plus at most one date bucket, and FOCUS when that
    bucket is OVERDUE or TODAY. Completed tasks match only ALL, and only
    while they are inside the retention window.
    """
    if not task.is_open:
        if is_recently_completed(task, boundaries.completed_cutoff):
            return frozenset({Bucket.ALL})
        return frozenset()
    buckets = {Bucket.ALL}
    primary = primary_bucket(task, boundaries)
    if primary is not None:
        buckets.add(primary)
    if primary in (Bucket.OVERDUE, Bucket.TODAY):
        buckets.add(Bucket.FOCUS)
    return frozenset(buckets)


def is_recently_completed(task: Task, cutoff: datetime) -> bool:
    """Completed at or after the retention cutoff."""
    return task.completed_at is not None and not task.is_open and task.completed_at >= cutoff


@dataclass(frozen=True)
class FilterCounts:
    """Number of tasks per bucket, as shown on the sidebar badges."""

    all: int = 0
    today: int = 0
    overdue: int = 0
    upcoming: int = 0
    no_due_date: int = 0
    focus: int = 0

    def get(self, bucket: Bucket) -> int:
        return getattr(self, _COUNT_FIELDS[bucket])

    def to_dict(self) -> dict[str, int]:
        return {
            "all": self.all,
            "focus": self.focus,
            "today": self.today,
            "overdue": self.overdue,
            "upcoming": self.upcoming,
            "noDueDate": self.no_due_date,
        }


_COUNT_FIELDS = {
    Bucket.ALL: "all",
    Bucket.TODAY: "today",
    Bucket.OVERDUE: "overdue",
    Bucket.UPCOMING: "upcoming",
    Bucket.NO_DUE_DATE: "no_due_date",
    Bucket.FOCUS: "focus",
}


def count_buckets(tasks: Iterable[Task], boundaries: DateBoundaries) -> FilterCounts:
    """
    Tally every bucket in a single pass over the tasks.

    Pure function - no I/O.
    """
    totals = Counter()
    for task in tasks:
        totals.update(classify(task, boundaries))
    return FilterCounts(**{name: totals[bucket] for bucket, name in _COUNT_FIELDS.items()})
