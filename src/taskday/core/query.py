"""Translate filter requests into store predicates - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime

from .classify import Bucket
from .dates import DateBoundaries
from .predicates import Clause, InstantRange, TaskPredicate
from .tasks import OPEN_STATUSES, Priority, TaskStatus

COMPLETED = frozenset({TaskStatus.COMPLETED})

# Order hint passed to stores. Stores that honour it must produce the same
# order as core.tasks.sort_key.
CANONICAL_ORDER = ("status", "-priority", "due_at", "-created_at", "id")


@dataclass(frozen=True)
class FilterQuery:
    """A bucket request with optional narrowing and pagination."""

    bucket: Bucket = Bucket.ALL
    include_completed_days: int | None = None
    priority: Priority | None = None
    search: str | None = None
    limit: int | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "bucket", Bucket.parse(self.bucket))
        if isinstance(self.priority, str):
            object.__setattr__(self, "priority", Priority(self.priority))
        if self.include_completed_days is not None and self.include_completed_days < 0:
            raise ValueError("include_completed_days must be non-negative")
        if self.search is not None:
            object.__setattr__(self, "search", self.search.strip() or None)

    @property
    def is_paginated(self) -> bool:
        return self.limit is not None or self.offset > 0


def _due_range(bucket: Bucket, boundaries: DateBoundaries) -> InstantRange | None:
    match bucket:
        case Bucket.OVERDUE:
            return InstantRange(end=boundaries.today_start)
        case Bucket.TODAY:
            return InstantRange(boundaries.today_start, boundaries.today_end)
        case Bucket.UPCOMING:
            return InstantRange(boundaries.tomorrow_start, boundaries.week_from_now)
        case Bucket.FOCUS:
            return InstantRange(end=boundaries.today_end)
    return None


def open_clause(bucket: Bucket, boundaries: DateBoundaries) -> Clause:
    """Clause matching exactly the open tasks ``classify`` puts in ``bucket``."""
    if bucket is Bucket.NO_DUE_DATE:
        return Clause(statuses=OPEN_STATUSES, due_is_null=True)
    return Clause(statuses=OPEN_STATUSES, due=_due_range(bucket, boundaries))


def completed_clauses(
    bucket: Bucket,
    boundaries: DateBoundaries,
    cutoff: datetime,
) -> tuple[Clause, ...]:
    """Clauses for completed tasks finished on or after ``cutoff``.

    TODAY and FOCUS also pick up anything completed during today.
    """
    retained = InstantRange(start=cutoff)
    if bucket is Bucket.NO_DUE_DATE:
        return (Clause(statuses=COMPLETED, due_is_null=True, completed=retained),)

    clauses = [Clause(statuses=COMPLETED, due=_due_range(bucket, boundaries), completed=retained)]
    if bucket in (Bucket.TODAY, Bucket.FOCUS):
        done_today = InstantRange(max(cutoff, boundaries.today_start), boundaries.today_end)
        clauses.append(Clause(statuses=COMPLETED, completed=done_today))
    return tuple(clauses)


def build_predicate(query: FilterQuery, boundaries: DateBoundaries) -> TaskPredicate:
    """
    Predicate for a filter query at the given boundaries.

    Pure function - no I/O.
    """
    clauses = [open_clause(query.bucket, boundaries)]
    if query.include_completed_days is not None:
        cutoff = boundaries.completed_cutoff_for(query.include_completed_days)
        clauses.extend(completed_clauses(query.bucket, boundaries, cutoff))
    elif query.bucket is Bucket.ALL:
        # ALL keeps completed tasks for the user's retention window
        clauses.extend(completed_clauses(Bucket.ALL, boundaries, boundaries.completed_cutoff))

    description = query.bucket.value
    if query.include_completed_days is not None:
        description += f"+completed({query.include_completed_days}d)"
    return TaskPredicate(
        clauses=tuple(clauses),
        priority=query.priority,
        search=query.search,
        description=description,
    )
