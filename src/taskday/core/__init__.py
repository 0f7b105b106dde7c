"""Functional core - pure business logic with no I/O."""

from .tasks import Task, TaskStatus, Priority, sort_tasks, sort_key
from .dates import DateBoundaries, compute_boundaries, to_utc, validate_timezone
from .classify import Bucket, FilterCounts, classify, count_buckets, primary_bucket, is_recently_completed
from .predicates import Clause, InstantRange, TaskPredicate
from .query import FilterQuery, build_predicate, CANONICAL_ORDER

__all__ = [
    # Tasks
    "Task",
    "TaskStatus",
    "Priority",
    "sort_tasks",
    "sort_key",
    # Dates
    "DateBoundaries",
    "compute_boundaries",
    "to_utc",
    "validate_timezone",
    # Classification
    "Bucket",
    "classify",
    "primary_bucket",
    "is_recently_completed",
    "FilterCounts",
    "count_buckets",
    # Predicates
    "Clause",
    "InstantRange",
    "TaskPredicate",
    "FilterQuery",
    "build_predicate",
    "CANONICAL_ORDER",
]
