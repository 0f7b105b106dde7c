"""Timezone-aware task filtering.

TaskFilterEngine is the list entry point used by the API layer: it resolves
the user's day boundaries, turns a FilterQuery into a store predicate, runs
the query and returns tasks in canonical order together with a count that
always agrees with them.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .core.dates import DateBoundaries, compute_boundaries
from .core.predicates import TaskPredicate
from .core.query import CANONICAL_ORDER, FilterQuery, build_predicate
from .core.tasks import Task, sort_tasks
from .errors import StoreQueryFailed
from .ports import TaskStore
from .timezones import TimezoneResolver

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGE_SIZE = 1000


@dataclass
class FilterResult:
    """Ordered tasks plus the total matching the same predicate."""

    tasks: list[Task] = field(default_factory=list)
    count: int = 0
    has_more: bool = False
    boundaries: DateBoundaries | None = None

    def to_dict(self) -> dict:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "totalCount": self.count,
            "hasMore": self.has_more,
        }


def utc_now() -> datetime:
    """Single source of "now" for entry points that were not given one."""
    return datetime.now(timezone.utc)


class TaskFilterEngine:
    """
    Lists a user's tasks for one bucket.

    Store errors surface as StoreQueryFailed; the engine never retries and
    never returns a partial result.
    """

    def __init__(
        self,
        store: TaskStore,
        resolver: TimezoneResolver,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ):
        self.store = store
        self.resolver = resolver
        self.max_page_size = max_page_size

    def boundaries_for(self, user_id: str, now: datetime | None = None) -> DateBoundaries:
        """Resolve the user's zone and retention window, then compute boundaries."""
        now = now or utc_now()
        timezone_id = self.resolver.resolve(user_id)
        window = self.resolver.completed_window(user_id)
        return compute_boundaries(timezone_id, window, now)

    def predicate_for(
        self,
        user_id: str,
        query: FilterQuery,
        now: datetime | None = None,
    ) -> tuple[TaskPredicate, DateBoundaries]:
        boundaries = self.boundaries_for(user_id, now)
        return build_predicate(query, boundaries), boundaries

    def get_filtered_tasks(
        self,
        tenant_id: str,
        user_id: str,
        query: FilterQuery | None = None,
        now: datetime | None = None,
    ) -> FilterResult:
        """
        Tasks in ``query.bucket`` for the user at ``now``.

        Unpaginated: one find, count = len(tasks). Paginated: a find for the
        page and a count with the identical predicate.
        """
        query = query or FilterQuery()
        predicate, boundaries = self.predicate_for(user_id, query, now)

        if not query.is_paginated:
            tasks = self._find(tenant_id, user_id, predicate)
            tasks = sort_tasks(tasks)
            return FilterResult(tasks=tasks, count=len(tasks), has_more=False, boundaries=boundaries)

        limit = max(1, min(query.limit or self.max_page_size, self.max_page_size))
        offset = max(0, query.offset)
        page = self._find(tenant_id, user_id, predicate, limit=limit, offset=offset)
        total = self._count(tenant_id, user_id, predicate)
        return FilterResult(
            tasks=sort_tasks(page),
            count=total,
            has_more=offset + len(page) < total,
            boundaries=boundaries,
        )

    def _find(
        self,
        tenant_id: str,
        user_id: str,
        predicate: TaskPredicate,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Task]:
        try:
            return self.store.find_tasks(
                tenant_id,
                user_id,
                predicate,
                order=CANONICAL_ORDER,
                limit=limit,
                offset=offset,
            )
        except Exception as e:
            logger.error(f"find_tasks failed for {tenant_id}/{user_id} ({predicate.description}): {e}")
            raise StoreQueryFailed("find_tasks", e) from e

    def _count(self, tenant_id: str, user_id: str, predicate: TaskPredicate) -> int:
        try:
            return self.store.count_tasks(tenant_id, user_id, predicate)
        except Exception as e:
            logger.error(f"count_tasks failed for {tenant_id}/{user_id} ({predicate.description}): {e}")
            raise StoreQueryFailed("count_tasks", e) from e
