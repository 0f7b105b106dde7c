"""Bucket counts for sidebar badges.

One boundary resolution and one bulk scan per (tenant, user), classified in
memory, instead of one count query per bucket. Results are cached for a few
seconds to absorb polling, keyed by the user's resolved timezone so a zone
change is picked up as soon as the resolver sees it.
"""

import logging
from datetime import datetime

from .core.classify import Bucket, FilterCounts, count_buckets
from .core.dates import compute_boundaries
from .core.query import FilterQuery, build_predicate
from .filters import utc_now
from .ports import Cache, TaskStore
from .timezones import TimezoneResolver

logger = logging.getLogger(__name__)


class CountAggregator:
    """
    Computes all bucket counts in one pass.

    Counts equal what TaskFilterEngine returns for each bucket with a
    default query. This path feeds a display badge, so any failure yields
    zero counts instead of raising; failures are never cached.
    """

    def __init__(
        self,
        store: TaskStore,
        resolver: TimezoneResolver,
        cache: Cache,
        ttl: float = 5.0,
    ):
        self.store = store
        self.resolver = resolver
        self.cache = cache
        self.ttl = ttl

    @staticmethod
    def _key(tenant_id: str, user_id: str, timezone_id: str) -> tuple[str, str, str, str]:
        return ("counts", tenant_id, user_id, timezone_id)

    def get_filter_counts(
        self,
        tenant_id: str,
        user_id: str,
        now: datetime | None = None,
    ) -> FilterCounts:
        """Counts for every bucket; all zero if the store is unavailable."""
        timezone_id = self.resolver.resolve(user_id)
        key = self._key(tenant_id, user_id, timezone_id)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Count cache hit for {tenant_id}/{user_id}")
            return cached

        try:
            counts = self._compute(tenant_id, user_id, timezone_id, now or utc_now())
        except Exception as e:
            logger.warning(f"Counting tasks failed for {tenant_id}/{user_id}, returning zeros: {e}")
            return FilterCounts()

        self.cache.set(key, counts, self.ttl)
        return counts

    def _compute(self, tenant_id: str, user_id: str, timezone_id: str, now: datetime) -> FilterCounts:
        window = self.resolver.completed_window(user_id)
        boundaries = compute_boundaries(timezone_id, window, now)
        predicate = build_predicate(FilterQuery(bucket=Bucket.ALL), boundaries)
        tasks = self.store.find_tasks(tenant_id, user_id, predicate)
        return count_buckets(tasks, boundaries)

    def invalidate(self, tenant_id: str, user_id: str) -> None:
        """Drop cached counts after the user's tasks changed."""
        self.cache.delete(self._key(tenant_id, user_id, self.resolver.resolve(user_id)))
