"""Tests for CountAggregator."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from taskday.adapters.memory_store import MemoryTaskStore
from taskday.adapters.sqlite_store import SqliteTaskStore
from taskday.core.classify import Bucket, FilterCounts
from taskday.core.dates import compute_boundaries
from taskday.core.query import FilterQuery
from taskday.core.tasks import TaskStatus
from taskday.counts import CountAggregator
from taskday.filters import TaskFilterEngine
from taskday.timezones import TimezoneResolver


@pytest.fixture
def tasks(make_task, now):
    start = compute_boundaries("Asia/Kolkata", 7, now).today_start
    result = [make_task(due_at=start + timedelta(hours=h)) for h in range(-50, 24 * 9, 5)]
    result += [make_task(due_at=None) for _ in range(3)]
    result.append(make_task(due_at=start + timedelta(hours=1), status=TaskStatus.ARCHIVED))
    result.append(make_task(due_at=start - timedelta(days=4), status=TaskStatus.COMPLETED))
    result.append(make_task(due_at=start + timedelta(hours=2), status=TaskStatus.COMPLETED))
    return result


@pytest.fixture
def resolver(preferences, cache):
    preferences.timezones["u1"] = "Asia/Kolkata"
    return TimezoneResolver(preferences, cache)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tasks, tmp_path):
    if request.param == "memory":
        return MemoryTaskStore(tasks)
    store = SqliteTaskStore(tmp_path / "tasks.sqlite3")
    for task in tasks:
        store.add(task)
    return store


class TestGetFilterCounts:
    def test_equals_engine_per_bucket(self, store, resolver, cache, now):
        counts = CountAggregator(store, resolver, cache).get_filter_counts("t1", "u1", now=now)
        engine = TaskFilterEngine(store, resolver)
        for bucket in Bucket:
            result = engine.get_filtered_tasks("t1", "u1", FilterQuery(bucket=bucket), now=now)
            assert counts.get(bucket) == result.count, bucket
        assert counts.all > counts.focus > 0

    def test_all_includes_recently_completed(self, resolver, cache, now, make_task):
        store = MemoryTaskStore(
            [
                make_task(due_at=None),
                make_task(due_at=None, status=TaskStatus.COMPLETED, completed_at=now - timedelta(hours=1)),
                make_task(due_at=None, status=TaskStatus.COMPLETED, completed_at=now - timedelta(days=30)),
            ]
        )
        counts = CountAggregator(store, resolver, cache).get_filter_counts("t1", "u1", now=now)
        assert counts.all == 2
        assert counts.no_due_date == 1

    def test_unknown_user_is_zero(self, store, resolver, cache, now):
        assert CountAggregator(store, resolver, cache).get_filter_counts("t1", "ghost", now=now) == FilterCounts()

    def test_single_scan(self, tasks, resolver, cache, now):
        store = MagicMock(wraps=MemoryTaskStore(tasks))
        CountAggregator(store, resolver, cache).get_filter_counts("t1", "u1", now=now)
        assert store.find_tasks.call_count == 1
        store.count_tasks.assert_not_called()


class TestCaching:
    def test_cached_within_ttl(self, tasks, resolver, cache, clock, now, make_task):
        store = MemoryTaskStore(tasks)
        aggregator = CountAggregator(store, resolver, cache, ttl=5)
        first = aggregator.get_filter_counts("t1", "u1", now=now)
        store.add(make_task(due_at=None))
        clock.advance(4)
        assert aggregator.get_filter_counts("t1", "u1", now=now) == first
        clock.advance(2)
        assert aggregator.get_filter_counts("t1", "u1", now=now).no_due_date == first.no_due_date + 1

    def test_invalidate(self, tasks, resolver, cache, now, make_task):
        store = MemoryTaskStore(tasks)
        aggregator = CountAggregator(store, resolver, cache)
        first = aggregator.get_filter_counts("t1", "u1", now=now)
        store.add(make_task(due_at=None))
        aggregator.invalidate("t1", "u1")
        assert aggregator.get_filter_counts("t1", "u1", now=now).all == first.all + 1

    def test_keyed_by_tenant_and_user(self, tasks, resolver, cache, now, make_task):
        store = MemoryTaskStore(tasks + [make_task(due_at=None, tenant_id="t2")])
        aggregator = CountAggregator(store, resolver, cache)
        assert aggregator.get_filter_counts("t1", "u1", now=now).all > 1
        assert aggregator.get_filter_counts("t2", "u1", now=now).all == 1

    def test_timezone_change_recomputes(self, resolver, cache, now, make_task):
        # 20:00Z is tomorrow in Kolkata (+05:30) but still today in UTC
        store = MemoryTaskStore([make_task(due_at=now.replace(hour=20))])
        aggregator = CountAggregator(store, resolver, cache, ttl=60)
        counts = aggregator.get_filter_counts("t1", "u1", now=now)
        assert (counts.today, counts.upcoming) == (0, 1)
        resolver.update_timezone("u1", "UTC")
        counts = aggregator.get_filter_counts("t1", "u1", now=now)
        assert (counts.today, counts.upcoming) == (1, 0)


class TestFailures:
    def test_store_failure_returns_zeros(self, resolver, cache, now, caplog):
        store = MagicMock()
        store.find_tasks.side_effect = RuntimeError("connection refused")
        counts = CountAggregator(store, resolver, cache).get_filter_counts("t1", "u1", now=now)
        assert counts == FilterCounts()
        assert "connection refused" in caplog.text

    def test_failure_not_cached(self, tasks, resolver, cache, now):
        real = MemoryTaskStore(tasks)
        calls = []

        def flaky(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                raise RuntimeError("timeout")
            return real.find_tasks(*args, **kwargs)

        store = MagicMock()
        store.find_tasks.side_effect = flaky
        aggregator = CountAggregator(store, resolver, cache)
        assert aggregator.get_filter_counts("t1", "u1", now=now) == FilterCounts()
        assert aggregator.get_filter_counts("t1", "u1", now=now).all > 0
