"""taskday - timezone-aware task classification."""

from .core.classify import Bucket, FilterCounts
from .core.query import FilterQuery
from .counts import CountAggregator
from .errors import InvalidDateFormat, InvalidTimezone, StoreQueryFailed, TaskdayError
from .filters import FilterResult, TaskFilterEngine
from .timezones import TimezoneResolver

__all__ = [
    "Bucket",
    "FilterCounts",
    "FilterQuery",
    "FilterResult",
    "TaskFilterEngine",
    "CountAggregator",
    "TimezoneResolver",
    "TaskdayError",
    "InvalidDateFormat",
    "InvalidTimezone",
    "StoreQueryFailed",
]
