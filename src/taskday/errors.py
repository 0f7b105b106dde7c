"""Exception types raised by taskday."""


class TaskdayError(Exception):
    """Base class for taskday errors."""

    pass


class InvalidTimezone(TaskdayError):
    """Raised when a timezone identifier cannot be loaded.

    The resolver recovers from this locally by substituting UTC.
    """

    def __init__(self, timezone_id: object):
        super().__init__(f"Invalid timezone: {timezone_id!r}")
        self.timezone_id = timezone_id


class InvalidDateFormat(TaskdayError, ValueError):
    """Raised when a calendar-date string is not a real YYYY-MM-DD date."""

    def __init__(self, value: object, reason: str = "expected YYYY-MM-DD"):
        super().__init__(f"Invalid date {value!r}: {reason}")
        self.value = value
        self.reason = reason


class StoreQueryFailed(TaskdayError):
    """Raised when the task store fails to answer a query."""

    def __init__(self, operation: str, cause: BaseException | None = None):
        message = f"Task store query failed during {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.operation = operation
