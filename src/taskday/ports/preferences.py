"""User preferences interface."""

from typing import Protocol


class PreferencesRepository(Protocol):
    """Interface for reading and writing per-user preferences."""

    def get_user_timezone(self, user_id: str) -> str | None:
        """Stored IANA zone name, or None if the user never set one."""
        ...

    def get_completed_task_retention_days(self, user_id: str) -> int:
        """How many days completed tasks stay visible."""
        ...

    def set_user_timezone(self, user_id: str, timezone: str) -> None:
        """Persist a new timezone preference."""
        ...
