"""File-based preferences adapter."""

import json
import logging
from pathlib import Path

from taskday.core.preferences import DEFAULT_COMPLETED_WINDOW, completed_window_days

logger = logging.getLogger(__name__)


class JsonPreferencesStore:
    """
    JSON-file preferences storage.

    Implements PreferencesRepository protocol. The file maps user id to a
    preferences object, e.g. {"u1": {"timezone": "Europe/Paris",
    "completedTaskVisibility": "7days"}}.
    """

    def __init__(self, path: Path | str, default_completed_window: int = DEFAULT_COMPLETED_WINDOW):
        self.path = Path(path).expanduser()
        self.default_completed_window = default_completed_window

    def _load(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text())
        if not isinstance(data, dict):
            raise ValueError(f"Preferences file {self.path} must contain a JSON object")
        return data

    def _save(self, data: dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True))
        tmp.replace(self.path)

    def get_preferences(self, user_id: str) -> dict:
        prefs = self._load().get(user_id) or {}
        return prefs if isinstance(prefs, dict) else {}

    def get_user_timezone(self, user_id: str) -> str | None:
        """Stored IANA zone name, or None if the user never set one."""
        return self.get_preferences(user_id).get("timezone")

    def get_completed_task_retention_days(self, user_id: str) -> int:
        """How many days completed tasks stay visible."""
        return completed_window_days(self.get_preferences(user_id), self.default_completed_window)

    def set_user_timezone(self, user_id: str, timezone: str) -> None:
        """Persist a new timezone preference."""
        self.update(user_id, timezone=timezone)

    def update(self, user_id: str, **changes) -> dict:
        """Merge changes into a user's preferences and save."""
        data = self._load()
        prefs = dict(data.get(user_id) or {})
        prefs.update(changes)
        data[user_id] = prefs
        self._save(data)
        logger.debug(f"Updated preferences for user {user_id}: {sorted(changes)}")
        return prefs
