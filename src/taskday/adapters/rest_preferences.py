"""Preferences service adapter - HTTP client for user preferences."""

import logging

import requests

from taskday.core.preferences import DEFAULT_COMPLETED_WINDOW, completed_window_days

logger = logging.getLogger(__name__)


class RestPreferencesAdapter:
    """
    Preferences service HTTP adapter.

    Implements PreferencesRepository protocol. Talks to
    ``GET/PATCH {base_url}/users/{user_id}/preferences``. No business logic
    - just I/O. HTTP errors propagate as ``requests.RequestException``.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 5.0,
        default_completed_window: int = DEFAULT_COMPLETED_WINDOW,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.default_completed_window = default_completed_window
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, user_id: str) -> str:
        return f"{self.base_url}/users/{user_id}/preferences"

    def get_preferences(self, user_id: str) -> dict:
        """Fetch the raw preferences object. A 404 means no preferences yet."""
        resp = self._session.get(self._url(user_id), headers=self._headers(), timeout=self.timeout)
        if resp.status_code == 404:
            return {}
        resp.raise_for_status()
        data = resp.json()
        # Some deployments wrap the payload: {"preferences": {...}}
        if isinstance(data, dict) and isinstance(data.get("preferences"), dict):
            data = data["preferences"]
        return data if isinstance(data, dict) else {}

    def get_user_timezone(self, user_id: str) -> str | None:
        """Stored IANA zone name, or None if the user never set one."""
        return self.get_preferences(user_id).get("timezone")

    def get_completed_task_retention_days(self, user_id: str) -> int:
        """How many days completed tasks stay visible."""
        return completed_window_days(self.get_preferences(user_id), self.default_completed_window)

    def set_user_timezone(self, user_id: str, timezone: str) -> None:
        """Persist a new timezone preference."""
        resp = self._session.patch(
            self._url(user_id),
            json={"timezone": timezone},
            headers=self._headers(),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        logger.info(f"Updated timezone for user {user_id} to {timezone}")
