"""Per-user timezone resolution with caching."""

import logging

from .core.dates import DEFAULT_TIMEZONE, load_zone, validate_timezone
from .core.preferences import DEFAULT_COMPLETED_WINDOW
from .ports import Cache, PreferencesRepository

logger = logging.getLogger(__name__)

# How long a previously resolved zone is kept around as a fallback when the
# preferences lookup fails.
STALE_TTL = 24 * 60 * 60


class TimezoneResolver:
    """
    Resolves a user's IANA timezone, never failing.

    Lookups go through the preferences port and are cached per user for
    ``ttl`` seconds. Invalid or missing zones resolve to UTC. A failed
    lookup returns the last zone seen for the user, or UTC.
    """

    def __init__(
        self,
        preferences: PreferencesRepository,
        cache: Cache,
        ttl: float = 30.0,
        default_completed_window: int = DEFAULT_COMPLETED_WINDOW,
    ):
        self.preferences = preferences
        self.cache = cache
        self.ttl = ttl
        self.default_completed_window = default_completed_window

    @staticmethod
    def _key(user_id: str) -> tuple[str, str]:
        return ("timezone", user_id)

    @staticmethod
    def _stale_key(user_id: str) -> tuple[str, str]:
        return ("timezone:stale", user_id)

    def resolve(self, user_id: str) -> str:
        """IANA zone name for a user; "UTC" when absent, invalid or unavailable."""
        cached = self.cache.get(self._key(user_id))
        if cached is not None:
            logger.debug(f"Timezone cache hit for user {user_id}: {cached}")
            return cached

        try:
            stored = self.preferences.get_user_timezone(user_id)
        except Exception as e:
            fallback = self.cache.get(self._stale_key(user_id)) or DEFAULT_TIMEZONE
            logger.warning(f"Timezone lookup failed for user {user_id}, using {fallback}: {e}")
            self.cache.set(self._key(user_id), fallback, self.ttl)
            return fallback

        timezone = validate_timezone(stored)
        if stored is not None and (not isinstance(stored, str) or timezone != stored.strip()):
            logger.warning(f"Invalid timezone {stored!r} for user {user_id}, falling back to UTC")

        self.cache.set(self._key(user_id), timezone, self.ttl)
        self.cache.set(self._stale_key(user_id), timezone, STALE_TTL)
        return timezone

    def invalidate(self, user_id: str) -> None:
        """Drop the cached zone, e.g. after the user changed the preference."""
        self.cache.delete(self._key(user_id))

    def update_timezone(self, user_id: str, timezone: str) -> str:
        """
        Validate and persist a new zone, then invalidate the cache.

        Raises InvalidTimezone for names that cannot be loaded; a write must
        not silently store something other than what the user picked.
        """
        load_zone(timezone)
        timezone = timezone.strip()
        self.preferences.set_user_timezone(user_id, timezone)
        self.invalidate(user_id)
        logger.info(f"Timezone for user {user_id} set to {timezone}")
        return timezone

    def completed_window(self, user_id: str) -> int:
        """Completed-task retention window in days, with a safe default."""
        try:
            days = self.preferences.get_completed_task_retention_days(user_id)
        except Exception as e:
            logger.warning(f"Completed window lookup failed for user {user_id}: {e}")
            return self.default_completed_window
        if not isinstance(days, int) or isinstance(days, bool) or days < 0:
            logger.warning(f"Invalid completed window {days!r} for user {user_id}")
            return self.default_completed_window
        return days
