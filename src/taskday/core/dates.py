"""Pure civil-date and day-boundary logic - no I/O dependencies.

All instants returned here are timezone-aware UTC datetimes. "now" is always
an explicit argument; nothing in this module reads the wall clock.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import InvalidDateFormat, InvalidTimezone

DEFAULT_TIMEZONE = "UTC"

_DATE_PATTERN = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


def load_zone(timezone_id: str) -> ZoneInfo:
    """Load an IANA zone, raising InvalidTimezone if it cannot be constructed."""
    if not isinstance(timezone_id, str) or not timezone_id.strip():
        raise InvalidTimezone(timezone_id)
    try:
        return ZoneInfo(timezone_id.strip())
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise InvalidTimezone(timezone_id) from e


def validate_timezone(timezone_id: str | None) -> str:
    """Return the trimmed zone name if it is valid, otherwise "UTC"."""
    try:
        load_zone(timezone_id)
    except InvalidTimezone:
        return DEFAULT_TIMEZONE
    return timezone_id.strip()


def _zone_or_utc(timezone_id: str | None) -> tuple[str, ZoneInfo]:
    name = validate_timezone(timezone_id)
    return name, ZoneInfo(name)


def parse_civil_date(value: str) -> date:
    """
    Parse a strict YYYY-MM-DD string.

    Raises InvalidDateFormat for any other shape and for impossible dates
    (month 13, April 31, Feb 29 outside leap years).
    """
    if not isinstance(value, str):
        raise InvalidDateFormat(value)
    match = _DATE_PATTERN.fullmatch(value.strip())
    if not match:
        raise InvalidDateFormat(value)
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateFormat(value, str(e)) from e


def local_date(instant: datetime, timezone_id: str) -> date:
    """Civil date of an instant as seen in the given zone."""
    _, zone = _zone_or_utc(timezone_id)
    return _require_aware(instant).astimezone(zone).date()


def format_local_date(instant: datetime, timezone_id: str) -> str:
    """Format an instant as YYYY-MM-DD in the given zone."""
    return local_date(instant, timezone_id).isoformat()


def _require_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError(f"Expected a timezone-aware datetime, got {instant!r}")
    return instant


def start_of_day(day: date, zone: ZoneInfo) -> datetime:
    """
    First instant (UTC) whose local date in ``zone`` is ``day`` or later.

    Normally this is local midnight. When midnight falls inside a DST gap the
    first existing instant of the day is the transition itself, found by
    bisecting on whole seconds. Ambiguous midnights resolve to the earlier
    occurrence (fold=0).
    """
    naive = datetime.combine(day, time.min)
    candidate = naive.replace(tzinfo=zone).astimezone(timezone.utc)
    if candidate.astimezone(zone).replace(tzinfo=None) == naive:
        return candidate

    # candidate is past the gap; 48h earlier is safely on a previous local date
    lo = int(candidate.timestamp()) - 48 * 3600
    hi = int(candidate.timestamp())
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if datetime.fromtimestamp(mid, zone).date() >= day:
            hi = mid
        else:
            lo = mid
    return datetime.fromtimestamp(hi, timezone.utc)


def to_utc(date_string: str, timezone_id: str) -> datetime:
    """
    Convert a YYYY-MM-DD civil date to the UTC instant of its local start.

    Pure function - identical inputs always give identical output. Formatting
    the result back in the same zone reproduces ``date_string``. An invalid
    zone is treated as UTC. Raises InvalidDateFormat for malformed dates and
    for dates the zone skipped entirely (e.g. Pacific/Apia 2011-12-30).
    """
    day = parse_civil_date(date_string)
    _, zone = _zone_or_utc(timezone_id)
    instant = start_of_day(day, zone)
    if instant.astimezone(zone).date() != day:
        raise InvalidDateFormat(date_string, f"date does not exist in {timezone_id}")
    return instant


@dataclass(frozen=True)
class DateBoundaries:
    """Absolute cut points for classifying one user's tasks at one instant.

    Intervals are half-open: today is [today_start, today_end).
    """

    timezone: str
    today: date
    today_start: datetime
    today_end: datetime
    week_from_now: datetime
    completed_cutoff: datetime

    @property
    def tomorrow_start(self) -> datetime:
        return self.today_end

    def completed_cutoff_for(self, days: int) -> datetime:
        """Cutoff for a retention window other than the one computed with."""
        if days < 0:
            raise ValueError(f"Completed window must be non-negative, got {days}")
        return start_of_day(self.today - timedelta(days=days), ZoneInfo(self.timezone))

    def to_dict(self) -> dict:
        return {
            "timezone": self.timezone,
            "today": self.today.isoformat(),
            "todayStart": self.today_start.isoformat(),
            "todayEnd": self.today_end.isoformat(),
            "tomorrowStart": self.tomorrow_start.isoformat(),
            "weekFromNow": self.week_from_now.isoformat(),
            "completedCutoff": self.completed_cutoff.isoformat(),
        }


def compute_boundaries(
    timezone_id: str,
    completed_window_days: int,
    now: datetime,
) -> DateBoundaries:
    """
    Compute today/tomorrow/week/completed boundaries for a zone at ``now``.

    Every boundary is derived from its own civil date, so days that are 23,
    25 or 23.5 hours long (DST transitions) come out right.

    Pure function - no I/O.
    """
    if completed_window_days < 0:
        raise ValueError(f"Completed window must be non-negative, got {completed_window_days}")
    name, zone = _zone_or_utc(timezone_id)
    today = _require_aware(now).astimezone(zone).date()

    return DateBoundaries(
        timezone=name,
        today=today,
        today_start=start_of_day(today, zone),
        today_end=start_of_day(today + timedelta(days=1), zone),
        week_from_now=start_of_day(today + timedelta(days=7), zone),
        completed_cutoff=start_of_day(today - timedelta(days=completed_window_days), zone),
    )


def is_local_midnight(timezone_id: str, now: datetime) -> bool:
    """True during the first minute of the local day, when day views roll over."""
    _, zone = _zone_or_utc(timezone_id)
    local = _require_aware(now).astimezone(zone)
    return local.hour == 0 and local.minute == 0
