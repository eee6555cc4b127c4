"""
Timezone helpers.

Clock events are stored as UTC instants; every report works on the wall
clock of the team's IANA zone. All functions take the zone explicitly,
the configured default is applied by the caller.
"""

from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timekeeper.core.exceptions import InvalidTimezone


@lru_cache(maxsize=64)
def resolve_timezone(name: str) -> ZoneInfo:
    """Return the ZoneInfo for name. Raises InvalidTimezone on unknown ids."""
    if not name:
        raise InvalidTimezone(name)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidTimezone(name)


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_local(instant: datetime, tz: str) -> datetime:
    """UTC instant → aware wall-clock datetime in tz. Naive input is UTC."""
    return _as_utc(instant).astimezone(resolve_timezone(tz))


def to_utc(local: datetime, tz: str) -> datetime:
    """
    Wall-clock datetime in tz → aware UTC datetime.

    A naive value is interpreted as wall clock in tz; an aware value keeps
    its own offset (so to_utc(to_local(x, tz), tz) == x).
    """
    if local.tzinfo is None:
        local = local.replace(tzinfo=resolve_timezone(tz))
    return local.astimezone(timezone.utc)


def local_hour(instant: datetime, tz: str) -> float:
    """Decimal time of day in tz, e.g. 15.5 for 15:30."""
    local = to_local(instant, tz)
    return (
        local.hour
        + local.minute / 60
        + local.second / 3600
        + local.microsecond / 3_600_000_000
    )


def local_time_of_day(instant: datetime, tz: str) -> timedelta:
    """Exact wall-clock offset from local midnight, e.g. 9:00:30 for 09:00:30."""
    local = to_local(instant, tz)
    return timedelta(
        hours=local.hour,
        minutes=local.minute,
        seconds=local.second,
        microseconds=local.microsecond,
    )


def local_date(instant: datetime, tz: str) -> date:
    return to_local(instant, tz).date()


def format_with_offset(instant: datetime, tz: str) -> str:
    """ISO-8601 with milliseconds and numeric offset: 2025-07-01T14:34:56.789+02:00"""
    return to_local(instant, tz).isoformat(timespec="milliseconds")


def local_day_bounds(day: date, tz: str) -> tuple[datetime, datetime]:
    """UTC instants of local midnight on day and on the following day."""
    start = to_utc(datetime.combine(day, time.min), tz)
    end = to_utc(datetime.combine(day + timedelta(days=1), time.min), tz)
    return start, end
