"""
Reporting service: the entry points the API layer calls.

Loads events, team and work window from a ClockStore, then hands them to
the pure engine (bucketing, reports, aggregation, attendance). Dates are
local calendar dates in the team's timezone; ranges are half-open
[date_from, date_to).
"""

import asyncio
import logging
import uuid
from datetime import date, datetime, timedelta, timezone

from timekeeper.core.exceptions import (
    InvalidClockSequence,
    InvalidDateRange,
    NoTeamForUser,
    TeamNotFound,
)
from timekeeper.schemas.report import DelayStatus, TeamAverages
from timekeeper.services.aggregation import (
    aggregate_daily,
    aggregate_team_weekly,
    daily_hours,
)
from timekeeper.services.attendance import delay_status
from timekeeper.services.bucketing import bucket_by_day, first_arrival, validate_direction
from timekeeper.services.clock_store import ClockStore
from timekeeper.services.domain import ClockEvent, DailyMetric, Direction, Team
from timekeeper.services.reports import ReportType, compute_report as compute_daily_metrics
from timekeeper.services.reports import parse_report_type
from timekeeper.services.timezone import local_date, local_day_bounds, resolve_timezone

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 30


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def local_today(tz: str) -> date:
    """Today's calendar date on the wall clock of tz."""
    return local_date(_utcnow(), tz)


def team_timezone(team: Team, default_tz: str) -> str:
    tz = team.timezone or default_tz
    resolve_timezone(tz)
    return tz


def _range_bounds(
    date_from: date | None, date_to: date | None, tz: str
) -> tuple[datetime, datetime]:
    """
    UTC bounds of the local range [date_from, date_to).

    Missing ends default to the last DEFAULT_RANGE_DAYS days up to and
    including today in tz.
    """
    if date_to is None:
        date_to = local_today(tz) + timedelta(days=1)
    if date_from is None:
        date_from = date_to - timedelta(days=DEFAULT_RANGE_DAYS)
    if date_from >= date_to:
        raise InvalidDateRange(
            f"'from' ({date_from.isoformat()}) must be before 'to' ({date_to.isoformat()})"
        )
    start, _ = local_day_bounds(date_from, tz)
    end, _ = local_day_bounds(date_to, tz)
    return start, end


async def compute_report(
    store: ClockStore,
    user_id: uuid.UUID,
    report_type: str,
    date_from: date | None,
    date_to: date | None,
    default_tz: str,
) -> tuple[ReportType, str, list[DailyMetric]]:
    """Returns (report type, timezone used, per-day metrics)."""
    kind = parse_report_type(report_type)

    team = await store.get_main_team_for_user(user_id)
    if team is None:
        raise NoTeamForUser(user_id)

    tz = team_timezone(team, default_tz)
    start, end = _range_bounds(date_from, date_to, tz)
    events = await store.get_events_for_user(user_id, start, end)

    logger.debug(
        "Computing %s for user_id=%s over %s..%s (%d events, tz=%s)",
        kind.value, user_id, date_from, date_to, len(events), tz,
    )
    return kind, tz, compute_daily_metrics(events, team.window, kind, tz)


async def compute_team_averages(
    store: ClockStore,
    team_id: uuid.UUID,
    date_from: date | None,
    date_to: date | None,
    default_tz: str,
) -> TeamAverages:
    team = await store.get_team(team_id)
    if team is None:
        raise TeamNotFound(team_id)

    tz = team_timezone(team, default_tz)
    start, end = _range_bounds(date_from, date_to, tz)
    members = await store.get_team_members(team_id)

    member_events = await asyncio.gather(
        *[store.get_events_for_user(member, start, end) for member in members]
    )

    per_member = {
        member: daily_hours(
            compute_daily_metrics(events, team.window, ReportType.PRESENCE, tz)
        )
        for member, events in zip(members, member_events)
    }

    return TeamAverages(
        daily=aggregate_daily(per_member, len(members)),
        weekly=aggregate_team_weekly(per_member, len(members)),
    )


async def compute_delay_status(
    store: ClockStore,
    user_id: uuid.UUID,
    day: date | None,
    default_tz: str,
) -> DelayStatus:
    team = await store.get_main_team_for_user(user_id)
    if team is None:
        raise NoTeamForUser(user_id)

    tz = team_timezone(team, default_tz)
    day = day or local_today(tz)
    start, end = local_day_bounds(day, tz)
    events = await store.get_events_for_user(user_id, start, end)

    first = None
    for bucket in bucket_by_day(events, tz):
        if bucket.day == day:
            first = first_arrival(bucket)
    return delay_status(day, first, team.window, tz)


async def record_clock(
    store: ClockStore,
    user_id: uuid.UUID,
    at: datetime | None,
    direction: Direction | None,
    default_tz: str,
) -> tuple[str, ClockEvent]:
    """
    Append a clock event, returns (timezone used, stored event).

    Tagged events must alternate within their local day.
    """
    at = at or _utcnow()
    if at.tzinfo is None:
        at = at.replace(tzinfo=timezone.utc)

    team = await store.get_main_team_for_user(user_id)
    tz = team_timezone(team, default_tz) if team else default_tz

    if direction is not None:
        start, end = local_day_bounds(local_date(at, tz), tz)
        same_day = await store.get_events_for_user(user_id, start, end)
        try:
            validate_direction(same_day, ClockEvent(user_id, at, direction), tz)
        except InvalidClockSequence:
            logger.warning("Rejected %s clock for user_id=%s at %s", direction.value, user_id, at)
            raise

    return tz, await store.add_event(user_id, at, direction)


async def list_clocks(
    store: ClockStore,
    user_id: uuid.UUID,
    date_from: date | None,
    date_to: date | None,
    default_tz: str,
) -> tuple[str, list[ClockEvent]]:
    """User's clock events in [date_from, date_to), sorted, with the timezone used."""
    team = await store.get_main_team_for_user(user_id)
    tz = team_timezone(team, default_tz) if team else default_tz
    start, end = _range_bounds(date_from, date_to, tz)
    events = await store.get_events_for_user(user_id, start, end)
    return tz, sorted(events, key=lambda e: e.at)
