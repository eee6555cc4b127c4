"""
Team averages over daily presence.

Weeks use the ISO-8601 definition (weeks start on Monday, week 1 holds the
year's first Thursday) and are labelled with the ISO week-year, so
2024-12-30 belongs to 2025-W01.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date

from timekeeper.schemas.report import DailyHours, WeeklyHours
from timekeeper.services.domain import DailyMetric
from timekeeper.services.reports import round_half_away


def _round2(value: float) -> float:
    return round_half_away(value, 2)


def iso_week_label(day: date) -> str:
    year, week, _ = day.isocalendar()
    return f"{year}-W{week:02d}"


def daily_hours(presence: Iterable[DailyMetric]) -> list[DailyHours]:
    """Presence minutes → hours per day, 2 decimals."""
    return [DailyHours(day=m.day, hours=_round2(m.value / 60)) for m in presence]


def aggregate_daily(
    per_member: Mapping[object, Iterable[DailyHours]],
    team_size: int,
) -> list[DailyHours]:
    """
    Average hours per day across a team.

    The denominator is the team size, not the number of members that
    clocked that day; an empty team divides by 1.
    """
    totals: dict[date, float] = defaultdict(float)
    for rows in per_member.values():
        for row in rows:
            totals[row.day] += row.hours

    count = max(team_size, 1)
    return [
        DailyHours(day=day, hours=_round2(totals[day] / count))
        for day in sorted(totals)
    ]


def aggregate_weekly(daily: Iterable[DailyHours]) -> list[WeeklyHours]:
    totals: dict[str, float] = defaultdict(float)
    for row in daily:
        totals[iso_week_label(row.day)] += row.hours

    return [WeeklyHours(week=week, hours=_round2(totals[week])) for week in sorted(totals)]


def aggregate_team_weekly(
    per_member: Mapping[object, Iterable[DailyHours]],
    team_size: int,
) -> list[WeeklyHours]:
    totals: dict[str, float] = defaultdict(float)
    for rows in per_member.values():
        for row in aggregate_weekly(rows):
            totals[row.week] += row.hours

    count = max(team_size, 1)
    return [
        WeeklyHours(week=week, hours=_round2(totals[week] / count))
        for week in sorted(totals)
    ]
