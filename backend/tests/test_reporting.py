"""
Reporting service tests against the in-memory store.

Tests:
  - compute_report resolves the main team, its window and timezone
  - NoTeamForUser / InvalidDateRange / InvalidReportType / InvalidTimezone
  - accepted leave periods are excluded
  - team averages fan out over members and divide by team size
  - delay status for late / early / on-time / absent days
  - record_clock enforces direction alternation
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

import pytest

from timekeeper.core.exceptions import (
    InvalidClockSequence,
    InvalidDateRange,
    InvalidReportType,
    InvalidTimezone,
    NoTeamForUser,
    TeamNotFound,
)
from timekeeper.services import reporting
from timekeeper.services.clock_store import InMemoryClockStore
from timekeeper.services.domain import DailyMetric, Direction, Team, WorkWindow
from timekeeper.services.reporting import (
    compute_delay_status,
    compute_report,
    compute_team_averages,
    list_clocks,
    record_clock,
)

DEFAULT_TZ = "Europe/Paris"


def at(text: str) -> datetime:
    return datetime.fromisoformat(text).replace(tzinfo=timezone.utc)


async def _clock(store: InMemoryClockStore, user_id: uuid.UUID, *stamps: str) -> None:
    for stamp in stamps:
        await store.add_event(user_id, at(stamp))


class TestComputeReport:
    async def test_lateness_for_member(self, store, team, people) -> None:
        await _clock(store, people["alice"], "2024-01-02T10:00", "2024-01-02T17:00")

        kind, tz, metrics = await compute_report(
            store, people["alice"], "lateness", date(2024, 1, 1), date(2024, 1, 3), DEFAULT_TZ
        )
        assert kind.value == "lateness"
        assert tz == "UTC"
        assert metrics == [DailyMetric(date(2024, 1, 2), 60)]

    async def test_range_is_half_open(self, store, team, people) -> None:
        await _clock(store, people["alice"], "2024-01-02T10:00", "2024-01-03T10:00")

        _, _, metrics = await compute_report(
            store, people["alice"], "lateness", date(2024, 1, 2), date(2024, 1, 3), DEFAULT_TZ
        )
        assert [m.day for m in metrics] == [date(2024, 1, 2)]

    async def test_team_without_timezone_uses_default(self, store, people) -> None:
        uid = uuid.uuid4()
        store.add_team(
            Team(id=uuid.uuid4(), name="Paris", manager_id=people["manager"],
                 window=WorkWindow(9, 17)),
            members=[uid],
        )
        # 08:00 UTC is 09:00 in Paris in winter
        await _clock(store, uid, "2024-01-02T08:00")

        _, tz, metrics = await compute_report(
            store, uid, "lateness", date(2024, 1, 1), date(2024, 1, 3), DEFAULT_TZ
        )
        assert tz == DEFAULT_TZ
        assert metrics == [DailyMetric(date(2024, 1, 2), 0)]

    async def test_no_team(self, store, people) -> None:
        with pytest.raises(NoTeamForUser):
            await compute_report(
                store, people["outsider"], "presence", date(2024, 1, 1), date(2024, 1, 3), DEFAULT_TZ
            )

    async def test_invalid_report_type_checked_first(self, store, people) -> None:
        with pytest.raises(InvalidReportType):
            await compute_report(
                store, people["outsider"], "bogus", date(2024, 1, 1), date(2024, 1, 3), DEFAULT_TZ
            )

    @pytest.mark.parametrize(
        ("date_from", "date_to"),
        [(date(2024, 1, 3), date(2024, 1, 3)), (date(2024, 1, 5), date(2024, 1, 3))],
    )
    async def test_invalid_range(self, store, team, people, date_from, date_to) -> None:
        with pytest.raises(InvalidDateRange):
            await compute_report(store, people["alice"], "presence", date_from, date_to, DEFAULT_TZ)

    async def test_invalid_team_timezone(self, store, people) -> None:
        uid = uuid.uuid4()
        store.add_team(
            Team(id=uuid.uuid4(), name="Nowhere", manager_id=people["manager"],
                 window=WorkWindow(9, 17), timezone="Nowhere/City"),
            members=[uid],
        )
        with pytest.raises(InvalidTimezone):
            await compute_report(store, uid, "presence", date(2024, 1, 1), date(2024, 1, 3), DEFAULT_TZ)

    async def test_accepted_leave_is_excluded(self, store, team, people) -> None:
        await _clock(
            store, people["alice"],
            "2024-01-02T09:00", "2024-01-02T17:00",
            "2024-01-03T09:00", "2024-01-03T17:00",
        )
        store.add_leave(people["alice"], at("2024-01-03T00:00"), at("2024-01-03T23:59"))
        store.add_leave(people["alice"], at("2024-01-02T00:00"), at("2024-01-02T23:59"), accepted=False)

        _, _, metrics = await compute_report(
            store, people["alice"], "presence", date(2024, 1, 1), date(2024, 1, 5), DEFAULT_TZ
        )
        assert metrics == [DailyMetric(date(2024, 1, 2), 480)]


class TestTeamAverages:
    async def test_daily_and_weekly(self, store, team, people) -> None:
        await _clock(store, people["alice"], "2024-01-02T09:00", "2024-01-02T17:00")
        await _clock(store, people["alice"], "2024-01-08T09:00", "2024-01-08T13:00")
        await _clock(store, people["bob"], "2024-01-02T09:00", "2024-01-02T13:00")

        result = await compute_team_averages(
            store, team.id, date(2024, 1, 1), date(2024, 1, 15), DEFAULT_TZ
        )
        assert [(d.day.isoformat(), d.hours) for d in result.daily] == [
            ("2024-01-02", 6.0),
            ("2024-01-08", 2.0),
        ]
        assert [(w.week, w.hours) for w in result.weekly] == [
            ("2024-W01", 6.0),
            ("2024-W02", 2.0),
        ]

    async def test_unknown_team(self, store) -> None:
        with pytest.raises(TeamNotFound):
            await compute_team_averages(
                store, uuid.uuid4(), date(2024, 1, 1), date(2024, 1, 2), DEFAULT_TZ
            )

    async def test_team_without_clocks(self, store, team) -> None:
        result = await compute_team_averages(
            store, team.id, date(2024, 1, 1), date(2024, 1, 2), DEFAULT_TZ
        )
        assert result.daily == []
        assert result.weekly == []


class TestDelayStatus:
    @pytest.mark.parametrize(
        ("stamp", "status", "delay"),
        [
            ("2024-01-02T09:20", "late", 20),
            ("2024-01-02T08:45", "early", -15),
            ("2024-01-02T09:00", "on_time", 0),
            ("2024-01-02T09:00:30", "late", 1),
            ("2024-01-02T08:59:30", "early", -1),
        ],
    )
    async def test_status(self, store, team, people, stamp, status, delay) -> None:
        await _clock(store, people["alice"], stamp, "2024-01-02T17:00")

        result = await compute_delay_status(store, people["alice"], date(2024, 1, 2), DEFAULT_TZ)
        assert result.status == status
        assert result.delay_minutes == delay

    async def test_absent(self, store, team, people) -> None:
        await _clock(store, people["alice"], "2024-01-03T09:00")

        result = await compute_delay_status(store, people["alice"], date(2024, 1, 2), DEFAULT_TZ)
        assert result.status == "absent"
        assert result.delay_minutes is None

    async def test_no_team(self, store, people) -> None:
        with pytest.raises(NoTeamForUser):
            await compute_delay_status(store, people["outsider"], date(2024, 1, 2), DEFAULT_TZ)

    async def test_default_day_is_today_in_team_timezone(
        self, store, people, monkeypatch
    ) -> None:
        uid = uuid.uuid4()
        store.add_team(
            Team(id=uuid.uuid4(), name="Tokyo", manager_id=people["manager"],
                 window=WorkWindow(9, 17), timezone="Asia/Tokyo"),
            members=[uid],
        )
        # 23:30 UTC on the 2nd is already 08:30 on the 3rd in Tokyo
        monkeypatch.setattr(reporting, "_utcnow", lambda: at("2024-01-02T23:30"))
        await _clock(store, uid, "2024-01-03T00:30")

        result = await compute_delay_status(store, uid, None, DEFAULT_TZ)
        assert result.date == date(2024, 1, 3)
        assert result.status == "late"
        assert result.delay_minutes == 30


class TestDefaultRange:
    async def test_covers_last_days_up_to_local_today(self, store, team, people, monkeypatch) -> None:
        monkeypatch.setattr(reporting, "_utcnow", lambda: at("2024-02-10T12:00"))
        await _clock(
            store, people["alice"],
            "2024-01-11T10:00",  # before the 30-day window
            "2024-01-12T10:00",
            "2024-02-10T10:00",
        )

        _, _, metrics = await compute_report(store, people["alice"], "lateness", None, None, DEFAULT_TZ)
        assert [m.day for m in metrics] == [date(2024, 1, 12), date(2024, 2, 10)]


class TestRecordClock:
    async def test_alternating_directions(self, store, team, people) -> None:
        uid = people["alice"]
        await record_clock(store, uid, at("2024-01-02T09:00"), Direction.ARRIVAL, DEFAULT_TZ)
        await record_clock(store, uid, at("2024-01-02T12:00"), Direction.DEPARTURE, DEFAULT_TZ)

        with pytest.raises(InvalidClockSequence):
            await record_clock(store, uid, at("2024-01-02T12:30"), Direction.DEPARTURE, DEFAULT_TZ)

        assert len(store.events[uid]) == 2

    async def test_backdated_departure_rejected(self, store, team, people) -> None:
        uid = people["alice"]
        await record_clock(store, uid, at("2024-01-02T09:00"), Direction.ARRIVAL, DEFAULT_TZ)
        await record_clock(store, uid, at("2024-01-02T12:00"), Direction.DEPARTURE, DEFAULT_TZ)

        with pytest.raises(InvalidClockSequence):
            await record_clock(store, uid, at("2024-01-02T10:00"), Direction.DEPARTURE, DEFAULT_TZ)

        assert [e.direction for e in store.events[uid]] == [Direction.ARRIVAL, Direction.DEPARTURE]

    async def test_untagged_defaults_to_now(self, store, people) -> None:
        tz, event = await record_clock(store, people["outsider"], None, None, DEFAULT_TZ)
        assert tz == DEFAULT_TZ
        assert event.direction is None
        assert event.at.tzinfo is not None

    async def test_list_clocks_sorted(self, store, team, people) -> None:
        await _clock(store, people["bob"], "2024-01-02T17:00", "2024-01-02T09:00")
        tz, events = await list_clocks(store, people["bob"], date(2024, 1, 2), date(2024, 1, 3), DEFAULT_TZ)
        assert tz == "UTC"
        assert [e.at.hour for e in events] == [9, 17]
