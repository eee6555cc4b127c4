"""
Clock event store.

The reporting engine only talks to the ClockStore protocol.
SqlClockStore reads the PostgreSQL tables through an AsyncSession;
InMemoryClockStore keeps everything in dicts and backs the tests and
local tooling.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import and_, exists, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from timekeeper.core.config import settings
from timekeeper.db.models import Clock, LeavePeriod, UserTeam
from timekeeper.db.models import Team as TeamRow
from timekeeper.db.session import AsyncSessionLocal
from timekeeper.services.domain import ClockEvent, Direction, Team, WorkWindow

logger = logging.getLogger(__name__)


class ClockStore(Protocol):
    async def get_events_for_user(
        self, user_id: uuid.UUID, start: datetime, end: datetime
    ) -> list[ClockEvent]: ...

    async def get_work_window(self, team_id: uuid.UUID) -> WorkWindow | None: ...

    async def get_team(self, team_id: uuid.UUID) -> Team | None: ...

    async def get_main_team_for_user(self, user_id: uuid.UUID) -> Team | None: ...

    async def get_team_members(self, team_id: uuid.UUID) -> list[uuid.UUID]: ...

    async def add_event(
        self, user_id: uuid.UUID, at: datetime, direction: Direction | None
    ) -> ClockEvent: ...


def _to_team(row: TeamRow) -> Team:
    return Team(
        id=row.id,
        name=row.name,
        manager_id=row.manager_id,
        window=WorkWindow(start_hour=row.start_hour, end_hour=row.end_hour),
        timezone=row.timezone,
    )


def _to_event(row: Clock) -> ClockEvent:
    return ClockEvent(
        user_id=row.user_id,
        at=row.at,
        direction=Direction(row.direction) if row.direction else None,
    )


class SqlClockStore:
    """
    One short-lived session per call, so concurrent reads (team fan-out)
    never share a connection.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        exclude_leave_periods: bool | None = None,
    ) -> None:
        self.session_factory = session_factory
        if exclude_leave_periods is None:
            exclude_leave_periods = settings.EXCLUDE_LEAVE_PERIODS
        self.exclude_leave_periods = exclude_leave_periods

    async def get_events_for_user(
        self, user_id: uuid.UUID, start: datetime, end: datetime
    ) -> list[ClockEvent]:
        stmt = select(Clock).where(
            Clock.user_id == user_id,
            Clock.at >= start,
            Clock.at < end,
        )
        if self.exclude_leave_periods:
            on_leave = exists().where(
                and_(
                    LeavePeriod.user_id == Clock.user_id,
                    LeavePeriod.accepted.is_(True),
                    Clock.at.between(LeavePeriod.start_date, LeavePeriod.end_date),
                )
            )
            stmt = stmt.where(~on_leave)

        async with self.session_factory() as db:
            result = await db.execute(stmt.order_by(Clock.at))
            return [_to_event(row) for row in result.scalars().all()]

    async def get_work_window(self, team_id: uuid.UUID) -> WorkWindow | None:
        team = await self.get_team(team_id)
        return team.window if team else None

    async def get_team(self, team_id: uuid.UUID) -> Team | None:
        async with self.session_factory() as db:
            result = await db.execute(select(TeamRow).where(TeamRow.id == team_id))
            row = result.scalar_one_or_none()
        return _to_team(row) if row else None

    async def get_main_team_for_user(self, user_id: uuid.UUID) -> Team | None:
        async with self.session_factory() as db:
            result = await db.execute(
                select(TeamRow)
                .join(UserTeam, UserTeam.team_id == TeamRow.id)
                .where(UserTeam.user_id == user_id)
                .order_by(UserTeam.joined_at)
                .limit(1)
            )
            row = result.scalar_one_or_none()
        return _to_team(row) if row else None

    async def get_team_members(self, team_id: uuid.UUID) -> list[uuid.UUID]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(UserTeam.user_id).where(UserTeam.team_id == team_id)
            )
            return list(result.scalars().all())

    async def add_event(
        self, user_id: uuid.UUID, at: datetime, direction: Direction | None
    ) -> ClockEvent:
        row = Clock(
            user_id=user_id,
            at=at,
            direction=direction.value if direction else None,
        )
        async with self.session_factory() as db:
            db.add(row)
            await db.commit()
            await db.refresh(row)
        logger.info("Clock recorded: user_id=%s at=%s direction=%s", user_id, at, row.direction)
        return _to_event(row)


@dataclass
class _Leave:
    start: datetime
    end: datetime
    accepted: bool


@dataclass
class InMemoryClockStore:
    teams: dict[uuid.UUID, Team] = field(default_factory=dict)
    memberships: dict[uuid.UUID, list[uuid.UUID]] = field(default_factory=dict)
    events: dict[uuid.UUID, list[ClockEvent]] = field(default_factory=dict)
    leaves: dict[uuid.UUID, list[_Leave]] = field(default_factory=dict)

    def add_team(self, team: Team, members: list[uuid.UUID] | None = None) -> Team:
        self.teams[team.id] = team
        for member in members or []:
            self.memberships.setdefault(member, []).append(team.id)
        return team

    def add_leave(
        self, user_id: uuid.UUID, start: datetime, end: datetime, accepted: bool = True
    ) -> None:
        self.leaves.setdefault(user_id, []).append(_Leave(start, end, accepted))

    def _on_leave(self, event: ClockEvent) -> bool:
        return any(
            leave.accepted and leave.start <= event.at <= leave.end
            for leave in self.leaves.get(event.user_id, [])
        )

    async def get_events_for_user(
        self, user_id: uuid.UUID, start: datetime, end: datetime
    ) -> list[ClockEvent]:
        return [
            e for e in self.events.get(user_id, [])
            if start <= e.at < end and not self._on_leave(e)
        ]

    async def get_work_window(self, team_id: uuid.UUID) -> WorkWindow | None:
        team = self.teams.get(team_id)
        return team.window if team else None

    async def get_team(self, team_id: uuid.UUID) -> Team | None:
        return self.teams.get(team_id)

    async def get_main_team_for_user(self, user_id: uuid.UUID) -> Team | None:
        team_ids = self.memberships.get(user_id)
        return self.teams[team_ids[0]] if team_ids else None

    async def get_team_members(self, team_id: uuid.UUID) -> list[uuid.UUID]:
        return [uid for uid, tids in self.memberships.items() if team_id in tids]

    async def add_event(
        self, user_id: uuid.UUID, at: datetime, direction: Direction | None = None
    ) -> ClockEvent:
        if at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)
        event = ClockEvent(user_id=user_id, at=at, direction=direction)
        self.events.setdefault(user_id, []).append(event)
        return event


def get_clock_store() -> ClockStore:
    """FastAPI dependency; tests override it with an InMemoryClockStore."""
    return SqlClockStore(AsyncSessionLocal)
