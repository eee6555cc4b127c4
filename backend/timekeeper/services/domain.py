"""Plain value objects shared by the store and the reporting engine."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime


class Direction(str, enum.Enum):
    ARRIVAL = "arrival"
    DEPARTURE = "departure"


@dataclass(frozen=True)
class ClockEvent:
    user_id: uuid.UUID
    at: datetime
    direction: Direction | None = None


@dataclass(frozen=True)
class WorkWindow:
    start_hour: float
    end_hour: float

    def __post_init__(self) -> None:
        if not (0 <= self.start_hour < 24 and 0 < self.end_hour <= 24):
            raise ValueError(
                f"Work hours out of range: {self.start_hour}-{self.end_hour}"
            )
        if self.start_hour >= self.end_hour:
            raise ValueError(
                f"start_hour must be before end_hour ({self.start_hour} >= {self.end_hour})"
            )


@dataclass(frozen=True)
class Team:
    id: uuid.UUID
    name: str
    manager_id: uuid.UUID
    window: WorkWindow
    timezone: str | None = None


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60


@dataclass
class DayBucket:
    day: date
    events: list[ClockEvent] = field(default_factory=list)


@dataclass(frozen=True)
class DailyMetric:
    day: date
    value: int
