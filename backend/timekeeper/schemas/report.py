from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel


class DailyValue(BaseModel):
    day: date
    value: int


class UserReport(BaseModel):
    user_id: UUID
    report: str
    timezone: str
    days: list[DailyValue]


class DailyHours(BaseModel):
    day: date
    hours: float


class WeeklyHours(BaseModel):
    week: str
    hours: float


class TeamAverages(BaseModel):
    daily: list[DailyHours]
    weekly: list[WeeklyHours]


class DelayStatus(BaseModel):
    date: date
    status: Literal["late", "early", "on_time", "absent"]
    delay_minutes: int | None


class ClockCreate(BaseModel):
    at: datetime | None = None
    direction: Literal["arrival", "departure"] | None = None


class ClockEntry(BaseModel):
    at: str
    direction: Literal["arrival", "departure"] | None
