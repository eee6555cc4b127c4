from datetime import date

from timekeeper.schemas.report import DelayStatus
from timekeeper.services.domain import ClockEvent, WorkWindow
from timekeeper.services.reports import minutes_from_start


def delay_status(
    day: date,
    first: ClockEvent | None,
    window: WorkWindow,
    tz: str,
) -> DelayStatus:
    """Signed delay of the day's first arrival against the team start hour."""
    if first is None:
        return DelayStatus(date=day, status="absent", delay_minutes=None)

    delay = minutes_from_start(first.at, window, tz)
    if delay > 0:
        status = "late"
    elif delay < 0:
        status = "early"
    else:
        status = "on_time"
    return DelayStatus(date=day, status=status, delay_minutes=delay)
