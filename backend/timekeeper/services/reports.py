"""
Per-day report computation.

compute_report() buckets a user's events by local day and derives one
minute value per day for the requested report type. Pure: no I/O.
"""

import enum
import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from timekeeper.core.exceptions import InvalidReportType
from timekeeper.services.bucketing import bucket_by_day, first_arrival, pair_intervals
from timekeeper.services.domain import ClockEvent, DailyMetric, DayBucket, WorkWindow
from timekeeper.services.timezone import local_time_of_day

logger = logging.getLogger(__name__)


class ReportType(str, enum.Enum):
    LATENESS = "lateness"
    EARLINESS = "earliness"
    PAUSE_TIMES = "pause_times"
    PRESENCE = "presence"


_ALIASES = {"earlyness": ReportType.EARLINESS}


def parse_report_type(value: str | ReportType) -> ReportType:
    if isinstance(value, ReportType):
        return value
    key = (value or "").strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return ReportType(key)
    except ValueError:
        raise InvalidReportType(value)


def round_half_away(value: float, ndigits: int = 0) -> float:
    """Round half away from zero (Python's round() is half-to-even)."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def minutes_from_start(instant: datetime, window: WorkWindow, tz: str) -> int:
    """
    Signed whole minutes between the local time of instant and the window start.

    Computed on integer microseconds so that half minutes (09:00:30) round
    away from zero exactly.
    """
    offset = local_time_of_day(instant, tz) - timedelta(hours=window.start_hour)
    micros = Decimal(offset // timedelta(microseconds=1))
    return int((micros / 60_000_000).quantize(Decimal(1), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Per-day formulas. Each returns None when the day yields no metric.
# ---------------------------------------------------------------------------


def _lateness(bucket: DayBucket, window: WorkWindow, tz: str) -> int | None:
    first = first_arrival(bucket)
    if first is None:
        return None
    return max(0, minutes_from_start(first.at, window, tz))


def _earliness(bucket: DayBucket, window: WorkWindow, tz: str) -> int | None:
    first = first_arrival(bucket)
    if first is None:
        return None
    return max(0, -minutes_from_start(first.at, window, tz))


def _pause(bucket: DayBucket, window: WorkWindow, tz: str) -> int | None:
    intervals = pair_intervals(bucket)
    if len(intervals) < 2:
        return None
    gap = intervals[1].start - intervals[0].end
    return int(round_half_away(gap.total_seconds() / 60))


def _presence(bucket: DayBucket, window: WorkWindow, tz: str) -> int | None:
    intervals = pair_intervals(bucket)
    if not intervals:
        return None
    return int(round_half_away(sum(i.minutes for i in intervals)))


_FORMULAS: dict[ReportType, Callable[[DayBucket, WorkWindow, str], int | None]] = {
    ReportType.LATENESS: _lateness,
    ReportType.EARLINESS: _earliness,
    ReportType.PAUSE_TIMES: _pause,
    ReportType.PRESENCE: _presence,
}


def compute_report(
    events: Iterable[ClockEvent],
    window: WorkWindow,
    report_type: str | ReportType,
    tz: str,
) -> list[DailyMetric]:
    """Return one DailyMetric per local day that yields a value, ascending by day."""
    kind = parse_report_type(report_type)
    formula = _FORMULAS[kind]

    metrics: list[DailyMetric] = []
    for bucket in bucket_by_day(events, tz):
        value = formula(bucket, window, tz)
        if value is not None:
            metrics.append(DailyMetric(day=bucket.day, value=value))

    logger.debug("Report %s (%s): %d day(s)", kind.value, tz, len(metrics))
    return metrics
