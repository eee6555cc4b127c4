"""
Day bucketing and in/out pairing of clock events.

Events are grouped by the local calendar day they fall on, sorted, and
paired into intervals. Tagged events (arrival/departure) are paired by
direction; legacy untagged events are paired by position within the day,
even index = arrival, odd index = departure.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime

from timekeeper.core.exceptions import InvalidClockSequence
from timekeeper.services.domain import ClockEvent, DayBucket, Direction, Interval
from timekeeper.services.timezone import local_date


def bucket_by_day(events: Iterable[ClockEvent], tz: str) -> list[DayBucket]:
    """Group events by local day. Days come out in ascending order, events sorted."""
    by_day: dict = defaultdict(list)
    for event in events:
        by_day[local_date(event.at, tz)].append(event)

    return [
        DayBucket(day=day, events=sorted(by_day[day], key=lambda e: e.at))
        for day in sorted(by_day)
    ]


def _is_tagged(events: list[ClockEvent]) -> bool:
    return bool(events) and all(e.direction is not None for e in events)


def pair_intervals(bucket: DayBucket) -> list[Interval]:
    events = bucket.events
    if _is_tagged(events):
        return _pair_by_direction(events)

    # Odd trailing event has no departure and is dropped
    return [
        Interval(start=events[i].at, end=events[i + 1].at)
        for i in range(0, len(events) - 1, 2)
    ]


def _pair_by_direction(events: list[ClockEvent]) -> list[Interval]:
    intervals: list[Interval] = []
    opened: datetime | None = None
    for event in events:
        if event.direction is Direction.ARRIVAL:
            if opened is None:
                opened = event.at
        elif opened is not None:
            intervals.append(Interval(start=opened, end=event.at))
            opened = None
    return intervals


def first_arrival(bucket: DayBucket) -> ClockEvent | None:
    """First arrival of the day; the first event at all for untagged data."""
    if not bucket.events:
        return None
    if _is_tagged(bucket.events):
        for event in bucket.events:
            if event.direction is Direction.ARRIVAL:
                return event
        return None
    return bucket.events[0]


def validate_direction(
    previous: Iterable[ClockEvent],
    new_event: ClockEvent,
    tz: str,
) -> None:
    """
    Check that a tagged event alternates with the same day's tagged events.

    The first tagged event of a local day must be an arrival. A backdated
    event is checked against the tagged event that follows it as well.
    Untagged events are not checked.
    """
    if new_event.direction is None:
        return

    day = local_date(new_event.at, tz)
    same_day = [
        e for e in previous
        if e.direction is not None and local_date(e.at, tz) == day
    ]
    before = [e for e in same_day if e.at < new_event.at]
    after = [e for e in same_day if e.at > new_event.at]

    expected = Direction.ARRIVAL
    if before and max(before, key=lambda e: e.at).direction is Direction.ARRIVAL:
        expected = Direction.DEPARTURE

    if new_event.direction is not expected:
        raise InvalidClockSequence(
            f"Expected {expected.value} at {new_event.at.isoformat()}, "
            f"got {new_event.direction.value}"
        )

    if after:
        following = min(after, key=lambda e: e.at)
        if following.direction is new_event.direction:
            raise InvalidClockSequence(
                f"{new_event.direction.value.capitalize()} at {new_event.at.isoformat()} "
                f"would precede another {following.direction.value} "
                f"at {following.at.isoformat()}"
            )
