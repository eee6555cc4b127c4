from fastapi import APIRouter, Depends, Query, status

from timekeeper.api.params import parse_range
from timekeeper.core.config import settings
from timekeeper.core.middleware import CurrentUser, get_current_user
from timekeeper.schemas.report import ClockCreate, ClockEntry
from timekeeper.services.clock_store import ClockStore, get_clock_store
from timekeeper.services.domain import ClockEvent, Direction
from timekeeper.services.reporting import list_clocks, record_clock
from timekeeper.services.timezone import format_with_offset

router = APIRouter()


def _to_entry(event: ClockEvent, tz: str) -> ClockEntry:
    return ClockEntry(
        at=format_with_offset(event.at, tz),
        direction=event.direction.value if event.direction else None,
    )


@router.post(
    "",
    response_model=ClockEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Clock in or out for the caller",
)
async def add_clock(
    body: ClockCreate,
    store: ClockStore = Depends(get_clock_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> ClockEntry:
    direction = Direction(body.direction) if body.direction else None
    tz, event = await record_clock(
        store, current_user.id, body.at, direction, settings.DEFAULT_TIMEZONE
    )
    return _to_entry(event, tz)


@router.get(
    "",
    response_model=list[ClockEntry],
    summary="Caller's clock events, timestamps in the team timezone",
)
async def get_clocks(
    date_from: str | None = Query(default=None, alias="from"),
    date_to: str | None = Query(default=None, alias="to"),
    store: ClockStore = Depends(get_clock_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> list[ClockEntry]:
    df, dt = parse_range(date_from, date_to)
    tz, events = await list_clocks(
        store, current_user.id, df, dt, settings.DEFAULT_TIMEZONE
    )
    return [_to_entry(e, tz) for e in events]
