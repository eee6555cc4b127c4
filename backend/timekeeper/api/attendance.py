
from fastapi import APIRouter, Depends, Query

from timekeeper.api.params import parse_date
from timekeeper.core.config import settings
from timekeeper.core.middleware import CurrentUser, get_current_user
from timekeeper.schemas.report import DelayStatus
from timekeeper.services.clock_store import ClockStore, get_clock_store
from timekeeper.services.reporting import compute_delay_status

router = APIRouter()


@router.get(
    "/delay",
    response_model=DelayStatus,
    summary="Late / early / on-time / absent status of the caller for one day",
)
async def get_delay(
    day: str | None = Query(default=None, alias="date", description="ISO date YYYY-MM-DD, defaults to today"),
    store: ClockStore = Depends(get_clock_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> DelayStatus:
    target = parse_date(day)
    return await compute_delay_status(
        store, current_user.id, target, settings.DEFAULT_TIMEZONE
    )
