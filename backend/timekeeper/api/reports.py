import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status

from timekeeper.api.params import parse_range
from timekeeper.core.config import settings
from timekeeper.core.middleware import CurrentUser, forbidden, get_current_user
from timekeeper.schemas.report import DailyValue, UserReport
from timekeeper.services.clock_store import ClockStore, get_clock_store
from timekeeper.services.reporting import compute_report

router = APIRouter()


async def ensure_can_view_user(
    store: ClockStore, target_id: uuid.UUID, current_user: CurrentUser
) -> None:
    """Users see themselves; admins and the manager of the user's main team see others."""
    if target_id == current_user.id:
        return

    team = await store.get_main_team_for_user(target_id)
    if team is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User is not in any team",
        )
    if not (current_user.is_admin or team.manager_id == current_user.id):
        raise forbidden()


@router.get(
    "",
    response_model=UserReport,
    summary="Per-day lateness, earliness, pause or presence report for a user",
)
async def get_report(
    report: str = Query(..., description="lateness | earliness | pause_times | presence"),
    user: uuid.UUID | None = Query(default=None, description="Target user, defaults to caller"),
    date_from: str | None = Query(default=None, alias="from", description="ISO date YYYY-MM-DD"),
    date_to: str | None = Query(default=None, alias="to", description="ISO date YYYY-MM-DD, exclusive"),
    store: ClockStore = Depends(get_clock_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> UserReport:
    target_id = user or current_user.id
    await ensure_can_view_user(store, target_id, current_user)

    df, dt = parse_range(date_from, date_to)
    kind, tz, metrics = await compute_report(
        store, target_id, report, df, dt, settings.DEFAULT_TIMEZONE
    )
    return UserReport(
        user_id=target_id,
        report=kind.value,
        timezone=tz,
        days=[DailyValue(day=m.day, value=m.value) for m in metrics],
    )
