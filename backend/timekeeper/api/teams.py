import uuid

from fastapi import APIRouter, Depends, Query

from timekeeper.api.params import parse_range
from timekeeper.core.config import settings
from timekeeper.core.exceptions import TeamNotFound
from timekeeper.core.middleware import CurrentUser, forbidden, get_current_user
from timekeeper.schemas.report import TeamAverages
from timekeeper.services.clock_store import ClockStore, get_clock_store
from timekeeper.services.reporting import compute_team_averages

router = APIRouter()


@router.get(
    "/{team_id}/averages",
    response_model=TeamAverages,
    summary="Average presence hours per day and per ISO week across team members",
)
async def get_team_averages(
    team_id: uuid.UUID,
    date_from: str | None = Query(default=None, alias="from"),
    date_to: str | None = Query(default=None, alias="to"),
    store: ClockStore = Depends(get_clock_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> TeamAverages:
    team = await store.get_team(team_id)
    if team is None:
        raise TeamNotFound(team_id)
    if not (current_user.is_admin or team.manager_id == current_user.id):
        raise forbidden("Only admins and the team manager can view team averages")

    df, dt = parse_range(date_from, date_to)
    return await compute_team_averages(
        store, team_id, df, dt, settings.DEFAULT_TIMEZONE
    )
