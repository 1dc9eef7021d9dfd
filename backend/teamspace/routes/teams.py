"""
Teamspace Backend — Teams Route Handler
=========================================

What:  GET /api/teams/current, the caller's team and roster.
When:  The first call bootstraps the team and sample teammates.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.config import settings
from teamspace.database import get_db_session
from teamspace.dependencies import CurrentUser, get_current_user
from teamspace.schemas.common import ErrorResponse
from teamspace.schemas.team import CurrentTeamResponse
from teamspace.services import mock_data
from teamspace.services.team_service import team_service

router = APIRouter(prefix="/api/teams", tags=["Teams"])


@router.get(
    "/current",
    response_model=CurrentTeamResponse,
    responses={404: {"description": "Team not found", "model": ErrorResponse}},
    summary="Current team and its members",
)
async def get_current_team(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CurrentTeamResponse:
    if settings.database_disabled:
        return CurrentTeamResponse(
            team=mock_data.get_dummy_team(current_user.user_id),
            members=mock_data.get_dummy_team_members(current_user.user_id),
        )
    return await team_service.get_current_team(db, current_user.user_id)
