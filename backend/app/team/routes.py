"""
backend/app/team/routes.py

Team Routes
- Current user's team with members
- Recent activity of the current user
- Subscription history of the current user's team

All endpoints require authentication.
"""

from fastapi import APIRouter, status

from app.core.dependencies import CurrentUserDep, DBDep
from app.team import schemas
from app.team.services import TeamService

router = APIRouter(tags=["Team"])


@router.get(
    "/team",
    response_model=schemas.TeamRead,
    status_code=status.HTTP_200_OK,
    summary="Get My Team",
    description="Returns the team of the current user with its members.",
)
async def get_my_team(db: DBDep, current_user: CurrentUserDep) -> schemas.TeamRead:
    return await TeamService(db).get_team_for_user(current_user)


@router.get(
    "/team/activity",
    response_model=list[schemas.ActivityLogRead],
    status_code=status.HTTP_200_OK,
    summary="Recent Activity",
    description="Returns the last 10 activity log entries of the current user, newest first.",
)
async def get_my_activity(
    db: DBDep, current_user: CurrentUserDep
) -> list[schemas.ActivityLogRead]:
    return await TeamService(db).list_recent_activity(current_user)


@router.get(
    "/dashboard/subscriptions",
    response_model=list[schemas.SubscriptionRead],
    status_code=status.HTTP_200_OK,
    summary="Team Subscriptions",
    description="Lists the subscriptions of the current user's team, newest first.",
)
async def get_team_subscriptions(
    db: DBDep, current_user: CurrentUserDep
) -> list[schemas.SubscriptionRead]:
    return await TeamService(db).list_team_subscriptions(current_user)
