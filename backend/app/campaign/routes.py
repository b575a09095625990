"""
backend/app/campaign/routes.py

Campaign Routes
- List the current user's team campaigns (filter by type and status)
- Create a draft campaign for the team

All endpoints require authentication.
"""

from fastapi import APIRouter, Query, Request, status

from app.campaign import schemas
from app.campaign.services import CampaignService
from app.core.dependencies import CurrentUserDep, DBDep
from app.core.limiter import limiter

router = APIRouter(prefix="/communication/campaigns", tags=["Campaigns"])


@router.get(
    "",
    response_model=list[schemas.CampaignRead],
    status_code=status.HTTP_200_OK,
    summary="List Team Campaigns",
    description="Last 50 campaigns of the current user's team, newest first.",
)
async def list_campaigns(
    db: DBDep,
    current_user: CurrentUserDep,
    type: str | None = Query(None, description="Campaign type or `all`"),
    status_filter: str | None = Query(None, alias="status", description="Status or `all`"),
) -> list[schemas.CampaignRead]:
    return await CampaignService(db).list_for_user(current_user, type, status_filter)


@router.post(
    "",
    response_model=schemas.CampaignRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Campaign",
    description="Creates a draft campaign for the current user's team.",
)
@limiter.limit("20/minute")
async def create_campaign(
    request: Request,
    payload: schemas.CampaignCreate,
    db: DBDep,
    current_user: CurrentUserDep,
) -> schemas.CampaignRead:
    return await CampaignService(db).create(current_user, payload)
