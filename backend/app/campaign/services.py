"""
backend/app/campaign/services.py

Campaign Service Layer
Lists and creates the campaigns of the current user's team.
"""

import logging

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.campaign import schemas
from app.campaign.models import Campaign
from app.database.models import User
from app.team.services import TeamService

logger = logging.getLogger(__name__)

CAMPAIGN_LIST_LIMIT = 50
NO_TEAM = "User not found or not part of a team"


def to_campaign_read(campaign: Campaign) -> schemas.CampaignRead:
    sent_on = campaign.sent_at or campaign.created_at
    return schemas.CampaignRead(
        id=campaign.id,
        name=campaign.name,
        type=campaign.type,
        status=campaign.status,
        recipients=campaign.recipient_count,
        open_rate=float(campaign.open_rate or 0),
        click_rate=float(campaign.click_rate or 0),
        response_rate=float(campaign.response_rate or 0),
        sent_date=sent_on.date(),
    )


class CampaignService:
    """Service class for team campaigns."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _team_id_or_404(self, user: User) -> int:
        team_id = await TeamService(self.db).get_team_id_for_user(user.id)
        if team_id is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NO_TEAM)
        return team_id

    async def list_for_user(
        self, user: User, type: str | None = None, status_filter: str | None = None
    ) -> list[schemas.CampaignRead]:
        """Newest campaigns of the user's team; `all` or no value disables a filter."""
        team_id = await self._team_id_or_404(user)
        query = select(Campaign).filter(Campaign.team_id == team_id)
        if type and type != "all":
            query = query.filter(Campaign.type == type)
        if status_filter and status_filter != "all":
            query = query.filter(Campaign.status == status_filter)

        rows = await self.db.execute(
            query.order_by(Campaign.created_at.desc(), Campaign.id.desc()).limit(
                CAMPAIGN_LIST_LIMIT
            )
        )
        return [to_campaign_read(c) for c in rows.scalars().all()]

    async def create(self, user: User, payload: schemas.CampaignCreate) -> schemas.CampaignRead:
        if not payload.name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Campaign name is required"
            )
        team_id = await self._team_id_or_404(user)

        campaign = Campaign(
            team_id=team_id,
            name=payload.name,
            description=payload.description,
            type=payload.type,
            recipient_count=payload.recipient_count,
            created_by=user.id,
        )
        self.db.add(campaign)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(f"[CAMPAIGN] Creating campaign for team {team_id} failed, rolled back")
            raise
        await self.db.refresh(campaign)
        logger.info(f"[CAMPAIGN] Team {team_id} created campaign {campaign.id} ({campaign.type})")
        return to_campaign_read(campaign)
