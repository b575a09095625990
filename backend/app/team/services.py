"""
backend/app/team/services.py

Team Service Layer
Looks up the current user's team and its members, records activity,
and lists the team's subscription history.
"""

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database.enums import ActivityType, TeamRole
from app.database.models import User
from app.team import schemas
from app.team.models import ActivityLog, Subscription, Team, TeamMember

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10


class TeamService:
    """Service class for teams, activity logging and subscriptions."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---------------------------------------------------
    # Lookups
    # ---------------------------------------------------
    async def get_team_id_for_user(self, user_id: UUID) -> int | None:
        """Team of the user's earliest membership, or None."""
        result = await self.db.execute(
            select(TeamMember.team_id)
            .filter(TeamMember.user_id == user_id)
            .order_by(TeamMember.joined_at.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    # ---------------------------------------------------
    # Team Creation & Activity
    # ---------------------------------------------------
    async def create_personal_team(self, user: User) -> Team:
        """
        Create a team owned by `user`. Flushes but does not commit, so it joins
        the caller's transaction.
        """
        team = Team(name=f"{user.email}'s Team")
        self.db.add(team)
        await self.db.flush()
        self.db.add(TeamMember(user_id=user.id, team_id=team.id, role=TeamRole.OWNER))
        await self.db.flush()
        logger.info(f"[TEAM] Created personal team {team.id} for user {user.id}")
        return team

    async def log_activity(
        self,
        user_id: UUID,
        action: ActivityType,
        ip_address: str | None = None,
        team_id: int | None = None,
    ) -> ActivityLog:
        """Add an activity log entry; the caller commits."""
        if team_id is None:
            team_id = await self.get_team_id_for_user(user_id)
        entry = ActivityLog(
            team_id=team_id, user_id=user_id, action=action, ip_address=ip_address
        )
        self.db.add(entry)
        logger.debug(f"[ACTIVITY] {action.value} user={user_id} team={team_id}")
        return entry

    # ---------------------------------------------------
    # Queries
    # ---------------------------------------------------
    async def get_team_for_user(self, user: User) -> schemas.TeamRead:
        team_id = await self.get_team_id_for_user(user.id)
        if team_id is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")

        team = (
            await self.db.execute(
                select(Team)
                .filter(Team.id == team_id)
                .options(selectinload(Team.members).selectinload(TeamMember.user))
            )
        ).scalar_one()

        members = [
            schemas.TeamMemberRead(
                id=member.user.id,
                name=member.user.name,
                email=member.user.email,
                role=member.role,
                joined_at=member.joined_at,
            )
            for member in team.members
        ]
        return schemas.TeamRead(
            id=team.id,
            name=team.name,
            plan_name=team.plan_name,
            subscription_status=team.subscription_status,
            created_at=team.created_at,
            members=members,
        )

    async def list_recent_activity(
        self, user: User, limit: int = RECENT_ACTIVITY_LIMIT
    ) -> list[schemas.ActivityLogRead]:
        rows = await self.db.execute(
            select(ActivityLog)
            .filter(ActivityLog.user_id == user.id)
            .order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
            .limit(limit)
        )
        return [schemas.ActivityLogRead.model_validate(r) for r in rows.scalars().all()]

    async def list_team_subscriptions(self, user: User) -> list[schemas.SubscriptionRead]:
        """Subscriptions of the user's team, newest first; empty when the user has no team."""
        team_id = await self.get_team_id_for_user(user.id)
        if team_id is None:
            return []

        rows = await self.db.execute(
            select(Subscription, User.name, User.email)
            .outerjoin(User, Subscription.user_id == User.id)
            .filter(Subscription.team_id == team_id)
            .order_by(Subscription.created_at.desc())
        )
        return [
            schemas.SubscriptionRead(
                id=sub.id,
                plan_name=sub.plan_name,
                status=sub.status,
                amount=sub.amount,
                currency=sub.currency,
                billing_period=sub.billing_period,
                current_period_start=sub.current_period_start,
                current_period_end=sub.current_period_end,
                created_at=sub.created_at,
                user_name=user_name,
                user_email=user_email,
            )
            for sub, user_name, user_email in rows.all()
        ]
