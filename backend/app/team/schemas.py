"""
team/schemas.py

Pydantic schemas for teams, team members, activity logs and subscriptions.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.database.enums import ActivityType, TeamRole


class TeamMemberRead(BaseModel):
    """A member of the current user's team."""

    id: UUID = Field(..., description="User ID of the member")
    name: str | None = None
    email: str
    role: TeamRole
    joined_at: datetime


class TeamRead(BaseModel):
    id: int
    name: str
    plan_name: str | None = None
    subscription_status: str | None = None
    created_at: datetime
    members: list[TeamMemberRead] = Field(default_factory=list)


class ActivityLogRead(BaseModel):
    id: int
    action: ActivityType
    timestamp: datetime
    ip_address: str | None = None

    model_config = ConfigDict(from_attributes=True)


class SubscriptionRead(BaseModel):
    """Subscription history entry joined with the user who started it."""

    id: int
    plan_name: str
    status: str
    amount: int | None = Field(None, description="Amount in cents")
    currency: str
    billing_period: str | None = None
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    created_at: datetime
    user_name: str | None = None
    user_email: str | None = None
