"""
tests/team/test_team_routes.py

Route tests for the team, activity and subscription endpoints,
plus the service-level activity logging used by the other features.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException, status
from httpx import AsyncClient

from app.database.enums import ActivityType, TeamRole
from app.database.models import User
from app.team.schemas import ActivityLogRead, SubscriptionRead, TeamMemberRead, TeamRead
from app.team.services import TeamService


@pytest.mark.asyncio
@patch("app.team.routes.TeamService.get_team_for_user", new_callable=AsyncMock)
async def test_get_my_team(
    mock_team: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_member_user: User,
) -> None:
    now = datetime.now(timezone.utc)
    mock_team.return_value = TeamRead(
        id=1,
        name=f"{mock_current_member_user.email}'s Team",
        created_at=now,
        members=[
            TeamMemberRead(
                id=mock_current_member_user.id,
                name=mock_current_member_user.name,
                email=mock_current_member_user.email,
                role=TeamRole.OWNER,
                joined_at=now,
            )
        ],
    )
    response = await async_client.get("/team")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["members"][0]["role"] == "owner"
    assert body["plan_name"] is None


@pytest.mark.asyncio
@patch("app.team.routes.TeamService.get_team_for_user", new_callable=AsyncMock)
async def test_get_my_team_missing(
    mock_team: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_member_user: User,
) -> None:
    mock_team.side_effect = HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    response = await async_client.get("/team")
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
@patch("app.team.routes.TeamService.list_recent_activity", new_callable=AsyncMock)
async def test_recent_activity(
    mock_activity: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_member_user: User,
) -> None:
    mock_activity.return_value = [
        ActivityLogRead(
            id=2,
            action=ActivityType.EVALUATION_COMPLETED,
            timestamp=datetime.now(timezone.utc),
            ip_address="10.0.0.1",
        ),
        ActivityLogRead(id=1, action=ActivityType.SIGN_UP, timestamp=datetime.now(timezone.utc)),
    ]
    response = await async_client.get("/team/activity")
    assert response.status_code == status.HTTP_200_OK
    assert [a["action"] for a in response.json()] == ["EVALUATION_COMPLETED", "SIGN_UP"]


@pytest.mark.asyncio
@patch("app.team.routes.TeamService.list_team_subscriptions", new_callable=AsyncMock)
async def test_team_subscriptions(
    mock_subscriptions: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_member_user: User,
) -> None:
    mock_subscriptions.return_value = [
        SubscriptionRead(
            id=1,
            plan_name="Pro",
            status="active",
            amount=4900,
            currency="RON",
            created_at=datetime.now(timezone.utc),
            user_email=mock_current_member_user.email,
        )
    ]
    response = await async_client.get("/dashboard/subscriptions")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()[0]["amount"] == 4900


@pytest.mark.asyncio
async def test_team_requires_authentication(
    async_client: AsyncClient, clear_overrides: None, override_get_db: None
) -> None:
    response = await async_client.get("/team")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_log_activity_uses_users_team(fake_member_user: User) -> None:
    db = AsyncMock()
    db.add = MagicMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = 7
    db.execute.return_value = result

    entry = await TeamService(db).log_activity(
        fake_member_user.id, ActivityType.SIGN_IN, "10.0.0.1"
    )

    assert entry.team_id == 7
    assert entry.action == ActivityType.SIGN_IN
    db.add.assert_called_once_with(entry)
    db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_subscriptions_empty_without_team(fake_member_user: User) -> None:
    db = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = None
    db.execute.return_value = result

    assert await TeamService(db).list_team_subscriptions(fake_member_user) == []
    db.execute.assert_awaited_once()
