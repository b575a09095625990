"""
tests/campaign/test_campaigns.py

Route tests for /communication/campaigns and unit tests of the team scoping,
filters and row mapping in CampaignService.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException, status
from httpx import AsyncClient
from sqlalchemy.exc import SQLAlchemyError

from app.campaign.models import Campaign
from app.campaign.schemas import CampaignCreate, CampaignRead
from app.campaign.services import NO_TEAM, CampaignService, to_campaign_read
from app.database.models import User


def _campaign(**overrides) -> Campaign:
    data = {
        "id": 1,
        "team_id": 4,
        "name": "Spring newsletter",
        "type": "email",
        "status": "sent",
        "recipient_count": 120,
        "open_rate": Decimal("42.50"),
        "click_rate": Decimal("7.25"),
        "response_rate": Decimal("0"),
        "sent_at": datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc),
        "created_at": datetime(2026, 2, 27, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return Campaign(**data)


def _db_for_team(team_id: int | None, campaigns: list[Campaign] | None = None) -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    team_result = MagicMock()
    team_result.scalar_one_or_none.return_value = team_id
    list_result = MagicMock()
    list_result.scalars.return_value.all.return_value = campaigns or []
    db.execute.side_effect = [team_result, list_result]
    return db


# =====================
# --- Row Mapping ---
# =====================
def test_to_campaign_read_uses_send_date() -> None:
    row = to_campaign_read(_campaign())
    assert row.sent_date == date(2026, 3, 2)
    assert row.recipients == 120
    assert row.open_rate == 42.5
    assert row.template == "Custom"


def test_to_campaign_read_falls_back_to_creation_date() -> None:
    row = to_campaign_read(_campaign(sent_at=None, status="draft"))
    assert row.sent_date == date(2026, 2, 27)


# =====================
# --- Service ---
# =====================
@pytest.mark.asyncio
async def test_list_requires_team(fake_member_user: User) -> None:
    db = _db_for_team(None)
    with pytest.raises(HTTPException) as exc:
        await CampaignService(db).list_for_user(fake_member_user)
    assert exc.value.status_code == status.HTTP_404_NOT_FOUND
    assert exc.value.detail == NO_TEAM


@pytest.mark.asyncio
async def test_list_applies_filters_except_all(fake_member_user: User) -> None:
    db = _db_for_team(4, [_campaign()])

    rows = await CampaignService(db).list_for_user(fake_member_user, "all", "sent")

    assert [r.id for r in rows] == [1]
    query = str(db.execute.await_args_list[1].args[0])
    assert "campaigns.team_id" in query
    assert "campaigns.status" in query
    assert "campaigns.type" not in query
    assert "LIMIT" in query


@pytest.mark.asyncio
async def test_create_rejects_blank_name(fake_member_user: User) -> None:
    db = _db_for_team(4)
    with pytest.raises(HTTPException) as exc:
        await CampaignService(db).create(fake_member_user, CampaignCreate(name="   "))
    assert exc.value.status_code == status.HTTP_400_BAD_REQUEST
    assert exc.value.detail == "Campaign name is required"
    db.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_stores_draft_for_team(fake_member_user: User) -> None:
    db = _db_for_team(4)

    async def fill_defaults(campaign: Campaign) -> None:
        campaign.id = 9
        campaign.status = "draft"
        campaign.open_rate = campaign.click_rate = campaign.response_rate = Decimal("0")
        campaign.created_at = datetime(2026, 4, 1, tzinfo=timezone.utc)

    db.refresh.side_effect = fill_defaults
    payload = CampaignCreate(name="Autumn offers", recipient_count=30)

    row = await CampaignService(db).create(fake_member_user, payload)

    stored = db.add.call_args.args[0]
    assert stored.team_id == 4
    assert stored.created_by == fake_member_user.id
    assert stored.type == "email"
    assert row.id == 9
    assert row.status == "draft"
    assert row.recipients == 30
    assert row.sent_date == date(2026, 4, 1)


@pytest.mark.asyncio
async def test_create_rolls_back_failed_commit(fake_member_user: User) -> None:
    db = _db_for_team(4)
    db.commit.side_effect = SQLAlchemyError("connection reset")
    with pytest.raises(SQLAlchemyError):
        await CampaignService(db).create(fake_member_user, CampaignCreate(name="Autumn offers"))
    db.rollback.assert_awaited_once()


# =====================
# --- Routes ---
# =====================
@pytest.mark.asyncio
@patch("app.campaign.routes.CampaignService.list_for_user", new_callable=AsyncMock)
async def test_list_campaigns_route(
    mock_list: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_member_user: User,
) -> None:
    mock_list.return_value = [to_campaign_read(_campaign())]

    response = await async_client.get(
        "/communication/campaigns", params={"type": "email", "status": "all"}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()[0]["sent_date"] == "2026-03-02"
    mock_list.assert_awaited_once_with(mock_current_member_user, "email", "all")


@pytest.mark.asyncio
@patch("app.campaign.routes.CampaignService.create", new_callable=AsyncMock)
async def test_create_campaign_route(
    mock_create: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_member_user: User,
) -> None:
    mock_create.return_value = CampaignRead(
        id=9,
        name="Autumn offers",
        type="email",
        status="draft",
        recipients=0,
        open_rate=0,
        click_rate=0,
        response_rate=0,
        sent_date=date(2026, 4, 1),
    )

    response = await async_client.post("/communication/campaigns", json={"name": "Autumn offers"})

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["status"] == "draft"
    user, payload = mock_create.call_args.args
    assert user is mock_current_member_user
    assert payload.type == "email"


@pytest.mark.asyncio
async def test_campaigns_require_authentication(
    clear_overrides: None, override_get_db: None, async_client: AsyncClient
) -> None:
    response = await async_client.get("/communication/campaigns")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
