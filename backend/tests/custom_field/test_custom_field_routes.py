"""
tests/custom_field/test_custom_field_routes.py

Route tests for /custom-fields and the admin custom field endpoints.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException, status
from httpx import AsyncClient

from app.custom_field.models import CustomField
from app.custom_field.schemas import CustomFieldList, PublicCustomField
from app.database.enums import CustomFieldType
from app.database.models import User

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _stored_field(**overrides) -> CustomField:
    data = {
        "id": 7,
        "property_type_id": 1,
        "label_ro": "Suprafață utilă",
        "label_en": "Usable area",
        "field_type": CustomFieldType.NUMBER,
        "is_required": True,
        "select_options": [],
        "validation": {"min": 1},
        "sort_order": 0,
        "is_active": True,
        "category": "general",
        "created_at": NOW,
        "updated_at": NOW,
    }
    data.update(overrides)
    return CustomField(**data)


# =====================
# --- Public ---
# =====================
@pytest.mark.asyncio
@patch("app.custom_field.routes.CustomFieldService.list_public", new_callable=AsyncMock)
async def test_list_custom_fields_public(
    mock_list: AsyncMock, async_client: AsyncClient, override_get_db: None
) -> None:
    field = PublicCustomField(
        id=7,
        label="Usable area",
        field_type=CustomFieldType.NUMBER,
        is_required=True,
        sort_order=0,
        category="general",
    )
    mock_list.return_value = CustomFieldList(
        property_type_id=1,
        language="en",
        fields=[field],
        fields_by_category={"general": [field]},
        total_fields=1,
        categories=["general"],
    )

    response = await async_client.get("/custom-fields", params={"property_type_id": 1, "lang": "en"})

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["total_fields"] == 1
    assert body["fields_by_category"]["general"][0]["field_type"] == "number"
    mock_list.assert_awaited_once_with(1, "en")


@pytest.mark.asyncio
async def test_list_custom_fields_requires_property_type(
    async_client: AsyncClient, override_get_db: None
) -> None:
    response = await async_client.get("/custom-fields")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


# =====================
# --- Admin ---
# =====================
@pytest.mark.asyncio
@patch("app.custom_field.routes.CustomFieldService.create", new_callable=AsyncMock)
async def test_create_custom_field(
    mock_create: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_owner_user: User,
) -> None:
    mock_create.return_value = _stored_field()
    payload = {"label_ro": "Suprafață utilă", "label_en": "Usable area", "field_type": "number"}

    response = await async_client.post("/admin/property-types/1/custom-fields", json=payload)

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["id"] == 7
    property_type_id, sent = mock_create.call_args.args
    assert property_type_id == 1
    assert sent.field_type == CustomFieldType.NUMBER
    assert sent.category == "general"


@pytest.mark.asyncio
async def test_create_custom_field_unknown_type(
    async_client: AsyncClient, override_get_db: None, mock_current_admin_user: User
) -> None:
    payload = {"label_ro": "Culoare", "field_type": "color"}
    response = await async_client.post("/admin/property-types/1/custom-fields", json=payload)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_custom_fields_forbidden_for_member(
    async_client: AsyncClient, override_get_db: None, mock_current_member_user: User
) -> None:
    response = await async_client.get("/admin/property-types/1/custom-fields")
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
@patch("app.custom_field.routes.CustomFieldService.list_for_property_type", new_callable=AsyncMock)
async def test_admin_list_includes_inactive(
    mock_list: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_list.return_value = [_stored_field(), _stored_field(id=8, is_active=False)]
    response = await async_client.get("/admin/property-types/1/custom-fields")
    assert response.status_code == status.HTTP_200_OK
    assert [f["is_active"] for f in response.json()] == [True, False]


@pytest.mark.asyncio
@patch("app.custom_field.routes.CustomFieldService.update", new_callable=AsyncMock)
async def test_replace_custom_field(
    mock_update: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_update.return_value = _stored_field(is_active=False)
    payload = {"label_ro": "Suprafață utilă", "field_type": "number", "is_active": False}

    response = await async_client.put("/admin/custom-fields/7", json=payload)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_active"] is False
    field_id, sent = mock_update.call_args.args
    assert field_id == 7
    assert sent.is_active is False


@pytest.mark.asyncio
@patch("app.custom_field.routes.CustomFieldService.delete", new_callable=AsyncMock)
async def test_delete_custom_field_not_found(
    mock_delete: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_delete.side_effect = HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Custom field not found"
    )
    response = await async_client.delete("/admin/custom-fields/99")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Custom field not found"
