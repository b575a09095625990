"""
tests/property_type/test_property_type_routes.py

Route tests for public and admin property type endpoints.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException, status
from httpx import AsyncClient

from app.database.models import User
from app.property_type import schemas


def _read(**overrides) -> schemas.PropertyTypeRead:
    data = {
        "id": 1,
        "name_ro": "Casă",
        "name_en": "House",
        "created_at": datetime.now(timezone.utc),
        "updated_at": datetime.now(timezone.utc),
    }
    data.update(overrides)
    return schemas.PropertyTypeRead(**data)


# =====================
# --- Public ---
# =====================
@pytest.mark.asyncio
@patch("app.property_type.routes.PropertyTypeService.list_public", new_callable=AsyncMock)
async def test_list_property_types_uses_query_language(
    mock_list: AsyncMock, async_client: AsyncClient, override_get_db: None
) -> None:
    mock_list.return_value = [
        schemas.PropertyTypeSummary(id=1, name_ro="Casă", name_en="House", name="House")
    ]
    response = await async_client.get("/property-types", params={"lang": "en"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()[0]["name"] == "House"
    assert mock_list.call_args.args[0] == "en"


@pytest.mark.asyncio
@patch("app.property_type.routes.PropertyTypeService.list_public", new_callable=AsyncMock)
async def test_list_property_types_language_from_header(
    mock_list: AsyncMock, async_client: AsyncClient, override_get_db: None
) -> None:
    mock_list.return_value = []
    response = await async_client.get(
        "/property-types", headers={"Accept-Language": "en-US,en;q=0.9"}
    )
    assert response.status_code == status.HTTP_200_OK
    assert mock_list.call_args.args[0] == "en"


@pytest.mark.asyncio
@patch("app.property_type.routes.PropertyTypeService.get_form", new_callable=AsyncMock)
async def test_get_form_not_found(
    mock_form: AsyncMock, async_client: AsyncClient, override_get_db: None
) -> None:
    mock_form.side_effect = HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Property type not found"
    )
    response = await async_client.get("/property-types/99/form")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Property type not found"


@pytest.mark.asyncio
@patch("app.property_type.routes.PropertyTypeService.get_form", new_callable=AsyncMock)
async def test_get_form_defaults_to_romanian(
    mock_form: AsyncMock, async_client: AsyncClient, override_get_db: None
) -> None:
    mock_form.return_value = schemas.PropertyTypeForm(id=1, name="Casă", language="ro", categories=[])
    response = await async_client.get("/property-types/1/form")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["language"] == "ro"
    assert mock_form.call_args.args == (1, "ro")


# =====================
# --- Admin ---
# =====================
@pytest.mark.asyncio
async def test_admin_list_forbidden_for_member(
    async_client: AsyncClient, override_get_db: None, mock_current_member_user: User
) -> None:
    response = await async_client.get("/admin/property-types")
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Access denied for role: MEMBER"


@pytest.mark.asyncio
async def test_admin_list_requires_authentication(
    async_client: AsyncClient, clear_overrides: None, override_get_db: None
) -> None:
    response = await async_client.get("/admin/property-types")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
@patch("app.property_type.routes.PropertyTypeService.create", new_callable=AsyncMock)
async def test_create_property_type_as_owner(
    mock_create: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_owner_user: User,
) -> None:
    mock_create.return_value = _read(id=3, name_ro="Apartament", name_en="Apartment")
    response = await async_client.post(
        "/admin/property-types", json={"name_ro": "Apartament", "name_en": "Apartment"}
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["id"] == 3


@pytest.mark.asyncio
@patch("app.property_type.routes.PropertyTypeService.create", new_callable=AsyncMock)
async def test_create_property_type_requires_name(
    mock_create: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    response = await async_client.post("/admin/property-types", json={"name_en": "Apartment"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    mock_create.assert_not_awaited()


@pytest.mark.asyncio
@patch("app.property_type.routes.PropertyTypeService.create", new_callable=AsyncMock)
async def test_create_property_type_duplicate(
    mock_create: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_create.side_effect = HTTPException(
        status_code=status.HTTP_409_CONFLICT, detail="Property type with this name already exists"
    )
    response = await async_client.post("/admin/property-types", json={"name_ro": "Casă"})
    assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.asyncio
@patch("app.property_type.routes.PropertyTypeService.get_detail", new_callable=AsyncMock)
async def test_get_property_type_with_include(
    mock_detail: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_detail.return_value = schemas.PropertyTypeDetail(id=1, name_ro="Casă", categories=[])
    response = await async_client.get(
        "/admin/property-types/1", params={"include": "questions"}
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["categories"] == []
    assert mock_detail.call_args.args == (1, {"categories", "questions"})


@pytest.mark.asyncio
async def test_get_property_type_invalid_include(
    async_client: AsyncClient, override_get_db: None, mock_current_admin_user: User
) -> None:
    response = await async_client.get("/admin/property-types/1", params={"include": "owners"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "owners" in response.json()["detail"]


@pytest.mark.asyncio
@patch("app.property_type.routes.PropertyTypeService.delete", new_callable=AsyncMock)
async def test_delete_property_type(
    mock_delete: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    response = await async_client.delete("/admin/property-types/4")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Property type deleted successfully"
    mock_delete.assert_awaited_once_with(4)


@pytest.mark.asyncio
@patch("app.property_type.routes.PropertyTypeService.delete", new_callable=AsyncMock)
async def test_delete_property_type_with_categories(
    mock_delete: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_delete.side_effect = HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Cannot delete property type with existing categories",
    )
    response = await async_client.delete("/admin/property-types/1")
    assert response.status_code == status.HTTP_409_CONFLICT
