"""
backend/app/custom_field/routes.py

Custom Field Routes
Public:
- Active fields of a property type (localized, grouped by display category)

Admin (OWNER / ADMIN / SUPERUSER):
- List and create the fields of a property type
- Replace and delete a field
"""

from fastapi import APIRouter, Query, Request, status

from app.core.dependencies import CatalogAdminDep, DBDep
from app.core.i18n import LanguageDep
from app.core.limiter import limiter
from app.core.schemas import MessageResponse
from app.custom_field import schemas
from app.custom_field.services import CustomFieldService

router = APIRouter(prefix="/custom-fields", tags=["Custom Fields"])
admin_router = APIRouter(prefix="/admin", tags=["Admin: Custom Fields"])


# ---------------------------------------------------
# Public Endpoints
# ---------------------------------------------------
@router.get(
    "",
    response_model=schemas.CustomFieldList,
    status_code=status.HTTP_200_OK,
    summary="List Custom Fields",
    description="Active extra fields of a property type, in the requested language.",
)
async def list_custom_fields(
    db: DBDep,
    lang: LanguageDep,
    property_type_id: int = Query(..., gt=0),
) -> schemas.CustomFieldList:
    return await CustomFieldService(db).list_public(property_type_id, lang)


# ---------------------------------------------------
# Admin Endpoints
# ---------------------------------------------------
@admin_router.get(
    "/property-types/{property_type_id}/custom-fields",
    response_model=list[schemas.CustomFieldRead],
    status_code=status.HTTP_200_OK,
    summary="List Property Type Fields",
    description="All fields of a property type, inactive ones included.",
)
async def admin_list_custom_fields(
    property_type_id: int, db: DBDep, current_user: CatalogAdminDep
) -> list[schemas.CustomFieldRead]:
    fields = await CustomFieldService(db).list_for_property_type(property_type_id)
    return [schemas.CustomFieldRead.model_validate(f) for f in fields]


@admin_router.post(
    "/property-types/{property_type_id}/custom-fields",
    response_model=schemas.CustomFieldRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Custom Field",
    description="Adds a field to a property type. Select fields need at least one option.",
)
@limiter.limit("30/minute")
async def create_custom_field(
    request: Request,
    property_type_id: int,
    payload: schemas.CustomFieldCreate,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.CustomFieldRead:
    field = await CustomFieldService(db).create(property_type_id, payload)
    return schemas.CustomFieldRead.model_validate(field)


@admin_router.put(
    "/custom-fields/{field_id}",
    response_model=schemas.CustomFieldRead,
    status_code=status.HTTP_200_OK,
    summary="Replace Custom Field",
)
@limiter.limit("30/minute")
async def update_custom_field(
    request: Request,
    field_id: int,
    payload: schemas.CustomFieldUpdate,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.CustomFieldRead:
    field = await CustomFieldService(db).update(field_id, payload)
    return schemas.CustomFieldRead.model_validate(field)


@admin_router.delete(
    "/custom-fields/{field_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete Custom Field",
)
@limiter.limit("30/minute")
async def delete_custom_field(
    request: Request, field_id: int, db: DBDep, current_user: CatalogAdminDep
) -> MessageResponse:
    await CustomFieldService(db).delete(field_id)
    return MessageResponse(message="Custom field deleted successfully")
