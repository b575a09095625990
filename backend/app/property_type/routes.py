"""
backend/app/property_type/routes.py

Property Type Routes
Public:
- List property types (localized)
- Evaluation form of a property type (categories, questions, answers; localized)

Admin (OWNER / ADMIN / SUPERUSER):
- List with full catalog, create, read (with include), update, delete
"""

from fastapi import APIRouter, Query, Request, status

from app.core.dependencies import CatalogAdminDep, DBDep
from app.core.i18n import LanguageDep
from app.core.limiter import limiter
from app.core.schemas import MessageResponse
from app.property_type import schemas
from app.property_type.services import PropertyTypeService, parse_include

router = APIRouter(prefix="/property-types", tags=["Property Types"])
admin_router = APIRouter(prefix="/admin/property-types", tags=["Admin: Property Types"])


# ---------------------------------------------------
# Public Endpoints
# ---------------------------------------------------
@router.get(
    "",
    response_model=list[schemas.PropertyTypeSummary],
    status_code=status.HTTP_200_OK,
    summary="List Property Types",
    description="Lists all property types with a `name` in the requested language.",
)
async def list_property_types(db: DBDep, lang: LanguageDep) -> list[schemas.PropertyTypeSummary]:
    return await PropertyTypeService(db).list_public(lang)


@router.get(
    "/{property_type_id}/form",
    response_model=schemas.PropertyTypeForm,
    status_code=status.HTTP_200_OK,
    summary="Get Evaluation Form",
    description="Returns the localized questionnaire (categories, questions, answers) of a property type.",
)
async def get_evaluation_form(
    property_type_id: int, db: DBDep, lang: LanguageDep
) -> schemas.PropertyTypeForm:
    return await PropertyTypeService(db).get_form(property_type_id, lang)


# ---------------------------------------------------
# Admin Endpoints
# ---------------------------------------------------
@admin_router.get(
    "",
    response_model=list[schemas.PropertyTypeDetail],
    status_code=status.HTTP_200_OK,
    summary="List Property Types (Admin)",
    description="All property types with nested categories, questions and answers.",
)
async def admin_list_property_types(
    db: DBDep, current_user: CatalogAdminDep
) -> list[schemas.PropertyTypeDetail]:
    return await PropertyTypeService(db).list_with_tree()


@admin_router.post(
    "",
    response_model=schemas.PropertyTypeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Property Type",
    description="Creates a property type. 409 if `name_ro` is already used.",
)
@limiter.limit("30/minute")
async def create_property_type(
    request: Request,
    payload: schemas.PropertyTypeCreate,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.PropertyTypeRead:
    property_type = await PropertyTypeService(db).create(payload)
    return schemas.PropertyTypeRead.model_validate(property_type)


@admin_router.get(
    "/{property_type_id}",
    response_model=schemas.PropertyTypeDetail,
    response_model_exclude_unset=True,
    status_code=status.HTTP_200_OK,
    summary="Get Property Type",
    description="Single property type; `include=categories,questions,answers` selects nested levels.",
)
async def get_property_type(
    property_type_id: int,
    db: DBDep,
    current_user: CatalogAdminDep,
    include: str | None = Query(None, description="Comma separated: categories,questions,answers"),
) -> schemas.PropertyTypeDetail:
    return await PropertyTypeService(db).get_detail(property_type_id, parse_include(include))


@admin_router.patch(
    "/{property_type_id}",
    response_model=schemas.PropertyTypeRead,
    status_code=status.HTTP_200_OK,
    summary="Update Property Type",
)
@limiter.limit("30/minute")
async def update_property_type(
    request: Request,
    property_type_id: int,
    payload: schemas.PropertyTypeUpdate,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.PropertyTypeRead:
    property_type = await PropertyTypeService(db).update(property_type_id, payload)
    return schemas.PropertyTypeRead.model_validate(property_type)


@admin_router.delete(
    "/{property_type_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete Property Type",
    description="Deletes a property type without categories. 409 otherwise.",
)
@limiter.limit("30/minute")
async def delete_property_type(
    request: Request,
    property_type_id: int,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> MessageResponse:
    await PropertyTypeService(db).delete(property_type_id)
    return MessageResponse(message="Property type deleted successfully")
