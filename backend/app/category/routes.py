"""
backend/app/category/routes.py

Question Category Routes (OWNER / ADMIN / SUPERUSER)
- List categories with nested questions and answers
- Create, update and delete categories
"""

from fastapi import APIRouter, Query, Request, status

from app.category import schemas
from app.category.services import CategoryService
from app.core.dependencies import CatalogAdminDep, DBDep
from app.core.limiter import limiter
from app.core.schemas import MessageResponse

router = APIRouter(prefix="/admin/question-categories", tags=["Admin: Question Categories"])


@router.get(
    "",
    response_model=list[schemas.CategoryRead],
    status_code=status.HTTP_200_OK,
    summary="List Categories",
    description="Categories with their questions and answers, optionally filtered by property type.",
)
async def list_categories(
    db: DBDep,
    current_user: CatalogAdminDep,
    property_type_id: int | None = Query(None, gt=0, description="Only this property type"),
) -> list[schemas.CategoryRead]:
    categories = await CategoryService(db).list_categories(property_type_id)
    return [schemas.CategoryRead.model_validate(c) for c in categories]


@router.post(
    "",
    response_model=schemas.CategoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Category",
    description="404 if the property type does not exist; 409 if the name is taken within it.",
)
@limiter.limit("30/minute")
async def create_category(
    request: Request,
    payload: schemas.CategoryCreate,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.CategoryRead:
    category = await CategoryService(db).create(payload)
    return schemas.CategoryRead.model_validate(category)


@router.patch(
    "/{category_id}",
    response_model=schemas.CategoryRead,
    status_code=status.HTTP_200_OK,
    summary="Update Category",
)
@limiter.limit("30/minute")
async def update_category(
    request: Request,
    category_id: int,
    payload: schemas.CategoryUpdate,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.CategoryRead:
    category = await CategoryService(db).update(category_id, payload)
    return schemas.CategoryRead.model_validate(category)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete Category",
    description="Deletes an empty category. 409 while it still has questions.",
)
@limiter.limit("30/minute")
async def delete_category(
    request: Request,
    category_id: int,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> MessageResponse:
    await CategoryService(db).delete(category_id)
    return MessageResponse(message="Category deleted successfully")
