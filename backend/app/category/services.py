"""
backend/app/category/services.py

Question Category Service Layer
Admin CRUD for categories. `name_ro` must be unique inside a property type and
categories that still hold questions cannot be removed.
"""

import logging

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.category import schemas
from app.category.models import QuestionCategory
from app.core.cache import invalidate_catalog
from app.property_type.models import PropertyType
from app.question.models import Question

logger = logging.getLogger(__name__)


class CategoryService:
    """Service class for question category business logic."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---------------------------------------------------
    # Internal Helpers
    # ---------------------------------------------------
    async def _get_category_or_404(
        self, category_id: int, with_questions: bool = False
    ) -> QuestionCategory:
        query = select(QuestionCategory).filter(QuestionCategory.id == category_id)
        if with_questions:
            query = query.options(
                selectinload(QuestionCategory.questions).selectinload(Question.answers)
            ).execution_options(populate_existing=True)
        category = (await self.db.execute(query)).scalar_one_or_none()
        if not category:
            logger.warning(f"[CATEGORY] Not found: id={category_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
        return category

    async def _ensure_property_type_exists(self, property_type_id: int) -> None:
        exists = await self.db.get(PropertyType, property_type_id)
        if not exists:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Property type not found"
            )

    async def _ensure_unique_name(
        self, property_type_id: int, name_ro: str, exclude_id: int | None = None
    ) -> None:
        query = select(QuestionCategory.id).filter(
            QuestionCategory.property_type_id == property_type_id,
            QuestionCategory.name_ro == name_ro,
        )
        if exclude_id is not None:
            query = query.filter(QuestionCategory.id != exclude_id)
        if (await self.db.execute(query)).first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Category with this name already exists for this property type",
            )

    # ---------------------------------------------------
    # Queries
    # ---------------------------------------------------
    async def list_categories(self, property_type_id: int | None = None) -> list[QuestionCategory]:
        """Categories with nested questions and answers, optionally for one property type."""
        query = (
            select(QuestionCategory)
            .options(selectinload(QuestionCategory.questions).selectinload(Question.answers))
            .order_by(QuestionCategory.property_type_id, QuestionCategory.id)
        )
        if property_type_id is not None:
            query = query.filter(QuestionCategory.property_type_id == property_type_id)
        return list((await self.db.execute(query)).scalars().all())

    # ---------------------------------------------------
    # Mutations
    # ---------------------------------------------------
    async def create(self, payload: schemas.CategoryCreate) -> QuestionCategory:
        await self._ensure_property_type_exists(payload.property_type_id)
        await self._ensure_unique_name(payload.property_type_id, payload.name_ro)

        category = QuestionCategory(
            name_ro=payload.name_ro,
            name_en=payload.name_en,
            property_type_id=payload.property_type_id,
        )
        self.db.add(category)
        await self.db.commit()
        await invalidate_catalog()
        logger.info(
            f"[CATEGORY] Created id={category.id} in property type {category.property_type_id}"
        )
        return await self._get_category_or_404(category.id, with_questions=True)

    async def update(self, category_id: int, payload: schemas.CategoryUpdate) -> QuestionCategory:
        category = await self._get_category_or_404(category_id)
        data = payload.model_dump(exclude_unset=True)
        if data.get("name_ro") is None:
            data.pop("name_ro", None)
        if "name_ro" in data and data["name_ro"] != category.name_ro:
            await self._ensure_unique_name(
                category.property_type_id, data["name_ro"], exclude_id=category_id
            )

        for field, value in data.items():
            setattr(category, field, value)
        await self.db.commit()
        await invalidate_catalog()
        logger.info(f"[CATEGORY] Updated id={category_id} fields={sorted(data)}")
        return await self._get_category_or_404(category_id, with_questions=True)

    async def delete(self, category_id: int) -> None:
        category = await self._get_category_or_404(category_id)
        question_count = (
            await self.db.execute(
                select(func.count(Question.id)).filter(Question.category_id == category_id)
            )
        ).scalar_one()
        if question_count:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete category with existing questions",
            )
        await self.db.delete(category)
        await self.db.commit()
        await invalidate_catalog()
        logger.info(f"[CATEGORY] Deleted id={category_id}")
