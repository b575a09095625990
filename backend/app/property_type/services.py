"""
backend/app/property_type/services.py

Property Type Service Layer
- Admin CRUD with uniqueness and child-protection checks
- Nested catalog reads (`include=categories,questions,answers`)
- Public localized list and evaluation form, served through the Redis cache
"""

import logging
from collections.abc import Iterable

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.interfaces import LoaderOption

from app.category.models import QuestionCategory
from app.category.schemas import CategoryRead
from app.core.cache import CATALOG_NS, cache_key, get_cached, invalidate_catalog, set_cached
from app.core.i18n import localize
from app.property_type import schemas
from app.property_type.models import PropertyType
from app.question.models import Question
from app.question.schemas import AnswerRead, QuestionRead

logger = logging.getLogger(__name__)

INCLUDE_LEVELS = ("categories", "questions", "answers")


# ---------------------------------------------------
# Loading Helpers
# ---------------------------------------------------
def catalog_tree_options(depth: int = len(INCLUDE_LEVELS)) -> list[LoaderOption]:
    """
    Eager-load options for PropertyType down to `depth` levels
    (1 = categories, 2 = questions, 3 = answers).
    """
    if depth <= 0:
        return []
    loader = selectinload(PropertyType.categories)
    if depth >= 2:
        loader = loader.selectinload(QuestionCategory.questions)
    if depth >= 3:
        loader = loader.selectinload(Question.answers)
    return [loader]


def parse_include(raw: str | None) -> set[str]:
    """
    Parse the comma separated `include` query value. Deeper levels imply their
    parents, so `answers` alone returns the whole tree.
    """
    if not raw:
        return set()
    requested = {part.strip().lower() for part in raw.split(",") if part.strip()}
    unknown = requested.difference(INCLUDE_LEVELS)
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid include value(s): {', '.join(sorted(unknown))}. "
            f"Allowed: {', '.join(INCLUDE_LEVELS)}",
        )
    deepest = max(INCLUDE_LEVELS.index(level) for level in requested)
    return set(INCLUDE_LEVELS[: deepest + 1])


def _question_view(question: Question, include: set[str]) -> QuestionRead:
    data = {
        "id": question.id,
        "text_ro": question.text_ro,
        "text_en": question.text_en,
        "weight": question.weight,
        "category_id": question.category_id,
        "created_at": question.created_at,
        "updated_at": question.updated_at,
    }
    if "answers" in include:
        data["answers"] = [AnswerRead.model_validate(a) for a in question.answers]
    return QuestionRead(**data)


def _category_view(category: QuestionCategory, include: set[str]) -> CategoryRead:
    data = {
        "id": category.id,
        "name_ro": category.name_ro,
        "name_en": category.name_en,
        "property_type_id": category.property_type_id,
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }
    if "questions" in include:
        data["questions"] = [_question_view(q, include) for q in category.questions]
    return CategoryRead(**data)


def build_detail(property_type: PropertyType, include: Iterable[str]) -> schemas.PropertyTypeDetail:
    """Build a detail view containing only the requested nesting levels."""
    include = set(include)
    data = {
        "id": property_type.id,
        "name_ro": property_type.name_ro,
        "name_en": property_type.name_en,
        "created_at": property_type.created_at,
        "updated_at": property_type.updated_at,
    }
    if "categories" in include:
        data["categories"] = [_category_view(c, include) for c in property_type.categories]
    return schemas.PropertyTypeDetail(**data)


def build_form(property_type: PropertyType, lang: str) -> schemas.PropertyTypeForm:
    """Localized questionnaire tree of a fully loaded property type."""
    return schemas.PropertyTypeForm(
        id=property_type.id,
        name=localize(property_type.name_ro, property_type.name_en, lang),
        language=lang,
        categories=[
            schemas.FormCategory(
                id=category.id,
                name=localize(category.name_ro, category.name_en, lang),
                questions=[
                    schemas.FormQuestion(
                        id=question.id,
                        text=localize(question.text_ro, question.text_en, lang),
                        weight=question.weight,
                        answers=[
                            schemas.FormAnswer(
                                id=answer.id,
                                text=localize(answer.text_ro, answer.text_en, lang),
                                weight=answer.weight,
                            )
                            for answer in question.answers
                        ],
                    )
                    for question in category.questions
                ],
            )
            for category in property_type.categories
        ],
    )


# ---------------------------------------------------
# PropertyTypeService
# ---------------------------------------------------
class PropertyTypeService:
    """Service class for property type business logic."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_property_type_or_404(
        self, property_type_id: int, depth: int = 0
    ) -> PropertyType:
        result = await self.db.execute(
            select(PropertyType)
            .filter(PropertyType.id == property_type_id)
            .options(*catalog_tree_options(depth))
            .execution_options(populate_existing=True)
        )
        property_type = result.scalar_one_or_none()
        if not property_type:
            logger.warning(f"[PROPERTY TYPE] Not found: id={property_type_id}")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Property type not found"
            )
        return property_type

    async def _ensure_unique_name(self, name_ro: str, exclude_id: int | None = None) -> None:
        query = select(PropertyType.id).filter(PropertyType.name_ro == name_ro)
        if exclude_id is not None:
            query = query.filter(PropertyType.id != exclude_id)
        if (await self.db.execute(query)).first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Property type with this name already exists",
            )

    # ---------------------------------------------------
    # Public (cached)
    # ---------------------------------------------------
    async def list_public(self, lang: str) -> list[schemas.PropertyTypeSummary]:
        key = cache_key(CATALOG_NS, f"property-types:{lang}")
        cached = await get_cached(key)
        if cached is not None:
            return [schemas.PropertyTypeSummary.model_validate(item) for item in cached]

        rows = await self.db.execute(select(PropertyType).order_by(PropertyType.id))
        items = [
            schemas.PropertyTypeSummary(
                id=pt.id,
                name_ro=pt.name_ro,
                name_en=pt.name_en,
                name=localize(pt.name_ro, pt.name_en, lang),
            )
            for pt in rows.scalars().all()
        ]
        await set_cached(key, [i.model_dump(mode="json") for i in items])
        return items

    async def get_form(self, property_type_id: int, lang: str) -> schemas.PropertyTypeForm:
        key = cache_key(CATALOG_NS, f"form:{property_type_id}:{lang}")
        cached = await get_cached(key)
        if cached is not None:
            return schemas.PropertyTypeForm.model_validate(cached)

        property_type = await self.get_property_type_or_404(property_type_id, depth=3)
        form = build_form(property_type, lang)
        await set_cached(key, form.model_dump(mode="json"))
        return form

    # ---------------------------------------------------
    # Admin
    # ---------------------------------------------------
    async def list_with_tree(self) -> list[schemas.PropertyTypeDetail]:
        rows = await self.db.execute(
            select(PropertyType).options(*catalog_tree_options()).order_by(PropertyType.id)
        )
        return [build_detail(pt, INCLUDE_LEVELS) for pt in rows.scalars().all()]

    async def get_detail(self, property_type_id: int, include: set[str]) -> schemas.PropertyTypeDetail:
        property_type = await self.get_property_type_or_404(property_type_id, depth=len(include))
        return build_detail(property_type, include)

    async def create(self, payload: schemas.PropertyTypeCreate) -> PropertyType:
        await self._ensure_unique_name(payload.name_ro)
        property_type = PropertyType(name_ro=payload.name_ro, name_en=payload.name_en)
        self.db.add(property_type)
        await self.db.commit()
        await self.db.refresh(property_type)
        await invalidate_catalog()
        logger.info(f"[PROPERTY TYPE] Created id={property_type.id} name_ro={property_type.name_ro!r}")
        return property_type

    async def update(
        self, property_type_id: int, payload: schemas.PropertyTypeUpdate
    ) -> PropertyType:
        property_type = await self.get_property_type_or_404(property_type_id)
        data = payload.model_dump(exclude_unset=True)
        if data.get("name_ro") is None:
            data.pop("name_ro", None)
        if "name_ro" in data and data["name_ro"] != property_type.name_ro:
            await self._ensure_unique_name(data["name_ro"], exclude_id=property_type_id)

        for field, value in data.items():
            setattr(property_type, field, value)
        await self.db.commit()
        await self.db.refresh(property_type)
        await invalidate_catalog()
        logger.info(f"[PROPERTY TYPE] Updated id={property_type_id} fields={sorted(data)}")
        return property_type

    async def delete(self, property_type_id: int) -> None:
        property_type = await self.get_property_type_or_404(property_type_id)
        category_count = (
            await self.db.execute(
                select(func.count(QuestionCategory.id)).filter(
                    QuestionCategory.property_type_id == property_type_id
                )
            )
        ).scalar_one()
        if category_count:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete property type with existing categories",
            )
        await self.db.delete(property_type)
        await self.db.commit()
        await invalidate_catalog()
        logger.info(f"[PROPERTY TYPE] Deleted id={property_type_id}")
