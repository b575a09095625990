"""
backend/app/custom_field/services.py

Custom Field Service Layer
- Admin CRUD of the extra detail fields attached to a property type
- Public localized list of active fields grouped by display category
"""

import logging

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.i18n import localize
from app.custom_field import schemas
from app.custom_field.models import CustomField
from app.database.enums import CustomFieldType
from app.property_type.models import PropertyType

logger = logging.getLogger(__name__)

SELECT_NEEDS_OPTIONS = "Select fields must have at least one option"


def _check_select_options(payload: schemas.CustomFieldCreate) -> None:
    if payload.field_type == CustomFieldType.SELECT and not payload.select_options:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SELECT_NEEDS_OPTIONS)


def build_public_field(field: CustomField, lang: str) -> schemas.PublicCustomField:
    placeholder = (
        localize(field.placeholder_ro, field.placeholder_en, lang)
        if field.placeholder_ro
        else field.placeholder_en
    )
    help_text = (
        localize(field.help_text_ro, field.help_text_en, lang)
        if field.help_text_ro
        else field.help_text_en
    )
    return schemas.PublicCustomField(
        id=field.id,
        label=localize(field.label_ro, field.label_en, lang),
        field_type=field.field_type,
        is_required=field.is_required,
        placeholder=placeholder,
        help_text=help_text,
        options=[
            schemas.LocalizedOption(
                value=option["value"],
                label=localize(option["label_ro"], option.get("label_en"), lang),
            )
            for option in field.select_options or []
        ],
        validation=field.validation or {},
        sort_order=field.sort_order,
        category=field.category,
    )


class CustomFieldService:
    """Service class for custom property fields."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _ensure_property_type(self, property_type_id: int) -> None:
        if not await self.db.get(PropertyType, property_type_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Property type not found"
            )

    async def _commit(self, action: str, field_id: int | None) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(f"[CUSTOM FIELD] {action} of field {field_id} failed, rolled back")
            raise

    async def get_field_or_404(self, field_id: int) -> CustomField:
        field = await self.db.get(CustomField, field_id)
        if not field:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Custom field not found"
            )
        return field

    async def list_for_property_type(self, property_type_id: int) -> list[CustomField]:
        """All fields of a property type, inactive included, by sort order then creation."""
        await self._ensure_property_type(property_type_id)
        result = await self.db.execute(
            select(CustomField)
            .filter(CustomField.property_type_id == property_type_id)
            .order_by(CustomField.sort_order, CustomField.created_at, CustomField.id)
        )
        return list(result.scalars().all())

    async def create(
        self, property_type_id: int, payload: schemas.CustomFieldCreate
    ) -> CustomField:
        await self._ensure_property_type(property_type_id)
        _check_select_options(payload)

        field = CustomField(property_type_id=property_type_id, **payload.model_dump())
        self.db.add(field)
        await self._commit("Creation", None)
        await self.db.refresh(field)
        logger.info(
            f"[CUSTOM FIELD] Created field {field.id} ({field.field_type.value}) "
            f"for property type {property_type_id}"
        )
        return field

    async def update(self, field_id: int, payload: schemas.CustomFieldUpdate) -> CustomField:
        field = await self.get_field_or_404(field_id)
        _check_select_options(payload)

        for key, value in payload.model_dump().items():
            setattr(field, key, value)
        await self._commit("Update", field_id)
        await self.db.refresh(field)
        logger.info(f"[CUSTOM FIELD] Updated field {field_id}")
        return field

    async def delete(self, field_id: int) -> None:
        field = await self.get_field_or_404(field_id)
        await self.db.delete(field)
        await self._commit("Deletion", field_id)
        logger.info(f"[CUSTOM FIELD] Deleted field {field_id}")

    async def list_public(self, property_type_id: int, lang: str) -> schemas.CustomFieldList:
        """Active fields ordered by category, then sort order."""
        result = await self.db.execute(
            select(CustomField)
            .filter(
                CustomField.property_type_id == property_type_id,
                CustomField.is_active.is_(True),
            )
            .order_by(CustomField.category, CustomField.sort_order, CustomField.id)
        )
        fields = [build_public_field(f, lang) for f in result.scalars().all()]

        by_category: dict[str, list[schemas.PublicCustomField]] = {}
        for field in fields:
            by_category.setdefault(field.category, []).append(field)

        return schemas.CustomFieldList(
            property_type_id=property_type_id,
            language=lang,
            fields=fields,
            fields_by_category=by_category,
            total_fields=len(fields),
            categories=list(by_category),
        )
