"""
custom_field/schemas.py

Pydantic schemas for custom property fields:
- Admin create / full-update payloads and the stored read model
- Public localized field list grouped by display category
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from app.custom_field.models import DEFAULT_FIELD_CATEGORY
from app.database.enums import CustomFieldType
from app.question.schemas import OptionalTextStr

LabelStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
CategoryStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class SelectOption(BaseModel):
    value: Annotated[str, StringConstraints(min_length=1)]
    label_ro: str
    label_en: str | None = None


# ---------------------------------------------------
# Admin Schemas
# ---------------------------------------------------
class CustomFieldCreate(BaseModel):
    label_ro: LabelStr
    label_en: OptionalTextStr = None
    field_type: CustomFieldType
    is_required: bool = False
    placeholder_ro: OptionalTextStr = None
    placeholder_en: OptionalTextStr = None
    help_text_ro: OptionalTextStr = None
    help_text_en: OptionalTextStr = None
    select_options: list[SelectOption] = Field(default_factory=list)
    validation: dict[str, Any] = Field(default_factory=dict)
    sort_order: int = 0
    category: CategoryStr = DEFAULT_FIELD_CATEGORY


class CustomFieldUpdate(CustomFieldCreate):
    """Full replacement of a field's definition."""

    is_active: bool = True


class CustomFieldRead(BaseModel):
    id: int
    property_type_id: int
    label_ro: str
    label_en: str | None = None
    field_type: CustomFieldType
    is_required: bool
    placeholder_ro: str | None = None
    placeholder_en: str | None = None
    help_text_ro: str | None = None
    help_text_en: str | None = None
    select_options: list[SelectOption] = Field(default_factory=list)
    validation: dict[str, Any] = Field(default_factory=dict)
    sort_order: int
    is_active: bool
    category: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------
# Public (Localized) Schemas
# ---------------------------------------------------
class LocalizedOption(BaseModel):
    value: str
    label: str


class PublicCustomField(BaseModel):
    id: int
    label: str
    field_type: CustomFieldType
    is_required: bool
    placeholder: str | None = None
    help_text: str | None = None
    options: list[LocalizedOption] = Field(default_factory=list)
    validation: dict[str, Any] = Field(default_factory=dict)
    sort_order: int
    category: str


class CustomFieldList(BaseModel):
    """Active fields of one property type, flat and grouped by display category."""

    property_type_id: int
    language: str
    fields: list[PublicCustomField]
    fields_by_category: dict[str, list[PublicCustomField]]
    total_fields: int
    categories: list[str]
