"""
property_type/schemas.py

Pydantic schemas for property types:
- Admin create/update/read models (optionally nested)
- Public localized list entry and evaluation form tree
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.category.schemas import CategoryRead
from app.question.schemas import NameStr, OptionalTextStr


# ---------------------------------------------------
# Admin Schemas
# ---------------------------------------------------
class PropertyTypeCreate(BaseModel):
    name_ro: NameStr
    name_en: OptionalTextStr = None


class PropertyTypeUpdate(BaseModel):
    name_ro: NameStr | None = None
    name_en: OptionalTextStr = None


class PropertyTypeRead(BaseModel):
    id: int
    name_ro: str
    name_en: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class PropertyTypeDetail(PropertyTypeRead):
    """
    Property type with nested catalog. Which levels are present depends on the
    `include` query; levels that were not requested are left unset.
    """

    categories: list[CategoryRead] = Field(default_factory=list)


# ---------------------------------------------------
# Public (Localized) Schemas
# ---------------------------------------------------
class PropertyTypeSummary(BaseModel):
    id: int
    name_ro: str
    name_en: str | None = None
    name: str = Field(..., description="Name in the requested language")


class FormAnswer(BaseModel):
    id: int
    text: str
    weight: int


class FormQuestion(BaseModel):
    id: int
    text: str
    weight: int
    answers: list[FormAnswer]


class FormCategory(BaseModel):
    id: int
    name: str
    questions: list[FormQuestion]


class PropertyTypeForm(BaseModel):
    """Everything the client needs to render one evaluation questionnaire."""

    id: int
    name: str
    language: str
    categories: list[FormCategory]
