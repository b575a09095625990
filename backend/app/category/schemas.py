"""
category/schemas.py

Pydantic schemas for question categories.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.question.schemas import NameStr, OptionalTextStr, QuestionRead


class CategoryCreate(BaseModel):
    name_ro: NameStr
    name_en: OptionalTextStr = None
    property_type_id: int = Field(..., gt=0)


class CategoryUpdate(BaseModel):
    name_ro: NameStr | None = None
    name_en: OptionalTextStr = None


class CategoryRead(BaseModel):
    """Category with its questions (and their answers) when loaded."""

    id: int
    name_ro: str
    name_en: str | None = None
    property_type_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    questions: list[QuestionRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
