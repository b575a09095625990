"""
question/schemas.py

Pydantic schemas for questions and answers:
- Read models with nested answers
- Create / full-update / partial-update payloads
- Bulk import rows and results
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints, model_validator

from app.core.validators import (
    answer_weight_validator,
    optional_text_validator,
    question_weight_validator,
)

TextStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
OptionalTextStr = Annotated[str | None, AfterValidator(optional_text_validator)]
QuestionWeight = Annotated[int, AfterValidator(question_weight_validator)]
AnswerWeight = Annotated[int, AfterValidator(answer_weight_validator)]

MIN_ANSWERS_PER_QUESTION = 2


# ---------------------------------------------------
# Answer Schemas
# ---------------------------------------------------
class AnswerRead(BaseModel):
    id: int
    text_ro: str
    text_en: str | None = None
    weight: int
    question_id: int

    model_config = ConfigDict(from_attributes=True)


class AnswerInput(BaseModel):
    """Answer supplied together with a new question."""

    text_ro: TextStr
    text_en: OptionalTextStr = None
    weight: AnswerWeight


class AnswerCreate(AnswerInput):
    question_id: int = Field(..., gt=0)


class AnswerUpdate(BaseModel):
    text_ro: TextStr | None = None
    text_en: OptionalTextStr = None
    weight: AnswerWeight | None = None


# ---------------------------------------------------
# Question Schemas
# ---------------------------------------------------
class QuestionRead(BaseModel):
    id: int
    text_ro: str
    text_en: str | None = None
    weight: int
    category_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    answers: list[AnswerRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class QuestionCreate(BaseModel):
    text_ro: TextStr
    text_en: OptionalTextStr = None
    weight: QuestionWeight
    category_id: int = Field(..., gt=0)
    answers: list[AnswerInput] = Field(..., min_length=MIN_ANSWERS_PER_QUESTION)


class QuestionAnswerEdit(BaseModel):
    """
    Answer entry of a full question update. Entries with an `id` and without
    `is_new` update that answer; all others are inserted.
    """

    id: int | None = None
    text_ro: TextStr
    text_en: OptionalTextStr = None
    weight: AnswerWeight
    is_new: bool = False

    @property
    def is_existing(self) -> bool:
        return self.id is not None and not self.is_new


class QuestionFullUpdate(BaseModel):
    text_ro: TextStr
    text_en: OptionalTextStr = None
    weight: QuestionWeight
    answers: list[QuestionAnswerEdit] = Field(..., min_length=MIN_ANSWERS_PER_QUESTION)
    deleted_answer_ids: list[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_no_update_of_deleted(self) -> "QuestionFullUpdate":
        edited = {a.id for a in self.answers if a.is_existing}
        clash = edited.intersection(self.deleted_answer_ids)
        if clash:
            raise ValueError(f"Answers cannot be both updated and deleted: {sorted(clash)}")
        return self


class QuestionPatch(BaseModel):
    text_ro: TextStr | None = None
    text_en: OptionalTextStr = None
    weight: QuestionWeight | None = None
    category_id: int | None = Field(None, gt=0)


# ---------------------------------------------------
# Bulk Import Schemas
# ---------------------------------------------------
class BulkImportRow(BaseModel):
    """One answer line; rows sharing a question text belong to the same question."""

    category_name_ro: NameStr
    category_name_en: OptionalTextStr = None
    question_ro: TextStr
    question_en: OptionalTextStr = None
    question_weight: QuestionWeight
    answer_ro: TextStr
    answer_en: OptionalTextStr = None
    answer_weight: AnswerWeight


class BulkImportRequest(BaseModel):
    property_type_id: int = Field(..., gt=0)
    mode: Literal["append", "replace"] = "append"
    rows: list[BulkImportRow] = Field(..., min_length=1)


class BulkImportResult(BaseModel):
    message: str
    categories_created: int = 0
    questions_created: int = 0
    questions_updated: int = 0
    answers_created: int = 0
    answers_updated: int = 0
