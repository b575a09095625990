"""
evaluation/schemas.py

Pydantic schemas for evaluations:
- Submission payload and stored property information
- Scoring results (evaluation result, category scores, quality breakdown)
- Session read models, history entries and statistics
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.question.schemas import OptionalTextStr


# ---------------------------------------------------
# Input Schemas
# ---------------------------------------------------
class PropertyInfo(BaseModel):
    property_name: OptionalTextStr = None
    property_location: OptionalTextStr = None
    property_surface: int | None = Field(None, ge=0, description="Surface in square meters")
    property_floors: OptionalTextStr = None
    property_construction_year: int | None = Field(None, ge=1000, le=3000)


class SubmittedAnswer(BaseModel):
    question_id: int = Field(..., gt=0)
    answer_id: int = Field(..., gt=0)


class EvaluationCreate(BaseModel):
    """
    A completed questionnaire. Only ids are accepted; weights are read from
    the catalog when the evaluation is scored.
    """

    property_type_id: int = Field(..., gt=0)
    answers: list[SubmittedAnswer] = Field(..., min_length=1)
    property_info: PropertyInfo | None = None

    @model_validator(mode="after")
    def check_unique_questions(self) -> "EvaluationCreate":
        seen: set[int] = set()
        for answer in self.answers:
            if answer.question_id in seen:
                raise ValueError(f"Question {answer.question_id} is answered more than once")
            seen.add(answer.question_id)
        return self


# ---------------------------------------------------
# Scoring Schemas
# ---------------------------------------------------
class CategoryScore(BaseModel):
    category_id: int
    category_name: str
    score: float
    max_score: float
    percentage: float
    questions_answered: int
    total_questions: int


class EvaluationResult(BaseModel):
    total_score: float
    max_possible_score: float
    percentage: float
    category_scores: list[CategoryScore]
    level: str
    badge: str
    completion_rate: float


class LevelBand(BaseModel):
    min: int
    max: int
    icon: str


class LevelThresholds(BaseModel):
    novice: LevelBand
    good: LevelBand
    expert: LevelBand
    master: LevelBand


class QualityCategoryScore(BaseModel):
    category: str
    score: int = Field(..., ge=0, le=100)
    weight: int


class QualityScoreBreakdown(BaseModel):
    total_score: int = Field(..., ge=0, le=100)
    star_rating: int = Field(..., ge=1, le=5)
    category_scores: list[QualityCategoryScore]


# ---------------------------------------------------
# Session Schemas
# ---------------------------------------------------
class EvaluationCreated(BaseModel):
    evaluation_session_id: int
    result: EvaluationResult


class EvaluationAnswerRead(BaseModel):
    id: int
    question_id: int
    answer_id: int
    answer_weight: int
    question_weight: int
    points_earned: int

    model_config = ConfigDict(from_attributes=True)


class EvaluationSummary(BaseModel):
    """Stored session as listed in the evaluation history."""

    id: int
    property_type_id: int
    property_type_name: str
    property_name: str | None = None
    property_location: str | None = None
    property_surface: int | None = None
    property_floors: str | None = None
    property_construction_year: int | None = None
    total_score: int
    max_possible_score: int
    percentage: int
    level: str
    badge: str
    completion_rate: int
    completed_at: datetime


class EvaluationDetail(EvaluationSummary):
    answers: list[EvaluationAnswerRead]
    category_scores: list[CategoryScore]


class EvaluationUpdate(BaseModel):
    property_name: OptionalTextStr = None
    property_location: OptionalTextStr = None
    property_surface: int | None = Field(None, ge=0)
    property_floors: OptionalTextStr = None
    property_construction_year: int | None = Field(None, ge=1000, le=3000)


class EvaluationStats(BaseModel):
    total_evaluations: int = 0
    average_score: int = 0
    best_score: int = 0
    completion_rate: int = 0
