"""
evaluation/models.py

Defines the EvaluationSession and UserEvaluationAnswer models.
- A session is one completed evaluation of a property by a user
- Scores are stored as integers: totals and points multiplied by 100,
  percentage and completion rate rounded to whole numbers
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.base import Base

if TYPE_CHECKING:
    from app.database.models import User
    from app.property_type.models import PropertyType
    from app.question.models import Answer, Question


# MODEL: EvaluationSession
class EvaluationSession(Base):
    __tablename__ = "evaluation_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    property_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("property_types.id"), nullable=False
    )

    # Property Information
    property_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    property_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    property_surface: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="Surface in square meters"
    )
    property_floors: Mapped[str | None] = mapped_column(
        String(50), nullable=True, comment="Floors description, e.g. 'P+1'"
    )
    property_construction_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Results
    total_score: Mapped[int] = mapped_column(Integer, nullable=False, comment="Score x 100")
    max_possible_score: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Maximum score x 100"
    )
    percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    level: Mapped[str] = mapped_column(String(50), nullable=False)
    badge: Mapped[str] = mapped_column(String(100), nullable=False)
    completion_rate: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="evaluation_sessions")
    property_type: Mapped["PropertyType"] = relationship("PropertyType")
    answers: Mapped[list["UserEvaluationAnswer"]] = relationship(
        "UserEvaluationAnswer",
        back_populates="evaluation_session",
        order_by="UserEvaluationAnswer.id",
    )


# MODEL: UserEvaluationAnswer
class UserEvaluationAnswer(Base):
    __tablename__ = "user_evaluation_answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    evaluation_session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("evaluation_sessions.id"), nullable=False, index=True
    )
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id"), nullable=False, index=True
    )
    answer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("answers.id"), nullable=False, index=True
    )

    # Weights captured at evaluation time
    answer_weight: Mapped[int] = mapped_column(Integer, nullable=False)
    question_weight: Mapped[int] = mapped_column(Integer, nullable=False)
    points_earned: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="answer_weight * question_weight * 100"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    evaluation_session: Mapped["EvaluationSession"] = relationship(
        "EvaluationSession", back_populates="answers"
    )
    question: Mapped["Question"] = relationship("Question")
    answer: Mapped["Answer"] = relationship("Answer")
