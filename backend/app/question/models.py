"""
question/models.py

Defines the Question and Answer models.
- Question: weighted (1..100) prompt inside a category
- Answer: weighted (0..100) choice of a question; every question keeps at least two
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.base import Base

if TYPE_CHECKING:
    from app.category.models import QuestionCategory


# MODEL: Question
class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("weight >= 1 AND weight <= 100", name="ck_question_weight_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text_ro: Mapped[str] = mapped_column(Text, nullable=False, comment="Romanian question text")
    text_en: Mapped[str | None] = mapped_column(Text, nullable=True, comment="English question text")
    weight: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Importance of the question (1..100)"
    )
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("question_categories.id"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    category: Mapped["QuestionCategory"] = relationship(
        "QuestionCategory", back_populates="questions"
    )
    answers: Mapped[list["Answer"]] = relationship(
        "Answer", back_populates="question", order_by="Answer.id"
    )

    @property
    def max_answer_weight(self) -> int:
        return max((answer.weight for answer in self.answers), default=0)


# MODEL: Answer
class Answer(Base):
    __tablename__ = "answers"
    __table_args__ = (
        CheckConstraint("weight >= 0 AND weight <= 100", name="ck_answer_weight_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text_ro: Mapped[str] = mapped_column(Text, nullable=False, comment="Romanian answer text")
    text_en: Mapped[str | None] = mapped_column(Text, nullable=True, comment="English answer text")
    weight: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Score of the answer (0..100)"
    )
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    question: Mapped["Question"] = relationship("Question", back_populates="answers")
