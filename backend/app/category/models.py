"""
category/models.py

Defines the QuestionCategory model.
- Groups questions of one property type (e.g. Utilities, Foundation)
- `name_ro` is unique within its property type
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.base import Base

if TYPE_CHECKING:
    from app.property_type.models import PropertyType
    from app.question.models import Question


class QuestionCategory(Base):
    __tablename__ = "question_categories"
    __table_args__ = (
        UniqueConstraint("property_type_id", "name_ro", name="uq_category_type_name_ro"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_ro: Mapped[str] = mapped_column(String(100), nullable=False, comment="Romanian name")
    name_en: Mapped[str | None] = mapped_column(String(100), nullable=True, comment="English name")
    property_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("property_types.id"),
        nullable=False,
        index=True,
        comment="Owning property type",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    property_type: Mapped["PropertyType"] = relationship(
        "PropertyType", back_populates="categories"
    )
    questions: Mapped[list["Question"]] = relationship(
        "Question", back_populates="category", order_by="Question.id"
    )
