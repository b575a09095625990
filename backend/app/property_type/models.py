"""
property_type/models.py

Defines the PropertyType model, the root of the evaluation catalog.
Each property type owns question categories, which own questions and answers.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.base import Base

if TYPE_CHECKING:
    from app.category.models import QuestionCategory


class PropertyType(Base):
    __tablename__ = "property_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_ro: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, comment="Romanian name (required, unique)"
    )
    name_en: Mapped[str | None] = mapped_column(
        String(100), nullable=True, comment="English name (optional)"
    )

    # Audit Fields
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    categories: Mapped[list["QuestionCategory"]] = relationship(
        "QuestionCategory",
        back_populates="property_type",
        order_by="QuestionCategory.id",
    )

    def __repr__(self) -> str:
        return f"<PropertyType id={self.id} name_ro={self.name_ro!r}>"
