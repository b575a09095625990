"""
custom_field/models.py

Defines the CustomField model.
- Extra detail an evaluator fills in for a property type (surface, year built, ...)
- Labels, placeholders and help texts are bilingual like the rest of the catalog
- Fields are grouped by a free-form `category` and ordered by `sort_order`
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.base import Base
from app.database.enums import CustomFieldType

if TYPE_CHECKING:
    from app.property_type.models import PropertyType

DEFAULT_FIELD_CATEGORY = "general"


class CustomField(Base):
    __tablename__ = "custom_fields"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_type_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("property_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Property type the field is shown for",
    )
    label_ro: Mapped[str] = mapped_column(String(200), nullable=False, comment="Romanian label")
    label_en: Mapped[str | None] = mapped_column(String(200), nullable=True, comment="English label")
    field_type: Mapped[CustomFieldType] = mapped_column(
        Enum(CustomFieldType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CustomFieldType.TEXT,
    )
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    placeholder_ro: Mapped[str | None] = mapped_column(String(200), nullable=True)
    placeholder_en: Mapped[str | None] = mapped_column(String(200), nullable=True)
    help_text_ro: Mapped[str | None] = mapped_column(Text, nullable=True)
    help_text_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    select_options: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list, comment="Options of select fields"
    )
    validation: Mapped[dict[str, Any]] = mapped_column(
        JSONB, nullable=False, default=dict, comment="Client-side rules (min, max, pattern)"
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    category: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_FIELD_CATEGORY, comment="Display group"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    property_type: Mapped["PropertyType"] = relationship("PropertyType")

    def __repr__(self) -> str:
        return f"<CustomField id={self.id} label_ro={self.label_ro!r} type={self.field_type.value}>"
