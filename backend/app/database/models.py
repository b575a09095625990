"""
backend/app/database/models.py

Core SQLAlchemy ORM Models

Defines:
- User: Authenticated accounts with role-based access

Includes relationships with:
- TeamMember (team memberships)
- EvaluationSession (evaluations run by the user)

Importing this module registers every feature model with the shared metadata.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.base import Base
from app.database.enums import UserRole
from app.property_type.models import PropertyType
from app.category.models import QuestionCategory
from app.question.models import Answer, Question
from app.evaluation.models import EvaluationSession, UserEvaluationAnswer
from app.team.models import ActivityLog, Subscription, Team, TeamMember
from app.custom_field.models import CustomField
from app.campaign.models import Campaign

__all__ = [
    "User",
    "PropertyType",
    "QuestionCategory",
    "Question",
    "Answer",
    "EvaluationSession",
    "UserEvaluationAnswer",
    "Team",
    "TeamMember",
    "ActivityLog",
    "Subscription",
    "CustomField",
    "Campaign",
]

# ---------------------------------------------------
# User Model: Authenticated Platform User
# ---------------------------------------------------


class User(Base):
    __tablename__ = "users"

    # -------------------------------------
    # Fields
    # -------------------------------------
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier for the user",
    )
    name: Mapped[str | None] = mapped_column(
        String(100), nullable=True, comment="Display name (first and last name)"
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, comment="User's email address"
    )
    hashed_password: Mapped[str] = mapped_column(
        String, nullable=False, comment="Hashed password for authentication"
    )
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole),
        nullable=False,
        default=UserRole.MEMBER,
        comment="Account role (MEMBER, OWNER, ADMIN, SUPERUSER)",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        comment="Timestamp when the user was created",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        comment="Timestamp when the user was last updated",
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Soft-delete marker; deleted users cannot sign in",
    )

    # -------------------------------------
    # Relationships
    # -------------------------------------

    # One-to-Many: A user may belong to teams through memberships
    team_memberships: Mapped[list["TeamMember"]] = relationship(
        "TeamMember", back_populates="user"
    )

    # One-to-Many: A user runs many evaluations
    evaluation_sessions: Mapped[list["EvaluationSession"]] = relationship(
        "EvaluationSession", back_populates="user"
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
