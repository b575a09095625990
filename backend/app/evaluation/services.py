"""
backend/app/evaluation/services.py

Evaluation Service Layer
- Scores submitted questionnaires against the catalog and stores the session
  together with the chosen answers in one transaction
- Evaluation history, statistics, detail with recomputed category scores,
  quality breakdown, property info updates and deletion
Sessions are only visible to the user who created them.
"""

import logging

from fastapi import HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.category.models import QuestionCategory
from app.core.config import settings
from app.core.email import send_evaluation_report_email
from app.core.i18n import localize
from app.core.schemas import PaginatedResponse
from app.database.enums import ActivityType
from app.database.models import User
from app.evaluation import schemas
from app.evaluation.models import EvaluationSession, UserEvaluationAnswer
from app.evaluation.scoring import (
    AnswerWeights,
    QualityItem,
    calculate_evaluation_result,
    calculate_quality_breakdown,
    round_half_up,
)
from app.property_type.models import PropertyType
from app.property_type.services import PropertyTypeService
from app.question.models import Question
from app.team.services import TeamService

logger = logging.getLogger(__name__)


def _question_index(property_type: PropertyType) -> dict[int, tuple[Question, QuestionCategory]]:
    """question id -> (question, category) for a fully loaded property type."""
    return {
        question.id: (question, category)
        for category in property_type.categories
        for question in category.questions
    }


def resolve_answer_weights(
    property_type: PropertyType, answers: list[schemas.SubmittedAnswer]
) -> list[AnswerWeights]:
    """
    Check submitted (question, answer) pairs against the catalog and read their
    weights from it. 400 for foreign questions, foreign answers and repeats.
    """
    questions = _question_index(property_type)
    resolved: list[AnswerWeights] = []
    seen: set[int] = set()

    for submitted in answers:
        if submitted.question_id in seen:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Question {submitted.question_id} is answered more than once",
            )
        seen.add(submitted.question_id)

        entry = questions.get(submitted.question_id)
        if entry is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Question {submitted.question_id} does not belong to "
                f"property type {property_type.id}",
            )
        question = entry[0]
        answer = next((a for a in question.answers if a.id == submitted.answer_id), None)
        if answer is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Answer {submitted.answer_id} does not belong to question {question.id}",
            )
        resolved.append(
            AnswerWeights(
                question_id=question.id,
                answer_id=answer.id,
                answer_weight=answer.weight,
                question_weight=question.weight,
            )
        )
    return resolved


def _summary(session: EvaluationSession, lang: str) -> schemas.EvaluationSummary:
    return schemas.EvaluationSummary(
        id=session.id,
        property_type_id=session.property_type_id,
        property_type_name=localize(
            session.property_type.name_ro, session.property_type.name_en, lang
        ),
        property_name=session.property_name,
        property_location=session.property_location,
        property_surface=session.property_surface,
        property_floors=session.property_floors,
        property_construction_year=session.property_construction_year,
        total_score=session.total_score,
        max_possible_score=session.max_possible_score,
        percentage=session.percentage,
        level=session.level,
        badge=session.badge,
        completion_rate=session.completion_rate,
        completed_at=session.completed_at,
    )


class EvaluationService:
    """Service class for evaluation sessions."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_session_or_404(self, user: User, session_id: int) -> EvaluationSession:
        result = await self.db.execute(
            select(EvaluationSession)
            .filter(EvaluationSession.id == session_id, EvaluationSession.user_id == user.id)
            .options(
                selectinload(EvaluationSession.answers),
                selectinload(EvaluationSession.property_type),
            )
            .execution_options(populate_existing=True)
        )
        session = result.scalar_one_or_none()
        if not session:
            logger.warning(f"[EVALUATION] Session {session_id} not found for user {user.id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Evaluation not found")
        return session

    async def _load_catalog(self, property_type_id: int) -> PropertyType:
        return await PropertyTypeService(self.db).get_property_type_or_404(
            property_type_id, depth=3
        )

    # ---------------------------------------------------
    # Submission
    # ---------------------------------------------------
    async def create(
        self,
        user: User,
        payload: schemas.EvaluationCreate,
        ip_address: str | None = None,
        lang: str = settings.DEFAULT_LANGUAGE,
    ) -> schemas.EvaluationCreated:
        property_type = await self._load_catalog(payload.property_type_id)
        weights = resolve_answer_weights(property_type, payload.answers)
        result = calculate_evaluation_result(weights, property_type.categories, lang)

        info = payload.property_info or schemas.PropertyInfo()
        session = EvaluationSession(
            user_id=user.id,
            property_type_id=property_type.id,
            **info.model_dump(),
            total_score=round_half_up(result.total_score * 100),
            max_possible_score=round_half_up(result.max_possible_score * 100),
            percentage=round_half_up(result.percentage),
            level=result.level,
            badge=result.badge,
            completion_rate=round_half_up(result.completion_rate),
        )
        self.db.add(session)
        await self.db.flush()

        self.db.add_all(
            UserEvaluationAnswer(
                evaluation_session_id=session.id,
                question_id=w.question_id,
                answer_id=w.answer_id,
                answer_weight=w.answer_weight,
                question_weight=w.question_weight,
                points_earned=round_half_up(w.answer_weight * w.question_weight * 100),
            )
            for w in weights
        )
        await TeamService(self.db).log_activity(
            user.id, ActivityType.EVALUATION_COMPLETED, ip_address
        )
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(f"[EVALUATION] Saving evaluation for user {user.id} failed, rolled back")
            raise
        logger.info(
            f"[EVALUATION] Session {session.id} saved for user {user.id}: "
            f"{result.percentage:.1f}% ({result.level})"
        )

        try:
            await send_evaluation_report_email(
                user.email,
                user.name,
                session.id,
                property_type.name_ro,
                result.model_dump(),
            )
        except Exception as e:
            logger.error(f"Failed to send evaluation report for session {session.id}: {e}")

        return schemas.EvaluationCreated(evaluation_session_id=session.id, result=result)

    # ---------------------------------------------------
    # Queries
    # ---------------------------------------------------
    async def list_sessions(
        self, user: User, skip: int, limit: int, lang: str
    ) -> PaginatedResponse[schemas.EvaluationSummary]:
        total_count = (
            await self.db.execute(
                select(func.count(EvaluationSession.id)).filter(
                    EvaluationSession.user_id == user.id
                )
            )
        ).scalar_one()
        rows = await self.db.execute(
            select(EvaluationSession)
            .filter(EvaluationSession.user_id == user.id)
            .options(selectinload(EvaluationSession.property_type))
            .order_by(EvaluationSession.completed_at.desc(), EvaluationSession.id.desc())
            .offset(skip)
            .limit(limit)
        )
        items = [_summary(s, lang) for s in rows.scalars().all()]
        return PaginatedResponse[schemas.EvaluationSummary](
            total_count=total_count,
            has_next_page=skip + len(items) < total_count,
            items=items,
        )

    async def get_stats(self, user: User) -> schemas.EvaluationStats:
        row = (
            await self.db.execute(
                select(
                    func.count(EvaluationSession.id),
                    func.avg(EvaluationSession.percentage),
                    func.max(EvaluationSession.percentage),
                    func.avg(EvaluationSession.completion_rate),
                ).filter(EvaluationSession.user_id == user.id)
            )
        ).one()
        total, average, best, completion = row
        if not total:
            return schemas.EvaluationStats()
        return schemas.EvaluationStats(
            total_evaluations=total,
            average_score=round_half_up(float(average)),
            best_score=best,
            completion_rate=round_half_up(float(completion)),
        )

    async def get_detail(
        self, user: User, session_id: int, lang: str
    ) -> schemas.EvaluationDetail:
        session = await self._get_session_or_404(user, session_id)
        property_type = await self._load_catalog(session.property_type_id)
        result = calculate_evaluation_result(session.answers, property_type.categories, lang)
        return schemas.EvaluationDetail(
            **_summary(session, lang).model_dump(),
            answers=[schemas.EvaluationAnswerRead.model_validate(a) for a in session.answers],
            category_scores=result.category_scores,
        )

    async def get_quality(
        self, user: User, session_id: int, lang: str
    ) -> schemas.QualityScoreBreakdown:
        session = await self._get_session_or_404(user, session_id)
        property_type = await self._load_catalog(session.property_type_id)
        questions = _question_index(property_type)

        items = []
        for answer in session.answers:
            entry = questions.get(answer.question_id)
            if entry is None:
                continue
            question, category = entry
            max_weight = question.max_answer_weight
            items.append(
                QualityItem(
                    category=localize(category.name_ro, category.name_en, lang),
                    question_weight=answer.question_weight,
                    value=answer.answer_weight / max_weight * 100 if max_weight else 0,
                )
            )
        return calculate_quality_breakdown(items)

    # ---------------------------------------------------
    # Mutations
    # ---------------------------------------------------
    async def update(
        self, user: User, session_id: int, payload: schemas.EvaluationUpdate, lang: str
    ) -> schemas.EvaluationSummary:
        session = await self._get_session_or_404(user, session_id)
        data = payload.model_dump(exclude_unset=True)
        for field, value in data.items():
            setattr(session, field, value)
        await self.db.commit()
        logger.info(f"[EVALUATION] Session {session_id} updated fields={sorted(data)}")
        return _summary(session, lang)

    async def delete(self, user: User, session_id: int) -> None:
        await self._get_session_or_404(user, session_id)
        await self.db.execute(
            delete(UserEvaluationAnswer).where(
                UserEvaluationAnswer.evaluation_session_id == session_id
            )
        )
        await self.db.execute(delete(EvaluationSession).where(EvaluationSession.id == session_id))
        await self.db.commit()
        logger.info(f"[EVALUATION] Session {session_id} deleted by user {user.id}")
