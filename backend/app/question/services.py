"""
backend/app/question/services.py

Question & Answer Service Layer
- Question CRUD with nested answers, including the full (PUT) answer diff
- Answer CRUD
- Every question keeps at least two answers; removing answers or questions
  also removes the user evaluation answers that reference them
"""

import logging
from collections.abc import Iterable

from fastapi import HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.category.models import QuestionCategory
from app.core.cache import invalidate_catalog
from app.evaluation.models import UserEvaluationAnswer
from app.question import schemas
from app.question.models import Answer, Question
from app.question.schemas import MIN_ANSWERS_PER_QUESTION

logger = logging.getLogger(__name__)


async def delete_user_answers_for_answers(db: AsyncSession, answer_ids: Iterable[int]) -> None:
    """Remove stored evaluation answers that point at the given answers."""
    answer_ids = list(answer_ids)
    if answer_ids:
        await db.execute(
            delete(UserEvaluationAnswer).where(UserEvaluationAnswer.answer_id.in_(answer_ids))
        )


async def delete_user_answers_for_questions(db: AsyncSession, question_ids: Iterable[int]) -> None:
    """Remove stored evaluation answers that point at the given questions."""
    question_ids = list(question_ids)
    if question_ids:
        await db.execute(
            delete(UserEvaluationAnswer).where(UserEvaluationAnswer.question_id.in_(question_ids))
        )


# ---------------------------------------------------
# QuestionService
# ---------------------------------------------------
class QuestionService:
    """Service class for question business logic."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_question_or_404(self, question_id: int) -> Question:
        result = await self.db.execute(
            select(Question)
            .filter(Question.id == question_id)
            .options(selectinload(Question.answers))
            .execution_options(populate_existing=True)
        )
        question = result.scalar_one_or_none()
        if not question:
            logger.warning(f"[QUESTION] Not found: id={question_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
        return question

    async def _ensure_category_exists(self, category_id: int) -> None:
        if not await self.db.get(QuestionCategory, category_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")

    async def list_questions(self, category_id: int | None = None) -> list[Question]:
        query = select(Question).options(selectinload(Question.answers)).order_by(Question.id)
        if category_id is not None:
            query = query.filter(Question.category_id == category_id)
        return list((await self.db.execute(query)).scalars().all())

    async def create(self, payload: schemas.QuestionCreate) -> Question:
        """Insert a question together with its answers in one transaction."""
        await self._ensure_category_exists(payload.category_id)

        question = Question(
            text_ro=payload.text_ro,
            text_en=payload.text_en,
            weight=payload.weight,
            category_id=payload.category_id,
        )
        self.db.add(question)
        await self.db.flush()
        self.db.add_all(
            Answer(
                question_id=question.id,
                text_ro=answer.text_ro,
                text_en=answer.text_en,
                weight=answer.weight,
            )
            for answer in payload.answers
        )
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(f"[QUESTION] Create in category {payload.category_id} failed, rolled back")
            raise
        await invalidate_catalog()
        logger.info(
            f"[QUESTION] Created id={question.id} in category {payload.category_id} "
            f"with {len(payload.answers)} answers"
        )
        return await self.get_question_or_404(question.id)

    async def full_update(self, question_id: int, payload: schemas.QuestionFullUpdate) -> Question:
        """
        Replace a question's texts and weight and reconcile its answers:
        existing answers listed in the payload are updated, new ones inserted and
        `deleted_answer_ids` removed together with their user answers.
        """
        question = await self.get_question_or_404(question_id)
        current = {answer.id: answer for answer in question.answers}

        referenced = {a.id for a in payload.answers if a.is_existing}
        referenced.update(payload.deleted_answer_ids)
        foreign = sorted(referenced.difference(current))
        if foreign:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Answers {foreign} do not belong to question {question_id}",
            )

        deleted_ids = set(payload.deleted_answer_ids)
        new_entries = [a for a in payload.answers if not a.is_existing]
        remaining = len(current) - len(deleted_ids) + len(new_entries)
        if remaining < MIN_ANSWERS_PER_QUESTION:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Questions must have at least {MIN_ANSWERS_PER_QUESTION} answers",
            )

        question.text_ro = payload.text_ro
        question.text_en = payload.text_en
        question.weight = payload.weight

        for entry in payload.answers:
            if entry.is_existing:
                answer = current[entry.id]
                answer.text_ro = entry.text_ro
                answer.text_en = entry.text_en
                answer.weight = entry.weight
        self.db.add_all(
            Answer(
                question_id=question_id,
                text_ro=entry.text_ro,
                text_en=entry.text_en,
                weight=entry.weight,
            )
            for entry in new_entries
        )

        if deleted_ids:
            await delete_user_answers_for_answers(self.db, deleted_ids)
            for answer_id in deleted_ids:
                await self.db.delete(current[answer_id])

        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(f"[QUESTION] Full update of {question_id} failed, rolled back")
            raise
        await invalidate_catalog()
        logger.info(
            f"[QUESTION] Full update id={question_id}: {len(payload.answers) - len(new_entries)} "
            f"answers updated, {len(new_entries)} added, {len(deleted_ids)} deleted"
        )
        return await self.get_question_or_404(question_id)

    async def patch(self, question_id: int, payload: schemas.QuestionPatch) -> Question:
        question = await self.get_question_or_404(question_id)
        data = payload.model_dump(exclude_unset=True)
        for field in ("text_ro", "weight", "category_id"):
            if field in data and data[field] is None:
                data.pop(field)
        if "category_id" in data and data["category_id"] != question.category_id:
            await self._ensure_category_exists(data["category_id"])

        for field, value in data.items():
            setattr(question, field, value)
        await self.db.commit()
        await invalidate_catalog()
        logger.info(f"[QUESTION] Updated id={question_id} fields={sorted(data)}")
        return await self.get_question_or_404(question_id)

    async def delete(self, question_id: int) -> None:
        """Delete user answers, then answers, then the question itself."""
        await self.get_question_or_404(question_id)
        await delete_user_answers_for_questions(self.db, [question_id])
        await self.db.execute(delete(Answer).where(Answer.question_id == question_id))
        await self.db.execute(delete(Question).where(Question.id == question_id))
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(f"[QUESTION] Delete of {question_id} failed, rolled back")
            raise
        await invalidate_catalog()
        logger.info(f"[QUESTION] Deleted id={question_id}")


# ---------------------------------------------------
# AnswerService
# ---------------------------------------------------
class AnswerService:
    """Service class for answer business logic."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_answer_or_404(self, answer_id: int) -> Answer:
        answer = await self.db.get(Answer, answer_id)
        if not answer:
            logger.warning(f"[ANSWER] Not found: id={answer_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Answer not found")
        return answer

    async def list_answers(self, question_id: int | None = None) -> list[Answer]:
        query = select(Answer).order_by(Answer.question_id, Answer.id)
        if question_id is not None:
            query = query.filter(Answer.question_id == question_id)
        return list((await self.db.execute(query)).scalars().all())

    async def create(self, payload: schemas.AnswerCreate) -> Answer:
        if not await self.db.get(Question, payload.question_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")

        answer = Answer(**payload.model_dump())
        self.db.add(answer)
        await self.db.commit()
        await self.db.refresh(answer)
        await invalidate_catalog()
        logger.info(f"[ANSWER] Created id={answer.id} for question {answer.question_id}")
        return answer

    async def update(self, answer_id: int, payload: schemas.AnswerUpdate) -> Answer:
        answer = await self._get_answer_or_404(answer_id)
        data = payload.model_dump(exclude_unset=True)
        for field in ("text_ro", "weight"):
            if field in data and data[field] is None:
                data.pop(field)

        for field, value in data.items():
            setattr(answer, field, value)
        await self.db.commit()
        await self.db.refresh(answer)
        await invalidate_catalog()
        logger.info(f"[ANSWER] Updated id={answer_id} fields={sorted(data)}")
        return answer

    async def delete(self, answer_id: int) -> None:
        answer = await self._get_answer_or_404(answer_id)
        sibling_count = (
            await self.db.execute(
                select(func.count(Answer.id)).filter(Answer.question_id == answer.question_id)
            )
        ).scalar_one()
        if sibling_count <= MIN_ANSWERS_PER_QUESTION:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete answer. Questions must have at least 2 answers.",
            )

        await delete_user_answers_for_answers(self.db, [answer_id])
        await self.db.delete(answer)
        await self.db.commit()
        await invalidate_catalog()
        logger.info(f"[ANSWER] Deleted id={answer_id} from question {answer.question_id}")
