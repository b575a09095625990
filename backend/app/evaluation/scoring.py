"""
backend/app/evaluation/scoring.py

Evaluation scoring. Pure functions over already loaded catalog objects; no
database access happens here.

An answered question earns `answer_weight * question_weight` points and is worth
at most `max_answer_weight * question_weight`. Percentages are relative to the
maximum of all questions of the property type, answered or not.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from app.core.i18n import localize
from app.database.enums import EvaluationLevel
from app.evaluation.schemas import (
    CategoryScore,
    EvaluationResult,
    LevelBand,
    LevelThresholds,
    QualityCategoryScore,
    QualityScoreBreakdown,
)

# (minimum percentage, level, badge), highest first
LEVELS = (
    (90, EvaluationLevel.EXPERT, "🏆 Property Master"),
    (60, EvaluationLevel.GOOD, "⭐ Property Expert"),
    (30, EvaluationLevel.GOOD, "📈 Property Learner"),
)
DEFAULT_LEVEL = (EvaluationLevel.NOVICE, "🏠 Beginner")


class ScoredAnswer(Protocol):
    question_id: int
    answer_weight: int
    question_weight: int


@dataclass
class AnswerWeights:
    """Weights of one chosen answer, as resolved from the catalog."""

    question_id: int
    answer_id: int
    answer_weight: int
    question_weight: int


@dataclass
class QualityItem:
    category: str
    question_weight: int
    value: float


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0


def determine_level(percentage: float) -> tuple[EvaluationLevel, str]:
    for minimum, level, badge in LEVELS:
        if percentage >= minimum:
            return level, badge
    return DEFAULT_LEVEL


def level_thresholds() -> LevelThresholds:
    return LevelThresholds(
        novice=LevelBand(min=0, max=30, icon="🏠"),
        good=LevelBand(min=30, max=60, icon="⭐"),
        expert=LevelBand(min=60, max=90, icon="🏆"),
        master=LevelBand(min=90, max=100, icon="👑"),
    )


def calculate_evaluation_result(
    user_answers: Iterable[ScoredAnswer], categories: Iterable[Any], lang: str = "ro"
) -> EvaluationResult:
    """
    Score `user_answers` against the categories of a property type.

    `categories` must have their questions and answers loaded. Answers to
    questions that are not part of the categories are ignored.
    """
    answered = {answer.question_id: answer for answer in user_answers}
    category_scores: list[CategoryScore] = []
    total_score = 0
    max_possible_score = 0
    total_questions = 0
    total_answered = 0

    for category in categories:
        score = 0
        max_score = 0
        questions_answered = 0
        questions = list(category.questions)

        for question in questions:
            max_score += question.max_answer_weight * question.weight
            user_answer = answered.get(question.id)
            if user_answer is not None:
                questions_answered += 1
                score += user_answer.answer_weight * user_answer.question_weight

        category_scores.append(
            CategoryScore(
                category_id=category.id,
                category_name=localize(category.name_ro, category.name_en, lang),
                score=score,
                max_score=max_score,
                percentage=_percent(score, max_score),
                questions_answered=questions_answered,
                total_questions=len(questions),
            )
        )
        total_score += score
        max_possible_score += max_score
        total_questions += len(questions)
        total_answered += questions_answered

    percentage = _percent(total_score, max_possible_score)
    level, badge = determine_level(percentage)
    return EvaluationResult(
        total_score=total_score,
        max_possible_score=max_possible_score,
        percentage=percentage,
        category_scores=category_scores,
        level=level.value,
        badge=badge,
        completion_rate=_percent(total_answered, total_questions),
    )


def calculate_quality_breakdown(items: Iterable[QualityItem]) -> QualityScoreBreakdown:
    """
    Weighted 0..100 quality score per category and overall, plus a 1..5 star rating.
    Item values are 0..100; each counts proportionally to its question weight.
    """
    weighted: dict[str, float] = {}
    weights: dict[str, int] = {}
    for item in items:
        weighted[item.category] = weighted.get(item.category, 0) + item.value * item.question_weight / 100
        weights[item.category] = weights.get(item.category, 0) + item.question_weight

    category_scores = [
        QualityCategoryScore(
            category=category,
            score=min(round_half_up(_percent(weighted[category], weights[category])), 100),
            weight=weights[category],
        )
        for category in weighted
    ]
    total_score = min(round_half_up(_percent(sum(weighted.values()), sum(weights.values()))), 100)
    star_rating = min(max(math.ceil(total_score / 100 * 5), 1), 5)
    return QualityScoreBreakdown(
        total_score=total_score, star_rating=star_rating, category_scores=category_scores
    )
