"""
tests/evaluation/test_scoring.py

Weighted scoring, level mapping and the quality breakdown.
"""

from types import SimpleNamespace

import pytest

from app.database.enums import EvaluationLevel
from app.evaluation.scoring import (
    AnswerWeights,
    QualityItem,
    calculate_evaluation_result,
    calculate_quality_breakdown,
    determine_level,
    level_thresholds,
    round_half_up,
)


def _chosen(question_id: int, answer_id: int, answer_weight: int, question_weight: int) -> AnswerWeights:
    return AnswerWeights(
        question_id=question_id,
        answer_id=answer_id,
        answer_weight=answer_weight,
        question_weight=question_weight,
    )


@pytest.mark.parametrize(
    "percentage,level,badge",
    [
        (100, EvaluationLevel.EXPERT, "🏆 Property Master"),
        (90, EvaluationLevel.EXPERT, "🏆 Property Master"),
        (89.99, EvaluationLevel.GOOD, "⭐ Property Expert"),
        (60, EvaluationLevel.GOOD, "⭐ Property Expert"),
        (59.5, EvaluationLevel.GOOD, "📈 Property Learner"),
        (30, EvaluationLevel.GOOD, "📈 Property Learner"),
        (29.99, EvaluationLevel.NOVICE, "🏠 Beginner"),
        (0, EvaluationLevel.NOVICE, "🏠 Beginner"),
    ],
)
def test_determine_level(percentage: float, level: EvaluationLevel, badge: str) -> None:
    assert determine_level(percentage) == (level, badge)


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2
    assert round_half_up(0) == 0


def test_level_thresholds_cover_whole_range() -> None:
    bands = level_thresholds()
    assert (bands.novice.min, bands.master.max) == (0, 100)
    assert bands.good.min == bands.novice.max
    assert bands.expert.min == bands.good.max
    assert bands.master.min == bands.expert.max


def test_full_evaluation(house_tree: SimpleNamespace) -> None:
    answers = [_chosen(1, 1, 10, 10), _chosen(2, 5, 7, 8), _chosen(3, 8, 2, 5)]

    result = calculate_evaluation_result(answers, house_tree.categories)

    assert result.total_score == 166
    assert result.max_possible_score == 200
    assert result.percentage == pytest.approx(83.0)
    assert result.level == "Good"
    assert result.badge == "⭐ Property Expert"
    assert result.completion_rate == pytest.approx(100.0)

    utilities, windows = result.category_scores
    assert (utilities.score, utilities.max_score) == (156, 180)
    assert utilities.percentage == pytest.approx(86.666, rel=1e-3)
    assert utilities.category_name == "Utilități"
    assert (windows.score, windows.max_score, windows.percentage) == (10, 20, 50)


def test_unanswered_questions_still_count_toward_maximum(house_tree: SimpleNamespace) -> None:
    result = calculate_evaluation_result([_chosen(1, 2, 5, 10)], house_tree.categories, lang="en")

    assert result.total_score == 50
    assert result.max_possible_score == 200
    assert result.percentage == pytest.approx(25.0)
    assert result.level == "Novice"
    assert result.completion_rate == pytest.approx(100 / 3)
    assert [c.category_name for c in result.category_scores] == ["Utilities", "Windows"]
    assert result.category_scores[1].questions_answered == 0
    assert result.category_scores[1].percentage == 0


def test_answers_outside_catalog_are_ignored(house_tree: SimpleNamespace) -> None:
    result = calculate_evaluation_result([_chosen(99, 1, 10, 100)], house_tree.categories)
    assert result.total_score == 0
    assert result.completion_rate == 0


def test_empty_catalog_scores_zero() -> None:
    result = calculate_evaluation_result([], [])
    assert result.percentage == 0
    assert result.completion_rate == 0
    assert result.category_scores == []


def test_category_without_answers_weighted_zero() -> None:
    category = SimpleNamespace(
        id=5,
        name_ro="Gol",
        name_en=None,
        questions=[SimpleNamespace(id=9, weight=4, max_answer_weight=0, answers=[])],
    )
    result = calculate_evaluation_result([], [category])
    assert result.category_scores[0].max_score == 0
    assert result.category_scores[0].percentage == 0


def test_quality_breakdown() -> None:
    breakdown = calculate_quality_breakdown(
        [
            QualityItem(category="Utilities", question_weight=10, value=100),
            QualityItem(category="Utilities", question_weight=8, value=70),
            QualityItem(category="Windows", question_weight=5, value=50),
        ]
    )
    scores = {c.category: (c.score, c.weight) for c in breakdown.category_scores}
    assert scores == {"Utilities": (87, 18), "Windows": (50, 5)}
    assert breakdown.total_score == 79
    assert breakdown.star_rating == 4


@pytest.mark.parametrize(
    "value,stars",
    [(0, 1), (1, 1), (20, 1), (21, 2), (60, 3), (81, 5), (100, 5)],
)
def test_quality_star_rating(value: float, stars: int) -> None:
    breakdown = calculate_quality_breakdown(
        [QualityItem(category="Structure", question_weight=10, value=value)]
    )
    assert breakdown.total_score == value
    assert breakdown.star_rating == stars


def test_quality_breakdown_without_items() -> None:
    breakdown = calculate_quality_breakdown([])
    assert breakdown.total_score == 0
    assert breakdown.star_rating == 1
    assert breakdown.category_scores == []
