"""Relevance scoring.

Applies the question catalog to a snapshot. Scoring is pure: the same
snapshot always yields the same scores and the same ranking.
"""

from nutrition_insights.core.daily_insights.constants import SUGGESTED_QUESTION_LIMIT
from nutrition_insights.core.daily_insights.enums import QuestionCategory
from nutrition_insights.core.daily_insights.models import DailyInsightData, ScoredQuestion
from nutrition_insights.core.daily_insights.registry import QUESTION_REGISTRY


def score_questions(data: DailyInsightData) -> list[ScoredQuestion]:
    """Score every catalog question against a snapshot.

    Args:
        data: Snapshot to score

    Returns:
        One ScoredQuestion per definition, in catalog order. Unavailable
        questions score 0.
    """
    scored: list[ScoredQuestion] = []
    for definition in QUESTION_REGISTRY:
        available = bool(definition.is_available(data))
        score = definition.compute_relevance(data) if available else 0.0
        scored.append(
            ScoredQuestion(
                question_id=definition.id,
                available=available,
                relevance_score=score,
            )
        )
    return scored


def rank_questions(scores: list[ScoredQuestion]) -> list[ScoredQuestion]:
    """Available questions ordered by relevance, ties kept in catalog order."""
    available = [score for score in scores if score.available]
    # sorted() is stable, so equal scores keep their catalog position
    return sorted(available, key=lambda score: score.relevance_score, reverse=True)


def get_suggested_questions(
    scores: list[ScoredQuestion],
    limit: int = SUGGESTED_QUESTION_LIMIT,
) -> list[ScoredQuestion]:
    """The top-ranked available questions."""
    return rank_questions(scores)[:limit]


def group_available_by_category(
    scores: list[ScoredQuestion],
) -> dict[QuestionCategory, list[ScoredQuestion]]:
    """Available questions grouped by category, each group ranked.

    Categories with no available question are omitted.
    """
    grouped: dict[QuestionCategory, list[ScoredQuestion]] = {}
    for score in rank_questions(scores):
        grouped.setdefault(score.definition.category, []).append(score)
    return {category: grouped[category] for category in QuestionCategory if category in grouped}
