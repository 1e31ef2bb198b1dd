"""Question analyzers.

One pure function per catalog question. Each turns a snapshot into a
QuestionAnalysis and never raises on zero or empty inputs.
"""

from collections.abc import Callable

from nutrition_insights.core.daily_insights.analyzers.hydration import (
    analyze_hydration_pacing,
    analyze_hydration_status,
)
from nutrition_insights.core.daily_insights.analyzers.macro import (
    analyze_calorie_pacing,
    analyze_macro_overview,
    analyze_macro_ratio,
    analyze_remaining_budget,
)
from nutrition_insights.core.daily_insights.analyzers.meals import (
    analyze_meal_distribution,
    analyze_meal_timing,
    analyze_meal_variety,
)
from nutrition_insights.core.daily_insights.analyzers.nutrients import (
    analyze_fiber_check,
    analyze_micronutrient_status,
    analyze_nutrient_overview,
)
from nutrition_insights.core.daily_insights.analyzers.protein import (
    analyze_protein_per_meal,
    analyze_protein_remaining,
    analyze_protein_status,
)
from nutrition_insights.core.daily_insights.analyzers.trends import (
    analyze_consistency_check,
    analyze_trend_direction,
    analyze_vs_weekly_avg,
)
from nutrition_insights.core.daily_insights.enums import QuestionId
from nutrition_insights.core.daily_insights.exceptions import UnknownQuestionError
from nutrition_insights.core.daily_insights.models import DailyInsightData, QuestionAnalysis

Analyzer = Callable[[DailyInsightData], QuestionAnalysis]

QUESTION_ANALYZERS: dict[QuestionId, Analyzer] = {
    QuestionId.macro_overview: analyze_macro_overview,
    QuestionId.calorie_pacing: analyze_calorie_pacing,
    QuestionId.macro_ratio: analyze_macro_ratio,
    QuestionId.remaining_budget: analyze_remaining_budget,
    QuestionId.protein_status: analyze_protein_status,
    QuestionId.protein_per_meal: analyze_protein_per_meal,
    QuestionId.protein_remaining: analyze_protein_remaining,
    QuestionId.meal_distribution: analyze_meal_distribution,
    QuestionId.meal_timing: analyze_meal_timing,
    QuestionId.meal_variety: analyze_meal_variety,
    QuestionId.hydration_status: analyze_hydration_status,
    QuestionId.hydration_pacing: analyze_hydration_pacing,
    QuestionId.vs_weekly_avg: analyze_vs_weekly_avg,
    QuestionId.consistency_check: analyze_consistency_check,
    QuestionId.trend_direction: analyze_trend_direction,
    QuestionId.nutrient_overview: analyze_nutrient_overview,
    QuestionId.fiber_check: analyze_fiber_check,
    QuestionId.micronutrient_status: analyze_micronutrient_status,
}


def analyze_question(question_id: str, data: DailyInsightData) -> QuestionAnalysis:
    """Run the analyzer registered for a question.

    Args:
        question_id: Catalog id of the question
        data: Snapshot to analyze

    Returns:
        The question's analysis

    Raises:
        UnknownQuestionError: If no analyzer exists for the id
    """
    try:
        analyzer = QUESTION_ANALYZERS[QuestionId(question_id)]
    except (KeyError, ValueError):
        raise UnknownQuestionError(str(question_id)) from None
    return analyzer(data)


__all__ = [
    "QUESTION_ANALYZERS",
    "Analyzer",
    "analyze_question",
]
