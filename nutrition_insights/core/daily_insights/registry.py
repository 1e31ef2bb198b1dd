"""Question catalog.

Eighteen questions across six categories. Each definition carries an
availability gate and an additive relevance score over a snapshot.
Both are pure functions of the snapshot.
"""

from collections.abc import Callable
from dataclasses import dataclass

from nutrition_insights.core.daily_insights.constants import (
    FAT_KCAL_PER_GRAM,
    FIBER_TARGET_GRAMS,
    PROTEIN_KCAL_PER_GRAM,
    TREND_MIN_LOGGED_DAYS,
    TREND_WINDOW_DAYS,
)
from nutrition_insights.core.daily_insights.enums import (
    AlertSeverity,
    QuestionCategory,
    QuestionId,
    UserGoal,
)
from nutrition_insights.core.daily_insights.exceptions import UnknownQuestionError
from nutrition_insights.core.daily_insights.models import DailyInsightData


@dataclass(frozen=True)
class QuestionDefinition:
    """A question the user can ask about their day."""

    id: QuestionId
    category: QuestionCategory
    text: str
    icon: str
    is_available: Callable[[DailyInsightData], bool]
    compute_relevance: Callable[[DailyInsightData], float]


@dataclass(frozen=True)
class CategoryMeta:
    """Display metadata for a question category."""

    label: str
    icon: str


CATEGORY_META: dict[QuestionCategory, CategoryMeta] = {
    QuestionCategory.macro_balance: CategoryMeta("Macro Balance", "pie-chart-outline"),
    QuestionCategory.protein_focus: CategoryMeta("Protein Focus", "barbell-outline"),
    QuestionCategory.meal_balance: CategoryMeta("Meal Balance", "restaurant-outline"),
    QuestionCategory.hydration: CategoryMeta("Hydration", "water-outline"),
    QuestionCategory.trends: CategoryMeta("Trends", "trending-up-outline"),
    QuestionCategory.nutrient_gaps: CategoryMeta("Nutrient Gaps", "nutrition-outline"),
}


def _cap(score: float) -> float:
    return max(0.0, min(100.0, score))


def _meal_gaps_hours(data: DailyInsightData) -> list[float]:
    times = sorted(
        meal.first_log_time
        for meal in data.meals_with_timestamps
        if meal.first_log_time is not None
    )
    return [(later - earlier).total_seconds() / 3600 for earlier, later in zip(times, times[1:])]


def _logged_days(data: DailyInsightData) -> int:
    return sum(1 for day in data.weekly_daily_totals if day.logged)


def _weekly_trend_percent(data: DailyInsightData) -> float:
    logged = sorted((d for d in data.weekly_daily_totals if d.logged), key=lambda d: d.date)
    if len(logged) < TREND_MIN_LOGGED_DAYS:
        return 0.0
    early = sum(d.calories for d in logged[:TREND_WINDOW_DAYS]) / TREND_WINDOW_DAYS
    recent = sum(d.calories for d in logged[-TREND_WINDOW_DAYS:]) / TREND_WINDOW_DAYS
    if early <= 0:
        return 0.0
    return (recent - early) / early * 100


# -- macro balance -----------------------------------------------------------


def _macro_overview_relevance(data: DailyInsightData) -> float:
    score = 30.0
    if data.current_hour >= 17:
        score += 20
    if abs(data.calorie_percent - data.protein_percent) > 15:
        score += 25
    if data.calorie_percent >= 80:
        score += 15
    return _cap(score)


def _calorie_pacing_relevance(data: DailyInsightData) -> float:
    score = 20.0
    if abs(data.calorie_percent - data.day_progress * 100) > 20:
        score += 35
    if 12 <= data.current_hour <= 18:
        score += 15
    return _cap(score)


def _macro_ratio_relevance(data: DailyInsightData) -> float:
    score = 20.0
    calories = max(1.0, data.today_calories)
    protein_share = data.today_protein * PROTEIN_KCAL_PER_GRAM / calories * 100
    fat_share = data.today_fat * FAT_KCAL_PER_GRAM / calories * 100
    if protein_share < 20 or protein_share > 40:
        score += 25
    if fat_share > 40:
        score += 20
    return _cap(score)


def _remaining_budget_relevance(data: DailyInsightData) -> float:
    score = 25.0
    remaining = data.calorie_target - data.today_calories
    protein_gap = data.protein_target - data.today_protein
    if protein_gap > 30 and remaining < 600:
        score += 35
    if data.current_hour >= 16:
        score += 20
    return _cap(score)


# -- protein focus -----------------------------------------------------------


def _protein_status_relevance(data: DailyInsightData) -> float:
    score = 25.0
    if data.protein_percent < data.calorie_percent - 15:
        score += 40
    if data.user_goal == UserGoal.gain:
        score += 15
    return _cap(score)


def _protein_per_meal_relevance(data: DailyInsightData) -> float:
    score = 20.0
    proteins = [meal.total_protein for meal in data.meals_with_timestamps]
    if any(p < 20 for p in proteins):
        score += 30
    if len(proteins) >= 2 and max(proteins) > min(proteins) * 3:
        score += 20
    return _cap(score)


def _protein_remaining_relevance(data: DailyInsightData) -> float:
    score = 20.0
    if data.protein_target - data.today_protein > 40:
        score += 30
    if data.current_hour >= 16:
        score += 20
    return _cap(score)


# -- meal balance ------------------------------------------------------------


def _meal_distribution_relevance(data: DailyInsightData) -> float:
    score = 20.0
    largest = max((m.total_calories for m in data.meals_with_timestamps), default=0)
    if data.today_calories > 0 and largest > data.today_calories * 0.5:
        score += 35
    return _cap(score)


def _meal_timing_available(data: DailyInsightData) -> bool:
    meals = data.meals_with_timestamps
    return len(meals) >= 2 and all(m.first_log_time is not None for m in meals)


def _meal_timing_relevance(data: DailyInsightData) -> float:
    score = 15.0
    score += 30 * sum(1 for gap in _meal_gaps_hours(data) if gap > 6)
    return _cap(score)


def _meal_variety_relevance(data: DailyInsightData) -> float:
    score = 15.0
    names = [food.name.strip().lower() for food in data.today_foods]
    if names and len(set(names)) < len(names) * 0.5:
        score += 30
    return _cap(score)


# -- hydration ---------------------------------------------------------------


def _hydration_status_relevance(data: DailyInsightData) -> float:
    score = 20.0
    if data.water_percent < 50 and data.current_hour >= 12:
        score += 40
    if data.water_percent < 30:
        score += 20
    return _cap(score)


def _hydration_pacing_relevance(data: DailyInsightData) -> float:
    score = 15.0
    if data.water_percent < data.day_progress * 100 - 20:
        score += 35
    return _cap(score)


# -- trends ------------------------------------------------------------------


def _vs_weekly_avg_relevance(data: DailyInsightData) -> float:
    score = 20.0
    if data.avg_calories_7d > 0:
        deviation = (data.today_calories - data.avg_calories_7d) / data.avg_calories_7d * 100
        if abs(deviation) > 20:
            score += 35
    if data.current_hour >= 18:
        score += 15
    return _cap(score)


def _consistency_relevance(data: DailyInsightData) -> float:
    score = 15.0
    if data.logging_streak >= 7:
        score += 30
    if _logged_days(data) < 4:
        score += 25
    return _cap(score)


def _trend_direction_relevance(data: DailyInsightData) -> float:
    score = 20.0
    if abs(_weekly_trend_percent(data)) > 10:
        score += 30
    return _cap(score)


# -- nutrient gaps -----------------------------------------------------------


def _nutrient_overview_relevance(data: DailyInsightData) -> float:
    score = 25.0
    if any(a.severity == AlertSeverity.concern for a in data.active_alerts):
        score += 40
    if any(a.tier == 1 for a in data.active_alerts):
        score += 20
    return _cap(score)


def _fiber_relevance(data: DailyInsightData) -> float:
    score = 15.0
    if data.today_fiber / FIBER_TARGET_GRAMS * 100 < 50:
        score += 35
    return _cap(score)


def _micronutrient_relevance(data: DailyInsightData) -> float:
    score = 15.0
    if len(data.active_alerts) >= 2:
        score += 25
    if any(a.severity == AlertSeverity.concern for a in data.active_alerts):
        score += 25
    return _cap(score)


QUESTION_REGISTRY: tuple[QuestionDefinition, ...] = (
    QuestionDefinition(
        id=QuestionId.macro_overview,
        category=QuestionCategory.macro_balance,
        text="Am I on track with my macros today?",
        icon="flag-outline",
        is_available=lambda d: d.today_meal_count >= 1,
        compute_relevance=_macro_overview_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.calorie_pacing,
        category=QuestionCategory.macro_balance,
        text="How am I pacing toward my calorie target?",
        icon="speedometer-outline",
        is_available=lambda d: d.today_meal_count >= 1,
        compute_relevance=_calorie_pacing_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.macro_ratio,
        category=QuestionCategory.macro_balance,
        text="What does my macro split look like today?",
        icon="pie-chart-outline",
        is_available=lambda d: d.today_calories >= 500,
        compute_relevance=_macro_ratio_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.remaining_budget,
        category=QuestionCategory.macro_balance,
        text="What can I fit in my remaining calories?",
        icon="calculator-outline",
        is_available=lambda d: d.calorie_target - d.today_calories > 200,
        compute_relevance=_remaining_budget_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.protein_status,
        category=QuestionCategory.protein_focus,
        text="Am I getting enough protein today?",
        icon="barbell-outline",
        is_available=lambda d: d.today_meal_count >= 1,
        compute_relevance=_protein_status_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.protein_per_meal,
        category=QuestionCategory.protein_focus,
        text="How is my protein distributed across meals?",
        icon="restaurant-outline",
        is_available=lambda d: d.today_meal_count >= 2,
        compute_relevance=_protein_per_meal_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.protein_remaining,
        category=QuestionCategory.protein_focus,
        text="How much protein do I still need today?",
        icon="fitness-outline",
        is_available=lambda d: d.today_protein < d.protein_target,
        compute_relevance=_protein_remaining_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.meal_distribution,
        category=QuestionCategory.meal_balance,
        text="How balanced are my meals today?",
        icon="scale-outline",
        is_available=lambda d: d.today_meal_count >= 2,
        compute_relevance=_meal_distribution_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.meal_timing,
        category=QuestionCategory.meal_balance,
        text="Am I spacing my meals well?",
        icon="time-outline",
        is_available=_meal_timing_available,
        compute_relevance=_meal_timing_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.meal_variety,
        category=QuestionCategory.meal_balance,
        text="How varied are my food choices today?",
        icon="color-palette-outline",
        is_available=lambda d: len(d.today_foods) >= 3,
        compute_relevance=_meal_variety_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.hydration_status,
        category=QuestionCategory.hydration,
        text="How's my hydration today?",
        icon="water-outline",
        is_available=lambda d: d.water_target > 0,
        compute_relevance=_hydration_status_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.hydration_pacing,
        category=QuestionCategory.hydration,
        text="Am I drinking enough water for this time of day?",
        icon="water",
        is_available=lambda d: d.water_target > 0 and d.current_hour >= 10,
        compute_relevance=_hydration_pacing_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.vs_weekly_avg,
        category=QuestionCategory.trends,
        text="How does today compare to my weekly average?",
        icon="trending-up-outline",
        is_available=lambda d: d.avg_calories_7d > 0 and d.today_meal_count >= 2,
        compute_relevance=_vs_weekly_avg_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.consistency_check,
        category=QuestionCategory.trends,
        text="How consistent has my tracking been this week?",
        icon="checkmark-circle-outline",
        is_available=lambda d: d.days_using_app >= 3,
        compute_relevance=_consistency_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.trend_direction,
        category=QuestionCategory.trends,
        text="Am I trending in the right direction this week?",
        icon="compass-outline",
        is_available=lambda d: _logged_days(d) >= 5,
        compute_relevance=_trend_direction_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.nutrient_overview,
        category=QuestionCategory.nutrient_gaps,
        text="Are there any nutrients I should pay attention to?",
        icon="nutrition-outline",
        is_available=lambda d: len(d.active_alerts) > 0,
        compute_relevance=_nutrient_overview_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.fiber_check,
        category=QuestionCategory.nutrient_gaps,
        text="Am I getting enough fiber today?",
        icon="leaf-outline",
        is_available=lambda d: d.today_fiber > 0 or d.today_meal_count >= 2,
        compute_relevance=_fiber_relevance,
    ),
    QuestionDefinition(
        id=QuestionId.micronutrient_status,
        category=QuestionCategory.nutrient_gaps,
        text="What does my micronutrient picture look like?",
        icon="flask-outline",
        is_available=lambda d: len(d.active_alerts) > 0 and d.days_using_app >= 7,
        compute_relevance=_micronutrient_relevance,
    ),
)

_REGISTRY_BY_ID: dict[QuestionId, QuestionDefinition] = {q.id: q for q in QUESTION_REGISTRY}


def get_question(question_id: str) -> QuestionDefinition:
    """Look up a question definition by id.

    Args:
        question_id: Catalog id, as enum member or plain string

    Returns:
        The matching QuestionDefinition

    Raises:
        UnknownQuestionError: If the id is not in the catalog
    """
    try:
        return _REGISTRY_BY_ID[QuestionId(question_id)]
    except (KeyError, ValueError):
        raise UnknownQuestionError(str(question_id)) from None
