"""Insight cards for the original insights screen.

The model writes up to three cards from a single JSON prompt. When the
model is disabled or unavailable, rule-based cards are built from the
same snapshot the daily questions use.
"""

import json
import re

from nutrition_insights.core.daily_insights.constants import (
    CARB_KCAL_PER_GRAM,
    FAT_KCAL_PER_GRAM,
    PROTEIN_KCAL_PER_GRAM,
)
from nutrition_insights.core.daily_insights.enums import LegacyInsightCategory, UserGoal
from nutrition_insights.core.daily_insights.models import DailyInsightData, LegacyInsight

MAX_LEGACY_INSIGHTS = 3

CATEGORY_ICONS: dict[LegacyInsightCategory, str] = {
    LegacyInsightCategory.macro_balance: "scale-outline",
    LegacyInsightCategory.protein: "barbell-outline",
    LegacyInsightCategory.consistency: "flame-outline",
    LegacyInsightCategory.pattern: "pie-chart-outline",
    LegacyInsightCategory.trend: "trending-up-outline",
    LegacyInsightCategory.hydration: "water-outline",
    LegacyInsightCategory.timing: "time-outline",
    LegacyInsightCategory.rest: "moon-outline",
}

CATEGORY_TITLES: dict[LegacyInsightCategory, str] = {
    LegacyInsightCategory.macro_balance: "Macro Balance",
    LegacyInsightCategory.protein: "Protein Pacing",
    LegacyInsightCategory.consistency: "Consistency Win",
    LegacyInsightCategory.pattern: "Pattern Spotted",
    LegacyInsightCategory.trend: "Trend Update",
    LegacyInsightCategory.hydration: "Hydration",
    LegacyInsightCategory.timing: "Meal Timing",
    LegacyInsightCategory.rest: "Rest Day",
}


def _insight(category: LegacyInsightCategory, text: str) -> LegacyInsight:
    return LegacyInsight(category=category, text=text, icon=CATEGORY_ICONS[category])


def _protein_insight(data: DailyInsightData) -> LegacyInsight | None:
    if data.today_protein <= 0 or data.protein_target <= 0:
        return None
    percent = round(data.today_protein / data.protein_target * 100)
    if percent >= 80 and data.today_meal_count >= 3:
        return _insight(
            LegacyInsightCategory.protein,
            f"You've hit {data.today_protein:.0f}g protein across {data.today_meal_count} "
            "meals, great distribution for muscle synthesis.",
        )
    if percent < 50 and data.today_meal_count >= 2:
        return _insight(
            LegacyInsightCategory.protein,
            f"You're at {data.today_protein:.0f}g protein so far. Adding a protein-rich "
            f"snack could help hit your {data.protein_target:.0f}g target.",
        )
    return None


def _streak_insight(data: DailyInsightData) -> LegacyInsight | None:
    if data.logging_streak >= 7:
        return _insight(
            LegacyInsightCategory.consistency,
            f"{data.logging_streak}-day logging streak. You're building a solid habit, "
            "and consistency beats perfection every time.",
        )
    if data.logging_streak >= 3:
        return _insight(
            LegacyInsightCategory.consistency,
            f"{data.logging_streak}-day logging streak. You're building momentum.",
        )
    return None


def _weekly_average_insight(data: DailyInsightData) -> LegacyInsight | None:
    if data.avg_calories_7d <= 0 or data.calorie_target <= 0:
        return None
    difference = data.avg_calories_7d - data.calorie_target
    percent_diff = round(abs(difference) / data.calorie_target * 100)
    if percent_diff <= 5:
        goal_text = {
            UserGoal.lose: "steady progress",
            UserGoal.gain: "muscle building",
            UserGoal.maintain: "maintenance",
        }[data.user_goal]
        return _insight(
            LegacyInsightCategory.trend,
            f"Your 7-day average is {data.avg_calories_7d:,.0f} calories. That's right in "
            f"your target zone for {goal_text}.",
        )
    if difference > 0 and percent_diff > 10:
        return _insight(
            LegacyInsightCategory.trend,
            f"Calories have averaged {abs(difference):,.0f} above target this week. "
            "Small adjustment territory, nothing drastic needed.",
        )
    if difference < 0 and percent_diff > 10:
        return _insight(
            LegacyInsightCategory.trend,
            f"Your 7-day average is {abs(difference):,.0f} calories below target. "
            "Consider adding a snack if you're feeling low energy.",
        )
    return None


def _hydration_insight(data: DailyInsightData) -> LegacyInsight | None:
    if data.today_water <= 0 or data.water_target <= 0:
        return None
    percent = round(data.today_water / data.water_target * 100)
    if percent >= 100:
        return _insight(
            LegacyInsightCategory.hydration,
            f"You've logged {data.today_water / 1000:.1f}L of water today. Nicely hydrated.",
        )
    if percent >= 70:
        return _insight(
            LegacyInsightCategory.hydration,
            f"{percent}% of your water goal. You're on track.",
        )
    return None


def _macro_insight(data: DailyInsightData) -> LegacyInsight | None:
    if data.today_calories <= 500:
        return None
    protein_kcal = data.today_protein * PROTEIN_KCAL_PER_GRAM
    carb_kcal = data.today_carbs * CARB_KCAL_PER_GRAM
    fat_kcal = data.today_fat * FAT_KCAL_PER_GRAM
    total = protein_kcal + carb_kcal + fat_kcal
    if total <= 0:
        return None
    protein_pct = round(protein_kcal / total * 100)
    carb_pct = round(carb_kcal / total * 100)
    fat_pct = round(fat_kcal / total * 100)
    if not (20 <= protein_pct <= 40 and 20 <= fat_pct <= 40):
        return None
    goal_text = {
        UserGoal.maintain: "maintenance",
        UserGoal.lose: "fat loss",
        UserGoal.gain: "muscle gain",
    }[data.user_goal]
    return _insight(
        LegacyInsightCategory.macro_balance,
        f"Today's macros: {carb_pct}% carbs, {protein_pct}% protein, {fat_pct}% fat, "
        f"nicely balanced for your {goal_text} goal.",
    )


def _light_day_insight(data: DailyInsightData) -> LegacyInsight | None:
    if (
        0 < data.today_calories < data.calorie_target * 0.5
        and data.today_meal_count <= 2
        and data.current_hour >= 14
    ):
        return _insight(
            LegacyInsightCategory.rest,
            "Lighter eating day today. Sometimes that's what the body asks for.",
        )
    return None


def generate_fallback_insights(data: DailyInsightData) -> list[LegacyInsight]:
    """Build up to three rule-based insight cards.

    Args:
        data: Today's snapshot

    Returns:
        Insight cards, most specific first
    """
    if data.today_calories < 100 and data.today_meal_count == 0:
        return [
            _insight(
                LegacyInsightCategory.pattern,
                "Just getting started today? Log your first meal and you'll see "
                "insights as your day takes shape.",
            )
        ]

    if data.days_using_app < 3:
        return [
            _insight(
                LegacyInsightCategory.pattern,
                "As you log meals over the next few days, you'll start seeing patterns "
                "and personalized insights here.",
            )
        ]

    insights: list[LegacyInsight] = []
    for build in (_protein_insight, _streak_insight):
        insight = build(data)
        if insight is not None:
            insights.append(insight)

    if data.calorie_streak >= 3 and len(insights) < MAX_LEGACY_INSIGHTS:
        insights.append(
            _insight(
                LegacyInsightCategory.trend,
                f"You've landed within your calorie target {data.calorie_streak} days in a row. "
                "That's the kind of consistency that adds up.",
            )
        )

    for build in (_weekly_average_insight, _hydration_insight, _macro_insight, _light_day_insight):
        if len(insights) >= MAX_LEGACY_INSIGHTS:
            break
        insight = build(data)
        if insight is not None:
            insights.append(insight)

    return insights[:MAX_LEGACY_INSIGHTS]


def get_empty_state_message(data: DailyInsightData) -> tuple[str, str] | None:
    """Title and message for the insights screen when there is little to say."""
    if data.days_using_app < 3:
        return (
            "Building your profile...",
            "As you log meals over the next few days, patterns and personalized "
            "insights will start to appear. It usually takes about a week.",
        )
    if data.today_meal_count == 0:
        return (
            "Nothing logged yet today",
            "Log your first meal and insights will appear as your day takes shape.",
        )
    return None


LEGACY_GOAL_TEXT: dict[UserGoal, str] = {
    UserGoal.lose: "weight loss",
    UserGoal.maintain: "maintenance",
    UserGoal.gain: "muscle gain",
}

LEGACY_PROMPT_FOOD_LIMIT = 10

JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)

LEGACY_INSIGHT_PROMPT = """You are a supportive nutrition companion. Generate 2-3 brief, personalized insights about the user's nutrition today.

USER DATA:
- Goal: {goal}
- Today: {calories} cal (target: {calorie_target}), {protein}g protein (target: {protein_target}g)
- Carbs: {carbs}g, Fat: {fat}g, Fiber: {fiber}g
- Water: {water}ml of {water_target}ml target
- Meals logged: {meal_count}
- Foods today: {foods}
- 7-day averages: {avg_calories} cal, {avg_protein}g protein
- Current streaks: {logging_streak} days logging, {calorie_streak} days meeting calorie target
- Days using app: {days_using_app}

RULES:
1. Be specific and reference actual numbers and foods from their data
2. Be encouraging, never judgmental; one off day doesn't matter
3. Focus on patterns over single data points
4. Celebrate consistency and small wins
5. If suggesting changes, use "Consider..." or "You might try..." not "You should..."
6. Keep each insight to 1-2 sentences
7. No medical advice, no supplement recommendations
8. If it's early in the day with few foods logged, acknowledge that

OUTPUT FORMAT (JSON only, no other text):
{{"insights": [{{"category": "macro_balance", "text": "..."}}, {{"category": "protein", "text": "..."}}]}}

Valid categories: {categories}

Generate insights now:"""


def _whole(value: float) -> str:
    return f"{value:.0f}"


def build_legacy_prompt(data: DailyInsightData) -> str:
    """Single prompt asking the model for legacy insight cards as JSON."""
    foods = ", ".join(f.name for f in data.today_foods[:LEGACY_PROMPT_FOOD_LIMIT])
    return LEGACY_INSIGHT_PROMPT.format(
        goal=LEGACY_GOAL_TEXT[data.user_goal],
        calories=_whole(data.today_calories),
        calorie_target=_whole(data.calorie_target),
        protein=_whole(data.today_protein),
        protein_target=_whole(data.protein_target),
        carbs=_whole(data.today_carbs),
        fat=_whole(data.today_fat),
        fiber=_whole(data.today_fiber),
        water=_whole(data.today_water),
        water_target=_whole(data.water_target),
        meal_count=data.today_meal_count,
        foods=foods or "No foods logged yet",
        avg_calories=_whole(data.avg_calories_7d),
        avg_protein=_whole(data.avg_protein_7d),
        logging_streak=data.logging_streak,
        calorie_streak=data.calorie_streak,
        days_using_app=data.days_using_app,
        categories=", ".join(category.value for category in LegacyInsightCategory),
    )


def parse_legacy_response(raw_text: str) -> list[LegacyInsight]:
    """Extract insight cards from a model reply.

    The first JSON object in the reply is read; entries with an unknown
    category or empty text are skipped. Anything unparseable yields no
    cards.

    Args:
        raw_text: Text returned by the model

    Returns:
        Up to three insight cards
    """
    match = JSON_OBJECT_PATTERN.search(raw_text)
    if match is None:
        return []
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError:
        return []

    items = payload.get("insights") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        return []

    insights: list[LegacyInsight] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        try:
            category = LegacyInsightCategory(item.get("category"))
        except ValueError:
            continue
        insights.append(_insight(category, text.strip()))
    return insights[:MAX_LEGACY_INSIGHTS]
