"""Widget headline engine.

An ordered cascade of (predicate, builder) rules. The first rule whose
predicate matches produces the headline; its position is the priority.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from nutrition_insights.core.daily_insights.constants import MINIMAL_DATA_CALORIES
from nutrition_insights.core.daily_insights.models import DailyInsightData, WidgetHeadlineData

START_TRACKING_TEXT = "Log your first meal to unlock today's insights."
START_TRACKING_ICON = "leaf-outline"


@dataclass(frozen=True)
class HeadlineRule:
    """One step of the cascade."""

    priority: int
    icon: str
    matches: Callable[[DailyInsightData], bool]
    build_text: Callable[[DailyInsightData], str]


def estimate_remaining_meals(data: DailyInsightData) -> int:
    """Rough count of meals still to come today, from the hour of day."""
    if data.calorie_percent >= 100:
        return 0
    hour = data.current_hour
    if hour >= 21:
        return 0
    if hour >= 18:
        return 1
    if hour >= 12:
        return max(1, 3 - data.today_meal_count)
    return max(1, 4 - data.today_meal_count)


def _remaining_text(data: DailyInsightData) -> str:
    remaining = max(0.0, data.calorie_target - data.today_calories)
    text = (
        f"{data.today_calories:,.0f} of {data.calorie_target:,.0f} calories logged, "
        f"{remaining:,.0f} remaining"
    )
    meals_left = estimate_remaining_meals(data)
    if meals_left > 0:
        text += f" across about {meals_left} more meal{'s' if meals_left != 1 else ''}."
    else:
        text += " for today."
    return text


HEADLINE_RULES: tuple[HeadlineRule, ...] = (
    HeadlineRule(
        priority=1,
        icon=START_TRACKING_ICON,
        matches=lambda d: d.today_meal_count == 0,
        build_text=lambda d: START_TRACKING_TEXT,
    ),
    HeadlineRule(
        priority=2,
        icon="leaf-outline",
        matches=lambda d: d.today_meal_count == 1 and d.today_calories < MINIMAL_DATA_CALORIES,
        build_text=lambda d: "1 meal logged so far. Keep going to see how your day takes shape.",
    ),
    HeadlineRule(
        priority=3,
        icon="checkmark-circle-outline",
        matches=lambda d: 90 <= d.calorie_percent <= 110,
        build_text=lambda d: f"Calories at {d.calorie_percent}%, nicely paced for today.",
    ),
    HeadlineRule(
        priority=4,
        icon="bar-chart-outline",
        matches=lambda d: d.calorie_percent > 110,
        build_text=lambda d: (
            f"{d.today_calories:,.0f} of {d.calorie_target:,.0f} calories today "
            f"({d.calorie_percent}%). Tomorrow is a fresh start."
        ),
    ),
    HeadlineRule(
        priority=5,
        icon="barbell-outline",
        matches=lambda d: d.protein_percent < 60 and d.calorie_percent >= 70,
        build_text=lambda d: (
            f"Protein at {d.protein_percent}% of target. A protein-rich meal could "
            "help close the gap."
        ),
    ),
    HeadlineRule(
        priority=6,
        icon="water-outline",
        matches=lambda d: d.water_target > 0 and d.water_percent < 50 and d.current_hour >= 13,
        build_text=lambda d: (
            f"Water at {d.water_percent}% of your goal. A glass now keeps you on pace."
        ),
    ),
    HeadlineRule(
        priority=7,
        icon="link-outline",
        matches=lambda d: d.logging_streak >= 7,
        build_text=lambda d: (
            f"Day {d.logging_streak} of your logging streak. Consistency is paying off."
        ),
    ),
    HeadlineRule(
        priority=8,
        icon="leaf-outline",
        matches=lambda d: True,
        build_text=_remaining_text,
    ),
)


def compute_headline(data: DailyInsightData, now: datetime | None = None) -> WidgetHeadlineData:
    """Select the headline for a snapshot.

    Args:
        data: Snapshot to summarise
        now: Timestamp for computed_at, defaults to the current UTC time

    Returns:
        WidgetHeadlineData from the first matching rule
    """
    computed_at = now or datetime.now(UTC)
    for rule in HEADLINE_RULES:
        if rule.matches(data):
            return WidgetHeadlineData(
                text=rule.build_text(data),
                icon=rule.icon,
                priority=rule.priority,
                computed_at=computed_at,
            )
    # The final rule always matches
    raise AssertionError("headline cascade exhausted")


def default_headline(now: datetime | None = None) -> WidgetHeadlineData:
    """Headline shown before any snapshot exists."""
    return WidgetHeadlineData(
        text=START_TRACKING_TEXT,
        icon=START_TRACKING_ICON,
        priority=1,
        computed_at=now or datetime.now(UTC),
    )
