"""Meal analyzers: meal_distribution, meal_timing, meal_variety."""

from collections import Counter

from nutrition_insights.core.daily_insights.analyzers.common import (
    build_analysis,
    fmt,
)
from nutrition_insights.core.daily_insights.constants import (
    DOMINANT_MEAL_SHARE,
    MEAL_GAP_HOURS,
)
from nutrition_insights.core.daily_insights.enums import CardStatus, QuestionId
from nutrition_insights.core.daily_insights.models import (
    DailyInsightData,
    DataCard,
    MealSummary,
    QuestionAnalysis,
)


def analyze_meal_distribution(data: DailyInsightData) -> QuestionAnalysis:
    """Share of the day's calories carried by each meal."""
    meals = data.meals_with_timestamps
    total = data.today_calories or sum(meal.total_calories for meal in meals)
    shares = [
        (meal, round(meal.total_calories / total * 100) if total > 0 else 0) for meal in meals
    ]
    largest = max(shares, key=lambda pair: pair[0].total_calories, default=None)
    dominant = (
        largest is not None
        and total > 0
        and largest[0].total_calories > total * DOMINANT_MEAL_SHARE
    )

    lines = ["MEAL DISTRIBUTION:"]
    lines.extend(
        f"{meal.meal_label}: {fmt(meal.total_calories)} cal ({share}% of day)"
        for meal, share in shares
    )
    lines.append(f"Total calories: {fmt(total)}")
    lines.append(f"Meals logged: {len(meals)}")
    if dominant:
        lines.append(
            f"FLAG: {largest[0].meal_label} holds more than half of today's calories."
        )

    if largest is None:
        fallback = "No meals logged yet. Meal balance will show up once you log a meal."
    elif dominant:
        meal, share = largest
        fallback = (
            f"{meal.meal_label} carried {share}% of today's calories. Shifting some of "
            "that into your other meals can keep energy steadier through the day."
        )
    else:
        meal, share = largest
        fallback = (
            f"Your calories are spread fairly evenly across {len(meals)} meals, with "
            f"{meal.meal_label} the largest at {share}%."
        )

    cards = [
        DataCard(
            label=meal.meal_label,
            value=f"{share}%",
            sub_value=f"{fmt(meal.total_calories)} cal",
            percent=share,
            status=(
                CardStatus.ahead
                if meal.total_calories > total * DOMINANT_MEAL_SHARE
                else CardStatus.on_track
            ),
        )
        for meal, share in shares
    ]
    if not cards:
        cards.append(DataCard(label="Meals", value="0", sub_value="logged today"))

    return build_analysis(QuestionId.meal_distribution, lines, fallback, cards)


def _timed_meals(meals: list[MealSummary]) -> list[MealSummary]:
    return sorted(
        (meal for meal in meals if meal.first_log_time is not None),
        key=lambda meal: meal.first_log_time,
    )


def analyze_meal_timing(data: DailyInsightData) -> QuestionAnalysis:
    """Hours between consecutive meals, flagging long stretches."""
    timed = _timed_meals(data.meals_with_timestamps)
    gaps = [
        (earlier, later, (later.first_log_time - earlier.first_log_time).total_seconds() / 3600)
        for earlier, later in zip(timed, timed[1:])
    ]
    long_gaps = [gap for gap in gaps if gap[2] > MEAL_GAP_HOURS]
    longest = max(gaps, key=lambda gap: gap[2], default=None)
    average_gap = sum(gap[2] for gap in gaps) / len(gaps) if gaps else 0.0

    lines = ["MEAL TIMING:"]
    lines.extend(
        f"{meal.meal_label}: first logged at {meal.first_log_time:%H:%M}" for meal in timed
    )
    lines.extend(
        f"Gap {earlier.meal_label} to {later.meal_label}: {fmt(hours)} hours"
        for earlier, later, hours in gaps
    )
    if long_gaps:
        lines.append(
            f"FLAG: {len(long_gaps)} gap(s) over {MEAL_GAP_HOURS} hours between meals."
        )
    else:
        lines.append(f"Meals with times: {len(timed)}")

    if longest is None:
        fallback = "Log at least two meals with times to see how your meals are spaced."
    elif long_gaps:
        earlier, later, hours = max(long_gaps, key=lambda gap: gap[2])
        fallback = (
            f"There's a {round(hours)}-hour gap between {earlier.meal_label} and "
            f"{later.meal_label}. A snack in between can help keep energy and "
            "hunger steady."
        )
    else:
        fallback = (
            f"Your meals are spaced well, with the longest gap at about "
            f"{round(longest[2])} hours."
        )

    cards = [
        DataCard(label="Meals", value=str(len(timed)), sub_value="with times"),
        DataCard(
            label="Longest Gap",
            value=f"{round(longest[2])}h" if longest else "0h",
            sub_value="between meals",
            status=CardStatus.neutral if long_gaps else CardStatus.on_track,
        ),
        DataCard(label="Average Gap", value=f"{fmt(average_gap)}h", sub_value="between meals"),
    ]
    return build_analysis(QuestionId.meal_timing, lines, fallback, cards)


def analyze_meal_variety(data: DailyInsightData) -> QuestionAnalysis:
    """Distinct foods versus repeated items today."""
    names = [food.name.strip().lower() for food in data.today_foods]
    counts = Counter(names)
    total = len(names)
    unique = len(counts)
    repeat_count = total - unique
    repetitive = total > 0 and repeat_count > total * 0.5

    lines = [
        "MEAL VARIETY:",
        f"Foods logged: {total}",
        f"Distinct foods: {unique}",
        f"Repeated items: {repeat_count}",
    ]
    most_common = counts.most_common(1)
    if most_common and most_common[0][1] > 1:
        name, times = most_common[0]
        lines.append(f"Most repeated: {name} ({times} times)")
    if repetitive:
        lines.append("FLAG: More than half of today's items are repeats.")

    if total == 0:
        fallback = "No foods logged yet today. Variety will show up as you log meals."
    elif repetitive:
        fallback = (
            f"There's some repetition today, {unique} different foods across {total} "
            "items. Adding a new vegetable or protein source could widen your "
            "nutrient range."
        )
    else:
        fallback = f"{unique} different foods across {total} items today, good variety."

    cards = [
        DataCard(label="Foods", value=str(total), sub_value="items logged"),
        DataCard(
            label="Distinct",
            value=str(unique),
            sub_value="different foods",
            status=CardStatus.neutral if repetitive else CardStatus.on_track,
        ),
    ]
    return build_analysis(QuestionId.meal_variety, lines, fallback, cards)
