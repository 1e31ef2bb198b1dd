"""Protein analyzers: protein_status, protein_per_meal, protein_remaining."""

from nutrition_insights.core.daily_insights.analyzers.common import (
    build_analysis,
    fmt,
    percent_of,
)
from nutrition_insights.core.daily_insights.constants import (
    MIN_MEAL_PROTEIN_GRAMS,
    PROTEIN_KCAL_PER_GRAM,
    PROTEIN_LAG_POINTS,
    UNEVEN_PROTEIN_RATIO,
)
from nutrition_insights.core.daily_insights.enums import CardStatus, QuestionId
from nutrition_insights.core.daily_insights.models import (
    DailyInsightData,
    DataCard,
    QuestionAnalysis,
)


def analyze_protein_status(data: DailyInsightData) -> QuestionAnalysis:
    """Protein progress compared against calorie progress."""
    remaining = max(0.0, data.protein_target - data.today_protein)
    lagging = data.protein_percent < data.calorie_percent - PROTEIN_LAG_POINTS

    lines = [
        "PROTEIN STATUS:",
        f"Today: {fmt(data.today_protein)}g of {fmt(data.protein_target)}g ({data.protein_percent}%)",
        f"Calorie progress: {data.calorie_percent}%",
        f"Protein gap vs calories: {data.calorie_percent - data.protein_percent} percentage points",
        f"Remaining: {fmt(remaining)}g",
        f"Meals so far: {data.today_meal_count}",
    ]
    if lagging:
        lines.append("FLAG: Protein is lagging behind calorie pace.")

    if lagging:
        fallback = (
            f"Protein is at {data.protein_percent}% compared to {data.calorie_percent}% "
            f"for calories, with {fmt(remaining)}g still to go. A protein-rich option "
            "for your next meal could help close the gap."
        )
    elif data.protein_percent >= 90:
        fallback = (
            f"Protein is tracking well at {data.protein_percent}% of your "
            f"{fmt(data.protein_target)}g target."
        )
    else:
        fallback = (
            f"Protein at {data.protein_percent}%, {fmt(remaining)}g remaining to reach "
            f"your {fmt(data.protein_target)}g target."
        )

    if data.protein_percent >= 85:
        protein_status = CardStatus.on_track
    elif data.protein_percent < 50:
        protein_status = CardStatus.behind
    else:
        protein_status = CardStatus.neutral

    cards = [
        DataCard(
            label="Protein",
            value=f"{data.protein_percent}%",
            sub_value=f"{fmt(data.today_protein)}g / {fmt(data.protein_target)}g",
            percent=data.protein_percent,
            status=protein_status,
        ),
        DataCard(
            label="Remaining",
            value=f"{fmt(remaining)}g",
            sub_value="to target",
            status=CardStatus.neutral if remaining > 40 else CardStatus.on_track,
        ),
        DataCard(label="Calories", value=f"{data.calorie_percent}%", sub_value="for comparison"),
    ]
    return build_analysis(QuestionId.protein_status, lines, fallback, cards)


def analyze_protein_per_meal(data: DailyInsightData) -> QuestionAnalysis:
    """How evenly protein is spread over today's meals."""
    meals = data.meals_with_timestamps
    proteins = [meal.total_protein for meal in meals]
    max_protein = max(proteins, default=0.0)
    min_protein = min(proteins, default=0.0)
    avg_per_meal = round(data.today_protein / len(meals)) if meals else 0
    has_low_meal = any(p < MIN_MEAL_PROTEIN_GRAMS for p in proteins)
    very_uneven = len(meals) >= 2 and max_protein > min_protein * UNEVEN_PROTEIN_RATIO

    lines = ["PROTEIN DISTRIBUTION:"]
    lines.extend(
        f"{meal.meal_label}: {fmt(meal.total_protein)}g protein ({fmt(meal.total_calories)} cal)"
        for meal in meals
    )
    lines.append(f"Average per meal: {avg_per_meal}g")
    lines.append(f"Range: {fmt(min_protein)}g - {fmt(max_protein)}g")
    if has_low_meal:
        lines.append(f"FLAG: At least one meal has less than {MIN_MEAL_PROTEIN_GRAMS}g protein.")
    if very_uneven:
        lines.append(
            f"FLAG: Protein distribution is uneven ({fmt(max_protein)}g max vs "
            f"{fmt(min_protein)}g min)."
        )

    if not meals:
        fallback = "No meals logged yet. Protein distribution will show up once you log a meal."
    elif very_uneven:
        fallback = (
            f"Protein ranges from {fmt(min_protein)}g to {fmt(max_protein)}g across meals. "
            f"Spreading it more evenly, around {avg_per_meal}g per meal, can support "
            "better absorption."
        )
    elif has_low_meal:
        fallback = (
            f"One of your meals has under {MIN_MEAL_PROTEIN_GRAMS}g protein. Distributing "
            "protein more evenly across meals supports better muscle synthesis."
        )
    else:
        fallback = (
            f"Protein is well distributed at ~{avg_per_meal}g per meal across "
            f"{len(meals)} meals."
        )

    cards = [
        DataCard(
            label=meal.meal_label,
            value=f"{fmt(meal.total_protein)}g",
            sub_value=f"{fmt(meal.total_calories)} cal",
            percent=percent_of(meal.total_protein, data.protein_target),
            status=(
                CardStatus.on_track
                if meal.total_protein >= MIN_MEAL_PROTEIN_GRAMS
                else CardStatus.neutral
            ),
        )
        for meal in meals
    ]
    if not cards:
        cards.append(DataCard(label="Meals", value="0", sub_value="logged today"))

    return build_analysis(QuestionId.protein_per_meal, lines, fallback, cards)


def analyze_protein_remaining(data: DailyInsightData) -> QuestionAnalysis:
    """Protein still needed today and whether the calorie budget fits it."""
    remaining = max(0.0, data.protein_target - data.today_protein)
    calories_left = max(0.0, data.calorie_target - data.today_calories)
    kcal_needed = remaining * PROTEIN_KCAL_PER_GRAM

    lines = [
        "PROTEIN REMAINING:",
        f"Protein remaining: {fmt(remaining)}g of {fmt(data.protein_target)}g target",
        f"Current: {fmt(data.today_protein)}g ({data.protein_percent}%)",
        f"Calorie budget remaining: {fmt(calories_left)}",
        f"Calories needed for remaining protein: {fmt(kcal_needed)}",
        f"Hour of day: {data.current_hour}",
    ]

    if remaining > 40:
        room = (
            "Plenty of calorie room to fit it in."
            if calories_left > kcal_needed
            else "Budget is tight, so lean protein sources would work well."
        )
        fallback = f"{fmt(remaining)}g of protein still to go today. {room}"
    else:
        fallback = (
            f"Just {fmt(remaining)}g of protein remaining. You're close to your "
            f"{fmt(data.protein_target)}g target."
        )

    cards = [
        DataCard(
            label="Remaining",
            value=f"{fmt(remaining)}g",
            sub_value=f"of {fmt(data.protein_target)}g",
            status=CardStatus.neutral if remaining > 40 else CardStatus.on_track,
        ),
        DataCard(
            label="Cal Budget",
            value=fmt(calories_left),
            sub_value="calories left",
            status=CardStatus.on_track if calories_left > kcal_needed else CardStatus.neutral,
        ),
    ]
    return build_analysis(QuestionId.protein_remaining, lines, fallback, cards)
