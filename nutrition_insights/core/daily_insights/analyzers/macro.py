"""Macro analyzers: macro_overview, calorie_pacing, macro_ratio, remaining_budget."""

from nutrition_insights.core.daily_insights.analyzers.common import (
    build_analysis,
    fmt,
    status_for_percent,
)
from nutrition_insights.core.daily_insights.constants import (
    CARB_KCAL_PER_GRAM,
    FAT_KCAL_PER_GRAM,
    FAT_SHARE_MAX,
    MACRO_BALANCED_PERCENT,
    OVER_TARGET_PERCENT,
    PACING_TOLERANCE_POINTS,
    PROTEIN_KCAL_PER_GRAM,
    PROTEIN_LAG_POINTS,
    PROTEIN_SHARE_MAX,
    PROTEIN_SHARE_MIN,
)
from nutrition_insights.core.daily_insights.enums import CardStatus, QuestionId
from nutrition_insights.core.daily_insights.models import (
    DailyInsightData,
    DataCard,
    QuestionAnalysis,
)


def _signed(value: float) -> str:
    return f"+{fmt(value)}" if value > 0 else fmt(value)


def analyze_macro_overview(data: DailyInsightData) -> QuestionAnalysis:
    """Compare each macro's progress against its target."""
    remaining = max(0.0, data.calorie_target - data.today_calories)
    protein_gap = max(0.0, data.protein_target - data.today_protein)

    all_balanced = all(
        percent >= MACRO_BALANCED_PERCENT
        for percent in (
            data.calorie_percent,
            data.protein_percent,
            data.carb_percent,
            data.fat_percent,
        )
    )
    protein_lagging = data.protein_percent < data.calorie_percent - PROTEIN_LAG_POINTS
    over_calories = data.calorie_percent > OVER_TARGET_PERCENT

    lines = [
        "TODAY'S MACRO PROGRESS:",
        f"Calories: {fmt(data.today_calories)} of {fmt(data.calorie_target)} ({data.calorie_percent}%)",
        f"Protein: {fmt(data.today_protein)}g of {fmt(data.protein_target)}g ({data.protein_percent}%)",
        f"Carbs: {fmt(data.today_carbs)}g of {fmt(data.carb_target)}g ({data.carb_percent}%)",
        f"Fat: {fmt(data.today_fat)}g of {fmt(data.fat_target)}g ({data.fat_percent}%)",
        f"Meals logged: {data.today_meal_count}",
        f"Remaining calories: {fmt(remaining)}",
        f"Remaining protein: {fmt(protein_gap)}g",
        "",
        "STATUS FLAGS:",
    ]
    if all_balanced:
        lines.append("All macros above 80%, well balanced.")
    if protein_lagging:
        lines.append(
            "Protein is lagging behind calories by "
            f"{data.calorie_percent - data.protein_percent} percentage points."
        )
    if over_calories:
        lines.append("Calories are above target.")
    if not (all_balanced or protein_lagging or over_calories):
        lines.append("No flags.")

    if protein_lagging:
        fallback = (
            f"Protein is at {data.protein_percent}% while calories are at "
            f"{data.calorie_percent}%. A protein-rich choice for your next meal "
            "could help balance things out."
        )
    elif all_balanced:
        fallback = (
            "All your macros are tracking above 80% of target today, "
            "well balanced across the board."
        )
    else:
        tail = f"{fmt(remaining)} calories remaining." if remaining > 0 else "Target reached."
        fallback = (
            f"Calories at {data.calorie_percent}%, protein at "
            f"{data.protein_percent}%. {tail}"
        )

    cards = [
        DataCard(
            label="Calories",
            value=f"{data.calorie_percent}%",
            sub_value=f"{fmt(data.today_calories)} / {fmt(data.calorie_target)}",
            percent=data.calorie_percent,
            status=status_for_percent(data.calorie_percent),
        ),
        DataCard(
            label="Protein",
            value=f"{data.protein_percent}%",
            sub_value=f"{fmt(data.today_protein)}g / {fmt(data.protein_target)}g",
            percent=data.protein_percent,
            status=status_for_percent(data.protein_percent),
        ),
        DataCard(
            label="Carbs",
            value=f"{data.carb_percent}%",
            sub_value=f"{fmt(data.today_carbs)}g / {fmt(data.carb_target)}g",
            percent=data.carb_percent,
            status=status_for_percent(data.carb_percent),
        ),
        DataCard(
            label="Fat",
            value=f"{data.fat_percent}%",
            sub_value=f"{fmt(data.today_fat)}g / {fmt(data.fat_target)}g",
            percent=data.fat_percent,
            status=status_for_percent(data.fat_percent),
        ),
    ]
    return build_analysis(QuestionId.macro_overview, lines, fallback, cards)


def analyze_calorie_pacing(data: DailyInsightData) -> QuestionAnalysis:
    """Compare calorie progress with how far through the waking day we are."""
    expected = round(data.day_progress * 100)
    deviation = data.calorie_percent - expected
    remaining = max(0.0, data.calorie_target - data.today_calories)

    if deviation > PACING_TOLERANCE_POINTS:
        pacing = "ahead of pace"
    elif deviation < -PACING_TOLERANCE_POINTS:
        pacing = "below pace"
    else:
        pacing = "on pace"

    lines = [
        "CALORIE PACING:",
        f"Current: {fmt(data.today_calories)} of {fmt(data.calorie_target)} ({data.calorie_percent}%)",
        f"Expected at this time of day: ~{expected}%",
        f"Deviation: {_signed(deviation)} percentage points ({pacing})",
        f"Day progress: {expected}% (hour {data.current_hour} of waking hours)",
        f"Remaining: {fmt(remaining)} calories",
    ]

    if pacing == "on pace":
        fallback = (
            f"You're pacing well, {data.calorie_percent}% of calories at "
            f"{expected}% through the day."
        )
    elif pacing == "ahead of pace":
        fallback = (
            f"You're a bit ahead of pace at {data.calorie_percent}% with the day "
            f"{expected}% through. Consider lighter options for remaining meals."
        )
    else:
        fallback = (
            f"You're pacing below expected at {data.calorie_percent}% with the day "
            f"{expected}% through, and {fmt(remaining)} calories are still available."
        )

    cards = [
        DataCard(
            label="Current",
            value=f"{data.calorie_percent}%",
            sub_value=f"{fmt(data.today_calories)} cal",
            status=status_for_percent(data.calorie_percent),
        ),
        DataCard(label="Expected", value=f"{expected}%", sub_value="at this time"),
        DataCard(
            label="Remaining",
            value=fmt(remaining),
            sub_value="calories left",
            status=CardStatus.neutral if remaining > 0 else CardStatus.on_track,
        ),
    ]
    return build_analysis(QuestionId.calorie_pacing, lines, fallback, cards)


def analyze_macro_ratio(data: DailyInsightData) -> QuestionAnalysis:
    """Split today's calories into protein, carb and fat shares."""
    protein_kcal = data.today_protein * PROTEIN_KCAL_PER_GRAM
    carb_kcal = data.today_carbs * CARB_KCAL_PER_GRAM
    fat_kcal = data.today_fat * FAT_KCAL_PER_GRAM
    total = max(1.0, protein_kcal + carb_kcal + fat_kcal)

    protein_share = round(protein_kcal / total * 100)
    carb_share = round(carb_kcal / total * 100)
    fat_share = round(fat_kcal / total * 100)

    protein_balanced = PROTEIN_SHARE_MIN <= protein_share <= PROTEIN_SHARE_MAX
    fat_balanced = fat_share <= FAT_SHARE_MAX

    lines = [
        "MACRO CALORIE SPLIT:",
        f"Protein: {protein_share}% of calories ({fmt(data.today_protein)}g x 4 = {fmt(protein_kcal)} cal)",
        f"Carbs: {carb_share}% of calories ({fmt(data.today_carbs)}g x 4 = {fmt(carb_kcal)} cal)",
        f"Fat: {fat_share}% of calories ({fmt(data.today_fat)}g x 9 = {fmt(fat_kcal)} cal)",
        f"Total calories: {fmt(data.today_calories)}",
    ]

    split = f"{carb_share}% carbs, {protein_share}% protein, {fat_share}% fat"
    if protein_balanced and fat_balanced:
        fallback = f"Today's macro split is {split}, nicely balanced."
    elif protein_share < PROTEIN_SHARE_MIN:
        fallback = f"Today's split: {split}. Room to boost protein share."
    elif not fat_balanced:
        fallback = f"Today's split: {split}. Fat proportion is on the higher side."
    else:
        fallback = f"Today's split: {split}. A slight adjustment could improve balance."

    cards = [
        DataCard(
            label="Protein",
            value=f"{protein_share}%",
            sub_value=f"{fmt(data.today_protein)}g",
            status=CardStatus.on_track if protein_balanced else CardStatus.neutral,
        ),
        DataCard(label="Carbs", value=f"{carb_share}%", sub_value=f"{fmt(data.today_carbs)}g"),
        DataCard(
            label="Fat",
            value=f"{fat_share}%",
            sub_value=f"{fmt(data.today_fat)}g",
            status=CardStatus.on_track if fat_balanced else CardStatus.neutral,
        ),
    ]
    return build_analysis(QuestionId.macro_ratio, lines, fallback, cards)


def analyze_remaining_budget(data: DailyInsightData) -> QuestionAnalysis:
    """Show what is left of the calorie budget once protein is prioritised."""
    remaining = max(0.0, data.calorie_target - data.today_calories)
    protein_gap = max(0.0, data.protein_target - data.today_protein)
    protein_kcal_needed = protein_gap * PROTEIN_KCAL_PER_GRAM
    after_protein = max(0.0, remaining - protein_kcal_needed)

    lines = [
        "REMAINING BUDGET:",
        f"Calories remaining: {fmt(remaining)}",
        f"Protein remaining: {fmt(protein_gap)}g ({fmt(protein_kcal_needed)} cal from protein)",
        f"Calories after protein priority: {fmt(after_protein)}",
        f"Current totals: {fmt(data.today_calories)} cal, {fmt(data.today_protein)}g protein",
    ]

    if protein_gap > 30:
        fallback = (
            f"You have {fmt(remaining)} calories remaining with {fmt(protein_gap)}g "
            "of protein still to go. A protein-focused meal could cover both."
        )
    elif protein_gap > 0:
        fallback = (
            f"{fmt(remaining)} calories remaining today. "
            f"{fmt(protein_gap)}g protein left to hit your target."
        )
    else:
        fallback = f"{fmt(remaining)} calories remaining today. Protein target already reached."

    if remaining > 300:
        calorie_status = CardStatus.neutral
    elif remaining > 0:
        calorie_status = CardStatus.on_track
    else:
        calorie_status = CardStatus.ahead

    if protein_gap > 40:
        protein_status = CardStatus.neutral
    elif protein_gap > 0:
        protein_status = CardStatus.on_track
    else:
        protein_status = CardStatus.ahead

    cards = [
        DataCard(label="Cal Left", value=fmt(remaining), sub_value="calories", status=calorie_status),
        DataCard(
            label="Pro Left",
            value=f"{fmt(protein_gap)}g",
            sub_value="protein",
            status=protein_status,
        ),
    ]
    return build_analysis(QuestionId.remaining_budget, lines, fallback, cards)
