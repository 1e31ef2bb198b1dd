"""Hydration analyzers: hydration_status, hydration_pacing."""

from nutrition_insights.core.daily_insights.analyzers.common import (
    build_analysis,
    fmt,
    status_for_percent,
)
from nutrition_insights.core.daily_insights.constants import PACING_TOLERANCE_POINTS
from nutrition_insights.core.daily_insights.enums import CardStatus, QuestionId
from nutrition_insights.core.daily_insights.models import (
    DailyInsightData,
    DataCard,
    QuestionAnalysis,
)


def analyze_hydration_status(data: DailyInsightData) -> QuestionAnalysis:
    """Water logged today against the water goal."""
    remaining = max(0.0, data.water_target - data.today_water)

    lines = [
        "HYDRATION STATUS:",
        f"Water today: {fmt(data.today_water)} ml of {fmt(data.water_target)} ml ({data.water_percent}%)",
        f"Remaining: {fmt(remaining)} ml",
        f"Hour of day: {data.current_hour}",
    ]

    if data.water_target <= 0:
        fallback = "Set a water goal to start tracking your hydration."
    elif data.water_percent >= 100:
        fallback = (
            f"You've reached your water goal with {fmt(data.today_water)} ml today. "
            "Nice work staying hydrated."
        )
    elif data.water_percent >= 50:
        fallback = (
            f"Water is at {data.water_percent}% of your goal, {fmt(remaining)} ml to go."
        )
    else:
        fallback = (
            f"Water is at {data.water_percent}% of your goal so far. A glass with your "
            f"next meal is an easy way to chip away at the remaining {fmt(remaining)} ml."
        )

    cards = [
        DataCard(
            label="Water",
            value=f"{data.water_percent}%",
            sub_value=f"{fmt(data.today_water)} / {fmt(data.water_target)} ml",
            percent=data.water_percent,
            status=status_for_percent(data.water_percent),
        ),
        DataCard(
            label="Remaining",
            value=f"{fmt(remaining)} ml",
            sub_value="to goal",
            status=CardStatus.on_track if remaining == 0 else CardStatus.neutral,
        ),
    ]
    return build_analysis(QuestionId.hydration_status, lines, fallback, cards)


def analyze_hydration_pacing(data: DailyInsightData) -> QuestionAnalysis:
    """Water progress compared with how far through the waking day we are."""
    expected = round(data.day_progress * 100)
    deviation = data.water_percent - expected
    expected_ml = data.water_target * data.day_progress

    if deviation > PACING_TOLERANCE_POINTS:
        pacing = "ahead of pace"
    elif deviation < -PACING_TOLERANCE_POINTS:
        pacing = "below pace"
    else:
        pacing = "on pace"

    lines = [
        "HYDRATION PACING:",
        f"Current: {fmt(data.today_water)} ml ({data.water_percent}%)",
        f"Expected at this time of day: ~{expected}% ({fmt(expected_ml)} ml)",
        f"Deviation: {deviation:+d} percentage points ({pacing})",
        f"Hour of day: {data.current_hour}",
    ]

    if pacing == "below pace":
        fallback = (
            f"Water is at {data.water_percent}% with the day {expected}% through. "
            "Try picking up the pace with a glass every hour or two to get back "
            "on track."
        )
    elif pacing == "ahead of pace":
        fallback = (
            f"Water is at {data.water_percent}% with the day {expected}% through, "
            "ahead of pace."
        )
    else:
        fallback = (
            f"Your water intake is right on pace at {data.water_percent}% with the day "
            f"{expected}% through."
        )

    cards = [
        DataCard(
            label="Current",
            value=f"{data.water_percent}%",
            sub_value=f"{fmt(data.today_water)} ml",
            status=status_for_percent(data.water_percent),
        ),
        DataCard(label="Expected", value=f"{expected}%", sub_value="at this time"),
    ]
    return build_analysis(QuestionId.hydration_pacing, lines, fallback, cards)
