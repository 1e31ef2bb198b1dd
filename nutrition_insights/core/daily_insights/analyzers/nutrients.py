"""Nutrient analyzers: nutrient_overview, fiber_check, micronutrient_status.

The overview and micronutrient analyzers read the deficiency alerts
already attached to the snapshot; they never recompute them.
"""

from nutrition_insights.core.daily_insights.analyzers.common import (
    build_analysis,
    fmt,
    percent_of,
    status_for_percent,
)
from nutrition_insights.core.daily_insights.constants import FIBER_TARGET_GRAMS
from nutrition_insights.core.daily_insights.enums import AlertSeverity, CardStatus, QuestionId
from nutrition_insights.core.daily_insights.models import (
    DailyInsightData,
    DataCard,
    DeficiencyCheck,
    QuestionAnalysis,
)

MAX_FOOD_SUGGESTIONS_SHOWN = 2

# Neutral wording for severities in text the model may echo back.
SEVERITY_WORDING: dict[AlertSeverity, str] = {
    AlertSeverity.notice: "mild gap",
    AlertSeverity.warning: "moderate gap",
    AlertSeverity.concern: "significant gap",
}


def _join_names(names: list[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return f"{', '.join(names[:-1])} and {names[-1]}"


def _alert_card(alert: DeficiencyCheck) -> DataCard:
    return DataCard(
        label=alert.nutrient_name,
        value=f"{alert.percent_of_rda}%",
        sub_value=f"{fmt(alert.average_intake)} / {fmt(alert.rda_target)} {alert.unit}",
        percent=alert.percent_of_rda,
        status=CardStatus.behind if alert.severity == AlertSeverity.concern else CardStatus.neutral,
    )


def _alert_line(alert: DeficiencyCheck) -> str:
    return (
        f"{alert.nutrient_name}: {fmt(alert.average_intake)} {alert.unit}/day avg, "
        f"{alert.percent_of_rda}% of {fmt(alert.rda_target)} {alert.unit} "
        f"({SEVERITY_WORDING[alert.severity]}, tier {alert.tier})"
    )


def analyze_nutrient_overview(data: DailyInsightData) -> QuestionAnalysis:
    """Summarise the top nutrient alert and where to find more of it."""
    alerts = data.active_alerts

    lines = ["NUTRIENT OVERVIEW (7-day averages):"]
    lines.extend(_alert_line(alert) for alert in alerts)
    if not alerts:
        lines.append("No nutrient alerts active.")

    if not alerts:
        fallback = "No nutrient gaps stand out from the past week. Keep up the variety."
    else:
        top = alerts[0]
        fallback = (
            f"{top.nutrient_name} has averaged {top.percent_of_rda}% of its daily "
            "target this week."
        )
        foods = top.food_suggestions[:MAX_FOOD_SUGGESTIONS_SHOWN]
        if foods:
            fallback += f" Foods like {_join_names(foods)} can help bring it up."
        if len(alerts) > 1:
            others = len(alerts) - 1
            fallback += (
                f" {others} other nutrient{'s' if others > 1 else ''} could use a "
                "little attention too."
            )

    cards = [_alert_card(alert) for alert in alerts]
    if not cards:
        cards.append(
            DataCard(label="Alerts", value="0", sub_value="active", status=CardStatus.on_track)
        )
    return build_analysis(QuestionId.nutrient_overview, lines, fallback, cards)


def analyze_fiber_check(data: DailyInsightData) -> QuestionAnalysis:
    """Fiber eaten today against the daily fiber target."""
    fiber_percent = percent_of(data.today_fiber, FIBER_TARGET_GRAMS)
    remaining = max(0.0, FIBER_TARGET_GRAMS - data.today_fiber)

    lines = [
        "FIBER CHECK:",
        f"Fiber today: {fmt(data.today_fiber)}g of {FIBER_TARGET_GRAMS}g ({fiber_percent}%)",
        f"Remaining: {fmt(remaining)}g",
        f"Meals logged: {data.today_meal_count}",
    ]

    if data.today_fiber <= 0:
        fallback = (
            "No fiber tracked yet today. Whole grains, beans and vegetables are easy "
            "ways to add some."
        )
    elif fiber_percent >= 80:
        fallback = (
            f"Fiber is tracking well at {fmt(data.today_fiber)}g, {fiber_percent}% of the "
            f"{FIBER_TARGET_GRAMS}g daily target."
        )
    else:
        fallback = (
            f"Fiber is at {fmt(data.today_fiber)}g so far, {fiber_percent}% of the "
            f"{FIBER_TARGET_GRAMS}g daily target. Beans, berries or whole grains can "
            "help close the gap."
        )

    cards = [
        DataCard(
            label="Fiber",
            value=f"{fmt(data.today_fiber)}g",
            sub_value=f"of {FIBER_TARGET_GRAMS}g",
            percent=fiber_percent,
            status=status_for_percent(fiber_percent),
        ),
        DataCard(label="Remaining", value=f"{fmt(remaining)}g", sub_value="to target"),
    ]
    return build_analysis(QuestionId.fiber_check, lines, fallback, cards)


def analyze_micronutrient_status(data: DailyInsightData) -> QuestionAnalysis:
    """Overall micronutrient picture, leading with tier-1 nutrients."""
    alerts = data.active_alerts
    tier_one = [alert for alert in alerts if alert.tier == 1]
    concerns = [alert for alert in alerts if alert.severity == AlertSeverity.concern]

    lines = [
        "MICRONUTRIENT STATUS:",
        f"Days using app: {data.days_using_app}",
        f"Active alerts: {len(alerts)}",
        f"Priority (tier 1) alerts: {len(tier_one)}",
        f"Lowest-coverage alerts: {len(concerns)}",
    ]
    lines.extend(_alert_line(alert) for alert in alerts)

    if not alerts:
        fallback = "Your micronutrient picture looks steady, with no gaps flagged this week."
    else:
        lead = tier_one or alerts
        names = _join_names([alert.nutrient_name for alert in lead])
        top = lead[0]
        fallback = (
            f"{names} {'stands' if len(lead) == 1 else 'stand'} out this week, with "
            f"{top.nutrient_name} at {top.percent_of_rda}% of its daily target."
        )
        if top.food_suggestions:
            fallback += (
                f" Adding {_join_names(top.food_suggestions[:MAX_FOOD_SUGGESTIONS_SHOWN])} "
                "a few times this week would help."
            )

    cards = [_alert_card(alert) for alert in alerts]
    if not cards:
        cards.append(
            DataCard(label="Alerts", value="0", sub_value="active", status=CardStatus.on_track)
        )
    return build_analysis(QuestionId.micronutrient_status, lines, fallback, cards)
