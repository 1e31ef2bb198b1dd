"""Trend analyzers: vs_weekly_avg, consistency_check, trend_direction."""

from nutrition_insights.core.daily_insights.analyzers.common import (
    build_analysis,
    fmt,
)
from nutrition_insights.core.daily_insights.constants import (
    TREND_STEADY_PERCENT,
    TREND_WINDOW_DAYS,
    WEEKLY_CONSISTENT_PERCENT,
)
from nutrition_insights.core.daily_insights.enums import CardStatus, QuestionId, UserGoal
from nutrition_insights.core.daily_insights.models import (
    DailyInsightData,
    DataCard,
    QuestionAnalysis,
)

GOAL_CONTEXT: dict[UserGoal, str] = {
    UserGoal.lose: "your fat loss goal",
    UserGoal.gain: "your muscle gain goal",
    UserGoal.maintain: "maintenance",
}

GOAL_DIRECTION: dict[UserGoal, str] = {
    UserGoal.lose: "downward",
    UserGoal.gain: "upward",
    UserGoal.maintain: "steady",
}


def _signed_int(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


def analyze_vs_weekly_avg(data: DailyInsightData) -> QuestionAnalysis:
    """Today's intake against the trailing seven-day average."""
    calorie_diff = data.today_calories - data.avg_calories_7d
    calorie_diff_pct = (
        round(calorie_diff / data.avg_calories_7d * 100) if data.avg_calories_7d > 0 else 0
    )
    protein_diff = data.today_protein - data.avg_protein_7d
    consistent = abs(calorie_diff_pct) <= WEEKLY_CONSISTENT_PERCENT

    lines = [
        "TODAY vs 7-DAY AVERAGE:",
        (
            f"Calories today: {fmt(data.today_calories)} | 7-day avg: {fmt(data.avg_calories_7d)} "
            f"({'+' if calorie_diff >= 0 else ''}{fmt(calorie_diff)}, {_signed_int(calorie_diff_pct)}%)"
        ),
        (
            f"Protein today: {fmt(data.today_protein)}g | 7-day avg: {fmt(data.avg_protein_7d)}g "
            f"({'+' if protein_diff >= 0 else ''}{fmt(protein_diff)}g)"
        ),
        f"Calorie target: {fmt(data.calorie_target)}",
    ]

    average = fmt(data.avg_calories_7d)
    if consistent:
        fallback = (
            f"Today is tracking close to your 7-day average of {average} calories, "
            "a consistent day."
        )
    elif calorie_diff > 0:
        fallback = (
            f"Today is running {abs(calorie_diff_pct)}% above your 7-day average of "
            f"{average} calories."
        )
    else:
        fallback = (
            f"Today is running {abs(calorie_diff_pct)}% below your 7-day average of "
            f"{average} calories."
        )

    cards = [
        DataCard(label="Today", value=fmt(data.today_calories), sub_value="calories"),
        DataCard(label="7-Day Avg", value=average, sub_value="calories"),
        DataCard(
            label="Difference",
            value=f"{_signed_int(calorie_diff_pct)}%",
            sub_value=f"{fmt(abs(calorie_diff))} cal",
            status=CardStatus.on_track if consistent else CardStatus.neutral,
        ),
    ]
    return build_analysis(QuestionId.vs_weekly_avg, lines, fallback, cards)


def analyze_consistency_check(data: DailyInsightData) -> QuestionAnalysis:
    """Logging consistency over the trailing week."""
    logged_days = sum(1 for day in data.weekly_daily_totals if day.logged)
    total_days = len(data.weekly_daily_totals)

    lines = [
        "CONSISTENCY CHECK:",
        f"Days logged this week: {logged_days} of {total_days}",
        f"Logging streak: {data.logging_streak} days",
        f"Calorie streak: {data.calorie_streak} of 7 days within target",
        f"Days using app: {data.days_using_app}",
    ]

    if data.logging_streak >= 7:
        fallback = (
            f"{data.logging_streak}-day logging streak. Your data is getting more "
            "valuable with each day of consistent tracking."
        )
    elif logged_days >= 5:
        fallback = f"{logged_days} of {total_days} days logged this week, solid consistency."
    else:
        fallback = (
            f"{logged_days} of {total_days} days logged this week. More consistent "
            "tracking helps surface more accurate patterns."
        )

    if logged_days >= 5:
        week_status = CardStatus.on_track
    elif logged_days < 3:
        week_status = CardStatus.behind
    else:
        week_status = CardStatus.neutral

    cards = [
        DataCard(
            label="This Week",
            value=f"{logged_days}/{total_days}",
            sub_value="days logged",
            status=week_status,
        ),
        DataCard(
            label="Streak",
            value=str(data.logging_streak),
            sub_value="days",
            status=CardStatus.on_track if data.logging_streak >= 7 else CardStatus.neutral,
        ),
        DataCard(
            label="On Target",
            value=str(data.calorie_streak),
            sub_value="of 7 days",
            status=CardStatus.on_track if data.calorie_streak >= 4 else CardStatus.neutral,
        ),
    ]
    return build_analysis(QuestionId.consistency_check, lines, fallback, cards)


def analyze_trend_direction(data: DailyInsightData) -> QuestionAnalysis:
    """Direction of calorie intake across the logged days of the week.

    Logged days are sorted oldest first; the mean of the latest three is
    compared with the mean of the earliest three. The user's goal only
    colours the wording, never the computed direction.
    """
    logged = sorted((day for day in data.weekly_daily_totals if day.logged), key=lambda d: d.date)
    recent = logged[-TREND_WINDOW_DAYS:]
    earlier = logged[:TREND_WINDOW_DAYS]

    recent_avg = round(sum(d.calories for d in recent) / len(recent)) if recent else 0
    earlier_avg = round(sum(d.calories for d in earlier) / len(earlier)) if earlier else 0
    trend_pct = round((recent_avg - earlier_avg) / earlier_avg * 100) if earlier_avg > 0 else 0

    if trend_pct > TREND_STEADY_PERCENT:
        direction = "upward"
    elif trend_pct < -TREND_STEADY_PERCENT:
        direction = "downward"
    else:
        direction = "steady"

    goal_context = GOAL_CONTEXT[data.user_goal]
    aligned = GOAL_DIRECTION[data.user_goal] == direction

    lines = [
        "TREND DIRECTION:",
        f"Recent {TREND_WINDOW_DAYS}-day avg: {recent_avg} cal",
        f"Earlier {TREND_WINDOW_DAYS}-day avg: {earlier_avg} cal",
        f"Trend: {direction} ({_signed_int(trend_pct)}%)",
        f"Logged days: {len(logged)}",
        f"Goal: {data.user_goal}",
        f"Calorie target: {fmt(data.calorie_target)}",
    ]
    if aligned:
        lines.append(f"Trend aligns with {goal_context}.")

    if direction == "steady":
        fallback = (
            f"Calorie intake is holding steady this week, with a recent average of "
            f"{recent_avg} vs {earlier_avg} earlier."
        )
    elif aligned:
        fallback = (
            f"Calories are trending {direction} ({recent_avg} recently vs {earlier_avg} "
            f"earlier), aligned with {goal_context}."
        )
    else:
        fallback = (
            f"Calories are trending {direction} ({recent_avg} recently vs {earlier_avg} "
            f"earlier). Worth noting relative to {goal_context}."
        )

    cards = [
        DataCard(label="Recent", value=str(recent_avg), sub_value="cal/day (3d)"),
        DataCard(label="Earlier", value=str(earlier_avg), sub_value="cal/day (3d)"),
        DataCard(
            label="Trend",
            value=f"{_signed_int(trend_pct)}%",
            sub_value=direction,
            status=CardStatus.on_track if aligned else CardStatus.neutral,
        ),
    ]
    return build_analysis(QuestionId.trend_direction, lines, fallback, cards)
