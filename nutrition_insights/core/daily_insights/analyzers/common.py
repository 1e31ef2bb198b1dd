"""Formatting helpers shared by the analyzers."""

from datetime import UTC, datetime

from nutrition_insights.core.daily_insights.enums import CardStatus, QuestionId
from nutrition_insights.core.daily_insights.models import DataCard, QuestionAnalysis


def fmt(value: float) -> str:
    """Render a quantity without a trailing '.0' for whole numbers."""
    rounded = round(value, 1)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.1f}"


def status_for_percent(percent: float) -> CardStatus:
    """Map a percent-of-target to a card status.

    85-115 is on track, above 115 ahead, below 50 behind.
    """
    if 85 <= percent <= 115:
        return CardStatus.on_track
    if percent > 115:
        return CardStatus.ahead
    if percent < 50:
        return CardStatus.behind
    return CardStatus.neutral


def percent_of(value: float, target: float) -> int:
    """Rounded percent of a target, 0 when there is no target."""
    if target <= 0:
        return 0
    return round(value / target * 100)


def build_analysis(
    question_id: QuestionId,
    data_lines: list[str],
    fallback_text: str,
    data_cards: list[DataCard],
) -> QuestionAnalysis:
    """Assemble a QuestionAnalysis stamped with the current time."""
    return QuestionAnalysis(
        question_id=question_id,
        data_block="\n".join(data_lines),
        fallback_text=fallback_text,
        data_cards=data_cards,
        computed_at=datetime.now(UTC),
    )
