"""Nutrient deficiency detection.

Turns a week of nutrient intake into at most three ranked alerts.
Three gates must pass before any nutrient is evaluated: enough days of
app use, a recent log, and enough logged days in the trailing week.
"""

from typing import Final

from nutrition_insights.core.daily_insights.enums import AlertSeverity
from nutrition_insights.core.daily_insights.models import (
    DeficiencyCheck,
    DeficiencyResult,
    MicronutrientSummary,
    NutrientIntakeHistory,
)
from nutrition_insights.core.daily_insights.nutrient_catalog import (
    NUTRIENT_CONFIGS,
    NutrientConfig,
    get_alertable_nutrients,
    get_food_suggestions,
)
from nutrition_insights.logging_config import get_logger

logger = get_logger(__name__)

# Gates checked, in order, before any nutrient is evaluated.
MIN_DAYS_USING_APP: Final[int] = 7
MAX_DAYS_SINCE_LAST_LOG: Final[int] = 3
MIN_DAYS_WITH_DATA: Final[int] = 5

# A nutrient needs this many recorded days before it can alert.
MIN_NUTRIENT_DAYS: Final[int] = 5

# Percent-of-target bands. At or above NO_ALERT_PERCENT nothing is raised.
NO_ALERT_PERCENT: Final[int] = 70
WARNING_BELOW_PERCENT: Final[int] = 50
CONCERN_BELOW_PERCENT: Final[int] = 30

MAX_ALERTS: Final[int] = 3
MAX_FOOD_SUGGESTIONS: Final[int] = 4

SEVERITY_RANK: Final[dict[AlertSeverity, int]] = {
    AlertSeverity.concern: 0,
    AlertSeverity.warning: 1,
    AlertSeverity.notice: 2,
}

MESSAGE_TEMPLATES: Final[dict[int, str]] = {
    1: (
        "Your {name} intake has averaged {percent}% of the daily target over the "
        "past week. {name} is one to prioritise, and a food source or two this "
        "week can make a real difference."
    ),
    2: (
        "{name} has averaged {percent}% of the daily target this week. A few more "
        "servings of {name}-rich foods could help."
    ),
}


def alert_key(nutrient_id: str, severity: str) -> str:
    """Composite key used to match an alert against its dismissal."""
    return f"{nutrient_id}_{severity}"


def determine_severity(percent: float, tier: int) -> AlertSeverity | None:
    """Severity for a percent-of-target, or None when no alert is due.

    Tier-2 nutrients never raise notice-level alerts.
    """
    if percent >= NO_ALERT_PERCENT:
        return None
    if percent < CONCERN_BELOW_PERCENT:
        severity = AlertSeverity.concern
    elif percent < WARNING_BELOW_PERCENT:
        severity = AlertSeverity.warning
    else:
        severity = AlertSeverity.notice
    if tier == 2 and severity == AlertSeverity.notice:
        return None
    return severity


def _recorded(values: list[float | None]) -> list[float]:
    return [value for value in values if value is not None]


class DeficiencyCalculator:
    """Detects nutrient gaps from a week of intake history."""

    def passes_gates(self, history: NutrientIntakeHistory) -> bool:
        """Whether the history is trustworthy enough to alert on.

        Args:
            history: Trailing-week intake history

        Returns:
            True when all three gates pass
        """
        if history.days_using_app < MIN_DAYS_USING_APP:
            return False
        if (
            history.days_since_last_log is None
            or history.days_since_last_log > MAX_DAYS_SINCE_LAST_LOG
        ):
            return False
        return history.days_with_data >= MIN_DAYS_WITH_DATA

    def evaluate(
        self,
        history: NutrientIntakeHistory,
        dismissed_alert_ids: set[str] | frozenset[str] = frozenset(),
    ) -> DeficiencyResult:
        """Compute ranked deficiency alerts.

        Args:
            history: Trailing-week intake history
            dismissed_alert_ids: Keys (nutrientId_severity) of active dismissals

        Returns:
            DeficiencyResult with at most three checks, most severe first
        """
        if not self.passes_gates(history):
            logger.debug(
                "Deficiency gates not met",
                days_using_app=history.days_using_app,
                days_since_last_log=history.days_since_last_log,
                days_with_data=history.days_with_data,
            )
            return DeficiencyResult(checks=[], has_alerts=False)

        checks: list[DeficiencyCheck] = []
        for config in get_alertable_nutrients():
            check = self._check_nutrient(config, history)
            if check is None:
                continue
            if alert_key(check.nutrient_id, check.severity) in dismissed_alert_ids:
                continue
            checks.append(check)

        checks.sort(key=lambda check: (SEVERITY_RANK[check.severity], check.tier))
        checks = checks[:MAX_ALERTS]

        if checks:
            logger.info(
                "Deficiency alerts computed",
                alerts=[alert_key(c.nutrient_id, c.severity) for c in checks],
            )
        return DeficiencyResult(checks=checks, has_alerts=bool(checks))

    def summarize(self, history: NutrientIntakeHistory) -> list[MicronutrientSummary]:
        """Weekly coverage for every tracked nutrient with enough data.

        Unlike evaluate(), this ignores the gates, tiers and dismissals.
        """
        summaries: list[MicronutrientSummary] = []
        for config in NUTRIENT_CONFIGS:
            values = _recorded(history.daily_intake.get(config.id, []))
            if not values:
                continue
            average = sum(values) / len(values)
            summaries.append(
                MicronutrientSummary(
                    nutrient_id=config.id,
                    nutrient_name=config.name,
                    average_intake=round(average, 1),
                    rda_target=config.rda_default,
                    unit=config.unit,
                    percent_of_rda=round(average / config.rda_default * 100),
                    tier=config.tier,
                    days_with_data=len(values),
                )
            )
        return summaries

    def _check_nutrient(
        self,
        config: NutrientConfig,
        history: NutrientIntakeHistory,
    ) -> DeficiencyCheck | None:
        values = _recorded(history.daily_intake.get(config.id, []))
        if len(values) < MIN_NUTRIENT_DAYS:
            return None

        average = sum(values) / len(values)
        percent = average / config.rda_default * 100
        severity = determine_severity(percent, config.tier)
        if severity is None:
            return None

        rounded_percent = round(percent)
        return DeficiencyCheck(
            nutrient_id=config.id,
            nutrient_name=config.name,
            average_intake=round(average, 1),
            rda_target=config.rda_default,
            unit=config.unit,
            percent_of_rda=rounded_percent,
            severity=severity,
            message=MESSAGE_TEMPLATES[config.tier].format(
                name=config.name,
                percent=rounded_percent,
            ),
            food_suggestions=get_food_suggestions(config.id, MAX_FOOD_SUGGESTIONS),
            tier=config.tier,
        )
