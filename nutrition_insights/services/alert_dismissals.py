"""Nutrient alert dismissals.

A dismissal hides one alert (nutrient at one severity) for a fixed
window. Re-dismissing the same alert replaces the earlier record.
"""

from datetime import datetime, timedelta
from typing import Any

from nutrition_insights.config import settings
from nutrition_insights.core.daily_insights import AlertDismissal
from nutrition_insights.core.daily_insights.deficiency import alert_key
from nutrition_insights.logging_config import get_logger
from nutrition_insights.services.clock import Clock, utc_now

logger = get_logger(__name__)

ALERT_DISMISSALS_STATE_KEY = "alert-dismissals"


class AlertDismissalStore:
    """Persisted list of alert dismissals keyed by ``nutrientId_severity``."""

    def __init__(self, clock: Clock = utc_now, dismissal_days: int | None = None) -> None:
        self._clock = clock
        self._window = timedelta(days=dismissal_days or settings.alert_dismissal_days)
        self.dismissals: list[AlertDismissal] = []

    def dismiss(self, nutrient_id: str, severity: str) -> AlertDismissal:
        """Dismiss an alert for the configured window.

        Args:
            nutrient_id: Nutrient the alert is about
            severity: Severity the alert was shown at

        Returns:
            The stored dismissal
        """
        now = self._clock()
        key = alert_key(nutrient_id, severity)
        dismissal = AlertDismissal(
            alert_id=key,
            nutrient_id=nutrient_id,
            severity=severity,
            dismissed_at=now,
            expires_at=now + self._window,
        )
        self.dismissals = [d for d in self.dismissals if d.alert_id != key]
        self.dismissals.append(dismissal)

        logger.info(
            "Nutrient alert dismissed",
            alert_id=key,
            expires_at=dismissal.expires_at.isoformat(),
        )
        return dismissal

    def is_dismissed(
        self, nutrient_id: str, severity: str, now: datetime | None = None
    ) -> bool:
        """Whether the alert is dismissed; the expiry instant itself is expired."""
        now = now or self._clock()
        key = alert_key(nutrient_id, severity)
        return any(d.alert_id == key and now < d.expires_at for d in self.dismissals)

    def get_dismissed_alert_ids(self, now: datetime | None = None) -> frozenset[str]:
        """Keys of every dismissal still in force."""
        now = now or self._clock()
        return frozenset(d.alert_id for d in self.dismissals if now < d.expires_at)

    def clear_expired(self, now: datetime | None = None) -> int:
        """Remove dismissals whose expiry has passed.

        Returns:
            Number of dismissals removed
        """
        now = now or self._clock()
        kept = [d for d in self.dismissals if d.expires_at > now]
        removed = len(self.dismissals) - len(kept)
        self.dismissals = kept
        if removed:
            logger.info("Expired alert dismissals cleared", removed=removed)
        return removed

    def clear_all(self) -> None:
        """Remove every dismissal."""
        count = len(self.dismissals)
        self.dismissals = []
        logger.info("All alert dismissals cleared", removed=count)

    def reset(self) -> None:
        self.dismissals = []

    def to_persisted(self) -> dict[str, Any]:
        return {"dismissals": [d.model_dump(mode="json") for d in self.dismissals]}

    def load_persisted(self, payload: dict[str, Any] | None) -> None:
        """Restore dismissals from a persisted document."""
        self.reset()
        if not payload:
            return
        self.dismissals = [
            AlertDismissal.model_validate(item) for item in payload.get("dismissals", [])
        ]
