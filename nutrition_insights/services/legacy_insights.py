"""Legacy insights cache.

The original insights screen shows up to three cards that are kept for
a few hours. Only the cards and the feature flag survive a restart; the
generation flags, model status and progress are transient.
"""

from datetime import datetime, timedelta
from typing import Any

from nutrition_insights.config import settings
from nutrition_insights.core.daily_insights import DownloadProgress, InsightSource, ModelStatus
from nutrition_insights.core.daily_insights.models import LegacyInsight, LegacyInsightsCache
from nutrition_insights.logging_config import get_logger
from nutrition_insights.services.clock import Clock, day_key, local_now

logger = get_logger(__name__)

LEGACY_INSIGHTS_STATE_KEY = "insights-storage"


class LegacyInsightsStore:
    """State container for the legacy insights screen."""

    def __init__(self, clock: Clock = local_now, ttl_hours: int | None = None) -> None:
        self._clock = clock
        self._ttl = timedelta(hours=ttl_hours or settings.legacy_insights_ttl_hours)
        self.cached_insights: LegacyInsightsCache | None = None
        self.llm_enabled = True
        self.reset_transient()

    def reset_transient(self) -> None:
        self.is_generating = False
        self.generation_error: str | None = None
        self.llm_status = ModelStatus.not_downloaded
        self.download_progress: DownloadProgress | None = None

    def reset(self) -> None:
        """Back to a fresh install: no cards, feature enabled."""
        self.cached_insights = None
        self.llm_enabled = True
        self.reset_transient()

    def should_regenerate(self, now: datetime | None = None) -> bool:
        """Whether the cards are missing, from another day, or past their window.

        The ``valid_until`` instant itself is still valid.
        """
        now = now or self._clock()
        cached = self.cached_insights
        if cached is None:
            return True
        if cached.date != day_key(now):
            return True
        return now > cached.valid_until

    def set_insights(
        self, insights: list[LegacyInsight], source: InsightSource
    ) -> LegacyInsightsCache:
        """Cache a new set of cards for the configured window."""
        now = self._clock()
        self.cached_insights = LegacyInsightsCache(
            insights=insights,
            generated_at=now,
            valid_until=now + self._ttl,
            source=source,
            date=day_key(now),
        )
        self.is_generating = False
        logger.info(
            "Legacy insights cached",
            count=len(insights),
            source=source,
            valid_until=self.cached_insights.valid_until.isoformat(),
        )
        return self.cached_insights

    def set_llm_status(self, status: ModelStatus) -> None:
        self.llm_status = status

    def set_download_progress(self, progress: DownloadProgress | None) -> None:
        self.download_progress = progress

    def set_is_generating(self, is_generating: bool) -> None:
        self.is_generating = is_generating

    def set_generation_error(self, error: str | None) -> None:
        """Record a generation error; an error always ends generation."""
        self.generation_error = error
        self.is_generating = False
        if error:
            logger.warning("Legacy insight generation failed", error=error)

    def set_llm_enabled(self, enabled: bool) -> None:
        self.llm_enabled = enabled
        logger.info("Legacy model insights toggled", enabled=enabled)

    def clear_insights(self) -> None:
        self.cached_insights = None
        logger.info("Legacy insights cleared")

    def to_persisted(self) -> dict[str, Any]:
        return {
            "cached_insights": (
                self.cached_insights.model_dump(mode="json")
                if self.cached_insights is not None
                else None
            ),
            "llm_enabled": self.llm_enabled,
        }

    def load_persisted(self, payload: dict[str, Any] | None) -> None:
        """Restore the cards and the feature flag."""
        self.reset()
        if not payload:
            return
        if payload.get("cached_insights"):
            self.cached_insights = LegacyInsightsCache.model_validate(
                payload["cached_insights"]
            )
        self.llm_enabled = bool(payload.get("llm_enabled", True))
