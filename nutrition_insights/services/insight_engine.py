"""Insight engine wiring.

Builds the stores and services once per process and keeps their
persisted state in sync with the database.
"""

from nutrition_insights.core.daily_insights import (
    AlertDismissal,
    DeficiencyCalculator,
    DeficiencyResult,
    UnknownNutrientError,
)
from nutrition_insights.core.daily_insights.models import MicronutrientSummary
from nutrition_insights.core.daily_insights.nutrient_catalog import get_nutrient
from nutrition_insights.database import get_session_maker
from nutrition_insights.logging_config import get_logger
from nutrition_insights.schemas.nutrition import NutritionDaySubmission
from nutrition_insights.services.alert_dismissals import (
    ALERT_DISMISSALS_STATE_KEY,
    AlertDismissalStore,
)
from nutrition_insights.services.clock import Clock, local_now, utc_now
from nutrition_insights.services.daily_insights import DailyInsightService
from nutrition_insights.services.data_collector import DailyDataCollector
from nutrition_insights.services.insight_store import (
    DAILY_INSIGHT_STATE_KEY,
    DailyInsightStore,
)
from nutrition_insights.services.legacy_generator import LegacyInsightsService
from nutrition_insights.services.legacy_insights import (
    LEGACY_INSIGHTS_STATE_KEY,
    LegacyInsightsStore,
)
from nutrition_insights.services.model_provider import LocalModelProvider, ModelProvider
from nutrition_insights.services.nutrition_source import SubmittedNutritionSource
from nutrition_insights.services.state_repository import StateRepository

logger = get_logger(__name__)


class InsightEngine:
    """Owns every store and service behind the HTTP API."""

    def __init__(
        self,
        source: SubmittedNutritionSource | None = None,
        provider: ModelProvider | None = None,
        repository: StateRepository | None = None,
        clock: Clock = local_now,
        utc_clock: Clock = utc_now,
    ) -> None:
        self.source = source or SubmittedNutritionSource()
        self.provider = provider or LocalModelProvider()
        self.repository = repository

        self.dismissals = AlertDismissalStore(clock=utc_clock)
        self.daily_store = DailyInsightStore(clock=clock)
        self.legacy_store = LegacyInsightsStore(clock=clock)

        self.calculator = DeficiencyCalculator()
        self.collector = DailyDataCollector(
            self.source, self.dismissals, self.calculator, clock=clock
        )
        self.daily = DailyInsightService(self.daily_store, self.collector, self.provider)
        self.legacy = LegacyInsightsService(self.legacy_store, self.daily, self.provider)

    def _persisted_stores(self):
        return (
            (DAILY_INSIGHT_STATE_KEY, self.daily_store),
            (ALERT_DISMISSALS_STATE_KEY, self.dismissals),
            (LEGACY_INSIGHTS_STATE_KEY, self.legacy_store),
        )

    async def load_state(self) -> None:
        """Restore every persisted store; transient flags start fresh."""
        if self.repository is None:
            return
        for key, store in self._persisted_stores():
            store.load_persisted(await self.repository.load(key))
        logger.info(
            "Insight engine state loaded",
            has_daily_cache=self.daily_store.cache is not None,
            dismissals=len(self.dismissals.dismissals),
        )

    async def save_state(self) -> None:
        """Write every persisted store."""
        if self.repository is None:
            return
        for key, store in self._persisted_stores():
            payload = store.to_persisted()
            if payload is None:
                await self.repository.delete(key)
            else:
                await self.repository.save(key, payload)

    async def submit_day(self, submission: NutritionDaySubmission) -> None:
        """Record a day from the client and rebuild today's snapshot."""
        self.source.submit(submission)
        self.daily.invalidate_cache()
        await self.daily.refresh_data(force=True)
        await self.save_state()

    async def get_alerts(self) -> DeficiencyResult:
        """Current deficiency alerts, honoring dismissals."""
        history = await self.collector.collect_nutrient_history()
        return self.calculator.evaluate(history, self.dismissals.get_dismissed_alert_ids())

    async def get_micronutrient_summary(self) -> list[MicronutrientSummary]:
        history = await self.collector.collect_nutrient_history()
        return self.calculator.summarize(history)

    async def dismiss_alert(self, nutrient_id: str, severity: str) -> AlertDismissal:
        """Dismiss a nutrient alert and rebuild the snapshot's alerts.

        Raises:
            UnknownNutrientError: If the nutrient is not tracked
        """
        if get_nutrient(nutrient_id) is None:
            raise UnknownNutrientError(nutrient_id)
        dismissal = self.dismissals.dismiss(nutrient_id, severity)
        await self.daily.refresh_data(force=True)
        await self.save_state()
        return dismissal

    async def sweep_expired_dismissals(self) -> int:
        removed = self.dismissals.clear_expired()
        if removed:
            await self.save_state()
        return removed

    async def refresh_if_stale(self) -> bool:
        """Refresh the snapshot when its TTL or date has rolled over.

        Returns:
            True if a refresh ran
        """
        if not self.daily_store.should_refresh_data():
            return False
        await self.daily.refresh_data()
        await self.save_state()
        return True

    async def shutdown(self) -> None:
        """Persist state and release the model."""
        await self.save_state()
        await self.provider.unload()


# Process-wide engine instance
_engine: InsightEngine | None = None


def get_insight_engine() -> InsightEngine:
    """Get or create the process-wide engine.

    Also used as the FastAPI dependency for every router.
    """
    global _engine
    if _engine is None:
        _engine = InsightEngine(repository=StateRepository(get_session_maker()))
    return _engine


def set_insight_engine(engine: InsightEngine | None) -> None:
    """Replace the process-wide engine."""
    global _engine
    _engine = engine
