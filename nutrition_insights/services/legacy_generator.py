"""Legacy insights generation.

Fills the legacy insights cache from today's snapshot, asking the model
when the feature is enabled and the model is ready, and falling back to
rule-based cards otherwise.
"""

from nutrition_insights.core.daily_insights import DailyInsightData, InsightSource, ModelStatus
from nutrition_insights.core.daily_insights.legacy import (
    build_legacy_prompt,
    generate_fallback_insights,
    parse_legacy_response,
)
from nutrition_insights.core.daily_insights.models import LegacyInsight, LegacyInsightsCache
from nutrition_insights.logging_config import get_logger
from nutrition_insights.services.daily_insights import DailyInsightService
from nutrition_insights.services.legacy_insights import LegacyInsightsStore
from nutrition_insights.services.model_provider import ModelProvider

logger = get_logger(__name__)

LEGACY_MAX_TOKENS = 400

LEGACY_SYSTEM_PROMPT = "Reply with a single JSON object and nothing else."


class LegacyInsightsService:
    """Produces and caches the legacy insight cards."""

    def __init__(
        self,
        store: LegacyInsightsStore,
        daily: DailyInsightService,
        provider: ModelProvider,
    ) -> None:
        self.store = store
        self.daily = daily
        self.provider = provider

    async def get_insights(self, force: bool = False) -> LegacyInsightsCache | None:
        """Cached cards, regenerated when stale.

        Args:
            force: Regenerate even when the cache is still valid

        Returns:
            The cache, or None when there is no snapshot to build from
        """
        if not force and not self.store.should_regenerate():
            return self.store.cached_insights
        if self.store.is_generating:
            return self.store.cached_insights

        await self.daily.ensure_fresh_data()
        if not self.daily.store.has_current_data():
            return self.store.cached_insights
        data = self.daily.store.cache.data

        self.store.set_is_generating(True)
        try:
            insights, source = await self._generate(data)
        finally:
            self.store.set_is_generating(False)
        return self.store.set_insights(insights, source)

    async def _generate(self, data: DailyInsightData) -> tuple[list[LegacyInsight], InsightSource]:
        if self.store.llm_enabled:
            status = await self.provider.get_status()
            self.store.set_llm_status(status)
            self.store.set_download_progress(self.provider.progress)

            if status == ModelStatus.ready:
                if not self.daily.store.begin_generation(None):
                    logger.info(
                        "Generation already in flight, using fallback cards",
                        active_question_id=self.daily.store.active_question_id,
                    )
                    return generate_fallback_insights(data), InsightSource.fallback
                try:
                    insights = await self._ask_model(data)
                finally:
                    self.daily.store.end_generation()
                if insights:
                    return insights, InsightSource.llm

        return generate_fallback_insights(data), InsightSource.fallback

    async def _ask_model(self, data: DailyInsightData) -> list[LegacyInsight]:
        if not await self.provider.initialize():
            self.store.set_generation_error("Model failed to load")
            return []
        result = await self.provider.generate(
            LEGACY_SYSTEM_PROMPT, build_legacy_prompt(data), LEGACY_MAX_TOKENS
        )
        insights = parse_legacy_response(result.text or "") if result.success else []
        if insights:
            self.store.set_generation_error(None)
            logger.info("Legacy insights generated by model", count=len(insights))
        else:
            self.store.set_generation_error(
                result.error or "Model reply contained no usable insights"
            )
        return insights
