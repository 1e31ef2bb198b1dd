"""Daily insight narrative generation.

Coordinates the snapshot cache, the analyzers and the on-device model:

1. Cache hit: a same-day narrative younger than its TTL is returned as is
2. Analyze: the question's analyzer runs against today's snapshot,
   refreshing it first when it is missing or from another day
3. Decide: without a ready model, or while another generation is in
   flight, the analyzer's fallback text is used immediately
4. Generate: the model narrates the data block; any failure or empty
   output falls back to the analyzer's text and records the error

Every path writes its narrative into the cache under today's date.
"""

from dataclasses import dataclass

from nutrition_insights.config import settings
from nutrition_insights.core.daily_insights import (
    DailyInsightCache,
    DailyInsightResponse,
    DataUnavailableError,
    DownloadProgress,
    InsightSource,
    ModelStatus,
    ModelUnavailableError,
    QuestionAnalysis,
    QuestionCategory,
    QuestionDefinition,
    QuestionId,
    ScoredQuestion,
    WidgetHeadlineData,
    analyze_question,
    build_question_prompt,
    build_system_prompt,
    compute_headline,
    get_question,
    parse_insight_response,
    score_questions,
)
from nutrition_insights.core.daily_insights.constants import DEFAULT_RESPONSE_ICON
from nutrition_insights.logging_config import generation_context, get_logger
from nutrition_insights.schemas.model import DownloadResult
from nutrition_insights.services.data_collector import DailyDataCollector
from nutrition_insights.services.insight_store import DailyInsightStore
from nutrition_insights.services.model_provider import ModelProvider

logger = get_logger(__name__)


@dataclass(frozen=True)
class GeneratedInsight:
    """A narrative plus the analysis it was produced from.

    ``analysis`` is None for cache hits, which never re-run the analyzer;
    the response carries the data cards it was written from.
    """

    response: DailyInsightResponse
    analysis: QuestionAnalysis | None = None

    @property
    def cached(self) -> bool:
        return self.analysis is None


class DailyInsightService:
    """Orchestrates snapshot refresh and narrative generation."""

    def __init__(
        self,
        store: DailyInsightStore,
        collector: DailyDataCollector,
        provider: ModelProvider,
        max_tokens: int | None = None,
    ) -> None:
        self.store = store
        self.collector = collector
        self.provider = provider
        self.max_tokens = max_tokens or settings.insight_max_tokens

    async def refresh_data(self, force: bool = False) -> DailyInsightCache | None:
        """Collect a new snapshot and rescore the catalog.

        A failed collection is logged and leaves the previous cache in
        place.

        Args:
            force: Refresh even when the cached snapshot is still fresh

        Returns:
            The current cache, which may be None if nothing was ever collected
        """
        if not force and not self.store.should_refresh_data():
            return self.store.cache

        now = self.store.now()
        try:
            data = await self.collector.collect(now)
        except Exception as e:
            logger.error(
                "Daily snapshot collection failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return self.store.cache

        scores = score_questions(data)
        headline = compute_headline(data, now)
        return self.store.apply_refresh(data, scores, headline)

    async def ensure_fresh_data(self) -> DailyInsightCache | None:
        """Refresh only when the snapshot is stale."""
        if self.store.should_refresh_data():
            return await self.refresh_data()
        return self.store.cache

    def analyze(self, question_id: QuestionId) -> QuestionAnalysis:
        """Run a question's analyzer against today's snapshot.

        Raises:
            UnknownQuestionError: If the question is not in the catalog
            DataUnavailableError: If there is no snapshot for today
        """
        get_question(question_id)
        if not self.store.has_current_data():
            raise DataUnavailableError(self.store.today())
        return analyze_question(question_id, self.store.cache.data)

    async def generate_insight(self, question_id: QuestionId) -> GeneratedInsight:
        """Answer one question.

        Args:
            question_id: Catalog question to answer

        Returns:
            GeneratedInsight with the cached or newly produced narrative

        Raises:
            UnknownQuestionError: If the question is not in the catalog
            DataUnavailableError: If no snapshot can be collected for today
        """
        question = get_question(question_id)

        cached = self.store.get_cached_response(question_id)
        if cached is not None:
            logger.debug("Narrative cache hit", question_id=question_id)
            return GeneratedInsight(response=cached)

        if not self.store.has_current_data():
            await self.refresh_data()
        analysis = self.analyze(question_id)

        status = await self.refresh_model_status()
        if status != ModelStatus.ready:
            return self._store(self._fallback(analysis), analysis)

        if not self.store.begin_generation(question_id):
            logger.info(
                "Generation already in flight, using fallback",
                question_id=question_id,
                active_question_id=self.store.active_question_id,
            )
            return self._store(self._fallback(analysis), analysis)

        error: str | None = None
        try:
            with generation_context(question_id):
                response, error = await self._narrate(question, analysis)
        finally:
            self.store.end_generation(error)

        return self._store(response, analysis)

    async def _narrate(
        self, question: QuestionDefinition, analysis: QuestionAnalysis
    ) -> tuple[DailyInsightResponse, str | None]:
        if not await self.provider.initialize():
            error = "Model failed to load"
            logger.warning(error, question_id=question.id)
            return self._fallback(analysis), error

        result = await self.provider.generate(
            build_system_prompt(),
            build_question_prompt(question.text, analysis.data_block),
            self.max_tokens,
        )
        if not result.success or not result.text:
            error = result.error or "Model returned no text"
            logger.warning(
                "Model narrative unavailable, using fallback",
                question_id=question.id,
                error=error,
            )
            return self._fallback(analysis), error

        parsed = parse_insight_response(result.text)
        if not parsed.is_usable:
            error = "Model narrative was empty after validation"
            logger.warning(error, question_id=question.id)
            return self._fallback(analysis), error

        if parsed.issues:
            logger.info(
                "Model narrative repaired",
                question_id=question.id,
                issues=[issue.kind for issue in parsed.issues],
            )
        logger.info("Model narrative generated", question_id=question.id)
        response = DailyInsightResponse(
            question_id=question.id,
            narrative=parsed.narrative,
            icon=parsed.icon,
            source=InsightSource.llm,
            generated_at=self.store.now(),
            date=self.store.today(),
            data_cards=analysis.data_cards,
        )
        return response, None

    def _fallback(self, analysis: QuestionAnalysis) -> DailyInsightResponse:
        return DailyInsightResponse(
            question_id=analysis.question_id,
            narrative=analysis.fallback_text,
            icon=DEFAULT_RESPONSE_ICON,
            source=InsightSource.fallback,
            generated_at=self.store.now(),
            date=self.store.today(),
            data_cards=analysis.data_cards,
        )

    def _store(
        self, response: DailyInsightResponse, analysis: QuestionAnalysis
    ) -> GeneratedInsight:
        self.store.put_response(response)
        return GeneratedInsight(response=response, analysis=analysis)

    def get_headline(self) -> WidgetHeadlineData:
        return self.store.get_headline()

    def get_suggested_questions(self) -> list[ScoredQuestion]:
        return self.store.get_suggested_questions()

    def get_available_questions(self) -> dict[QuestionCategory, list[ScoredQuestion]]:
        return self.store.get_available_questions()

    async def refresh_model_status(self) -> ModelStatus:
        """Read the provider's status into the store."""
        status = await self.provider.get_status()
        if status != self.store.llm_status:
            logger.info(
                "Model status changed",
                previous=self.store.llm_status,
                current=status,
            )
        self.store.set_llm_status(status)
        self.store.set_download_progress(self.provider.progress)
        return status

    async def download_model(self) -> DownloadResult:
        """Download the model, mirroring progress into the store.

        Raises:
            ModelUnavailableError: If this host cannot run the model
        """
        capability = await self.provider.check_capabilities()
        if not capability.can_run:
            self.store.set_llm_status(ModelStatus.unsupported)
            raise ModelUnavailableError(capability.reason or "Model cannot run on this host")

        def on_progress(progress: DownloadProgress) -> None:
            self.store.set_download_progress(progress)

        self.store.set_llm_status(ModelStatus.downloading)
        result = await self.provider.download_model(on_progress)
        await self.refresh_model_status()
        return result

    def cancel_download(self) -> bool:
        return self.provider.cancel_download()

    def invalidate_cache(self) -> None:
        self.store.invalidate()
