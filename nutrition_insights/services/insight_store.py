"""Daily insight cache.

Holds the day's snapshot, scores, headline and per-question narratives,
plus the transient flags the orchestrator uses while generating. Only
the cache document is persisted; flags reset on every start.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from nutrition_insights.config import settings
from nutrition_insights.core.daily_insights import (
    DailyInsightCache,
    DailyInsightData,
    DailyInsightResponse,
    DownloadProgress,
    ModelStatus,
    QuestionCategory,
    QuestionId,
    ScoredQuestion,
    WidgetHeadlineData,
    default_headline,
    get_suggested_questions,
    group_available_by_category,
)
from nutrition_insights.logging_config import get_logger
from nutrition_insights.services.clock import Clock, day_key, local_now

logger = get_logger(__name__)

DAILY_INSIGHT_STATE_KEY = "daily-insight-cache"

# Timestamp assigned when the cache is invalidated so the next check refreshes.
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class DailyInsightStore:
    """State container for the daily insight cache.

    All mutation goes through the methods below. The cache itself is a
    frozen model that is replaced wholesale on every change.
    """

    def __init__(
        self,
        clock: Clock = local_now,
        data_ttl_minutes: int | None = None,
        response_ttl_minutes: int | None = None,
    ) -> None:
        self._clock = clock
        self._data_ttl = timedelta(
            minutes=data_ttl_minutes or settings.insight_data_ttl_minutes
        )
        self._response_ttl = timedelta(
            minutes=response_ttl_minutes or settings.insight_response_ttl_minutes
        )
        self.cache: DailyInsightCache | None = None
        self.reset()

    def reset(self) -> None:
        """Drop the cache and every transient flag."""
        self.cache = None
        self.reset_transient()

    def reset_transient(self) -> None:
        """Clear generation and model flags, keeping the cache."""
        self.is_generating = False
        self.active_question_id: QuestionId | None = None
        self.generation_error: str | None = None
        self.llm_status = ModelStatus.not_downloaded
        self.download_progress: DownloadProgress | None = None

    def today(self) -> str:
        """Today's calendar day in the user's zone."""
        return day_key(self._clock())

    def now(self) -> datetime:
        """Current time from the store's clock."""
        return self._clock()

    def has_current_data(self) -> bool:
        """Whether a snapshot for today is cached."""
        return self.cache is not None and self.cache.date == self.today()

    def should_refresh_data(self) -> bool:
        """Whether the snapshot is missing, from another day, or past its TTL."""
        if self.cache is None:
            return True
        if self.cache.date != self.today():
            return True
        return self._clock() - self.cache.last_data_update > self._data_ttl

    def apply_refresh(
        self,
        data: DailyInsightData,
        scores: list[ScoredQuestion],
        headline: WidgetHeadlineData,
    ) -> DailyInsightCache:
        """Replace the snapshot, keeping today's narratives.

        Narratives survive a same-day refresh; any narrative dated for
        another day is dropped, so a date change clears them all.

        Args:
            data: Fresh snapshot
            scores: Scores computed from the snapshot
            headline: Headline computed from the snapshot

        Returns:
            The new cache
        """
        today = self.today()
        previous = self.cache.responses if self.cache is not None else {}
        responses = {
            question_id: response
            for question_id, response in previous.items()
            if response.date == today
        }
        dropped = len(previous) - len(responses)

        self.cache = DailyInsightCache(
            date=today,
            headline=headline,
            data=data,
            scores=scores,
            responses=responses,
            last_data_update=self._clock(),
        )
        logger.info(
            "Daily insight data refreshed",
            date=today,
            available_questions=sum(1 for s in scores if s.available),
            kept_responses=len(responses),
            dropped_responses=dropped,
        )
        return self.cache

    def get_cached_response(self, question_id: QuestionId) -> DailyInsightResponse | None:
        """Today's narrative for a question if it is still within its TTL."""
        if not self.has_current_data():
            return None
        response = self.cache.responses.get(question_id)
        if response is None or response.date != self.cache.date:
            return None
        if self._clock() - response.generated_at >= self._response_ttl:
            return None
        return response

    def put_response(self, response: DailyInsightResponse) -> bool:
        """Cache a narrative under its question id.

        Returns:
            False when the narrative's date does not match the cache's date
        """
        if self.cache is None or self.cache.date != response.date:
            logger.warning(
                "Discarding narrative for a different day",
                question_id=response.question_id,
                response_date=response.date,
                cache_date=self.cache.date if self.cache else None,
            )
            return False
        responses = {**self.cache.responses, response.question_id: response}
        self.cache = self.cache.model_copy(update={"responses": responses})
        return True

    def begin_generation(self, question_id: QuestionId | None) -> bool:
        """Take the single generation slot guarding the model.

        Args:
            question_id: Question being answered; None for legacy cards

        Returns:
            False if another generation already holds it
        """
        if self.is_generating:
            return False
        self.is_generating = True
        self.active_question_id = question_id
        self.generation_error = None
        return True

    def end_generation(self, error: str | None = None) -> None:
        """Release the generation slot, recording any error."""
        self.is_generating = False
        self.active_question_id = None
        self.generation_error = error

    def set_llm_status(self, status: ModelStatus) -> None:
        """Record the latest model status."""
        self.llm_status = status

    def set_download_progress(self, progress: DownloadProgress | None) -> None:
        """Record the latest download progress."""
        self.download_progress = progress

    def get_headline(self) -> WidgetHeadlineData:
        """Today's headline, or the start-tracking headline when there is none."""
        if not self.has_current_data():
            return default_headline(self._clock())
        return self.cache.headline

    def get_suggested_questions(self) -> list[ScoredQuestion]:
        """Top suggested questions from today's scores."""
        if not self.has_current_data():
            return []
        return get_suggested_questions(self.cache.scores)

    def get_available_questions(self) -> dict[QuestionCategory, list[ScoredQuestion]]:
        """Today's available questions grouped by category."""
        if not self.has_current_data():
            return {}
        return group_available_by_category(self.cache.scores)

    def invalidate(self) -> None:
        """Force the next check to refresh and forget cached narratives."""
        if self.cache is None:
            return
        self.cache = self.cache.model_copy(
            update={"last_data_update": _EPOCH, "responses": {}}
        )
        logger.info("Daily insight cache invalidated", date=self.cache.date)

    def to_persisted(self) -> dict[str, Any] | None:
        """Persistable form of the cache; flags are never included."""
        if self.cache is None:
            return None
        return {"cache": self.cache.model_dump(mode="json")}

    def load_persisted(self, payload: dict[str, Any] | None) -> None:
        """Restore the cache from a persisted document."""
        self.reset()
        if payload and payload.get("cache"):
            self.cache = DailyInsightCache.model_validate(payload["cache"])
            logger.info("Daily insight cache restored", date=self.cache.date)
