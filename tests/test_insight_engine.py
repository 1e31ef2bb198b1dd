"""Tests for engine wiring and persisted state."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import MutableClock, make_provider, make_submission
from nutrition_insights.core.daily_insights import (
    AlertSeverity,
    QuestionId,
    UnknownNutrientError,
)
from nutrition_insights.services.alert_dismissals import ALERT_DISMISSALS_STATE_KEY
from nutrition_insights.services.insight_engine import (
    InsightEngine,
    get_insight_engine,
    set_insight_engine,
)
from nutrition_insights.services.insight_store import DAILY_INSIGHT_STATE_KEY
from nutrition_insights.services.legacy_insights import LEGACY_INSIGHTS_STATE_KEY


class FakeRepository:
    """Dictionary-backed stand-in for StateRepository."""

    def __init__(self) -> None:
        self.documents: dict[str, dict] = {}

    async def load(self, key: str) -> dict | None:
        return self.documents.get(key)

    async def save(self, key: str, payload: dict) -> None:
        self.documents[key] = payload

    async def delete(self, key: str) -> bool:
        return self.documents.pop(key, None) is not None


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def persisted_engine(clock: MutableClock, repository) -> InsightEngine:
    return InsightEngine(
        provider=make_provider(), repository=repository, clock=clock, utc_clock=clock
    )


class TestPersistence:
    """Tests for saving and restoring engine state."""

    async def test_submit_saves_every_store(self, persisted_engine, repository):
        await persisted_engine.submit_day(make_submission())

        assert set(repository.documents) == {
            DAILY_INSIGHT_STATE_KEY,
            ALERT_DISMISSALS_STATE_KEY,
            LEGACY_INSIGHTS_STATE_KEY,
        }

    async def test_restart_restores_state(self, persisted_engine, repository, clock):
        await persisted_engine.submit_day(make_submission())
        await persisted_engine.daily.generate_insight(QuestionId.protein_status)
        await persisted_engine.dismiss_alert("iron", AlertSeverity.concern)
        await persisted_engine.save_state()

        restarted = InsightEngine(
            provider=make_provider(), repository=repository, clock=clock, utc_clock=clock
        )
        await restarted.load_state()

        assert restarted.daily_store.cache == persisted_engine.daily_store.cache
        assert restarted.dismissals.is_dismissed("iron", AlertSeverity.concern)
        assert not restarted.daily_store.is_generating

    async def test_empty_daily_cache_deletes_document(self, persisted_engine, repository):
        repository.documents[DAILY_INSIGHT_STATE_KEY] = {"stale": True}

        await persisted_engine.save_state()

        assert DAILY_INSIGHT_STATE_KEY not in repository.documents

    async def test_without_repository_nothing_is_saved(self, engine):
        await engine.submit_day(make_submission())
        await engine.load_state()

        assert engine.daily_store.cache is not None


class TestAlerts:
    """Tests for alert operations on the engine."""

    async def test_alerts(self, engine):
        await engine.submit_day(make_submission())

        result = await engine.get_alerts()

        assert result.has_alerts
        assert result.checks[0].nutrient_id == "iron"

    async def test_dismiss_unknown_nutrient(self, engine):
        with pytest.raises(UnknownNutrientError):
            await engine.dismiss_alert("unobtainium", AlertSeverity.concern)

    async def test_dismiss_rebuilds_snapshot_alerts(self, engine):
        await engine.submit_day(make_submission())

        await engine.dismiss_alert("iron", AlertSeverity.concern)

        assert engine.daily_store.cache.data.active_alerts == []
        assert not (await engine.get_alerts()).has_alerts

    async def test_sweep_expired_dismissals(self, persisted_engine, clock, repository):
        await persisted_engine.dismiss_alert("iron", AlertSeverity.concern)
        clock.advance(days=8)

        removed = await persisted_engine.sweep_expired_dismissals()

        assert removed == 1
        assert repository.documents[ALERT_DISMISSALS_STATE_KEY] == {"dismissals": []}


class TestRefreshIfStale:
    """Tests for the scheduled refresh hook."""

    async def test_fresh_snapshot_is_kept(self, engine):
        await engine.submit_day(make_submission())

        assert not await engine.refresh_if_stale()

    async def test_stale_snapshot_is_refreshed(self, engine, clock):
        await engine.submit_day(make_submission())
        clock.advance(minutes=16)

        assert await engine.refresh_if_stale()
        assert engine.daily_store.cache.last_data_update == clock.now


class TestShutdown:
    """Tests for shutdown and the process-wide instance."""

    async def test_shutdown_unloads_model(self, engine, provider):
        await engine.shutdown()

        provider.unload.assert_awaited_once()

    def test_process_wide_engine_can_be_replaced(self):
        replacement = MagicMock(spec=InsightEngine)
        set_insight_engine(replacement)
        try:
            assert get_insight_engine() is replacement
        finally:
            set_insight_engine(None)

    async def test_repository_errors_propagate(self, clock):
        repository = MagicMock()
        repository.load = AsyncMock(side_effect=RuntimeError("disk full"))
        engine = InsightEngine(
            provider=make_provider(), repository=repository, clock=clock, utc_clock=clock
        )

        with pytest.raises(RuntimeError):
            await engine.load_state()
