"""Tests for the background job scheduler."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from nutrition_insights.services import scheduler as scheduler_module
from nutrition_insights.services.scheduler import (
    get_scheduler,
    refresh_daily_insights,
    start_scheduler,
    stop_scheduler,
    sweep_expired_dismissals,
)

ENGINE_PATH = "nutrition_insights.services.scheduler.get_insight_engine"


@pytest.fixture
def fake_engine() -> MagicMock:
    engine = MagicMock()
    engine.sweep_expired_dismissals = AsyncMock(return_value=2)
    engine.refresh_if_stale = AsyncMock(return_value=True)
    return engine


class TestJobs:
    """Scheduled jobs log failures instead of raising."""

    async def test_sweep(self, fake_engine):
        with patch(ENGINE_PATH, return_value=fake_engine):
            await sweep_expired_dismissals()

        fake_engine.sweep_expired_dismissals.assert_awaited_once()

    async def test_sweep_failure_is_contained(self, fake_engine):
        fake_engine.sweep_expired_dismissals.side_effect = RuntimeError("database locked")

        with patch(ENGINE_PATH, return_value=fake_engine):
            await sweep_expired_dismissals()

    async def test_refresh(self, fake_engine):
        with patch(ENGINE_PATH, return_value=fake_engine):
            await refresh_daily_insights()

        fake_engine.refresh_if_stale.assert_awaited_once()

    async def test_refresh_failure_is_contained(self, fake_engine):
        fake_engine.refresh_if_stale.side_effect = RuntimeError("source offline")

        with patch(ENGINE_PATH, return_value=fake_engine):
            await refresh_daily_insights()


class TestSchedulerLifecycle:
    """Tests for starting and stopping the scheduler."""

    @pytest.fixture(autouse=True)
    async def reset_scheduler(self):
        scheduler_module.scheduler = None
        yield
        stop_scheduler()

    async def test_start_registers_jobs(self):
        started = start_scheduler()

        assert get_scheduler() is started
        assert {job.id for job in started.get_jobs()} == {"dismissal_sweep", "insight_refresh"}

    async def test_start_twice_returns_running_scheduler(self):
        first = start_scheduler()

        assert start_scheduler() is first

    async def test_disabled_jobs_are_skipped(self):
        with patch.object(scheduler_module.settings, "insight_refresh_enabled", False):
            started = start_scheduler()

        assert [job.id for job in started.get_jobs()] == ["dismissal_sweep"]

    async def test_stop(self):
        start_scheduler()

        stop_scheduler()

        assert get_scheduler() is None
