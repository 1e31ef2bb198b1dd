"""Tests for persisted state documents."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from nutrition_insights.database import create_tables
from nutrition_insights.services.state_repository import StateRepository


@pytest_asyncio.fixture
async def repository() -> AsyncGenerator[StateRepository, None]:
    """Repository over a private in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await create_tables(engine)
    yield StateRepository(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()


class TestStateRepository:
    """Tests for StateRepository."""

    async def test_load_missing_key(self, repository):
        assert await repository.load("daily_insights") is None

    async def test_save_and_load(self, repository):
        payload = {"cache": {"date": "2026-03-10"}, "llm_enabled": True}

        await repository.save("daily_insights", payload)

        assert await repository.load("daily_insights") == payload

    async def test_save_replaces_document(self, repository):
        await repository.save("alert_dismissals", {"dismissals": []})

        await repository.save(
            "alert_dismissals", {"dismissals": [{"alert_id": "iron_warning"}]}
        )

        loaded = await repository.load("alert_dismissals")
        assert loaded == {"dismissals": [{"alert_id": "iron_warning"}]}

    async def test_documents_are_independent(self, repository):
        await repository.save("a", {"value": 1})
        await repository.save("b", {"value": 2})

        assert await repository.load("a") == {"value": 1}
        assert await repository.load("b") == {"value": 2}

    async def test_delete(self, repository):
        await repository.save("legacy_insights", {"cached_insights": None})

        assert await repository.delete("legacy_insights") is True
        assert await repository.load("legacy_insights") is None

    async def test_delete_missing_key(self, repository):
        assert await repository.delete("legacy_insights") is False
