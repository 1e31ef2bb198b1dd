"""Persisted state documents.

Each store serialises itself to one JSON document saved under a fixed
key in the ``persisted_state`` table.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nutrition_insights.logging_config import get_logger
from nutrition_insights.models.persisted_state import PersistedState

logger = get_logger(__name__)


class StateRepository:
    """Load and save named state documents."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def load(self, key: str) -> dict[str, Any] | None:
        """Fetch a document.

        Args:
            key: Document key

        Returns:
            The stored payload, or None if nothing was saved under the key
        """
        async with self._session_maker() as session:
            row = await session.get(PersistedState, key)
            return dict(row.payload) if row is not None else None

    async def save(self, key: str, payload: dict[str, Any]) -> None:
        """Insert or replace a document."""
        async with self._session_maker() as session:
            row = await session.get(PersistedState, key)
            if row is None:
                session.add(PersistedState(key=key, payload=payload))
            else:
                row.payload = payload
            await session.commit()

        logger.debug("State document saved", key=key)

    async def delete(self, key: str) -> bool:
        """Remove a document.

        Returns:
            True if a document was removed
        """
        async with self._session_maker() as session:
            row = await session.get(PersistedState, key)
            if row is None:
                return False
            await session.delete(row)
            await session.commit()

        logger.info("State document deleted", key=key)
        return True
