"""SQLite state database.

The engine is built on first use so it binds to the running event loop.
File databases get their parent directory created on first use.
"""

from pathlib import Path

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from nutrition_insights.config import settings
from nutrition_insights.logging_config import get_logger
from nutrition_insights.models.base import Base

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def _ensure_database_dir(url: str) -> None:
    database = make_url(url).database
    if database and database != ":memory:":
        Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def _enable_wal(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def get_engine() -> AsyncEngine:
    """The process-wide engine.

    Tests get a NullPool so no connection outlives its event loop.
    """
    global _engine
    if _engine is not None:
        return _engine

    _ensure_database_dir(settings.database_url)
    if settings.testing:
        _engine = create_async_engine(settings.database_url, poolclass=NullPool)
    else:
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.log_level.upper() == "DEBUG" and settings.log_format == "text",
        )
        event.listen(_engine.sync_engine, "connect", _enable_wal)
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the process-wide engine."""
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_maker


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """Create missing tables.

    Args:
        engine: Engine to use; defaults to the process-wide engine
    """
    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database_connection() -> bool:
    """True when a trivial query succeeds."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database check failed", error=str(e))
        return False
    return True


async def close_database() -> None:
    """Dispose of the engine; the next call to get_engine() builds a new one."""
    global _engine, _session_maker
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_maker = None
