"""Clock helpers.

Stores and services take a ``Clock`` so tests can pin the current time.
Calendar days and the hour of day are evaluated in the user's zone.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from nutrition_insights.config import settings

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Current time in the configured user time zone."""
    return datetime.now(ZoneInfo(settings.user_timezone))


def utc_now() -> datetime:
    """Current UTC time."""
    return datetime.now(UTC)


def day_key(moment: datetime) -> str:
    """Calendar day of a timestamp as YYYY-MM-DD."""
    return moment.date().isoformat()
