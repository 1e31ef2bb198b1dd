"""Persisted state document model.

Stores the JSON documents that must survive a restart: the daily
insight cache, the alert dismissal list and the legacy insights cache.
"""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from nutrition_insights.models.base import Base, TimestampMixin


class PersistedState(Base, TimestampMixin):
    """One named state document.

    The payload is whatever the owning store returns from
    ``to_persisted()``; transient flags are never written here.
    """

    __tablename__ = "persisted_state"

    key: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )

    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<PersistedState(key={self.key}, updated_at={self.updated_at})>"
