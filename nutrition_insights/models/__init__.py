# Database Models
from nutrition_insights.models.base import Base, TimestampMixin
from nutrition_insights.models.persisted_state import PersistedState

__all__ = [
    "Base",
    "PersistedState",
    "TimestampMixin",
]
