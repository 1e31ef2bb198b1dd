# Orchestration, caching and the on-device model
from nutrition_insights.services.daily_insights import DailyInsightService, GeneratedInsight
from nutrition_insights.services.insight_engine import (
    InsightEngine,
    get_insight_engine,
    set_insight_engine,
)
from nutrition_insights.services.scheduler import (
    get_scheduler,
    start_scheduler,
    stop_scheduler,
)

__all__ = [
    "DailyInsightService",
    "GeneratedInsight",
    "InsightEngine",
    "get_insight_engine",
    "set_insight_engine",
    "get_scheduler",
    "start_scheduler",
    "stop_scheduler",
]
