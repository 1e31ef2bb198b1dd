"""Daily insight generation.

Turns a snapshot of the user's nutrition day into ranked questions,
deterministic analyses, a widget headline and deficiency alerts.
Everything in this package is pure: no I/O, no model calls and no
cached state. Orchestration, caching and the language model live in
``nutrition_insights.services``.

Pipeline:

1. Score the 18-question catalog against the snapshot
2. Analyze a question into a data block, fallback text and data cards
3. Optionally narrate the data block with the on-device model, then
   validate the narrative against the voice rules
"""

from nutrition_insights.core.daily_insights.analyzers import (
    QUESTION_ANALYZERS,
    analyze_question,
)
from nutrition_insights.core.daily_insights.deficiency import DeficiencyCalculator
from nutrition_insights.core.daily_insights.enums import (
    AlertSeverity,
    CardStatus,
    InsightSource,
    ModelStatus,
    QuestionCategory,
    QuestionId,
    UserGoal,
)
from nutrition_insights.core.daily_insights.exceptions import (
    DataUnavailableError,
    InsightEngineError,
    ModelDownloadCancelledError,
    ModelDownloadError,
    ModelUnavailableError,
    UnknownNutrientError,
    UnknownQuestionError,
)
from nutrition_insights.core.daily_insights.headline import compute_headline, default_headline
from nutrition_insights.core.daily_insights.models import (
    AlertDismissal,
    DailyInsightCache,
    DailyInsightData,
    DailyInsightResponse,
    DataCard,
    DeficiencyCheck,
    DeficiencyResult,
    DownloadProgress,
    NutrientIntakeHistory,
    QuestionAnalysis,
    ScoredQuestion,
    WidgetHeadlineData,
)
from nutrition_insights.core.daily_insights.prompts import (
    build_question_prompt,
    build_system_prompt,
)
from nutrition_insights.core.daily_insights.registry import (
    CATEGORY_META,
    QUESTION_REGISTRY,
    QuestionDefinition,
    get_question,
)
from nutrition_insights.core.daily_insights.response_parser import (
    ParsedInsight,
    parse_insight_response,
)
from nutrition_insights.core.daily_insights.scorer import (
    get_suggested_questions,
    group_available_by_category,
    rank_questions,
    score_questions,
)

__all__ = [
    "CATEGORY_META",
    "QUESTION_ANALYZERS",
    "QUESTION_REGISTRY",
    "AlertDismissal",
    "AlertSeverity",
    "CardStatus",
    "DailyInsightCache",
    "DailyInsightData",
    "DailyInsightResponse",
    "DataCard",
    "DataUnavailableError",
    "DeficiencyCalculator",
    "DeficiencyCheck",
    "DeficiencyResult",
    "DownloadProgress",
    "InsightEngineError",
    "InsightSource",
    "ModelDownloadCancelledError",
    "ModelDownloadError",
    "ModelStatus",
    "ModelUnavailableError",
    "NutrientIntakeHistory",
    "ParsedInsight",
    "QuestionAnalysis",
    "QuestionCategory",
    "QuestionDefinition",
    "QuestionId",
    "ScoredQuestion",
    "UnknownNutrientError",
    "UnknownQuestionError",
    "UserGoal",
    "WidgetHeadlineData",
    "analyze_question",
    "build_question_prompt",
    "build_system_prompt",
    "compute_headline",
    "default_headline",
    "get_question",
    "get_suggested_questions",
    "group_available_by_category",
    "parse_insight_response",
    "rank_questions",
    "score_questions",
]
