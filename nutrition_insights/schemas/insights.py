"""Daily and legacy insight API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from nutrition_insights.core.daily_insights import (
    CATEGORY_META,
    DataCard,
    DownloadProgress,
    InsightSource,
    ModelStatus,
    QuestionCategory,
    QuestionId,
    ScoredQuestion,
    WidgetHeadlineData,
)
from nutrition_insights.core.daily_insights.enums import LegacyInsightCategory
from nutrition_insights.core.daily_insights.legacy import CATEGORY_TITLES
from nutrition_insights.core.daily_insights.models import LegacyInsight


class QuestionSummary(BaseModel):
    """A question as offered to the user."""

    question_id: QuestionId
    text: str
    icon: str
    category: QuestionCategory
    relevance_score: float

    @classmethod
    def from_scored(cls, scored: ScoredQuestion) -> "QuestionSummary":
        definition = scored.definition
        return cls(
            question_id=scored.question_id,
            text=definition.text,
            icon=definition.icon,
            category=definition.category,
            relevance_score=scored.relevance_score,
        )


class QuestionCategoryGroup(BaseModel):
    """Available questions in one category."""

    category: QuestionCategory
    label: str
    icon: str
    questions: list[QuestionSummary]


class DailyInsightsOverview(BaseModel):
    """Response schema for the daily insights screen."""

    date: str | None = Field(default=None, description="Day the cached snapshot belongs to")
    headline: WidgetHeadlineData
    suggested: list[QuestionSummary]
    categories: list[QuestionCategoryGroup]
    llm_status: ModelStatus
    is_generating: bool
    active_question_id: QuestionId | None = None
    generation_error: str | None = None
    last_data_update: datetime | None = None

    @classmethod
    def build(
        cls,
        headline: WidgetHeadlineData,
        suggested: list[ScoredQuestion],
        grouped: dict[QuestionCategory, list[ScoredQuestion]],
        **state,
    ) -> "DailyInsightsOverview":
        categories = [
            QuestionCategoryGroup(
                category=category,
                label=CATEGORY_META[category].label,
                icon=CATEGORY_META[category].icon,
                questions=[QuestionSummary.from_scored(s) for s in scores],
            )
            for category, scores in grouped.items()
        ]
        return cls(
            headline=headline,
            suggested=[QuestionSummary.from_scored(s) for s in suggested],
            categories=categories,
            **state,
        )


class InsightAnswer(BaseModel):
    """Response schema for one answered question."""

    question_id: QuestionId
    question_text: str
    narrative: str
    icon: str
    source: InsightSource
    generated_at: datetime
    date: str
    cached: bool = Field(..., description="Served from the narrative cache")
    data_cards: list[DataCard]


class LegacyInsightCard(BaseModel):
    """A legacy insight card with its display title."""

    category: LegacyInsightCategory
    title: str
    text: str
    icon: str

    @classmethod
    def from_insight(cls, insight: LegacyInsight) -> "LegacyInsightCard":
        return cls(
            category=insight.category,
            title=CATEGORY_TITLES[insight.category],
            text=insight.text,
            icon=insight.icon,
        )


class EmptyState(BaseModel):
    """Message shown instead of cards when there is little to say."""

    title: str
    message: str


class LegacyInsightsResponse(BaseModel):
    """Response schema for the legacy insights screen."""

    insights: list[LegacyInsightCard]
    source: InsightSource | None = None
    generated_at: datetime | None = None
    valid_until: datetime | None = None
    date: str | None = None
    llm_enabled: bool
    llm_status: ModelStatus
    is_generating: bool
    generation_error: str | None = None
    download_progress: DownloadProgress | None = None
    empty_state: EmptyState | None = None


class LegacyEnabledRequest(BaseModel):
    """Request schema for toggling model-written legacy insights."""

    enabled: bool
