"""Daily insight Pydantic models.

Pure data models for the insight pipeline. No database dependencies.
Every record is frozen: stores replace records instead of mutating them.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from nutrition_insights.core.daily_insights.enums import (
    AlertSeverity,
    CardStatus,
    InsightSource,
    LegacyInsightCategory,
    QuestionId,
    UserGoal,
)

if TYPE_CHECKING:
    from nutrition_insights.core.daily_insights.registry import QuestionDefinition


class FoodItem(BaseModel):
    """A single food logged today."""

    model_config = ConfigDict(frozen=True)

    name: str
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)


class MealSummary(BaseModel):
    """Totals for one meal, with the time its first item was logged."""

    model_config = ConfigDict(frozen=True)

    meal_label: str
    total_calories: float = Field(default=0, ge=0)
    total_protein: float = Field(default=0, ge=0)
    total_carbs: float = Field(default=0, ge=0)
    total_fat: float = Field(default=0, ge=0)
    first_log_time: datetime | None = None
    foods: list[FoodItem] = Field(default_factory=list)


class WeeklyDayTotal(BaseModel):
    """Totals for one day of the trailing week."""

    model_config = ConfigDict(frozen=True)

    date: str = Field(description="Calendar day, YYYY-MM-DD.")
    logged: bool = False
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)


class DeficiencyCheck(BaseModel):
    """One nutrient whose weekly average sits below its daily target."""

    model_config = ConfigDict(frozen=True)

    nutrient_id: str
    nutrient_name: str
    average_intake: float = Field(ge=0)
    rda_target: float = Field(gt=0)
    unit: str
    percent_of_rda: int = Field(ge=0)
    severity: AlertSeverity
    message: str = Field(min_length=1)
    food_suggestions: list[str] = Field(default_factory=list, max_length=4)
    tier: int = Field(ge=1, le=3)


class DeficiencyResult(BaseModel):
    """Ranked deficiency alerts for the trailing week."""

    model_config = ConfigDict(frozen=True)

    checks: list[DeficiencyCheck] = Field(default_factory=list, max_length=3)
    has_alerts: bool = False

    @model_validator(mode="after")
    def check_consistency(self) -> Self:
        """Keep has_alerts in step with the checks list."""
        if self.has_alerts != bool(self.checks):
            msg = "has_alerts must be true exactly when checks is non-empty"
            raise ValueError(msg)
        return self


class DailyInsightData(BaseModel):
    """Point-in-time snapshot of the user's nutrition day.

    Percentages are precomputed by the collector; analyzers never divide
    by a target themselves when a percent field exists.
    """

    model_config = ConfigDict(frozen=True)

    today_calories: float = Field(default=0, ge=0)
    today_protein: float = Field(default=0, ge=0)
    today_carbs: float = Field(default=0, ge=0)
    today_fat: float = Field(default=0, ge=0)
    today_fiber: float = Field(default=0, ge=0)

    calorie_target: float = Field(default=0, ge=0)
    protein_target: float = Field(default=0, ge=0)
    carb_target: float = Field(default=0, ge=0)
    fat_target: float = Field(default=0, ge=0)
    water_target: float = Field(default=0, ge=0, description="Millilitres.")
    today_water: float = Field(default=0, ge=0, description="Millilitres.")

    today_meal_count: int = Field(default=0, ge=0)
    today_foods: list[FoodItem] = Field(default_factory=list)
    meals_with_timestamps: list[MealSummary] = Field(default_factory=list)

    avg_calories_7d: float = Field(default=0, ge=0)
    avg_protein_7d: float = Field(default=0, ge=0)
    logging_streak: int = Field(default=0, ge=0)
    calorie_streak: int = Field(default=0, ge=0)
    weekly_daily_totals: list[WeeklyDayTotal] = Field(default_factory=list)

    user_goal: UserGoal = UserGoal.maintain
    days_using_app: int = Field(default=0, ge=0)

    calorie_percent: int = Field(default=0, ge=0)
    protein_percent: int = Field(default=0, ge=0)
    carb_percent: int = Field(default=0, ge=0)
    fat_percent: int = Field(default=0, ge=0)
    water_percent: int = Field(default=0, ge=0)

    current_hour: int = Field(default=12, ge=0, le=23)
    day_progress: float = Field(default=0, ge=0, le=1)

    active_alerts: list[DeficiencyCheck] = Field(default_factory=list)


class DataCard(BaseModel):
    """A labelled number shown under a narrative."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(min_length=1)
    value: str = Field(min_length=1)
    sub_value: str | None = None
    percent: int | None = None
    status: CardStatus = CardStatus.neutral


class QuestionAnalysis(BaseModel):
    """Deterministic analysis of one question against a snapshot.

    ``data_block`` grounds the model in verbatim numbers, ``fallback_text``
    is a complete narrative used whenever the model is not.
    """

    model_config = ConfigDict(frozen=True)

    question_id: QuestionId
    data_block: str = Field(min_length=1)
    fallback_text: str = Field(min_length=1)
    data_cards: list[DataCard] = Field(min_length=1)
    computed_at: datetime


class ScoredQuestion(BaseModel):
    """Availability and relevance of one question for one snapshot."""

    model_config = ConfigDict(frozen=True)

    question_id: QuestionId
    available: bool
    relevance_score: float = Field(ge=0, le=100)

    @property
    def definition(self) -> "QuestionDefinition":
        """Catalog entry this score belongs to."""
        from nutrition_insights.core.daily_insights.registry import get_question

        return get_question(self.question_id)


class DailyInsightResponse(BaseModel):
    """A narrative answer cached per question for one calendar day."""

    model_config = ConfigDict(frozen=True)

    question_id: QuestionId
    narrative: str = Field(min_length=1)
    icon: str
    source: InsightSource
    generated_at: datetime
    date: str = Field(description="Calendar day the response belongs to, YYYY-MM-DD.")
    data_cards: list[DataCard] = Field(
        default_factory=list, description="Cards from the analysis the narrative was written from."
    )


class WidgetHeadlineData(BaseModel):
    """One-line headline for the home screen widget."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    icon: str
    priority: int = Field(ge=1, le=8, description="Cascade rule that produced it.")
    computed_at: datetime


class DailyInsightCache(BaseModel):
    """Everything cached for the current day."""

    model_config = ConfigDict(frozen=True)

    date: str
    headline: WidgetHeadlineData
    data: DailyInsightData
    scores: list[ScoredQuestion]
    responses: dict[QuestionId, DailyInsightResponse] = Field(default_factory=dict)
    last_data_update: datetime


class AlertDismissal(BaseModel):
    """A user's dismissal of one nutrient alert at one severity."""

    model_config = ConfigDict(frozen=True)

    alert_id: str = Field(description="Composite key nutrientId_severity.")
    nutrient_id: str
    severity: str
    dismissed_at: datetime
    expires_at: datetime

    @model_validator(mode="after")
    def check_window(self) -> Self:
        """Expiry must come after the dismissal."""
        if self.expires_at <= self.dismissed_at:
            msg = "expires_at must be after dismissed_at"
            raise ValueError(msg)
        return self


class DownloadProgress(BaseModel):
    """Pollable progress of the model download."""

    model_config = ConfigDict(frozen=True)

    bytes_downloaded: int = Field(default=0, ge=0)
    total_bytes: int = Field(default=0, ge=0)
    percentage: int = Field(default=0, ge=0, le=100)
    estimated_seconds_remaining: int | None = None


class LegacyInsight(BaseModel):
    """A card from the original insights screen."""

    model_config = ConfigDict(frozen=True)

    category: LegacyInsightCategory
    text: str = Field(min_length=1)
    icon: str


class LegacyInsightsCache(BaseModel):
    """Legacy insights with their validity window."""

    model_config = ConfigDict(frozen=True)

    insights: list[LegacyInsight]
    generated_at: datetime
    valid_until: datetime
    source: InsightSource
    date: str


class NutrientIntakeHistory(BaseModel):
    """Trailing-week nutrient intake used for deficiency detection.

    ``daily_intake`` maps nutrient id to one amount per day of the week,
    ``None`` for days where that nutrient was not recorded.
    """

    model_config = ConfigDict(frozen=True)

    days_using_app: int = Field(default=0, ge=0)
    days_since_last_log: int | None = Field(
        default=None,
        ge=0,
        description="None when nothing has ever been logged.",
    )
    days_with_data: int = Field(default=0, ge=0, le=7)
    daily_intake: dict[str, list[float | None]] = Field(default_factory=dict)


class MicronutrientSummary(BaseModel):
    """Weekly coverage of one nutrient, alert or not."""

    model_config = ConfigDict(frozen=True)

    nutrient_id: str
    nutrient_name: str
    average_intake: float = Field(ge=0)
    rda_target: float = Field(gt=0)
    unit: str
    percent_of_rda: int = Field(ge=0)
    tier: int = Field(ge=1, le=3)
    days_with_data: int = Field(ge=0)
