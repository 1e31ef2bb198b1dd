"""Nutrition day submission schemas.

The mobile client owns the food log. It pushes the day it is showing,
together with the trailing history the insight engine needs.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from nutrition_insights.core.daily_insights import UserGoal


class LoggedFoodEntry(BaseModel):
    """One food log entry."""

    food_name: str = Field(default="Unknown", min_length=1)
    meal_type: str = Field(default="Snack", description="Meal label, e.g. Breakfast")
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)
    fiber: float = Field(default=0, ge=0)
    logged_at: datetime | None = Field(default=None, description="When the entry was logged")


class NutritionTargets(BaseModel):
    """Daily targets; missing macros are derived from calories and protein."""

    calories: float | None = Field(default=None, gt=0)
    protein: float | None = Field(default=None, gt=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    goal: UserGoal = UserGoal.maintain


class DayTotals(BaseModel):
    """Macro totals for a previous day."""

    date: date
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)


class WaterIntake(BaseModel):
    """Water logged for a day."""

    consumed_ml: float = Field(default=0, ge=0)
    goal_ml: float = Field(default=2000, ge=0)


class NutrientDayIntake(BaseModel):
    """Micronutrient amounts recorded for one day, keyed by nutrient id."""

    date: date
    nutrients: dict[str, float] = Field(default_factory=dict)


class NutritionDaySubmission(BaseModel):
    """Request schema for submitting a day of nutrition data."""

    date: date
    entries: list[LoggedFoodEntry] = Field(default_factory=list)
    targets: NutritionTargets = Field(default_factory=NutritionTargets)
    water: WaterIntake = Field(default_factory=WaterIntake)
    history: list[DayTotals] = Field(
        default_factory=list,
        description="Totals for earlier days of the trailing week",
    )
    log_dates: list[date] = Field(
        default_factory=list,
        description="Every date with at least one log entry",
    )
    nutrient_intake: list[NutrientDayIntake] = Field(default_factory=list)


class NutritionDayAccepted(BaseModel):
    """Response schema for a submitted day."""

    date: date
    entries: int
    message: str
