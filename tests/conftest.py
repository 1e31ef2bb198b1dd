"""Pytest configuration and shared fixtures.

Snapshots are built from a realistic mid-afternoon day so each test only
overrides the fields it cares about.
"""

import os
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set testing mode BEFORE importing the app
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from nutrition_insights.config import settings

# Override settings for testing
settings.testing = True

from nutrition_insights.core.daily_insights import DailyInsightData, ModelStatus
from nutrition_insights.core.daily_insights.models import FoodItem, MealSummary, WeeklyDayTotal
from nutrition_insights.main import app
from nutrition_insights.schemas.model import (
    CapabilityResult,
    DownloadResult,
    GenerationResult,
)
from nutrition_insights.schemas.nutrition import (
    DayTotals,
    LoggedFoodEntry,
    NutrientDayIntake,
    NutritionDaySubmission,
    NutritionTargets,
    WaterIntake,
)
from nutrition_insights.services.insight_engine import InsightEngine, get_insight_engine
from nutrition_insights.services.model_provider import ModelProvider

# Tuesday 10 March 2026, 14:00 in the configured (UTC) user zone
FIXED_NOW = datetime(2026, 3, 10, 14, 0, tzinfo=UTC)

WEEK_CALORIES = [1500, 1900, 2050, 1800, 1750, 2000, 1600]


class MutableClock:
    """Clock whose current time tests can move forward."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def _base_meals() -> list[MealSummary]:
    return [
        MealSummary(
            meal_label="Breakfast",
            total_calories=400,
            total_protein=25,
            total_carbs=55,
            total_fat=10,
            first_log_time=FIXED_NOW.replace(hour=8, minute=0),
            foods=[
                FoodItem(name="Oatmeal", calories=250, protein=10, carbs=45, fat=5),
                FoodItem(name="Greek Yogurt", calories=150, protein=15, carbs=10, fat=5),
            ],
        ),
        MealSummary(
            meal_label="Lunch",
            total_calories=600,
            total_protein=40,
            total_carbs=70,
            total_fat=20,
            first_log_time=FIXED_NOW.replace(hour=12, minute=30),
            foods=[
                FoodItem(name="Chicken Salad", calories=450, protein=35, carbs=40, fat=15),
                FoodItem(name="Brown Rice", calories=150, protein=5, carbs=30, fat=5),
            ],
        ),
        MealSummary(
            meal_label="Snack",
            total_calories=500,
            total_protein=35,
            total_carbs=55,
            total_fat=20,
            first_log_time=FIXED_NOW.replace(hour=13, minute=30),
            foods=[FoodItem(name="Protein Bar", calories=500, protein=35, carbs=55, fat=20)],
        ),
    ]


def _base_week() -> list[WeeklyDayTotal]:
    return [
        WeeklyDayTotal(
            date=(FIXED_NOW - timedelta(days=offset)).date().isoformat(),
            logged=True,
            calories=calories,
            protein=110,
            carbs=200,
            fat=60,
        )
        for offset, calories in enumerate(WEEK_CALORIES)
    ]


def build_data(**overrides) -> DailyInsightData:
    """A mid-afternoon snapshot with three meals logged."""
    meals = _base_meals()
    values = {
        "today_calories": 1500,
        "today_protein": 100,
        "today_carbs": 180,
        "today_fat": 50,
        "today_fiber": 15,
        "calorie_target": 2000,
        "protein_target": 150,
        "carb_target": 250,
        "fat_target": 65,
        "water_target": 2500,
        "today_water": 1500,
        "today_meal_count": 3,
        "today_foods": [food for meal in meals for food in meal.foods],
        "meals_with_timestamps": meals,
        "avg_calories_7d": 1800,
        "avg_protein_7d": 120,
        "logging_streak": 5,
        "calorie_streak": 3,
        "weekly_daily_totals": _base_week(),
        "days_using_app": 30,
        "calorie_percent": 75,
        "protein_percent": 67,
        "carb_percent": 72,
        "fat_percent": 77,
        "water_percent": 60,
        "current_hour": 14,
        "day_progress": 0.5,
    }
    values.update(overrides)
    return DailyInsightData(**values)


def make_submission(**overrides) -> NutritionDaySubmission:
    """A submitted day with breakfast and lunch, six days of history and iron intake.

    Iron averages 4.5 mg of 18 mg over the week, a tier-1 concern.
    """
    today = FIXED_NOW.date()
    values = {
        "date": today,
        "entries": [
            LoggedFoodEntry(
                food_name="Oatmeal",
                meal_type="Breakfast",
                calories=250,
                protein=10,
                carbs=45,
                fat=5,
                fiber=4,
                logged_at=FIXED_NOW.replace(hour=8),
            ),
            LoggedFoodEntry(
                food_name="Chicken Salad",
                meal_type="Lunch",
                calories=450,
                protein=35,
                carbs=40,
                fat=15,
                fiber=6,
                logged_at=FIXED_NOW.replace(hour=12, minute=30),
            ),
        ],
        "targets": NutritionTargets(calories=2000, protein=150),
        "water": WaterIntake(consumed_ml=1200, goal_ml=2500),
        "history": [
            DayTotals(
                date=today - timedelta(days=offset),
                calories=calories,
                protein=110,
                carbs=200,
                fat=60,
            )
            for offset, calories in enumerate(WEEK_CALORIES[1:], start=1)
        ],
        "log_dates": [today - timedelta(days=29)],
        "nutrient_intake": [
            NutrientDayIntake(date=today - timedelta(days=offset), nutrients={"iron": 4.5})
            for offset in range(7)
        ],
    }
    values.update(overrides)
    return NutritionDaySubmission(**values)


def make_provider(
    status: ModelStatus = ModelStatus.not_downloaded,
    text: str | None = "\U0001F957 Protein is at 67% of your target. A protein-rich dinner could help.",
    success: bool = True,
    initialized: bool = True,
    can_run: bool = True,
) -> MagicMock:
    """A model provider mock with every coroutine stubbed."""
    provider = MagicMock(spec=ModelProvider)
    provider.progress = None
    provider.get_status = AsyncMock(return_value=status)
    provider.check_capabilities = AsyncMock(
        return_value=CapabilityResult(
            can_run=can_run,
            reason=None if can_run else "Not enough free storage",
        )
    )
    provider.initialize = AsyncMock(return_value=initialized)
    provider.generate = AsyncMock(
        return_value=GenerationResult(
            success=success,
            text=text if success else None,
            error=None if success else "runtime timed out",
        )
    )
    provider.download_model = AsyncMock(return_value=DownloadResult(success=True))
    provider.cancel_download = MagicMock(return_value=False)
    provider.unload = AsyncMock()
    return provider


@pytest.fixture
def make_data() -> Callable[..., DailyInsightData]:
    """Factory for snapshots with per-test overrides."""
    return build_data


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def provider() -> MagicMock:
    return make_provider()


@pytest.fixture
def engine(clock, provider) -> InsightEngine:
    """Engine with pinned clocks, a mocked model and no persistence."""
    return InsightEngine(provider=provider, clock=clock, utc_clock=clock)


@pytest_asyncio.fixture
async def client(engine) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client wired to the test engine."""
    app.dependency_overrides[get_insight_engine] = lambda: engine
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
