"""Tests for the daily snapshot collector."""

from datetime import date, timedelta

import pytest

from conftest import FIXED_NOW, make_submission
from nutrition_insights.core.daily_insights import AlertSeverity, UserGoal
from nutrition_insights.core.daily_insights.models import WeeklyDayTotal
from nutrition_insights.schemas.nutrition import LoggedFoodEntry, NutritionTargets
from nutrition_insights.services.alert_dismissals import AlertDismissalStore
from nutrition_insights.services.data_collector import (
    DailyDataCollector,
    compute_calorie_streak,
    compute_day_progress,
    compute_days_using_app,
    compute_logging_streak,
    group_meals,
    resolve_targets,
    safe_percent,
)
from nutrition_insights.services.nutrition_source import SubmittedNutritionSource


def _week(*calories: float) -> list[WeeklyDayTotal]:
    """Week rows, newest first; zero calories means not logged."""
    return [
        WeeklyDayTotal(
            date=(FIXED_NOW.date() - timedelta(days=offset)).isoformat(),
            logged=value > 0,
            calories=value,
        )
        for offset, value in enumerate(calories)
    ]


class TestStreaks:
    """Tests for logging and calorie streaks."""

    def test_logging_streak(self):
        assert compute_logging_streak(_week(1500, 1800, 1900, 0, 2000, 2000, 2000)) == 3

    def test_unlogged_today_does_not_break_streak(self):
        assert compute_logging_streak(_week(0, 1800, 1900, 2000, 0, 0, 0)) == 3

    def test_no_logs(self):
        assert compute_logging_streak(_week(0, 0, 0, 0, 0, 0, 0)) == 0

    def test_calorie_streak_within_tolerance(self):
        week = _week(1850, 2150, 2000, 2300, 2000, 2000, 2000)

        assert compute_calorie_streak(week, 2000) == 3

    def test_calorie_streak_skips_unlogged_today(self):
        assert compute_calorie_streak(_week(0, 1950, 2050, 1500, 0, 0, 0), 2000) == 2

    def test_calorie_streak_broken_by_today(self):
        assert compute_calorie_streak(_week(700, 1950, 2050, 2000, 0, 0, 0), 2000) == 0


class TestDerivedValues:
    """Tests for the small derivations."""

    @pytest.mark.parametrize(
        ("hour", "expected"),
        [(3, 0.0), (6, 0.0), (14, 0.5), (22, 1.0), (23, 1.0)],
    )
    def test_day_progress(self, hour, expected):
        assert compute_day_progress(hour, 6, 22) == expected

    def test_day_progress_with_empty_window(self):
        assert compute_day_progress(14, 22, 6) == 0.0

    def test_days_using_app(self):
        today = date(2026, 3, 10)

        assert compute_days_using_app(today, []) == 1
        assert compute_days_using_app(today, [today]) == 1
        assert compute_days_using_app(today, [today, date(2026, 3, 1)]) == 10

    def test_safe_percent(self):
        assert safe_percent(100, 150) == 67
        assert safe_percent(100, 0) == 0

    def test_resolve_targets_derives_missing_macros(self):
        calories, protein, carbs, fat = resolve_targets(NutritionTargets())

        assert (calories, protein) == (2000, 150)
        assert fat == 56
        assert carbs == 224

    def test_resolve_targets_keeps_explicit_values(self):
        targets = NutritionTargets(calories=1800, protein=120, carbs=200, fat=60)

        assert resolve_targets(targets) == (1800, 120, 200.0, 60.0)

    def test_group_meals_in_first_seen_order(self):
        entries = [
            LoggedFoodEntry(
                food_name="Eggs",
                meal_type="Breakfast",
                calories=150,
                protein=12,
                logged_at=FIXED_NOW.replace(hour=8, minute=15),
            ),
            LoggedFoodEntry(food_name="Apple", meal_type="Snack", calories=95),
            LoggedFoodEntry(
                food_name="Toast",
                meal_type="Breakfast",
                calories=120,
                protein=4,
                logged_at=FIXED_NOW.replace(hour=8, minute=0),
            ),
        ]

        meals = group_meals(entries)

        assert [m.meal_label for m in meals] == ["Breakfast", "Snack"]
        assert meals[0].total_calories == 270
        assert meals[0].total_protein == 16
        assert meals[0].first_log_time == FIXED_NOW.replace(hour=8, minute=0)
        assert [f.name for f in meals[0].foods] == ["Eggs", "Toast"]
        assert meals[1].first_log_time is None


class TestCollect:
    """Tests for building the snapshot from submitted data."""

    @pytest.fixture
    def dismissals(self, clock) -> AlertDismissalStore:
        return AlertDismissalStore(clock=clock)

    @pytest.fixture
    def collector(self, clock, dismissals) -> DailyDataCollector:
        source = SubmittedNutritionSource()
        source.submit(make_submission())
        return DailyDataCollector(source, dismissals, clock=clock)

    async def test_today(self, collector):
        data = await collector.collect()

        assert data.today_calories == 700
        assert data.today_protein == 45
        assert data.today_fiber == 10
        assert data.today_meal_count == 2
        assert [f.name for f in data.today_foods] == ["Oatmeal", "Chicken Salad"]
        assert data.calorie_percent == 35
        assert data.protein_percent == 30
        assert data.water_percent == 48
        assert data.current_hour == 14
        assert data.day_progress == 0.5
        assert data.user_goal == UserGoal.maintain

    async def test_targets(self, collector):
        data = await collector.collect()

        assert data.calorie_target == 2000
        assert data.carb_target == 224
        assert data.fat_target == 56
        assert data.water_target == 2500

    async def test_week(self, collector):
        data = await collector.collect()

        assert len(data.weekly_daily_totals) == 7
        assert data.weekly_daily_totals[0].date == "2026-03-10"
        assert data.weekly_daily_totals[0].calories == 700
        assert data.avg_calories_7d == 1686
        assert data.avg_protein_7d == 101
        assert data.logging_streak == 7
        assert data.calorie_streak == 0
        assert data.days_using_app == 30

    async def test_alerts(self, collector):
        data = await collector.collect()

        assert [a.nutrient_id for a in data.active_alerts] == ["iron"]
        assert data.active_alerts[0].severity == AlertSeverity.concern

    async def test_dismissed_alerts_are_left_out(self, collector, dismissals):
        dismissals.dismiss("iron", AlertSeverity.concern)

        data = await collector.collect()

        assert data.active_alerts == []

    async def test_nutrient_history(self, collector):
        history = await collector.collect_nutrient_history()

        assert history.days_using_app == 30
        assert history.days_since_last_log == 0
        assert history.days_with_data == 7
        assert history.daily_intake == {"iron": [4.5] * 7}

    async def test_empty_source(self, clock, dismissals):
        collector = DailyDataCollector(SubmittedNutritionSource(), dismissals, clock=clock)

        data = await collector.collect()

        assert data.today_meal_count == 0
        assert data.days_using_app == 1
        assert data.logging_streak == 0
        assert data.active_alerts == []


class TestSubmittedNutritionSource:
    """Tests for the in-process submission source."""

    async def test_history_does_not_overwrite_submitted_day(self):
        source = SubmittedNutritionSource()
        yesterday = FIXED_NOW.date() - timedelta(days=1)
        source.submit(make_submission(date=yesterday, history=[]))

        source.submit(make_submission())

        totals = await source.get_daily_totals(yesterday, yesterday)
        assert totals[yesterday].calories == 700

    async def test_empty_day_is_not_a_log_date(self):
        source = SubmittedNutritionSource()

        source.submit(make_submission(entries=[], history=[], log_dates=[]))

        assert await source.get_dates_with_logs() == []

    async def test_dates_most_recent_first(self):
        source = SubmittedNutritionSource()

        source.submit(make_submission())

        dates = await source.get_dates_with_logs()
        assert dates[0] == FIXED_NOW.date()
        assert dates[-1] == FIXED_NOW.date() - timedelta(days=29)
