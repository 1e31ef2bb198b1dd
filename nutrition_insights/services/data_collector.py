"""Daily snapshot collector.

Builds the ``DailyInsightData`` snapshot that every scorer, analyzer and
headline rule reads, from whatever ``NutritionDataSource`` backs the
app. All derived numbers (percentages, streaks, day progress) are
computed here once.
"""

from datetime import date, datetime, timedelta

from nutrition_insights.config import settings
from nutrition_insights.core.daily_insights import (
    DailyInsightData,
    DeficiencyCalculator,
    NutrientIntakeHistory,
)
from nutrition_insights.core.daily_insights.constants import (
    CARB_KCAL_PER_GRAM,
    FAT_KCAL_PER_GRAM,
    PROTEIN_KCAL_PER_GRAM,
)
from nutrition_insights.core.daily_insights.models import (
    DeficiencyCheck,
    FoodItem,
    MealSummary,
    WeeklyDayTotal,
)
from nutrition_insights.logging_config import get_logger
from nutrition_insights.schemas.nutrition import LoggedFoodEntry, NutritionTargets
from nutrition_insights.services.alert_dismissals import AlertDismissalStore
from nutrition_insights.services.clock import Clock, local_now
from nutrition_insights.services.nutrition_source import NutritionDataSource

logger = get_logger(__name__)

WEEK_DAYS = 7
DEFAULT_CALORIE_TARGET = 2000.0
DEFAULT_PROTEIN_TARGET = 150.0
DEFAULT_FAT_SHARE = 0.25
CALORIE_STREAK_TOLERANCE = 0.10


def safe_percent(value: float, target: float) -> int:
    """Rounded percent of target, 0 when there is no target."""
    if target <= 0:
        return 0
    return round(value / target * 100)


def compute_day_progress(
    hour: int,
    waking_start: int | None = None,
    waking_end: int | None = None,
) -> float:
    """Fraction of the waking day elapsed, clamped to [0, 1]."""
    start = settings.waking_start_hour if waking_start is None else waking_start
    end = settings.waking_end_hour if waking_end is None else waking_end
    if end <= start:
        return 0.0
    return max(0.0, min(1.0, (hour - start) / (end - start)))


def compute_logging_streak(week: list[WeeklyDayTotal]) -> int:
    """Consecutive logged days, newest first.

    An unlogged today does not break the streak; it starts from yesterday.
    """
    streak = 0
    for index, day in enumerate(week):
        if day.logged:
            streak += 1
        elif index == 0:
            continue
        else:
            break
    return streak


def compute_calorie_streak(week: list[WeeklyDayTotal], calorie_target: float) -> int:
    """Consecutive logged days within 10% of the calorie target, newest first."""
    streak = 0
    for index, day in enumerate(week):
        on_target = (
            day.logged
            and abs(day.calories - calorie_target) / max(1.0, calorie_target)
            <= CALORIE_STREAK_TOLERANCE
        )
        if on_target:
            streak += 1
        elif index == 0 and not day.logged:
            continue
        else:
            break
    return streak


def compute_days_using_app(today: date, dates_with_logs: list[date]) -> int:
    """Days since the first ever log, counting today; at least 1."""
    if not dates_with_logs:
        return 1
    first = min(dates_with_logs)
    return max(1, (today - first).days + 1)


def resolve_targets(targets: NutritionTargets) -> tuple[float, float, float, float]:
    """Fill in missing targets.

    Fat defaults to a quarter of calories; carbs take whatever calories
    protein and fat leave over.

    Returns:
        Calorie, protein, carb and fat targets
    """
    calories = targets.calories or DEFAULT_CALORIE_TARGET
    protein = targets.protein or DEFAULT_PROTEIN_TARGET
    if targets.fat is not None:
        fat = targets.fat
    else:
        fat = round(calories * DEFAULT_FAT_SHARE / FAT_KCAL_PER_GRAM)
    if targets.carbs is not None:
        carbs = targets.carbs
    else:
        leftover = calories - protein * PROTEIN_KCAL_PER_GRAM - fat * FAT_KCAL_PER_GRAM
        carbs = round(max(0.0, leftover) / CARB_KCAL_PER_GRAM)
    return calories, protein, float(carbs), float(fat)


def group_meals(entries: list[LoggedFoodEntry]) -> list[MealSummary]:
    """Group entries by meal label in first-seen order."""
    groups: dict[str, list[LoggedFoodEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.meal_type or "Snack", []).append(entry)

    meals = []
    for label, items in groups.items():
        times = [e.logged_at for e in items if e.logged_at is not None]
        meals.append(
            MealSummary(
                meal_label=label,
                total_calories=sum(e.calories for e in items),
                total_protein=sum(e.protein for e in items),
                total_carbs=sum(e.carbs for e in items),
                total_fat=sum(e.fat for e in items),
                first_log_time=min(times) if times else None,
                foods=[_food_item(e) for e in items],
            )
        )
    return meals


def _food_item(entry: LoggedFoodEntry) -> FoodItem:
    return FoodItem(
        name=entry.food_name,
        calories=entry.calories,
        protein=entry.protein,
        carbs=entry.carbs,
        fat=entry.fat,
    )


class DailyDataCollector:
    """Collects the daily snapshot from a nutrition data source."""

    def __init__(
        self,
        source: NutritionDataSource,
        dismissals: AlertDismissalStore,
        calculator: DeficiencyCalculator | None = None,
        clock: Clock = local_now,
    ) -> None:
        self.source = source
        self.dismissals = dismissals
        self.calculator = calculator or DeficiencyCalculator()
        self._clock = clock

    async def collect(self, now: datetime | None = None) -> DailyInsightData:
        """Build the snapshot for the current day.

        Args:
            now: Moment to collect for; defaults to the collector's clock

        Returns:
            A fully derived DailyInsightData
        """
        now = now or self._clock()
        today = now.date()

        entries = await self.source.get_entries(today)
        week = await self._weekly_totals(today)
        dates_with_logs = await self.source.get_dates_with_logs()
        targets = await self.source.get_targets(today)
        water = await self.source.get_water(today)

        calorie_target, protein_target, carb_target, fat_target = resolve_targets(targets)
        meals = group_meals(entries)

        today_calories = sum(e.calories for e in entries)
        today_protein = sum(e.protein for e in entries)
        today_carbs = sum(e.carbs for e in entries)
        today_fat = sum(e.fat for e in entries)

        logged_days = [d for d in week if d.logged]
        avg_calories = avg_protein = 0
        if logged_days:
            avg_calories = round(sum(d.calories for d in logged_days) / len(logged_days))
            avg_protein = round(sum(d.protein for d in logged_days) / len(logged_days))

        days_using_app = compute_days_using_app(today, dates_with_logs)
        alerts = await self._active_alerts(today, days_using_app, dates_with_logs, week)

        data = DailyInsightData(
            today_calories=today_calories,
            today_protein=today_protein,
            today_carbs=today_carbs,
            today_fat=today_fat,
            today_fiber=sum(e.fiber for e in entries),
            calorie_target=calorie_target,
            protein_target=protein_target,
            carb_target=carb_target,
            fat_target=fat_target,
            water_target=water.goal_ml,
            today_water=water.consumed_ml,
            today_meal_count=len(meals),
            today_foods=[_food_item(e) for e in entries],
            meals_with_timestamps=meals,
            avg_calories_7d=avg_calories,
            avg_protein_7d=avg_protein,
            logging_streak=compute_logging_streak(week),
            calorie_streak=compute_calorie_streak(week, calorie_target),
            weekly_daily_totals=week,
            user_goal=targets.goal,
            days_using_app=days_using_app,
            calorie_percent=safe_percent(today_calories, calorie_target),
            protein_percent=safe_percent(today_protein, protein_target),
            carb_percent=safe_percent(today_carbs, carb_target),
            fat_percent=safe_percent(today_fat, fat_target),
            water_percent=safe_percent(water.consumed_ml, water.goal_ml),
            current_hour=now.hour,
            day_progress=compute_day_progress(now.hour),
            active_alerts=alerts,
        )

        logger.info(
            "Daily snapshot collected",
            date=today.isoformat(),
            meals=data.today_meal_count,
            calorie_percent=data.calorie_percent,
            logging_streak=data.logging_streak,
            active_alerts=len(alerts),
        )
        return data

    async def collect_nutrient_history(self, now: datetime | None = None) -> NutrientIntakeHistory:
        """Trailing-week nutrient history for deficiency checks."""
        now = now or self._clock()
        today = now.date()
        week = await self._weekly_totals(today)
        dates_with_logs = await self.source.get_dates_with_logs()
        return await self._nutrient_history(
            today, compute_days_using_app(today, dates_with_logs), dates_with_logs, week
        )

    async def _weekly_totals(self, today: date) -> list[WeeklyDayTotal]:
        """The seven days ending today, newest first."""
        start = today - timedelta(days=WEEK_DAYS - 1)
        totals = await self.source.get_daily_totals(start, today)

        week = []
        for offset in range(WEEK_DAYS):
            day = today - timedelta(days=offset)
            row = totals.get(day)
            week.append(
                WeeklyDayTotal(
                    date=day.isoformat(),
                    logged=row is not None and row.calories > 0,
                    calories=row.calories if row else 0,
                    protein=row.protein if row else 0,
                    carbs=row.carbs if row else 0,
                    fat=row.fat if row else 0,
                )
            )
        return week

    async def _nutrient_history(
        self,
        today: date,
        days_using_app: int,
        dates_with_logs: list[date],
        week: list[WeeklyDayTotal],
    ) -> NutrientIntakeHistory:
        start = today - timedelta(days=WEEK_DAYS - 1)
        intake = await self.source.get_nutrient_intake(start, today)

        nutrient_ids = sorted({nid for day in intake.values() for nid in day})
        days = [today - timedelta(days=offset) for offset in range(WEEK_DAYS)]
        daily_intake = {
            nid: [intake.get(day, {}).get(nid) for day in days] for nid in nutrient_ids
        }

        last_log = max(dates_with_logs) if dates_with_logs else None
        return NutrientIntakeHistory(
            days_using_app=days_using_app,
            days_since_last_log=max(0, (today - last_log).days) if last_log else None,
            days_with_data=sum(1 for d in week if d.logged),
            daily_intake=daily_intake,
        )

    async def _active_alerts(
        self,
        today: date,
        days_using_app: int,
        dates_with_logs: list[date],
        week: list[WeeklyDayTotal],
    ) -> list[DeficiencyCheck]:
        history = await self._nutrient_history(today, days_using_app, dates_with_logs, week)
        result = self.calculator.evaluate(
            history, self.dismissals.get_dismissed_alert_ids()
        )
        return list(result.checks)
