"""Nutrition data sources read by the snapshot collector."""

from datetime import date
from typing import Protocol

from nutrition_insights.logging_config import get_logger
from nutrition_insights.schemas.nutrition import (
    DayTotals,
    LoggedFoodEntry,
    NutritionDaySubmission,
    NutritionTargets,
    WaterIntake,
)

logger = get_logger(__name__)


class NutritionDataSource(Protocol):
    """Read-only view of the user's food log, goals and water."""

    async def get_entries(self, day: date) -> list[LoggedFoodEntry]: ...

    async def get_daily_totals(self, start: date, end: date) -> dict[date, DayTotals]: ...

    async def get_dates_with_logs(self) -> list[date]: ...

    async def get_targets(self, day: date) -> NutritionTargets: ...

    async def get_water(self, day: date) -> WaterIntake: ...

    async def get_nutrient_intake(
        self, start: date, end: date
    ) -> dict[date, dict[str, float]]: ...


class SubmittedNutritionSource:
    """In-process source fed by day submissions from the client.

    A submission replaces everything previously known about its date.
    Its history and nutrient rows fill in earlier days without
    overwriting days that were submitted in full.
    """

    def __init__(self) -> None:
        self._entries: dict[date, list[LoggedFoodEntry]] = {}
        self._totals: dict[date, DayTotals] = {}
        self._log_dates: set[date] = set()
        self._water: dict[date, WaterIntake] = {}
        self._nutrients: dict[date, dict[str, float]] = {}
        self._targets = NutritionTargets()

    def submit(self, submission: NutritionDaySubmission) -> None:
        """Record a submitted day."""
        day = submission.date

        for totals in submission.history:
            if totals.date not in self._entries:
                self._totals[totals.date] = totals
        for row in submission.nutrient_intake:
            self._nutrients[row.date] = dict(row.nutrients)

        self._entries[day] = list(submission.entries)
        self._totals[day] = DayTotals(
            date=day,
            calories=sum(e.calories for e in submission.entries),
            protein=sum(e.protein for e in submission.entries),
            carbs=sum(e.carbs for e in submission.entries),
            fat=sum(e.fat for e in submission.entries),
        )
        self._water[day] = submission.water
        self._targets = submission.targets

        self._log_dates.update(submission.log_dates)
        self._log_dates.update(t.date for t in submission.history if t.calories > 0)
        if submission.entries:
            self._log_dates.add(day)
        else:
            self._log_dates.discard(day)

        logger.info(
            "Nutrition day submitted",
            date=day.isoformat(),
            entries=len(submission.entries),
            history_days=len(submission.history),
        )

    async def get_entries(self, day: date) -> list[LoggedFoodEntry]:
        return list(self._entries.get(day, []))

    async def get_daily_totals(self, start: date, end: date) -> dict[date, DayTotals]:
        return {d: t for d, t in self._totals.items() if start <= d <= end}

    async def get_dates_with_logs(self) -> list[date]:
        """Dates with logs, most recent first."""
        return sorted(self._log_dates, reverse=True)

    async def get_targets(self, day: date) -> NutritionTargets:
        return self._targets

    async def get_water(self, day: date) -> WaterIntake:
        return self._water.get(day, WaterIntake())

    async def get_nutrient_intake(
        self, start: date, end: date
    ) -> dict[date, dict[str, float]]:
        return {d: n for d, n in self._nutrients.items() if start <= d <= end}
