"""Nutrition day submission router."""

from fastapi import APIRouter, Depends

from nutrition_insights.schemas.nutrition import NutritionDayAccepted, NutritionDaySubmission
from nutrition_insights.services.insight_engine import InsightEngine, get_insight_engine

router = APIRouter(prefix="/api/nutrition", tags=["nutrition"])


@router.put(
    "/day",
    response_model=NutritionDayAccepted,
    responses={
        200: {"description": "Day recorded and insights rebuilt"},
        422: {"description": "Invalid submission"},
    },
)
async def submit_day(
    submission: NutritionDaySubmission,
    engine: InsightEngine = Depends(get_insight_engine),
) -> NutritionDayAccepted:
    """Submit a day of nutrition data.

    Replaces whatever was known about the day, invalidates the daily
    insight cache and rebuilds today's snapshot.
    """
    await engine.submit_day(submission)
    return NutritionDayAccepted(
        date=submission.date,
        entries=len(submission.entries),
        message="Nutrition day recorded",
    )
