"""Nutrient alerts router."""

from fastapi import APIRouter, Depends, HTTPException, status

from nutrition_insights.core.daily_insights import UnknownNutrientError
from nutrition_insights.schemas.alerts import (
    DismissAlertRequest,
    DismissAlertResponse,
    MicronutrientSummaryResponse,
    NutrientAlertsResponse,
)
from nutrition_insights.schemas.common import ErrorResponse
from nutrition_insights.services.insight_engine import InsightEngine, get_insight_engine

router = APIRouter(prefix="/api/alerts/nutrients", tags=["alerts"])


@router.get("", response_model=NutrientAlertsResponse)
async def get_nutrient_alerts(
    engine: InsightEngine = Depends(get_insight_engine),
) -> NutrientAlertsResponse:
    """Active deficiency alerts for the trailing week, most severe first."""
    result = await engine.get_alerts()
    return NutrientAlertsResponse(alerts=result.checks, has_alerts=result.has_alerts)


@router.post(
    "/dismiss",
    response_model=DismissAlertResponse,
    responses={
        200: {"description": "Alert dismissed"},
        404: {"model": ErrorResponse, "description": "Unknown nutrient"},
    },
)
async def dismiss_nutrient_alert(
    request: DismissAlertRequest,
    engine: InsightEngine = Depends(get_insight_engine),
) -> DismissAlertResponse:
    """Hide one alert at one severity for seven days.

    A worse severity for the same nutrient still alerts.
    """
    try:
        dismissal = await engine.dismiss_alert(request.nutrient_id, request.severity)
    except UnknownNutrientError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return DismissAlertResponse(
        alert_id=dismissal.alert_id,
        dismissed_at=dismissal.dismissed_at,
        expires_at=dismissal.expires_at,
    )


@router.get("/summary", response_model=MicronutrientSummaryResponse)
async def get_micronutrient_summary(
    engine: InsightEngine = Depends(get_insight_engine),
) -> MicronutrientSummaryResponse:
    """Weekly coverage of every nutrient with recorded data."""
    return MicronutrientSummaryResponse(nutrients=await engine.get_micronutrient_summary())
