"""Nutrient alert API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from nutrition_insights.core.daily_insights import AlertSeverity, DeficiencyCheck
from nutrition_insights.core.daily_insights.models import MicronutrientSummary


class NutrientAlertsResponse(BaseModel):
    """Response schema for active nutrient alerts."""

    alerts: list[DeficiencyCheck]
    has_alerts: bool


class DismissAlertRequest(BaseModel):
    """Request schema for dismissing a nutrient alert."""

    nutrient_id: str = Field(..., min_length=1)
    severity: AlertSeverity


class DismissAlertResponse(BaseModel):
    """Response schema for a stored dismissal."""

    alert_id: str
    dismissed_at: datetime
    expires_at: datetime


class MicronutrientSummaryResponse(BaseModel):
    """Response schema for weekly micronutrient coverage."""

    nutrients: list[MicronutrientSummary]
