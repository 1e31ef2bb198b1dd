"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from nutrition_insights.database import check_database_connection
from nutrition_insights.services.insight_engine import InsightEngine, get_insight_engine

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=None)
async def health_check(engine: InsightEngine = Depends(get_insight_engine)) -> Response:
    """
    Health check endpoint with database and model status.

    Returns:
        {"status": "healthy", "database": "connected", "model": <status>}
        {"status": "degraded", "database": "disconnected", "model": <status>}

    The model status is informational; insights degrade to rule-based
    text without it.
    """
    db_connected = await check_database_connection()
    model_status = await engine.provider.get_status()

    if db_connected:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={
                "status": "healthy",
                "database": "connected",
                "model": model_status.value,
            },
        )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "degraded",
            "database": "disconnected",
            "model": model_status.value,
        },
    )


@router.get("/health/live")
async def liveness_probe() -> dict[str, Any]:
    """Liveness probe; does not check any dependency."""
    return {"status": "alive"}
