"""On-device model router."""

from fastapi import APIRouter, Depends, HTTPException, status

from nutrition_insights.core.daily_insights import ModelUnavailableError
from nutrition_insights.schemas.common import ErrorResponse
from nutrition_insights.schemas.model import ModelActionResponse, ModelStatusResponse
from nutrition_insights.services.insight_engine import InsightEngine, get_insight_engine

router = APIRouter(prefix="/api/model", tags=["model"])


@router.get("/status", response_model=ModelStatusResponse)
async def get_model_status(
    engine: InsightEngine = Depends(get_insight_engine),
) -> ModelStatusResponse:
    """Lifecycle status, capability and download progress."""
    model_status = await engine.daily.refresh_model_status()
    capability = await engine.provider.check_capabilities()
    return ModelStatusResponse(
        status=model_status,
        can_run=capability.can_run,
        reason=capability.reason,
        download_progress=engine.provider.progress,
    )


@router.post(
    "/download",
    response_model=ModelActionResponse,
    responses={
        200: {"description": "Model downloaded"},
        409: {"model": ErrorResponse, "description": "Model cannot run on this host"},
        502: {"model": ErrorResponse, "description": "Download failed"},
    },
)
async def download_model(
    engine: InsightEngine = Depends(get_insight_engine),
) -> ModelActionResponse:
    """Download the model file.

    Runs until the download finishes or is cancelled; progress can be
    polled from the status endpoint meanwhile.
    """
    try:
        result = await engine.daily.download_model()
    except ModelUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    model_status = await engine.daily.refresh_model_status()
    if result.cancelled:
        return ModelActionResponse(status=model_status, message="Download cancelled")
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=result.error or "Model download failed",
        )
    return ModelActionResponse(status=model_status, message="Model downloaded")


@router.post("/download/cancel", response_model=ModelActionResponse)
async def cancel_model_download(
    engine: InsightEngine = Depends(get_insight_engine),
) -> ModelActionResponse:
    """Abort the in-flight download, if any."""
    cancelled = engine.daily.cancel_download()
    model_status = await engine.daily.refresh_model_status()
    return ModelActionResponse(
        status=model_status,
        message="Cancellation requested" if cancelled else "No download in progress",
    )


@router.post("/unload", response_model=ModelActionResponse)
async def unload_model(
    engine: InsightEngine = Depends(get_insight_engine),
) -> ModelActionResponse:
    """Release the loaded model; it reloads on the next narrative."""
    await engine.provider.unload()
    model_status = await engine.daily.refresh_model_status()
    return ModelActionResponse(status=model_status, message="Model unloaded")
