"""On-device model schemas.

Result objects returned by the model provider, and the request and
response bodies of the model endpoints.
"""

from pydantic import BaseModel, Field

from nutrition_insights.core.daily_insights import DownloadProgress, ModelStatus


class CapabilityResult(BaseModel):
    """Whether this host can run the on-device model."""

    can_run: bool
    reason: str | None = Field(default=None, description="Why the model cannot run")


class DownloadResult(BaseModel):
    """Outcome of a model download."""

    success: bool
    error: str | None = None
    cancelled: bool = False


class GenerationResult(BaseModel):
    """Outcome of one model completion."""

    success: bool
    text: str | None = Field(default=None, description="Raw model output")
    error: str | None = None


class ModelStatusResponse(BaseModel):
    """Response schema for the model status endpoint."""

    status: ModelStatus
    can_run: bool
    reason: str | None = None
    download_progress: DownloadProgress | None = None


class ModelActionResponse(BaseModel):
    """Response schema for model download, cancel and unload."""

    status: ModelStatus
    message: str
