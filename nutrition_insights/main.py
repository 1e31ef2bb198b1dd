"""Nutrition Insights FastAPI Application."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nutrition_insights import __version__
from nutrition_insights.config import settings
from nutrition_insights.database import close_database, create_tables
from nutrition_insights.logging_config import get_logger, setup_logging
from nutrition_insights.routers import alerts, health, insights, model, nutrition
from nutrition_insights.services.insight_engine import get_insight_engine
from nutrition_insights.services.scheduler import start_scheduler, stop_scheduler

setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    await create_tables()
    engine = get_insight_engine()
    await engine.load_state()
    start_scheduler()
    logger.info("Nutrition Insights API started")

    yield

    # Shutdown
    logger.info("Shutting down Nutrition Insights API...")
    stop_scheduler()
    await engine.shutdown()
    await close_database()
    logger.info("Nutrition Insights API shutdown complete")


app = FastAPI(
    title="Nutrition Insights API",
    description="Daily nutrition insights with an optional on-device language model",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(nutrition.router)
app.include_router(insights.router)
app.include_router(alerts.router)
app.include_router(model.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "Nutrition Insights API",
        "version": __version__,
        "docs": "/docs",
    }
