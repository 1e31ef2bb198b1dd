"""Daily and legacy insights router."""

from fastapi import APIRouter, Depends, HTTPException, status

from nutrition_insights.core.daily_insights import (
    DataUnavailableError,
    QuestionId,
    UnknownQuestionError,
    get_question,
)
from nutrition_insights.core.daily_insights.legacy import get_empty_state_message
from nutrition_insights.schemas.common import ErrorResponse
from nutrition_insights.schemas.insights import (
    DailyInsightsOverview,
    EmptyState,
    InsightAnswer,
    LegacyEnabledRequest,
    LegacyInsightCard,
    LegacyInsightsResponse,
)
from nutrition_insights.services.insight_engine import InsightEngine, get_insight_engine

router = APIRouter(prefix="/api/insights", tags=["insights"])


def _overview(engine: InsightEngine) -> DailyInsightsOverview:
    store = engine.daily_store
    cache = store.cache if store.has_current_data() else None
    return DailyInsightsOverview.build(
        engine.daily.get_headline(),
        engine.daily.get_suggested_questions(),
        engine.daily.get_available_questions(),
        date=cache.date if cache else None,
        llm_status=store.llm_status,
        is_generating=store.is_generating,
        active_question_id=store.active_question_id,
        generation_error=store.generation_error,
        last_data_update=cache.last_data_update if cache else None,
    )


@router.get("/daily", response_model=DailyInsightsOverview)
async def get_daily_insights(
    engine: InsightEngine = Depends(get_insight_engine),
) -> DailyInsightsOverview:
    """Headline, suggested questions and every available question.

    Refreshes the snapshot first when it is stale.
    """
    await engine.daily.ensure_fresh_data()
    await engine.daily.refresh_model_status()
    return _overview(engine)


@router.post("/daily/refresh", response_model=DailyInsightsOverview)
async def refresh_daily_insights(
    engine: InsightEngine = Depends(get_insight_engine),
) -> DailyInsightsOverview:
    """Force a snapshot refresh, keeping today's narratives."""
    await engine.daily.refresh_data(force=True)
    await engine.save_state()
    return _overview(engine)


@router.post(
    "/daily/{question_id}",
    response_model=InsightAnswer,
    responses={
        200: {"description": "Narrative for the question"},
        404: {"model": ErrorResponse, "description": "Unknown question"},
        503: {"model": ErrorResponse, "description": "No nutrition data for today"},
    },
)
async def answer_question(
    question_id: str,
    engine: InsightEngine = Depends(get_insight_engine),
) -> InsightAnswer:
    """Answer one daily question.

    Serves a cached narrative when one is fresh; otherwise the model
    narrates the question's analysis, or the rule-based text is used.
    """
    try:
        qid = QuestionId(question_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(UnknownQuestionError(question_id)),
        ) from e

    try:
        generated = await engine.daily.generate_insight(qid)
    except UnknownQuestionError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except DataUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)
        ) from e

    await engine.save_state()
    response = generated.response
    return InsightAnswer(
        question_id=response.question_id,
        question_text=get_question(qid).text,
        narrative=response.narrative,
        icon=response.icon,
        source=response.source,
        generated_at=response.generated_at,
        date=response.date,
        cached=generated.cached,
        data_cards=response.data_cards,
    )


def _legacy_response(engine: InsightEngine) -> LegacyInsightsResponse:
    store = engine.legacy_store
    cached = store.cached_insights

    empty_state = None
    if engine.daily_store.has_current_data():
        message = get_empty_state_message(engine.daily_store.cache.data)
        if message is not None:
            empty_state = EmptyState(title=message[0], message=message[1])

    return LegacyInsightsResponse(
        insights=[LegacyInsightCard.from_insight(i) for i in cached.insights] if cached else [],
        source=cached.source if cached else None,
        generated_at=cached.generated_at if cached else None,
        valid_until=cached.valid_until if cached else None,
        date=cached.date if cached else None,
        llm_enabled=store.llm_enabled,
        llm_status=store.llm_status,
        is_generating=store.is_generating,
        generation_error=store.generation_error,
        download_progress=store.download_progress,
        empty_state=empty_state,
    )


@router.get("/legacy", response_model=LegacyInsightsResponse)
async def get_legacy_insights(
    force: bool = False,
    engine: InsightEngine = Depends(get_insight_engine),
) -> LegacyInsightsResponse:
    """Insight cards for the original insights screen, regenerated when stale."""
    await engine.legacy.get_insights(force=force)
    await engine.save_state()
    return _legacy_response(engine)


@router.put("/legacy/enabled", response_model=LegacyInsightsResponse)
async def set_legacy_enabled(
    request: LegacyEnabledRequest,
    engine: InsightEngine = Depends(get_insight_engine),
) -> LegacyInsightsResponse:
    """Turn model-written legacy insights on or off.

    Cached cards are dropped so the next read uses the new setting.
    """
    engine.legacy_store.set_llm_enabled(request.enabled)
    engine.legacy_store.clear_insights()
    await engine.save_state()
    return _legacy_response(engine)
