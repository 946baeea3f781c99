"""Agent query endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ...core.logging_config import get_logger
from ..schemas.query import DataSourceStats, QueryRequest, QueryResponse
from ..services.agent_service import AgentService, get_agent_service

router = APIRouter(prefix="/agent", tags=["agent"])
logger = get_logger(__name__)


@router.post("/query", response_model=QueryResponse)
async def process_query(
    request: QueryRequest,
    service: AgentService = Depends(get_agent_service),
) -> QueryResponse:
    response = await service.process_query(
        request.query, context=request.context, session_id=request.session_id
    )
    logger.info(
        "query_request_completed",
        success=response.success,
        steps=len(response.steps),
        duration_ms=response.duration_ms,
        history_id=response.history_id,
    )
    return response


@router.get("/stats", response_model=DataSourceStats)
async def data_source_stats(
    service: AgentService = Depends(get_agent_service),
) -> DataSourceStats:
    return service.data_source_stats()


@router.get("/suggestions", response_model=list[str])
async def suggested_questions(
    service: AgentService = Depends(get_agent_service),
) -> list[str]:
    return service.suggested_questions()


@router.get("/health")
async def agent_health() -> dict[str, object]:
    return {
        "status": "healthy",
        "initialized": get_agent_service.cache_info().currsize > 0,
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }
