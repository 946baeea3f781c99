"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request

from ..core.config import env_file_candidates, get_settings, resolved_env_file
from ..core.logging_config import configure_logging, get_logger
from .api.agent import router as agent_router
from .api.events import router as events_router
from .api.history import router as history_router
from .api.tools import router as tools_router
from .services.agent_service import get_agent_service

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the agent before serving; a missing credential aborts startup."""

    configure_logging()
    settings = get_settings()
    logger.info(
        "agent_startup",
        env=settings.app_env,
        log_level=settings.log_level,
        agent_host=settings.agent_host,
        agent_port=settings.agent_port,
        model=settings.openai_model,
        max_iterations=settings.max_iterations,
        bash_enabled=settings.enable_bash_commands,
    )
    logger.info(
        "environment_loaded",
        env_file=resolved_env_file() or "not-found",
        env_candidates=list(env_file_candidates()),
        sqlite_path=str(settings.sqlite_path),
        documents_path=str(settings.documents_path),
        history_file=str(settings.history_file),
    )
    get_agent_service()
    logger.info("agent_ready")
    yield
    logger.info("agent_shutdown")


app = FastAPI(
    title="Multi-Source AI Agent",
    version="0.1.0",
    description="Natural-language questions over SQLite databases, documents and shell commands.",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_incoming_requests(request: Request, call_next):
    logger.info(
        "http_request_received",
        method=request.method,
        path=request.url.path,
        client=str(request.client[0]) if request.client else "unknown",
    )
    response = await call_next(request)
    logger.info(
        "http_request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
    )
    return response


app.include_router(agent_router)
app.include_router(history_router)
app.include_router(tools_router)
app.include_router(events_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(tz=timezone.utc).isoformat()}


@app.get("/")
async def index() -> dict[str, str]:
    return {"service": "multisource-agent", "status": "ok"}
