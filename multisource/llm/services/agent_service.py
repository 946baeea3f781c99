"""Query pipeline: orchestrate, record in history, shape the response."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache

from ...core.config import AgentSettings, get_settings
from ...core.logging_config import get_logger
from ...core.messages import get_string
from ...mcp.registry import ToolRegistry
from ...mcp.server import get_tool_registry
from ...mcp.tools import BashCommandTool, DocumentSearchTool, SqliteQueryTool
from ..schemas.query import (
    AgentStepModel,
    BashStats,
    DataSourceStats,
    DocumentStats,
    QueryResponse,
    SqliteStats,
)
from .history_store import HistoryStore, get_history_store
from .openai_client import get_llm_client
from .orchestrator import AgentOrchestrator

logger = get_logger(__name__)


class AgentService:
    def __init__(
        self,
        orchestrator: AgentOrchestrator,
        registry: ToolRegistry,
        history: HistoryStore,
        *,
        locale: str = "pt-BR",
    ) -> None:
        self._orchestrator = orchestrator
        self._registry = registry
        self._history = history
        self._locale = locale

    async def process_query(
        self,
        query: str,
        *,
        context: str | None = None,
        session_id: str | None = None,
    ) -> QueryResponse:
        logger.info(
            "query_received",
            session_id=session_id,
            has_context=bool(context),
            query_preview=query[:200],
        )
        result = await self._orchestrator.run(query)

        history_id = await self._history.add_entry(
            query,
            result.answer,
            datetime.now(tz=timezone.utc),
            result.duration_ms,
            result.success,
        )

        return QueryResponse(
            answer=result.answer,
            steps=[AgentStepModel(**step.to_dict()) for step in result.steps],
            success=result.success,
            duration_ms=result.duration_ms,
            history_id=history_id,
            timestamp=datetime.now(tz=timezone.utc),
            error=result.error,
        )

    def data_source_stats(self) -> DataSourceStats:
        sqlite_tool = self._registry.get(SqliteQueryTool.name)
        document_tool = self._registry.get(DocumentSearchTool.name)
        bash_tool = self._registry.get(BashCommandTool.name)

        sqlite = SqliteStats()
        documents = DocumentStats()
        try:
            sqlite = SqliteStats(**sqlite_tool.stats())
        except OSError as exc:
            logger.debug("sqlite_stats_unavailable", error=str(exc))
        try:
            documents = DocumentStats(**document_tool.stats())
        except OSError as exc:
            logger.debug("document_stats_unavailable", error=str(exc))

        return DataSourceStats(
            sqlite=sqlite,
            documents=documents,
            bash=BashStats(enabled=bash_tool.enabled),
        )

    def suggested_questions(self) -> list[str]:
        stats = self.data_source_stats()
        suggestions: list[str] = []

        if stats.sqlite.count > 0:
            database = stats.sqlite.databases[0]
            suggestions.append(get_string("suggest_tables", self._locale, database=database))
            suggestions.append(get_string("suggest_rows", self._locale, database=database))

        if stats.documents.count > 0:
            document = stats.documents.files[0]
            suggestions.append(get_string("suggest_document", self._locale, document=document))
            suggestions.append(get_string("suggest_search", self._locale))

        if stats.bash.enabled:
            suggestions.append(get_string("suggest_date", self._locale))
            suggestions.append(get_string("suggest_weather", self._locale))

        return suggestions


def build_agent_service(settings: AgentSettings) -> AgentService:
    registry = get_tool_registry()
    orchestrator = AgentOrchestrator(
        get_llm_client(),
        registry,
        max_iterations=settings.max_iterations,
        agent_name=settings.agent_name,
        locale=settings.response_locale,
    )
    return AgentService(
        orchestrator,
        registry,
        get_history_store(),
        locale=settings.response_locale,
    )


@lru_cache
def get_agent_service() -> AgentService:
    return build_agent_service(get_settings())
