"""Direct tool endpoints, bypassing the LLM."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from ...core.exceptions import (
    DocumentNotFoundError,
    SourceNotFoundError,
    ToolExecutionError,
)
from ...core.logging_config import get_logger
from ...mcp.registry import ToolRegistry
from ...mcp.server import get_tool_registry
from ...mcp.tools import BashCommandTool, DocumentSearchTool, SqliteQueryTool
from ...mcp.tools.bash import BashCommandInput
from ...mcp.tools.documents import DocumentSearchInput
from ...mcp.tools.sqlite import SqliteQueryInput

router = APIRouter(prefix="/tools", tags=["tools"])
logger = get_logger(__name__)


def _to_http_error(exc: ToolExecutionError) -> HTTPException:
    if isinstance(exc, (SourceNotFoundError, DocumentNotFoundError)):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


async def _invoke(registry: ToolRegistry, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        return await registry.get(name).invoke(arguments)
    except ToolExecutionError as exc:
        logger.warning("direct_tool_call_failed", tool=name, error=str(exc))
        raise _to_http_error(exc) from exc


@router.get("/sqlite/databases", response_model=list[str])
async def list_databases(registry: ToolRegistry = Depends(get_tool_registry)) -> list[str]:
    return registry.get(SqliteQueryTool.name).list_databases()


@router.get("/sqlite/{database}/tables", response_model=list[str])
async def list_tables(
    database: str, registry: ToolRegistry = Depends(get_tool_registry)
) -> list[str]:
    try:
        return await registry.get(SqliteQueryTool.name).get_tables(database)
    except ToolExecutionError as exc:
        raise _to_http_error(exc) from exc


@router.post("/sqlite/query")
async def execute_query(
    request: SqliteQueryInput, registry: ToolRegistry = Depends(get_tool_registry)
) -> dict[str, Any]:
    return await _invoke(registry, SqliteQueryTool.name, request.model_dump())


@router.get("/documents", response_model=list[str])
async def list_documents(registry: ToolRegistry = Depends(get_tool_registry)) -> list[str]:
    return registry.get(DocumentSearchTool.name).list_documents()


@router.post("/documents/search")
async def search_document(
    request: DocumentSearchInput, registry: ToolRegistry = Depends(get_tool_registry)
) -> dict[str, Any]:
    return await _invoke(registry, DocumentSearchTool.name, request.model_dump())


@router.post("/bash/execute")
async def execute_command(
    request: BashCommandInput, registry: ToolRegistry = Depends(get_tool_registry)
) -> dict[str, Any]:
    return await _invoke(registry, BashCommandTool.name, request.model_dump())
