"""Process-wide tool registry and its FastMCP publication."""

from __future__ import annotations

import sys
from functools import lru_cache
from typing import Any, Mapping

from ..core.config import AgentSettings, get_settings
from ..core.logging_config import configure_logging, get_logger
from .registry import ToolRegistry, mcp
from .tools import BashCommandTool, DocumentSearchTool, SqliteQueryTool

logger = get_logger(__name__)


def build_tool_registry(settings: AgentSettings) -> ToolRegistry:
    """Create the three data-source tools and freeze the registry."""

    registry = ToolRegistry()
    registry.register(SqliteQueryTool(settings.sqlite_path))
    registry.register(DocumentSearchTool(settings.documents_path))
    registry.register(BashCommandTool(enabled=settings.enable_bash_commands))
    registry.freeze()
    logger.info(
        "tool_registry_ready",
        tools=registry.tool_names,
        bash_enabled=settings.enable_bash_commands,
    )
    return registry


@lru_cache
def get_tool_registry() -> ToolRegistry:
    """Return the registry shared by every request in this process."""

    return build_tool_registry(get_settings())


async def call_tool(name: str, arguments: Mapping[str, Any]) -> dict[str, Any]:
    """Execute a registered tool by name."""

    logger.debug("tool_call", name=name, arguments=dict(arguments))
    return await get_tool_registry().get(name).invoke(arguments)


@mcp.tool(name=SqliteQueryTool.name, description=SqliteQueryTool.description)
async def sqlite_query(source_name: str, query: str) -> dict[str, Any]:
    return await call_tool(SqliteQueryTool.name, {"source_name": source_name, "query": query})


@mcp.tool(name=DocumentSearchTool.name, description=DocumentSearchTool.description)
async def document_search(filename: str, search_term: str | None = None) -> dict[str, Any]:
    return await call_tool(
        DocumentSearchTool.name, {"filename": filename, "search_term": search_term}
    )


@mcp.tool(name=BashCommandTool.name, description=BashCommandTool.description)
async def bash_command(command: str, description: str | None = None) -> dict[str, Any]:
    return await call_tool(BashCommandTool.name, {"command": command, "description": description})


def main() -> None:
    """Serve the tools to MCP clients over stdio."""

    configure_logging(stream=sys.stderr)
    get_tool_registry()
    mcp.run()


if __name__ == "__main__":
    main()
