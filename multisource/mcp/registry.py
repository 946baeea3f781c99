"""Tool registry and the FastMCP server instance the tools are published on."""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from ..core.exceptions import DuplicateToolError, ToolRegistryError, UnknownToolError
from ..core.logging_config import get_logger
from .base import Tool

logger = get_logger(__name__)

mcp = FastMCP("multisource-agent")


class ToolRegistry:
    """Ordered set of tools, writable only until :meth:`freeze` is called."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._frozen = False

    def register(self, tool: Tool) -> None:
        if self._frozen:
            raise ToolRegistryError(f"Registry is frozen; cannot register {tool.name}")
        if tool.name in self._tools:
            raise DuplicateToolError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool
        logger.debug("tool_registered", tool=tool.name)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(f"Unknown tool: {name}") from None

    def list_tools(self) -> tuple[Tool, ...]:
        """Registered tools in registration order."""

        return tuple(self._tools.values())

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def get_tools_schema(self) -> list[dict[str, Any]]:
        return [tool.to_openai_tool() for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
