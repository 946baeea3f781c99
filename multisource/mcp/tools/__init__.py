"""Agent tools grouped by data source."""

from .bash import BashCommandTool, is_dangerous_command
from .documents import DocumentSearchTool
from .sqlite import SqliteQueryTool

__all__ = [
    "BashCommandTool",
    "DocumentSearchTool",
    "SqliteQueryTool",
    "is_dangerous_command",
]
