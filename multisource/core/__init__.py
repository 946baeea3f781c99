"""Core infrastructure utilities."""

from .config import AgentSettings, get_settings, require_llm_credentials
from .logging_config import configure_logging, get_logger

__all__ = [
    "AgentSettings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "require_llm_credentials",
]
