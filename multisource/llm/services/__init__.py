"""Service layer exports."""

from .agent_service import AgentService, get_agent_service
from .history_store import HistoryStore, get_history_store
from .openai_client import LLMClient, get_llm_client
from .orchestrator import AgentOrchestrator, parse_decision

__all__ = [
    "AgentOrchestrator",
    "AgentService",
    "HistoryStore",
    "LLMClient",
    "get_agent_service",
    "get_history_store",
    "get_llm_client",
    "parse_decision",
]
