"""HTTP API routers."""

from .agent import router as agent_router
from .events import router as events_router
from .history import router as history_router
from .tools import router as tools_router

__all__ = ["agent_router", "events_router", "history_router", "tools_router"]
