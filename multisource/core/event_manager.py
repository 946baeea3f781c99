"""WebSocket manager for pushing chat events to connected clients."""

from __future__ import annotations

import asyncio
import json
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from .logging_config import get_logger

logger = get_logger(__name__)


class ChatEventManager:
    """Track connected chat clients and deliver typed events to them."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        client_id = uuid.uuid4().hex
        async with self._lock:
            self._connections[client_id] = websocket
        logger.info("chat_client_connected", client_id=client_id)
        return client_id

    async def disconnect(self, client_id: str) -> None:
        async with self._lock:
            self._connections.pop(client_id, None)
        logger.info("chat_client_disconnected", client_id=client_id)

    @property
    def connected_count(self) -> int:
        return len(self._connections)

    async def send(self, client_id: str, event: str, payload: dict[str, Any]) -> None:
        """Send one event to a single client; unknown clients are ignored."""

        websocket = self._connections.get(client_id)
        if websocket is None:
            return
        await self._deliver(client_id, websocket, _envelope(event, payload))

    async def broadcast(self, event: str, payload: dict[str, Any]) -> None:
        async with self._lock:
            connections = list(self._connections.items())

        message = _envelope(event, payload)
        for client_id, websocket in connections:
            await self._deliver(client_id, websocket, message)

    async def _deliver(self, client_id: str, websocket: WebSocket, message: str) -> None:
        try:
            await websocket.send_text(message)
        except WebSocketDisconnect:
            await self.disconnect(client_id)
        except RuntimeError as exc:
            logger.warning("chat_event_push_failed", client_id=client_id, error=str(exc))
            await self.disconnect(client_id)


def _envelope(event: str, payload: dict[str, Any]) -> str:
    body = {
        "type": event,
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        **payload,
    }
    return json.dumps(body, ensure_ascii=False, default=str)


event_manager = ChatEventManager()
