"""WebSocket chat channel: queries in, processing/result/error events out."""

import json

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ...core.config import AgentSettings, get_settings
from ...core.event_manager import event_manager
from ...core.logging_config import get_logger
from ...core.messages import get_string
from ..schemas.query import QueryRequest
from ..services.agent_service import AgentService, get_agent_service

router = APIRouter(prefix="/ws", tags=["events"])
logger = get_logger(__name__)


@router.websocket("/chat")
async def chat_socket(
    websocket: WebSocket,
    service: AgentService = Depends(get_agent_service),
    settings: AgentSettings = Depends(get_settings),
) -> None:
    client_id = await event_manager.connect(websocket)
    locale = settings.response_locale
    await event_manager.send(
        client_id, "welcome", {"message": get_string("welcome", locale), "client_id": client_id}
    )

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("chat_message_unparsable", client_id=client_id)
                await event_manager.send(client_id, "error", {"message": "Invalid JSON message"})
                continue

            message_type = data.get("type") if isinstance(data, dict) else None

            if message_type == "chat_message":
                await _handle_chat_message(client_id, data, service, locale)
            elif message_type == "get_suggestions":
                await event_manager.send(
                    client_id, "suggestions", {"suggestions": service.suggested_questions()}
                )
            elif message_type == "get_stats":
                await event_manager.send(
                    client_id, "stats", {"stats": service.data_source_stats().model_dump()}
                )
            else:
                logger.warning("chat_message_unknown_type", client_id=client_id, type=message_type)
                await event_manager.send(
                    client_id, "error", {"message": f"Unknown message type: {message_type}"}
                )
    except WebSocketDisconnect:
        logger.info("chat_socket_closed", client_id=client_id)
    finally:
        await event_manager.disconnect(client_id)


async def _handle_chat_message(
    client_id: str, data: dict, service: AgentService, locale: str
) -> None:
    try:
        request = QueryRequest.model_validate(data)
    except ValidationError as exc:
        await event_manager.send(client_id, "error", {"message": f"Invalid query: {exc.errors()}"})
        return

    logger.info("chat_message_received", client_id=client_id, query_preview=request.query[:200])
    await event_manager.send(client_id, "processing", {"message": get_string("processing", locale)})

    try:
        response = await service.process_query(
            request.query, context=request.context, session_id=request.session_id
        )
    except Exception as exc:
        logger.exception("chat_message_failed", client_id=client_id)
        await event_manager.send(
            client_id, "error", {"message": f"Error processing message: {exc}"}
        )
        return

    await event_manager.send(
        client_id, "chat_response", {**response.model_dump(mode="json"), "client_id": client_id}
    )
