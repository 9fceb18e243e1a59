"""
Event-driven chat surface over a single WebSocket endpoint.

Client -> server events:
- join / join-chat   {userId, sessionId?}
- send-message       {sessionId, message, userId}

Server -> client events:
- chat-joined        {sessionId}
- message-received   {message, timestamp, isBot, needsEscalation, confidence}
- escalation-needed  {sessionId, userId, message, timestamp}   (broadcast)
- error              {message}                                 (sender only)
"""

from __future__ import annotations

import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from supportbot.context import AppContext
from supportbot.deps import get_app_context
from supportbot.logging_config import logger
from supportbot.models import utcnow

router = APIRouter()

JOIN_EVENTS = {"join", "join-chat"}
SEND_MESSAGE_EVENT = "send-message"


def _field(data: Dict[str, Any], name: str) -> str | None:
    value = data.get(name)
    if isinstance(value, str) and value.strip():
        return value
    return None


async def _handle_join(
    context: AppContext, connection_id: str, data: Dict[str, Any]
) -> None:
    manager = context.connections
    user_id = _field(data, "userId")
    if user_id is None:
        await manager.emit(connection_id, "error", {"message": "User ID is required"})
        return

    session_id = _field(data, "sessionId") or context.registry.generate_session_id(user_id)
    manager.join(connection_id, session_id)
    # Same lock as process_message, so the upsert cannot interleave with a
    # history append for this session.
    async with context.locks.hold(session_id):
        await context.registry.create_session(
            session_id,
            user_id,
            {"connectionId": connection_id, "connectedAt": utcnow().isoformat()},
        )
    await manager.emit(connection_id, "chat-joined", {"sessionId": session_id})
    logger.info("User %s joined chat session: %s", user_id, session_id)


async def _handle_send_message(
    context: AppContext, connection_id: str, data: Dict[str, Any]
) -> None:
    manager = context.connections
    session_id = _field(data, "sessionId")
    message = _field(data, "message")
    user_id = _field(data, "userId")
    if session_id is None or message is None or user_id is None:
        await manager.emit(
            connection_id,
            "error",
            {"message": "Session ID, message, and user ID are required"},
        )
        return

    response = await context.orchestrator.process_message(session_id, message, user_id)
    payload = response.model_dump(mode="json", by_alias=True)

    await manager.emit_to_room(
        session_id,
        "message-received",
        {
            "message": payload["message"],
            "timestamp": payload["timestamp"],
            "isBot": True,
            "needsEscalation": payload["needsEscalation"],
            "confidence": payload["confidence"],
        },
        include=connection_id,
    )

    if response.needs_escalation:
        await manager.broadcast(
            "escalation-needed",
            {
                "sessionId": session_id,
                "userId": user_id,
                "message": message,
                "timestamp": payload["timestamp"],
            },
        )
        logger.info("Escalation needed for session %s", session_id)


async def _receive_frame(websocket: WebSocket) -> str | None:
    """
    Next client frame as text. Binary frames are decoded as UTF-8; None when
    the frame carries nothing readable.
    """
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
    text = message.get("text")
    if text is not None:
        return text
    data = message.get("bytes")
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


async def _dispatch(context: AppContext, connection_id: str, raw: str) -> None:
    manager = context.connections
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError:
        await manager.emit(connection_id, "error", {"message": "Malformed frame"})
        return
    if not isinstance(frame, dict):
        await manager.emit(connection_id, "error", {"message": "Malformed frame"})
        return

    event = frame.get("event")
    data = frame.get("data")
    if not isinstance(data, dict):
        data = {}

    if event in JOIN_EVENTS:
        await _handle_join(context, connection_id, data)
    elif event == SEND_MESSAGE_EVENT:
        await _handle_send_message(context, connection_id, data)
    else:
        await manager.emit(connection_id, "error", {"message": f"Unknown event: {event}"})


@router.websocket("/ws")
async def chat_websocket(
    websocket: WebSocket,
    context: AppContext = Depends(get_app_context),
) -> None:
    manager = context.connections
    connection_id = await manager.connect(websocket)
    try:
        while True:
            raw = await _receive_frame(websocket)
            try:
                if raw is None:
                    await manager.emit(connection_id, "error", {"message": "Malformed frame"})
                    continue
                await _dispatch(context, connection_id, raw)
            except Exception:
                logger.exception("Error processing event on connection %s", connection_id)
                await manager.emit(
                    connection_id, "error", {"message": "Failed to process message"}
                )
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(connection_id)


__all__ = ["router"]
