"""
In-process registry of WebSocket connections and session rooms.

Every frame is a JSON object {"event": <name>, "data": {...}}. A room is
the set of connections attached to one session id; broadcasts go to every
open connection (support-side listeners included).
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Set

from fastapi import WebSocket

from supportbot.logging_config import logger


def build_frame(event: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"event": event, "data": data}


class ConnectionManager:
    def __init__(self) -> None:
        self._connections: Dict[str, WebSocket] = {}
        self._rooms: Dict[str, Set[str]] = {}

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        self._connections[connection_id] = websocket
        logger.info("Client connected: %s (%d active)", connection_id, self.active_connections)
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)
        for room_id in list(self._rooms):
            members = self._rooms[room_id]
            members.discard(connection_id)
            if not members:
                del self._rooms[room_id]
        logger.info("Client disconnected: %s (%d active)", connection_id, self.active_connections)

    def join(self, connection_id: str, room_id: str) -> None:
        self._rooms.setdefault(room_id, set()).add(connection_id)

    def room_members(self, room_id: str) -> Set[str]:
        return set(self._rooms.get(room_id, set()))

    @property
    def active_connections(self) -> int:
        return len(self._connections)

    async def _send(self, connection_id: str, frame: Dict[str, Any]) -> None:
        websocket = self._connections.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_json(frame)
        except Exception:
            # Peer went away mid-send; the receive loop will clean up.
            logger.warning("Failed to deliver %s to %s", frame.get("event"), connection_id)

    async def emit(self, connection_id: str, event: str, data: Dict[str, Any]) -> None:
        await self._send(connection_id, build_frame(event, data))

    async def emit_to_room(
        self, room_id: str, event: str, data: Dict[str, Any], *, include: str | None = None
    ) -> None:
        """
        Send to every member of the room, plus `include` if it is not one.
        """
        targets = self.room_members(room_id)
        if include is not None:
            targets.add(include)
        frame = build_frame(event, data)
        for connection_id in targets:
            await self._send(connection_id, frame)

    async def broadcast(self, event: str, data: Dict[str, Any]) -> None:
        frame = build_frame(event, data)
        for connection_id in list(self._connections):
            await self._send(connection_id, frame)


__all__ = ["ConnectionManager", "build_frame"]
