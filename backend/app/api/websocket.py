"""WebSocket endpoint for real-time trigger updates."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import orjson
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from core.models import TriggerState

logger = logging.getLogger(__name__)


def _orjson_dumps(obj: Any) -> str:
    """Serialize object to JSON string using orjson."""
    return orjson.dumps(obj, default=str).decode("utf-8")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class WebSocketMessage(BaseModel):
    """WebSocket message format."""

    type: str  # "trigger", "snapshot", "status"
    data: Any
    timestamp: datetime

    def to_json(self) -> str:
        """Serialize to JSON string using orjson for performance."""
        return _orjson_dumps(self.model_dump(mode="json"))


class ConnectionManager:
    """Manage WebSocket connections and broadcasts."""

    def __init__(self):
        self._connections: list[WebSocket] = []
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self._connections.append(websocket)
        logger.info(f"WebSocket connected. Total connections: {len(self._connections)}")

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a disconnected WebSocket."""
        async with self._lock:
            if websocket in self._connections:
                self._connections.remove(websocket)
        logger.info(f"WebSocket disconnected. Total connections: {len(self._connections)}")

    async def broadcast(self, message: WebSocketMessage) -> None:
        """Broadcast message to all connected clients."""
        if not self._connections:
            return

        message_text = message.to_json()
        disconnected = []

        async with self._lock:
            for websocket in self._connections:
                try:
                    await websocket.send_text(message_text)
                except Exception as e:
                    logger.warning(f"Failed to send message: {e}")
                    disconnected.append(websocket)

            for ws in disconnected:
                self._connections.remove(ws)

    async def send_trigger(self, state: TriggerState) -> None:
        """Broadcast one asset's trigger state."""
        message = WebSocketMessage(
            type="trigger",
            data=state.model_dump(mode="json"),
            timestamp=_now(),
        )
        await self.broadcast(message)

    def notify(self, state: TriggerState) -> None:
        """Schedule a trigger broadcast from synchronous code.

        Does nothing outside a running event loop.
        """
        if not self._connections:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.send_trigger(state))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @property
    def connection_count(self) -> int:
        """Get number of active connections."""
        return len(self._connections)


# Global connection manager
manager = ConnectionManager()


async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for real-time trigger updates.

    Messages sent to clients:
    - snapshot: All trigger states, sent once on connect
    - trigger: One asset's trigger state after it changed

    Message format:
    {
        "type": "trigger",
        "data": {...},
        "timestamp": "2024-01-01T00:00:00+00:00"
    }
    """
    await manager.connect(websocket)

    try:
        board = websocket.app.state.board
        await websocket.send_text(WebSocketMessage(
            type="snapshot",
            data=[s.model_dump(mode="json") for s in board.states()],
            timestamp=_now(),
        ).to_json())

        while True:
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=60.0,
                )

                try:
                    message = orjson.loads(data)
                    await handle_client_message(websocket, message)
                except orjson.JSONDecodeError:
                    await websocket.send_text(_orjson_dumps({
                        "type": "error",
                        "data": {"message": "Invalid JSON"},
                        "timestamp": _now().isoformat(),
                    }))

            except asyncio.TimeoutError:
                # Send ping to keep connection alive
                await websocket.send_text(_orjson_dumps({
                    "type": "ping",
                    "data": {},
                    "timestamp": _now().isoformat(),
                }))

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        await manager.disconnect(websocket)


async def handle_client_message(websocket: WebSocket, message: dict) -> None:
    """Handle incoming message from client."""
    msg_type = message.get("type", "") if isinstance(message, dict) else ""

    if msg_type == "ping":
        await websocket.send_text(_orjson_dumps({
            "type": "pong",
            "data": {},
            "timestamp": _now().isoformat(),
        }))
    else:
        await websocket.send_text(_orjson_dumps({
            "type": "error",
            "data": {"message": f"Unknown message type: {msg_type}"},
            "timestamp": _now().isoformat(),
        }))
