"""WebSocket feed that keeps dashboard views in sync.

Protocol (JSON frames):
    Server -> Client: {"type": "initial-data", "data": {...dashboard...}}
    Server -> Client: {"type": "data-update", "entity": "todos", "data": [...]}
    Server -> Client: {"type": "pong"}
    Server -> Client: {"type": "error", "message": "..."}

    Client -> Server: {"type": "ping"}
    Client -> Server: {"type": "refresh"}   (re-sends initial-data)
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter()


class DashboardHub:
    """Tracks open dashboard sockets and fans frames out to them."""

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    def __len__(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)

    async def broadcast(self, frame: dict[str, Any]) -> int:
        """Send ``frame`` to every connection; drop the ones that fail.

        Returns the number of connections that received the frame.
        """
        delivered = 0
        for websocket in list(self._connections):
            try:
                await websocket.send_json(frame)
            except Exception as exc:
                logger.warning("Dropping dashboard socket after failed send: %s", exc)
                self.disconnect(websocket)
            else:
                delivered += 1
        return delivered


@router.websocket("/ws/dashboard")
async def dashboard_websocket(websocket: WebSocket) -> None:
    """Push the dashboard on connect, then updates as they happen."""
    state = websocket.app.state
    hub: DashboardHub = state.hub

    await hub.connect(websocket)
    try:
        await websocket.send_json({
            "type": "initial-data",
            "data": state.dashboard_service.get_dashboard(),
        })

        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({
                    "type": "error",
                    "message": "Invalid JSON frame",
                })
                continue

            frame_type = frame.get("type") if isinstance(frame, dict) else None

            if frame_type == "ping":
                await websocket.send_json({"type": "pong"})
            elif frame_type == "refresh":
                await websocket.send_json({
                    "type": "initial-data",
                    "data": state.dashboard_service.get_dashboard(),
                })
            else:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown frame type: {frame_type}",
                })

    except WebSocketDisconnect:
        logger.info("Dashboard WebSocket disconnected")
    finally:
        hub.disconnect(websocket)
