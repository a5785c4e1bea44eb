"""Heatmap WebSocket: renderer clients receive periodic snapshots here.

Path: /ws/heatmap

On connect the client immediately gets the current snapshot (if output is
visible) so it does not wait a full publish period for its first frame.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from gaze_heatmap.services.broadcaster import HeatmapBroadcaster, snapshot_message
from gaze_heatmap.services.session import HeatmapSession

logger = logging.getLogger(__name__)


def create_heatmap_router(
    session: HeatmapSession,
    broadcaster: HeatmapBroadcaster,
) -> APIRouter:
    """Factory that creates the heatmap WebSocket endpoint."""

    router = APIRouter()

    @router.websocket("/ws/heatmap")
    async def heatmap_ws(websocket: WebSocket) -> None:
        await broadcaster.register(websocket)
        try:
            if session.visible:
                await websocket.send_json(snapshot_message(session.snapshot()))
            # Keep the connection alive; snapshots are pushed server-side
            while True:
                data = await websocket.receive_text()
                if data.strip().lower() == "ping":
                    await websocket.send_text("pong")
        except WebSocketDisconnect:
            await broadcaster.unregister(websocket)

    return router
