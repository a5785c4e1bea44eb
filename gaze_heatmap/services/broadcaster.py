"""Fans published snapshots out to connected heatmap WebSocket clients.

Architecture:
    tracker  →  /ws/gaze     →  HeatmapSession.ingest
                                     ↓
                              SnapshotPublisher (timer)
                                     ↓
    renderer ←  /ws/heatmap  ←  HeatmapBroadcaster.render

The broadcaster is the renderer the publisher sees.  With no clients
connected a render call is a no-op.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket

from gaze_heatmap.domain.snapshot import Snapshot

logger = logging.getLogger(__name__)


def snapshot_message(snapshot: Snapshot) -> dict[str, Any]:
    return {"type": "heatmap_snapshot", **snapshot.to_render_payload()}


class HeatmapBroadcaster:
    """Tracks connected renderer clients and broadcasts snapshots to them."""

    def __init__(self) -> None:
        self._renderers: set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self.snapshots_sent = 0

    # ── Renderer registration ────────────────────────────────────────

    async def register(self, ws: WebSocket) -> int:
        """Accept *ws* as a renderer and return the renderer count."""
        await ws.accept()
        async with self._lock:
            self._renderers.add(ws)
            count = len(self._renderers)
        logger.info("Renderer attached to heatmap stream (%d attached)", count)
        return count

    async def unregister(self, ws: WebSocket) -> None:
        async with self._lock:
            self._renderers.discard(ws)
            count = len(self._renderers)
        logger.info("Renderer detached from heatmap stream (%d attached)", count)

    @property
    def renderer_count(self) -> int:
        return len(self._renderers)

    # ── Rendering ────────────────────────────────────────────────────

    async def render(self, snapshot: Snapshot) -> None:
        if not self._renderers:
            return
        await self._broadcast(snapshot_message(snapshot))

    async def _broadcast(self, payload: dict[str, Any]) -> None:
        """Send payload to every renderer, dropping ones whose socket died."""
        message = json.dumps(payload)
        dead: set[WebSocket] = set()

        async with self._lock:
            renderers = set(self._renderers)

        for ws in renderers:
            try:
                await ws.send_text(message)
                self.snapshots_sent += 1
            except Exception:
                dead.add(ws)

        if dead:
            async with self._lock:
                self._renderers -= dead
            logger.info("Dropped %d unreachable renderer(s)", len(dead))
