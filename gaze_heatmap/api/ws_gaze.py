"""WebSocket endpoint for gaze sample ingestion.

Path: /ws/gaze

Accepts JSON matching the GazeSample schema, validates it at the boundary,
routes it into the HeatmapSession, and returns a minimal acknowledgement.
Samples without a ``timestampMs`` are stamped with their arrival time.
Unparseable or invalid payloads get an error ack and the socket stays open.

No rendering happens on this path.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from gaze_heatmap.domain.sample import GazeSample
from gaze_heatmap.services.session import HeatmapSession

logger = logging.getLogger(__name__)


def create_gaze_router(session: HeatmapSession) -> APIRouter:
    """Factory that wires the gaze endpoint to a concrete HeatmapSession."""

    router = APIRouter()

    @router.websocket("/ws/gaze")
    async def ingest_gaze(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("Gaze source connected")

        try:
            while True:
                raw = await websocket.receive_text()

                # ── Validate at the boundary ─────────────────────────────
                # Non-JSON text surfaces as a ValidationError too
                try:
                    sample = GazeSample.model_validate_json(raw)
                except ValidationError as exc:
                    await websocket.send_json({
                        "status": "error",
                        "detail": exc.errors(include_url=False, include_context=False),
                    })
                    continue

                # ── Route into session ───────────────────────────────────
                result = session.ingest(sample)

                # ── Acknowledge ──────────────────────────────────────────
                if result.accepted:
                    await websocket.send_json({
                        "status": "accepted",
                        "bucket": list(result.coordinate),
                        "delta_ms": result.delta_ms,
                        "total_time_accrued_ms": session.accumulator.total_time_accrued,
                    })
                else:
                    await websocket.send_json({
                        "status": "ignored",
                        "reason": result.reason.value,
                    })

        except WebSocketDisconnect:
            logger.info("Gaze source disconnected")

    return router
