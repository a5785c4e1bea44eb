"""REST control surface for the heatmap session.

Paths (prefix /api/session):
    GET  /snapshot    current normalized dataset, computed on demand
    GET  /buckets     raw per-bucket dwell time
    GET  /summary     accumulator totals and control state
    POST /reset       clear all dwell time and the renderer
    PUT  /visibility  show/hide rendered output (collection continues)
    PUT  /tracking    pause/resume ingestion
    PUT  /surface     replace the viewing-surface bounds
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from gaze_heatmap.domain.sample import SurfaceBounds
from gaze_heatmap.services.session import HeatmapSession


class VisibilityUpdate(BaseModel):
    visible: bool


class TrackingUpdate(BaseModel):
    active: bool


def create_session_router(session: HeatmapSession) -> APIRouter:
    """Factory that wires the control endpoints to a HeatmapSession."""

    router = APIRouter(prefix="/api/session", tags=["session"])

    @router.get("/snapshot")
    async def get_snapshot() -> dict[str, Any]:
        snapshot = session.snapshot()
        return {
            **snapshot.to_render_payload(),
            "total_time_accrued_ms": snapshot.total_time_accrued,
            "bucket_count": snapshot.bucket_count,
        }

    @router.get("/buckets")
    async def get_buckets() -> dict[str, Any]:
        buckets = session.accumulator.buckets()
        return {
            "buckets": [b.to_dict() for b in buckets],
            "count": len(buckets),
            "total_time_accrued_ms": session.accumulator.total_time_accrued,
        }

    @router.get("/summary")
    async def get_summary() -> dict[str, Any]:
        return session.summary()

    @router.post("/reset")
    async def reset() -> dict[str, Any]:
        await session.reset()
        return {"status": "reset", **session.accumulator.summary()}

    @router.put("/visibility")
    async def set_visibility(update: VisibilityUpdate) -> dict[str, Any]:
        session.set_visible(update.visible)
        return {"visible": session.visible}

    @router.put("/tracking")
    async def set_tracking(update: TrackingUpdate) -> dict[str, Any]:
        session.set_tracking_active(update.active)
        return {"tracking_active": session.tracking_active}

    @router.put("/surface")
    async def set_surface(bounds: SurfaceBounds) -> dict[str, Any]:
        session.set_surface(bounds)
        return {"width": bounds.width, "height": bounds.height}

    return router
