"""gaze-heatmap: streaming dwell-time aggregation for gaze attention maps.

This is the application entry point.  It wires the HeatmapSession,
HeatmapBroadcaster, and the WebSocket / REST endpoints together, and ties
the snapshot publisher's timer to the application lifespan.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from gaze_heatmap.api.session import create_session_router
from gaze_heatmap.api.ws_gaze import create_gaze_router
from gaze_heatmap.api.ws_heatmap import create_heatmap_router
from gaze_heatmap.config import Settings, settings
from gaze_heatmap.domain.sample import SurfaceBounds
from gaze_heatmap.services.broadcaster import HeatmapBroadcaster
from gaze_heatmap.services.session import HeatmapSession

logger = logging.getLogger(__name__)


def build_session(cfg: Settings) -> HeatmapSession:
    return HeatmapSession(
        surface=SurfaceBounds(width=cfg.surface_width, height=cfg.surface_height),
        grid_size=cfg.grid_size,
        publish_interval_ms=cfg.publish_interval_ms,
        noise_floor=cfg.noise_floor_percent,
        tracking_active=cfg.tracking_active,
        visible=cfg.heatmap_visible,
    )


def create_app(
    session: HeatmapSession,
    broadcaster: HeatmapBroadcaster,
    title: str = "gaze-heatmap",
) -> FastAPI:
    """Build the FastAPI app around an explicitly constructed session."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await session.attach_renderer(broadcaster)
        session.start()
        yield
        # The timer must not outlive the session it reads
        await session.stop()
        session.publisher.detach_renderer()

    app = FastAPI(
        title=title,
        description="Time-weighted gaze attention map aggregation",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(create_gaze_router(session))
    app.include_router(create_heatmap_router(session, broadcaster))
    app.include_router(create_session_router(session))

    @app.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "buckets": session.accumulator.bucket_count,
            "total_time_accrued_ms": session.accumulator.total_time_accrued,
            "tracking_active": session.tracking_active,
            "visible": session.visible,
            "publisher_running": session.publisher.is_running,
            "renderers": broadcaster.renderer_count,
            "snapshots_sent": broadcaster.snapshots_sent,
        }

    return app


# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

# ── State ────────────────────────────────────────────────────────────────────

session = build_session(settings)
broadcaster = HeatmapBroadcaster()

# ── App ──────────────────────────────────────────────────────────────────────

app = create_app(session, broadcaster, title=settings.app_name)
