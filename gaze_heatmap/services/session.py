"""HeatmapSession: one tracked surface, one accumulator, one publisher.

The session is the control surface the transport layer talks to:
ingest, reset, visibility, tracking gate, and surface bounds.  It owns the
accumulator for its whole lifetime; nothing else holds a reference to it
except the publisher, which only reads.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from gaze_heatmap.core.publisher import (
    DEFAULT_NOISE_FLOOR,
    DEFAULT_PUBLISH_INTERVAL_MS,
    SnapshotPublisher,
    SnapshotRenderer,
)
from gaze_heatmap.domain.sample import GazeSample, SurfaceBounds
from gaze_heatmap.domain.snapshot import Snapshot
from gaze_heatmap.foundation.clock import utc_now
from gaze_heatmap.store.accumulator import DEFAULT_GRID_SIZE, GazeAccumulator, IngestResult

logger = logging.getLogger(__name__)

BoundsProvider = Callable[[], SurfaceBounds]


class HeatmapSession:
    """Owns the accumulator and publisher for a single viewing surface.

    Args:
        surface: Static surface bounds, or a callable queried on every
            sample (e.g. when the surface can be resized).
        grid_size: Bucket edge length in surface units.
        publish_interval_ms: Snapshot publish period.
        noise_floor: Minimum percentage for a bucket to be published.
        tracking_active: Initial state of the ingestion gate.
        visible: Initial state of the rendering gate.
    """

    def __init__(
        self,
        surface: SurfaceBounds | BoundsProvider,
        grid_size: int = DEFAULT_GRID_SIZE,
        publish_interval_ms: int = DEFAULT_PUBLISH_INTERVAL_MS,
        noise_floor: float = DEFAULT_NOISE_FLOOR,
        tracking_active: bool = True,
        visible: bool = True,
    ) -> None:
        self.accumulator = GazeAccumulator(grid_size=grid_size)
        self.publisher = SnapshotPublisher(
            self.accumulator,
            interval_ms=publish_interval_ms,
            noise_floor=noise_floor,
            visible=visible,
        )
        self._surface = surface
        self._tracking_active = tracking_active
        self.created_at: datetime = utc_now()
        self.samples_accepted = 0
        self.samples_ignored = 0

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def attach_renderer(self, renderer: SnapshotRenderer) -> None:
        await self.publisher.attach_renderer(renderer)

    def start(self) -> None:
        self.publisher.start()

    async def stop(self) -> None:
        await self.publisher.stop()

    # ── Ingestion ────────────────────────────────────────────────────────

    def ingest(self, sample: GazeSample | None, now: int | None = None) -> IngestResult:
        """Route *sample* into the accumulator.

        An explicit *now* wins, then the sample's own ``timestamp_ms``, then
        the wall clock.
        """
        if now is None and sample is not None:
            now = sample.timestamp_ms
        result = self.accumulator.ingest(
            sample,
            is_tracking_active=self._tracking_active,
            surface_bounds=self.surface_bounds,
            now=now,
        )
        if result.accepted:
            self.samples_accepted += 1
        else:
            self.samples_ignored += 1
        return result

    async def reset(self) -> None:
        """Drop all accumulated dwell time and clear the renderer."""
        self.accumulator.reset()
        self.samples_accepted = 0
        self.samples_ignored = 0
        await self.publisher.clear()
        logger.info("Heatmap session reset")

    # ── Controls ─────────────────────────────────────────────────────────

    @property
    def tracking_active(self) -> bool:
        return self._tracking_active

    def set_tracking_active(self, active: bool) -> None:
        if active != self._tracking_active:
            logger.info("Gaze tracking %s", "resumed" if active else "paused")
        self._tracking_active = active

    @property
    def visible(self) -> bool:
        return self.publisher.visible

    def set_visible(self, visible: bool) -> None:
        self.publisher.set_visible(visible)

    @property
    def surface_bounds(self) -> SurfaceBounds:
        if callable(self._surface):
            return self._surface()
        return self._surface

    def set_surface(self, surface: SurfaceBounds | BoundsProvider) -> None:
        self._surface = surface

    # ── Queries ──────────────────────────────────────────────────────────

    def snapshot(self) -> Snapshot:
        return self.publisher.snapshot()

    def summary(self) -> dict[str, Any]:
        bounds = self.surface_bounds
        return {
            **self.accumulator.summary(),
            "created_at": self.created_at.isoformat(),
            "tracking_active": self._tracking_active,
            "visible": self.publisher.visible,
            "surface": {"width": bounds.width, "height": bounds.height},
            "samples_accepted": self.samples_accepted,
            "samples_ignored": self.samples_ignored,
            "publisher_running": self.publisher.is_running,
            "publish_interval_ms": self.publisher.interval_ms,
            "noise_floor": self.publisher.noise_floor,
            "publish_count": self.publisher.publish_count,
        }
