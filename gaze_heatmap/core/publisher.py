"""Snapshot publishing: turns accumulated dwell time into renderable data.

``publish`` is a pure function of accumulator state.  ``SnapshotPublisher``
drives it on a fixed-period asyncio timer that runs independently of
sample arrival and hands each Snapshot to whatever renderer is attached.

The publisher never mutates the accumulator.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from gaze_heatmap.domain.snapshot import Snapshot, SnapshotPoint
from gaze_heatmap.store.accumulator import GazeAccumulator

logger = logging.getLogger(__name__)

DEFAULT_NOISE_FLOOR = 0.1
DEFAULT_PUBLISH_INTERVAL_MS = 100


class SnapshotRenderer(Protocol):
    """Consumer of published snapshots (colour mapping, blur, compositing)."""

    async def render(self, snapshot: Snapshot) -> None:
        ...


def publish(
    state: GazeAccumulator | None,
    noise_floor: float = DEFAULT_NOISE_FLOOR,
) -> Snapshot:
    """Normalize bucket dwell times into percentages of total dwell time.

    Buckets at or below *noise_floor* percent are dropped.  The scale
    always starts at 0 and tops out at the hottest retained bucket.
    """
    if state is None or state.total_time_accrued == 0:
        return Snapshot.empty()

    total = state.total_time_accrued
    buckets = state.buckets()
    points: list[SnapshotPoint] = []
    for bucket in buckets:
        intensity = 100 * bucket.time_accrued / total
        if intensity > noise_floor:
            points.append(SnapshotPoint(
                x=bucket.coordinate.x,
                y=bucket.coordinate.y,
                intensity=intensity,
            ))

    if not points:
        return Snapshot(total_time_accrued=total, bucket_count=len(buckets))

    return Snapshot(
        data=tuple(points),
        max_intensity=max(p.intensity for p in points),
        min_intensity=0.0,
        total_time_accrued=total,
        bucket_count=len(buckets),
    )


class SnapshotPublisher:
    """Periodically publishes snapshots of an accumulator to a renderer.

    Args:
        accumulator: State to read.  May be attached later; until then
            every cycle is a no-op.
        interval_ms: Publish period.
        noise_floor: Minimum percentage for a bucket to be published.
        visible: Whether snapshots are delivered to the renderer.  Hiding
            the output never pauses accumulation.
    """

    def __init__(
        self,
        accumulator: GazeAccumulator | None = None,
        interval_ms: int = DEFAULT_PUBLISH_INTERVAL_MS,
        noise_floor: float = DEFAULT_NOISE_FLOOR,
        visible: bool = True,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if noise_floor < 0:
            raise ValueError("noise_floor must not be negative")

        self._accumulator = accumulator
        self._interval_ms = interval_ms
        self._noise_floor = noise_floor
        self._visible = visible
        self._renderer: SnapshotRenderer | None = None
        self._task: asyncio.Task | None = None
        self._last_snapshot: Snapshot = Snapshot.empty()
        self._publish_count = 0

    # ── Wiring ───────────────────────────────────────────────────────────

    def attach_accumulator(self, accumulator: GazeAccumulator | None) -> None:
        self._accumulator = accumulator

    async def attach_renderer(self, renderer: SnapshotRenderer) -> None:
        """Readiness callback for the renderer.  Publishes immediately."""
        self._renderer = renderer
        logger.info("Renderer attached: %s", type(renderer).__name__)
        await self.publish_once()

    def detach_renderer(self) -> None:
        self._renderer = None

    @property
    def renderer(self) -> SnapshotRenderer | None:
        return self._renderer

    # ── Visibility ───────────────────────────────────────────────────────

    @property
    def visible(self) -> bool:
        return self._visible

    def set_visible(self, visible: bool) -> None:
        self._visible = visible

    # ── Publishing ───────────────────────────────────────────────────────

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def noise_floor(self) -> float:
        return self._noise_floor

    @property
    def last_snapshot(self) -> Snapshot:
        return self._last_snapshot

    @property
    def publish_count(self) -> int:
        return self._publish_count

    def snapshot(self) -> Snapshot:
        """Compute a Snapshot now without delivering it."""
        return publish(self._accumulator, self._noise_floor)

    async def publish_once(self) -> Snapshot | None:
        """Run one publish cycle.

        Returns None when there is nothing to publish yet (no accumulator,
        or no dwell time accrued).  Otherwise the snapshot is recorded and
        delivered if a renderer is attached and output is visible.
        """
        if self._accumulator is None or self._accumulator.total_time_accrued == 0:
            return None

        snapshot = self.snapshot()
        self._last_snapshot = snapshot
        self._publish_count += 1

        if self._renderer is not None and self._visible:
            await self._deliver(snapshot)
        return snapshot

    async def clear(self) -> None:
        """Push an empty snapshot so the renderer drops its last frame."""
        self._last_snapshot = Snapshot.empty()
        if self._renderer is not None:
            await self._deliver(self._last_snapshot)

    async def _deliver(self, snapshot: Snapshot) -> None:
        try:
            await self._renderer.render(snapshot)
        except Exception as exc:
            logger.error("Snapshot delivery failed: %s", exc, exc_info=True)

    # ── Timer ────────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the periodic timer on the running event loop.  Idempotent."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="snapshot_publisher")
        logger.info("Snapshot publisher started (every %d ms)", self._interval_ms)

    async def stop(self) -> None:
        """Cancel the timer and wait for it to finish.  Idempotent."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Snapshot publisher stopped after %d publish(es)", self._publish_count)

    async def _run(self) -> None:
        period = self._interval_ms / 1000
        while True:
            await asyncio.sleep(period)
            await self.publish_once()
