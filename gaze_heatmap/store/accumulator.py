"""In-memory dwell-time accumulator for a single tracked surface.

Design notes:
    - Elapsed time between two samples is attributed to the bucket the
      gaze occupied *during* that interval (the previous sample's bucket),
      never to the bucket of the sample that just arrived.
    - Times are integer milliseconds, so ``total_time_accrued`` equals the
      sum of every bucket's ``time_accrued`` exactly after every call.
    - There is no lock.  Ingestion never suspends, so on a single event
      loop it cannot interleave with a publish cycle.
    - The accumulator does not know about rendering.  Publishers read it,
      nothing but ``ingest`` and ``reset`` writes it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from gaze_heatmap.domain.enums import SkipReason
from gaze_heatmap.domain.grid import Bucket, GridCoord
from gaze_heatmap.domain.sample import GazeSample, SurfaceBounds
from gaze_heatmap.foundation.clock import now_ms

logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 5


@dataclass(frozen=True)
class IngestResult:
    """Outcome of a single ``ingest`` call."""

    accepted: bool
    coordinate: GridCoord | None = None
    delta_ms: int = 0
    reason: SkipReason | None = None


def _skipped(reason: SkipReason) -> IngestResult:
    logger.debug("Gaze sample skipped: %s", reason.value)
    return IngestResult(accepted=False, reason=reason)


class GazeAccumulator:
    """Per-bucket running dwell totals plus a global running total.

    Args:
        grid_size: Edge length of a bucket in surface units.
    """

    def __init__(self, grid_size: int = DEFAULT_GRID_SIZE) -> None:
        if grid_size <= 0:
            raise ValueError("grid_size must be positive")

        self._grid_size = grid_size
        self._buckets: dict[GridCoord, Bucket] = {}
        self._total_time_accrued: int = 0
        self._last_sample_timestamp: int | None = None
        self._active_coordinate: GridCoord | None = None

    # ── Public API ───────────────────────────────────────────────────────

    def ingest(
        self,
        sample: GazeSample | None,
        is_tracking_active: bool,
        surface_bounds: SurfaceBounds,
        now: int | None = None,
    ) -> IngestResult:
        """Attribute elapsed time to the active bucket, then move to *sample*'s bucket.

        Inactive tracking, a missing sample, a sample without a position,
        or a position outside *surface_bounds* leaves the state untouched.
        """
        if not is_tracking_active:
            return _skipped(SkipReason.TRACKING_INACTIVE)
        if sample is None:
            return _skipped(SkipReason.NO_SAMPLE)

        position = sample.position()
        if position is None:
            return _skipped(SkipReason.NO_POSITION)
        x, y = position
        if not surface_bounds.contains(x, y):
            return _skipped(SkipReason.OUT_OF_BOUNDS)

        if now is None:
            now = now_ms()

        delta = 0
        if self._last_sample_timestamp is not None:
            # Clock regressions never produce negative dwell time
            delta = max(0, now - self._last_sample_timestamp)
            self._total_time_accrued += delta
            if self._active_coordinate is not None:
                self._buckets[self._active_coordinate].accrue(delta)
        self._last_sample_timestamp = now

        coordinate = GridCoord.from_position(x, y, self._grid_size)
        bucket = self._buckets.get(coordinate)
        if bucket is None:
            bucket = Bucket(coordinate, touched_at=now)
            self._buckets[coordinate] = bucket
            logger.debug("Created bucket %s (%d live)", coordinate, len(self._buckets))
        else:
            bucket.touch(now)

        self._active_coordinate = coordinate
        return IngestResult(accepted=True, coordinate=coordinate, delta_ms=delta)

    def reset(self) -> None:
        """Restore the exact initial empty state.  Safe to call repeatedly."""
        self._buckets.clear()
        self._total_time_accrued = 0
        self._last_sample_timestamp = None
        self._active_coordinate = None

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def grid_size(self) -> int:
        return self._grid_size

    @property
    def total_time_accrued(self) -> int:
        return self._total_time_accrued

    @property
    def last_sample_timestamp(self) -> int | None:
        return self._last_sample_timestamp

    @property
    def active_coordinate(self) -> GridCoord | None:
        return self._active_coordinate

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    @property
    def is_empty(self) -> bool:
        return not self._buckets and self._total_time_accrued == 0

    def get(self, coordinate: GridCoord) -> Bucket | None:
        return self._buckets.get(coordinate)

    def buckets(self) -> list[Bucket]:
        """Snapshot list of live buckets.  Callers must not mutate them."""
        return list(self._buckets.values())

    def summary(self) -> dict[str, Any]:
        active = self._active_coordinate
        return {
            "grid_size": self._grid_size,
            "bucket_count": len(self._buckets),
            "total_time_accrued_ms": self._total_time_accrued,
            "last_sample_timestamp_ms": self._last_sample_timestamp,
            "active_bucket": list(active) if active is not None else None,
        }
