"""Grid cells used to spatially quantize gaze positions.

GridCoord is the composite key of the bucket mapping.  Bucket is the
mutable per-cell dwell counter; it is only ever mutated by the
accumulator that owns it.
"""

from __future__ import annotations

import math
from typing import Any, NamedTuple


class GridCoord(NamedTuple):
    """Grid-aligned origin of a bucket (not the raw sample position)."""

    x: int
    y: int

    @classmethod
    def from_position(cls, x: float, y: float, grid_size: int) -> GridCoord:
        """Floor each axis to the nearest multiple of *grid_size*."""
        return cls(
            math.floor(x / grid_size) * grid_size,
            math.floor(y / grid_size) * grid_size,
        )


class Bucket:
    """Dwell time accrued in a single grid cell.

    ``time_accrued`` only grows; the accumulator drops whole buckets on
    reset instead of rewriting them.
    """

    __slots__ = ("coordinate", "time_accrued", "last_touched")

    def __init__(self, coordinate: GridCoord, touched_at: int) -> None:
        self.coordinate: GridCoord = coordinate
        self.time_accrued: int = 0
        self.last_touched: int = touched_at

    def accrue(self, delta_ms: int) -> None:
        """Add *delta_ms* of dwell time."""
        if delta_ms < 0:
            raise ValueError(f"dwell time cannot decrease (delta={delta_ms})")
        self.time_accrued += delta_ms

    def touch(self, at: int) -> None:
        self.last_touched = at

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.coordinate.x,
            "y": self.coordinate.y,
            "time_accrued_ms": self.time_accrued,
            "last_touched_ms": self.last_touched,
        }
