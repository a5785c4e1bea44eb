"""Snapshot: an immutable, normalized view of the attention map.

A Snapshot is produced fresh on every publish cycle and handed to the
renderer.  It never references live accumulator state.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SnapshotPoint(BaseModel):
    """One bucket's share of total dwell time, as a percentage."""

    x: int
    y: int
    intensity: float = Field(..., gt=0, le=100, description="Percent of total dwell time")

    model_config = {"frozen": True}


class Snapshot(BaseModel):
    """Normalized dataset plus the scale bounds the renderer maps colours over.

    ``min_intensity`` is always 0 so the hottest bucket renders at full
    saturation and everything else is relative to it.
    """

    data: tuple[SnapshotPoint, ...] = ()
    max_intensity: float = Field(0.0, ge=0)
    min_intensity: float = Field(0.0, ge=0)
    total_time_accrued: int = Field(0, ge=0, description="Grand total (ms) the percentages are of")
    bucket_count: int = Field(0, ge=0, description="Live buckets before the noise floor")

    model_config = {"frozen": True}

    @classmethod
    def empty(cls) -> Snapshot:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.data

    def to_render_payload(self) -> dict[str, Any]:
        """Wire format consumed by the density-surface renderer."""
        return {
            "max": self.max_intensity,
            "min": self.min_intensity,
            "data": [
                {"x": p.x, "y": p.y, "value": p.intensity}
                for p in self.data
            ],
        }
