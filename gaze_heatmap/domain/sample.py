"""Inbound gaze sample and viewing-surface models.

A GazeSample is what the upstream gaze source believes the viewer is
looking at.  A source-supplied ``timestampMs`` is optional; without it the
sample is stamped by arrival time when it is ingested.  Field aliases match
the camelCase wire format the browser-side tracker emits (``absoluteX``,
``absoluteY``, ``timestampMs``).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# ── Gaze Sample ──────────────────────────────────────────────────────────────

class GazeSample(BaseModel):
    """A single 2-D gaze position.

    Absolute (surface) coordinates are preferred; the local ``x``/``y``
    fields are the fallback when the source cannot report absolute ones.
    """

    absolute_x: Optional[float] = Field(default=None, alias="absoluteX")
    absolute_y: Optional[float] = Field(default=None, alias="absoluteY")
    x: Optional[float] = Field(default=None, description="Local X, used when absoluteX is absent")
    y: Optional[float] = Field(default=None, description="Local Y, used when absoluteY is absent")
    timestamp_ms: Optional[int] = Field(
        default=None,
        alias="timestampMs",
        description="Source clock in milliseconds; arrival time is used when absent",
    )

    model_config = {"frozen": True, "populate_by_name": True}

    def position(self) -> tuple[float, float] | None:
        """Resolve the sample to a surface position, or None if an axis is missing."""
        px = self.absolute_x if self.absolute_x is not None else self.x
        py = self.absolute_y if self.absolute_y is not None else self.y
        if px is None or py is None:
            return None
        return (px, py)


# ── Surface Bounds ───────────────────────────────────────────────────────────

class SurfaceBounds(BaseModel):
    """Width/height of the viewing surface gaze is tracked against."""

    width: float = Field(..., gt=0, description="Surface width in surface units")
    height: float = Field(..., gt=0, description="Surface height in surface units")

    model_config = {"frozen": True}

    def contains(self, x: float, y: float) -> bool:
        """Inclusive bounds check: points exactly on an edge are inside."""
        return 0 <= x <= self.width and 0 <= y <= self.height
