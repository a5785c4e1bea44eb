"""Controlled vocabularies for the gaze domain."""

from __future__ import annotations

from enum import Enum


class SkipReason(str, Enum):
    """Why a gaze sample did not reach the accumulator."""

    TRACKING_INACTIVE = "tracking_inactive"
    NO_SAMPLE = "no_sample"
    NO_POSITION = "no_position"
    OUT_OF_BOUNDS = "out_of_bounds"
