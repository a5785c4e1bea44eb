from gaze_heatmap.domain.enums import SkipReason
from gaze_heatmap.domain.grid import Bucket, GridCoord
from gaze_heatmap.domain.sample import GazeSample, SurfaceBounds
from gaze_heatmap.domain.snapshot import Snapshot, SnapshotPoint

__all__ = [
    "Bucket",
    "GazeSample",
    "GridCoord",
    "SkipReason",
    "Snapshot",
    "SnapshotPoint",
    "SurfaceBounds",
]
