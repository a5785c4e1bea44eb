"""Tests for the GazeAccumulator.

Covers dwell-time attribution, bucketing, guards, conservation and reset.
Timestamps are passed explicitly except where the clock fallback is tested.
"""

import random
from unittest.mock import patch

import pytest

from gaze_heatmap.domain.enums import SkipReason
from gaze_heatmap.domain.grid import GridCoord
from gaze_heatmap.domain.sample import GazeSample, SurfaceBounds
from gaze_heatmap.store.accumulator import GazeAccumulator

from tests.test_sample import _sample


BOUNDS = SurfaceBounds(width=800, height=600)


@pytest.fixture
def acc() -> GazeAccumulator:
    return GazeAccumulator()


def _feed(acc: GazeAccumulator, events: list[tuple[int, float, float]]) -> None:
    for t, x, y in events:
        acc.ingest(_sample(x, y), True, BOUNDS, now=t)


def _bucket_sum(acc: GazeAccumulator) -> int:
    return sum(b.time_accrued for b in acc.buckets())


class TestAttribution:
    def test_first_sample_creates_empty_bucket(self, acc: GazeAccumulator) -> None:
        result = acc.ingest(_sample(10, 10), True, BOUNDS, now=0)
        assert result.accepted
        assert result.coordinate == GridCoord(10, 10)
        assert result.delta_ms == 0
        assert acc.total_time_accrued == 0
        assert acc.get(GridCoord(10, 10)).time_accrued == 0
        assert acc.active_coordinate == GridCoord(10, 10)
        assert acc.last_sample_timestamp == 0

    def test_scenario_delta_goes_to_previous_bucket(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 10, 10), (1000, 12, 11), (1500, 60, 60)])
        assert acc.total_time_accrued == 1500
        assert acc.get(GridCoord(10, 10)).time_accrued == 1500
        assert acc.get(GridCoord(60, 60)).time_accrued == 0
        assert acc.active_coordinate == GridCoord(60, 60)
        assert acc.bucket_count == 2

    def test_leaving_and_returning(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 0, 0), (100, 50, 50), (400, 0, 0), (450, 50, 50)])
        assert acc.get(GridCoord(0, 0)).time_accrued == 150
        assert acc.get(GridCoord(50, 50)).time_accrued == 300
        assert acc.bucket_count == 2

    def test_revisit_updates_last_touched(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 10, 10), (250, 11, 13)])
        assert acc.get(GridCoord(10, 10)).last_touched == 250

    def test_nearby_samples_share_a_bucket(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 20, 20), (10, 24.9, 21), (20, 22, 24)])
        assert acc.bucket_count == 1
        assert acc.get(GridCoord(20, 20)).time_accrued == 20

    def test_custom_grid_size(self) -> None:
        acc = GazeAccumulator(grid_size=50)
        _feed(acc, [(0, 10, 10), (100, 49, 49), (200, 50, 50)])
        assert acc.bucket_count == 2
        assert acc.get(GridCoord(0, 0)).time_accrued == 200

    def test_invalid_grid_size_rejected(self) -> None:
        with pytest.raises(ValueError):
            GazeAccumulator(grid_size=0)


class TestClock:
    def test_negative_delta_clamped_to_zero(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(1000, 10, 10), (500, 10, 10)])
        assert acc.total_time_accrued == 0
        assert acc.get(GridCoord(10, 10)).time_accrued == 0
        assert acc.last_sample_timestamp == 500

    def test_time_resumes_after_regression(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(1000, 10, 10), (500, 10, 10), (800, 10, 10)])
        assert acc.total_time_accrued == 300

    def test_wall_clock_used_when_now_omitted(self, acc: GazeAccumulator) -> None:
        with patch("gaze_heatmap.store.accumulator.now_ms", side_effect=[1000, 1750]):
            acc.ingest(_sample(10, 10), True, BOUNDS)
            acc.ingest(_sample(10, 10), True, BOUNDS)
        assert acc.total_time_accrued == 750


class TestGuards:
    def _state(self, acc: GazeAccumulator) -> tuple:
        return (
            acc.total_time_accrued,
            acc.active_coordinate,
            acc.last_sample_timestamp,
            acc.bucket_count,
        )

    def test_inactive_tracking_is_noop(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 10, 10)])
        before = self._state(acc)
        result = acc.ingest(_sample(100, 100), False, BOUNDS, now=500)
        assert not result.accepted
        assert result.reason == SkipReason.TRACKING_INACTIVE
        assert self._state(acc) == before

    def test_absent_sample_is_noop(self, acc: GazeAccumulator) -> None:
        result = acc.ingest(None, True, BOUNDS, now=0)
        assert result.reason == SkipReason.NO_SAMPLE
        assert acc.is_empty

    def test_sample_without_position_is_noop(self, acc: GazeAccumulator) -> None:
        result = acc.ingest(_sample(x=5), True, BOUNDS, now=0)
        assert result.reason == SkipReason.NO_POSITION
        assert acc.last_sample_timestamp is None

    def test_out_of_bounds_sample_is_noop(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 10, 10), (100, 10, 10)])
        before = self._state(acc)
        result = acc.ingest(_sample(BOUNDS.width + 1, 10), True, BOUNDS, now=400)
        assert result.reason == SkipReason.OUT_OF_BOUNDS
        assert self._state(acc) == before

    def test_skipped_sample_does_not_reset_interval(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 10, 10)])
        acc.ingest(_sample(-5, 10), True, BOUNDS, now=100)
        _feed(acc, [(300, 60, 60)])
        assert acc.get(GridCoord(10, 10)).time_accrued == 300

    def test_edge_sample_accepted(self, acc: GazeAccumulator) -> None:
        result = acc.ingest(_sample(800, 600), True, BOUNDS, now=0)
        assert result.accepted
        assert result.coordinate == GridCoord(800, 600)

    def test_local_fallback_coordinates_ingested(self, acc: GazeAccumulator) -> None:
        sample = GazeSample.model_validate({"x": 33, "y": 41})
        result = acc.ingest(sample, True, BOUNDS, now=0)
        assert result.coordinate == GridCoord(30, 40)


class TestInvariants:
    def test_conservation_and_monotonicity(self, acc: GazeAccumulator) -> None:
        rng = random.Random(7)
        t = 0
        previous: dict = {}
        for _ in range(500):
            t += rng.randint(-50, 200)
            x = rng.uniform(-20, BOUNDS.width + 20)
            y = rng.uniform(-20, BOUNDS.height + 20)
            acc.ingest(_sample(x, y), rng.random() > 0.1, BOUNDS, now=t)

            assert acc.total_time_accrued == _bucket_sum(acc)
            current = {b.coordinate: b.time_accrued for b in acc.buckets()}
            for coord, accrued in previous.items():
                assert current[coord] >= accrued
            previous = current

    def test_reset_restores_initial_state(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 10, 10), (100, 60, 60), (250, 10, 10)])
        acc.reset()
        assert acc.is_empty
        assert acc.bucket_count == 0
        assert acc.total_time_accrued == 0
        assert acc.last_sample_timestamp is None
        assert acc.active_coordinate is None
        assert acc.summary() == GazeAccumulator().summary()

    def test_reset_is_idempotent(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 10, 10), (100, 60, 60)])
        acc.reset()
        once = acc.summary()
        acc.reset()
        assert acc.summary() == once

    def test_first_sample_after_reset_starts_fresh(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 10, 10), (100, 60, 60)])
        acc.reset()
        _feed(acc, [(5000, 10, 10)])
        assert acc.total_time_accrued == 0

    def test_buckets_returns_copy(self, acc: GazeAccumulator) -> None:
        _feed(acc, [(0, 10, 10)])
        acc.buckets().clear()
        assert acc.bucket_count == 1
