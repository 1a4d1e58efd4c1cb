"""
Tests for paths, stages and position lookup.

Tests for spacetime/paths.py
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from spacetime.data_models import Frame
from spacetime.errors import SceneError, SuperluminalError
from spacetime.lorentz import transform
from spacetime.paths import (
    current_position,
    find_stage,
    local_stage_duration,
    sample_positions,
    stage_frame,
    validate_path,
    validate_sample_paths,
)


class TestStageFrame:
    def test_scenario_velocities(self, accelerate_path):
        assert stage_frame(accelerate_path, 0).velocity == (2.0, 0.0)
        assert stage_frame(accelerate_path, 1).velocity == (0.0, 0.0)
        assert stage_frame(accelerate_path, 1).is_main

    def test_diagonal_stage(self):
        path = [(1.0, 1.0, 2.0), (4.0, -3.0, 4.0)]
        assert stage_frame(path, 0).velocity == pytest.approx((1.5, -2.0))


class TestValidatePath:
    def test_scenario_passes(self, accelerate_path, c):
        assert validate_path([list(ev) for ev in accelerate_path], c) == accelerate_path

    def test_scenario_fails_for_small_c(self, accelerate_path):
        with pytest.raises(SuperluminalError):
            validate_path(accelerate_path, 1.0)

    def test_speed_equal_to_c_fails(self):
        with pytest.raises(SuperluminalError):
            validate_path([(0, 0, 0), (3, 4, 1)], 5.0)

    def test_too_few_events(self):
        with pytest.raises(SceneError, match="at least 2"):
            validate_path([(0, 0, 0)], 30.0)

    def test_time_must_increase(self):
        with pytest.raises(SceneError, match="strictly increase"):
            validate_path([(0, 0, 0), (1, 0, 0)], 30.0)
        with pytest.raises(SceneError, match="strictly increase"):
            validate_path([(0, 0, 0), (1, 0, 2), (1, 0, 1)], 30.0)

    @pytest.mark.parametrize("bad", [[(0, 0), (1, 1, 1)], [(0, 0, "x"), (1, 1, 1)], [5, (1, 1, 1)], "path"])
    def test_malformed_events(self, bad):
        with pytest.raises(SceneError):
            validate_path(bad, 30.0)

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    @pytest.mark.parametrize("axis", [0, 1, 2])
    def test_non_finite_components(self, value, axis):
        ev = [10.0, 0.0, 5.0]
        ev[axis] = value
        with pytest.raises(SceneError, match="non-finite"):
            validate_path([(0, 0, 0), ev, (10, 0, 10)], 30.0)

    def test_non_finite_sample_paths(self):
        paths = np.array([[[0.0, 0.0, 0.0], [1.0, 0.0, 1.0]], [[0.0, 0.0, 0.0], [np.nan, 0.0, 1.0]]])
        with pytest.raises(SceneError, match="non-finite"):
            validate_sample_paths(paths, 30.0)

    def test_sample_paths_checked(self):
        paths = np.array([[[0.0, 0.0, 0.0], [1.0, 0.0, 1.0]], [[0.0, 0.0, 0.0], [40.0, 0.0, 1.0]]])
        with pytest.raises(SuperluminalError):
            validate_sample_paths(paths, 30.0)
        validate_sample_paths(paths[:1], 30.0)


class TestLocalStageDuration:
    def test_rest_stage(self, accelerate_path, c):
        assert local_stage_duration(accelerate_path, 1, c) == pytest.approx(5.0)

    def test_moving_stage_is_dilated(self, accelerate_path, c):
        gamma = 1.0 / math.sqrt(1.0 - (2.0 / c) ** 2)
        assert local_stage_duration(accelerate_path, 0, c) == pytest.approx(5.0 / gamma)


class TestFindStage:
    def test_main_frame_lookup(self, accelerate_path, c):
        stage, start, end = find_stage(accelerate_path, 2.5, Frame.main(), c)
        assert stage == 0
        assert start == pytest.approx((0.0, 0.0, 0.0))
        assert end == pytest.approx((10.0, 0.0, 5.0))
        assert find_stage(accelerate_path, 5.0, Frame.main(), c)[0] == 1

    def test_outside_is_none(self, accelerate_path, c):
        assert find_stage(accelerate_path, -0.1, Frame.main(), c) is None
        assert find_stage(accelerate_path, 10.0, Frame.main(), c) is None

    def test_endpoints_are_in_frame_coordinates(self, accelerate_path, c):
        frame = Frame((2.0, 0.0))
        stage, start, end = find_stage(accelerate_path, 1.0, frame, c)
        assert stage == 0
        assert end == pytest.approx(transform(frame, Frame.main(), accelerate_path[1], c))


class TestCurrentPosition:
    def test_interpolates_in_main(self, accelerate_path, c):
        assert current_position(accelerate_path, 2.5, Frame.main(), c) == pytest.approx((5.0, 0.0))
        assert current_position(accelerate_path, 7.0, Frame.main(), c) == pytest.approx((10.0, 0.0))

    def test_at_rest_in_own_frame(self, accelerate_path, c):
        frame = stage_frame(accelerate_path, 0)
        for t in (0.0, 1.0, 4.0):
            assert current_position(accelerate_path, t, frame, c) == pytest.approx((0.0, 0.0), abs=1e-9)

    def test_matches_boosted_main_position(self, accelerate_path, c):
        """Interpolating in a moving frame equals boosting the main-frame worldline point."""
        frame = Frame((-3.0, 1.0))
        t_main = 3.0
        x, y = current_position(accelerate_path, t_main, Frame.main(), c)
        xb, yb, tb = transform(frame, Frame.main(), (x, y, t_main), c)
        assert current_position(accelerate_path, tb, frame, c) == pytest.approx((xb, yb))

    def test_inactive_is_none(self, accelerate_path, c):
        assert current_position(accelerate_path, 11.0, Frame.main(), c) is None


class TestSamplePositions:
    def test_agrees_with_scalar_lookup(self, c):
        paths = [
            [(0.0, 0.0, 0.0), (10.0, 0.0, 5.0), (10.0, 0.0, 10.0)],
            [(0.0, 5.0, 1.0), (-5.0, 5.0, 4.0), (-5.0, 8.0, 6.0)],
            [(3.0, 3.0, 20.0), (3.0, 3.0, 30.0), (4.0, 3.0, 31.0)],
        ]
        frame = Frame((1.0, -2.0))
        for t in (0.5, 2.0, 4.9, 7.5):
            active, stages, positions = sample_positions(np.asarray(paths), t, frame, c)
            for i, path in enumerate(paths):
                expected = current_position(path, t, frame, c)
                assert bool(active[i]) == (expected is not None)
                if expected is not None:
                    assert stages[i] == find_stage(path, t, frame, c)[0]
                    np.testing.assert_allclose(positions[i], expected, atol=1e-9)
