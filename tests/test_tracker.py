"""
Tests for the observer tracker.

Tests for spacetime/tracker.py
"""

from __future__ import annotations

import logging

import pytest

from spacetime.data_models import Frame
from spacetime.errors import RetargetError
from spacetime.lorentz import transform
from spacetime.tracker import ObserverTracker


def drive(tracker, dt=0.05, max_steps=100000):
    """Advance until the followed path is exhausted; return (stages seen, end reports)."""
    stages = [tracker.stage]
    ends = 0
    for _ in range(max_steps):
        tracker.advance(dt)
        if not tracker.resolve_transitions():
            ends += 1
            break
        if tracker.stage != stages[-1]:
            stages.append(tracker.stage)
    return stages, ends


class TestObserverTracker:
    def test_initial_state(self, accelerate_path, c):
        tracker = ObserverTracker(accelerate_path, c)
        assert tracker.stage == 0
        assert tracker.frame == Frame((2.0, 0.0))
        assert tracker.t == pytest.approx(0.0)
        assert not tracker.finished

    def test_set_stage_redefines_time(self, accelerate_path, c):
        tracker = ObserverTracker(accelerate_path, c)
        tracker.set_stage(1)
        assert tracker.frame.is_main
        assert tracker.t == pytest.approx(5.0)

    def test_set_stage_in_moving_frame(self, c):
        path = [(0.0, 0.0, 0.0), (0.0, 0.0, 4.0), (6.0, 8.0, 6.0), (6.0, 8.0, 9.0)]
        tracker = ObserverTracker(path, c)
        tracker.set_stage(1)
        frame = Frame((3.0, 4.0))
        assert tracker.frame == frame
        assert tracker.t == pytest.approx(transform(frame, Frame.main(), path[1], c)[2])

    def test_stage_monotonicity(self, c):
        path = [(0.0, 0.0, 0.0), (10.0, 0.0, 5.0), (10.0, 0.0, 10.0), (0.0, 10.0, 14.0), (0.0, 10.0, 16.0)]
        tracker = ObserverTracker(path, c)
        stages, ends = drive(tracker)
        assert stages == [0, 1, 2, 3]
        assert ends == 1
        assert tracker.finished

    def test_end_reported_once(self, accelerate_path, c, caplog):
        tracker = ObserverTracker(accelerate_path, c)
        with caplog.at_level(logging.INFO, logger="spacetime.tracker"):
            stages, ends = drive(tracker)
            assert tracker.resolve_transitions() is False
            assert tracker.resolve_transitions() is False
        assert stages == [0, 1]
        assert ends == 1
        assert sum("exhausted" in r.message for r in caplog.records) == 1

    def test_time_monotonic_within_stage(self, accelerate_path, c):
        tracker = ObserverTracker(accelerate_path, c)
        last_t, last_stage = tracker.t, tracker.stage
        for _ in range(60):
            tracker.advance(0.1)
            if not tracker.resolve_transitions():
                break
            if tracker.stage == last_stage:
                assert tracker.t >= last_t
            last_t, last_stage = tracker.t, tracker.stage

    def test_negative_step_rejected(self, accelerate_path, c):
        tracker = ObserverTracker(accelerate_path, c)
        with pytest.raises(ValueError):
            tracker.advance(-1.0)

    def test_focus_is_at_rest_in_own_frame(self, accelerate_path, c):
        tracker = ObserverTracker(accelerate_path, c)
        tracker.advance(2.0)
        assert tracker.resolve_transitions()
        x, y, t = tracker.observer_event()
        assert (x, y) == pytest.approx((0.0, 0.0), abs=1e-9)
        assert t == pytest.approx(2.0)

    def test_find_stage_of_other_path(self, accelerate_path, c):
        tracker = ObserverTracker(accelerate_path, c)
        other = [(0.0, 60.0, -1.0), (0.0, 60.0, 20.0)]
        tracker.advance(1.0)
        found = tracker.find_stage(other)
        assert found is not None and found[0] == 0
        assert tracker.current_position(other)[1] == pytest.approx(60.0)


class TestRetarget:
    def test_retarget_keeps_main_frame_event(self, accelerate_path, c):
        tracker = ObserverTracker(accelerate_path, c)
        tracker.advance(2.0)
        tracker.resolve_transitions()
        before = transform(Frame.main(), tracker.frame, tracker.observer_event(), c)

        other = [(0.0, 60.0, 0.0), (0.0, 60.0, 10.0)]
        tracker.retarget(other, "station")
        assert tracker.label == "station"
        assert tracker.frame.is_main
        assert tracker.stage == 0
        assert tracker.t == pytest.approx(before[2])
        assert tracker.observer_event()[:2] == pytest.approx((0.0, 60.0))

    def test_retarget_inactive_path_fails(self, accelerate_path, c):
        tracker = ObserverTracker(accelerate_path, c)
        tracker.advance(1.0)
        tracker.resolve_transitions()
        with pytest.raises(RetargetError):
            tracker.retarget([(0.0, 0.0, 50.0), (0.0, 0.0, 60.0)], "late")
        assert tracker.path == accelerate_path

    def test_retarget_to_moving_path(self, accelerate_path, c):
        tracker = ObserverTracker([(0.0, 0.0, 0.0), (0.0, 0.0, 10.0)], c)
        tracker.advance(3.0)
        tracker.resolve_transitions()
        tracker.retarget(accelerate_path, "ship")
        assert tracker.frame == Frame((2.0, 0.0))
        x, y, t = tracker.observer_event()
        assert (x, y) == pytest.approx((0.0, 0.0), abs=1e-9)
        assert t == pytest.approx(transform(tracker.frame, Frame.main(), (6.0, 0.0, 3.0), c)[2])
