#!/usr/bin/env python3
"""
Clock accumulator.

A clock shows the proper time elapsed along its path: the rest-frame
durations of all completed stages plus the active stage's rest-frame duration
scaled by how far the observer is through it. That fraction is measured in
the observer's frame, not the clock's rest frame; within one stage both
agree on the endpoints and differ only in how the interior is spread.
"""
from typing import Optional

from .constants import DEFAULT_CLOCK_SCALE, ONCE_CLOCK_LIMIT
from .data_models import Clock, ClockMode, Frame
from .paths import find_stage, interpolation_fraction, local_stage_duration
from .vector_utils import clamp


def elapsed_proper_time(clock: Clock, t: float, frame: Frame, c: float) -> Optional[float]:
    """Proper time along the clock path at observer time t, or None if inactive."""
    found = find_stage(clock.path, t, frame, c)
    if found is None:
        return None
    stage, start, end = found
    d = interpolation_fraction(start, end, t)

    total = 0.0
    for s in range(stage):
        total += local_stage_duration(clock.path, s, c)
    total += local_stage_duration(clock.path, stage, c) * d
    return total


def clock_value(clock: Clock, t: float, frame: Frame, c: float,
                scale: float = DEFAULT_CLOCK_SCALE) -> Optional[float]:
    """
    How full the clock dial is at observer time t.

    Once clocks saturate at half a turn; Repeat clocks wrap every full turn.
    """
    elapsed = elapsed_proper_time(clock, t, frame, c)
    if elapsed is None:
        return None
    value = elapsed / scale
    if clock.mode is ClockMode.ONCE:
        return clamp(value, 0.0, ONCE_CLOCK_LIMIT)
    return value % 1.0
