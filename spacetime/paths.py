#!/usr/bin/env python3
"""
Paths and stages.

A path is a list of main-frame events; each consecutive pair is a stage with
constant velocity. The rest frame of a stage is never stored, it is derived
from the stage's endpoints whenever needed.

The lookup helpers answer "which stage is active and where is the object"
for an observer at time t in some frame. Because constant-velocity motion is
linear in every inertial frame, interpolating the two frame-transformed stage
endpoints is exact.
"""
import math
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .data_models import Event, Frame, Path
from .errors import SceneError, SuperluminalError
from .lorentz import transform, transform_many
from .vector_utils import vec_lerp


def stage_frame(path: Sequence[Event], stage: int) -> Frame:
    """Rest frame of `stage`: spatial delta over temporal delta of its endpoints."""
    start, end = path[stage], path[stage + 1]
    dt = end[2] - start[2]
    return Frame(((end[0] - start[0]) / dt, (end[1] - start[1]) / dt))


def stage_count(path: Sequence[Event]) -> int:
    return len(path) - 1


def validate_path(raw: Iterable, c: float, label: str = "path") -> Path:
    """
    Coerce and validate a path read from a scene file.

    Raises SceneError for fewer than two events, malformed events or time
    that does not strictly increase, and SuperluminalError for any stage
    whose speed is c or more. Nothing is clamped.
    """
    try:
        events = list(raw)
    except TypeError:
        raise SceneError(f"{label}: path must be a list of [x, y, t] events")
    if len(events) < 2:
        raise SceneError(f"{label}: a path needs at least 2 events, got {len(events)}")

    path: Path = []
    for i, ev in enumerate(events):
        try:
            if len(ev) != 3:
                raise SceneError(f"{label}: event {i} must have exactly 3 components (x, y, t)")
            coords = (float(ev[0]), float(ev[1]), float(ev[2]))
        except (TypeError, ValueError):
            raise SceneError(f"{label}: event {i} is not a numeric [x, y, t] triple: {ev!r}")
        if not all(math.isfinite(v) for v in coords):
            raise SceneError(f"{label}: event {i} has a non-finite component: {ev!r}")
        path.append(coords)

    for i in range(stage_count(path)):
        if path[i + 1][2] <= path[i][2]:
            raise SceneError(
                f"{label}: time must strictly increase, stage {i} goes from t={path[i][2]} to t={path[i + 1][2]}"
            )
        vx, vy = stage_frame(path, i).velocity
        speed = math.hypot(vx, vy)
        if speed >= c:
            raise SuperluminalError(
                f"{label}: stage {i} moves at {speed:.6g}, which is not below c = {c:.6g}"
            )
    return path


def validate_sample_paths(paths: np.ndarray, c: float, label: str = "object") -> None:
    """Speed check for a (N, E, 3) array of sample paths."""
    if not np.isfinite(paths).all():
        raise SceneError(f"{label}: resynchronized sample path has a non-finite component")
    deltas = paths[:, 1:, :] - paths[:, :-1, :]
    if np.any(deltas[..., 2] <= 0.0):
        raise SceneError(f"{label}: resynchronized sample path has non-increasing time")
    speeds = np.hypot(deltas[..., 0], deltas[..., 1]) / deltas[..., 2]
    fastest = float(speeds.max())
    if fastest >= c:
        raise SuperluminalError(
            f"{label}: a resynchronized sample moves at {fastest:.6g}, which is not below c = {c:.6g}"
        )


def local_stage_duration(path: Sequence[Event], stage: int, c: float) -> float:
    """Proper time elapsed over `stage`, measured in the stage's rest frame."""
    f = stage_frame(path, stage)
    main = Frame.main()
    start = transform(f, main, path[stage], c)
    end = transform(f, main, path[stage + 1], c)
    delta = end[2] - start[2]
    assert delta >= 0.0, f"negative proper time {delta} on stage {stage}"
    return delta


def find_stage(path: Sequence[Event], t: float, frame: Frame, c: float) -> Optional[Tuple[int, Event, Event]]:
    """
    Locate the stage of `path` active at time t of `frame`.

    Returns (stage, start, end) with both endpoints in `frame`'s coordinates,
    or None if t lies outside every stage.
    """
    main = Frame.main()
    evs = [transform(frame, main, ev, c) for ev in path]
    for i in range(len(evs) - 1):
        if evs[i][2] <= t < evs[i + 1][2]:
            return i, evs[i], evs[i + 1]
    return None


def interpolation_fraction(start: Event, end: Event, t: float) -> float:
    return (t - start[2]) / (end[2] - start[2])


def current_position(path: Sequence[Event], t: float, frame: Frame, c: float) -> Optional[Tuple[float, float]]:
    """Position of `path` at time t of `frame`, in `frame`'s coordinates."""
    found = find_stage(path, t, frame, c)
    if found is None:
        return None
    _, start, end = found
    d = interpolation_fraction(start, end, t)
    return vec_lerp((start[0], start[1]), (end[0], end[1]), d)


def sample_positions(paths: np.ndarray, t: float, frame: Frame, c: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Evaluate a whole sample grid at time t of `frame`.

    Args:
        paths: (N, E, 3) sample paths in main-frame coordinates

    Returns:
        (active, stages, positions): boolean mask (N,), stage index per sample
        (N,) valid where active, and (N, 2) positions valid where active.
    """
    evs = transform_many(frame, Frame.main(), paths, c)
    ts = evs[..., 2]
    inside = (ts[:, :-1] <= t) & (t < ts[:, 1:])
    active = inside.any(axis=1)
    stages = np.argmax(inside, axis=1)

    rows = np.arange(paths.shape[0])
    start = evs[rows, stages]
    end = evs[rows, stages + 1]
    span = end[:, 2] - start[:, 2]
    # Inactive rows may carry a zero span; their result is masked anyway.
    span = np.where(active, span, 1.0)
    d = (t - start[:, 2]) / span
    positions = start[:, :2] * (1.0 - d)[:, None] + end[:, :2] * d[:, None]
    return active, stages, positions
