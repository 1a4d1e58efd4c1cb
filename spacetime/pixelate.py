#!/usr/bin/env python3
"""
Pixelation and resynchronization of extended objects.

An object is drawn as a square grid of samples around its nominal path. Each
sample gets its own path because samples at different offsets desynchronize
differently whenever the object changes velocity.

Boundary events
- In its own rest frame an object appears and disappears all at once. The
  first and last events of every sample are therefore built by moving the
  nominal event into the boundary stage's frame, adding the offset there and
  moving it back to the main frame.

Transition events
- At an interior event the incoming stage (frame f1) and outgoing stage
  (frame f2) disagree about simultaneity, so offsetting in either frame alone
  tears the shape. For every sample we look for a time shift, taken inside
  f1, such that the f1-offset event moved by that shift lands, seen from f2,
  on the f2-offset position. The sample then switches stage at that shifted
  event.
- The shift is found by bisection over a wide symmetric bracket. The
  objective is the squared spatial distance in f2, which is quadratic in the
  shift because the boost is affine; a closed form would also do, but the
  bisection is cheap and vectorized across the whole grid.
"""
import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from .constants import DEFAULT_GRID_RADIUS, RESYNC_BRACKET, RESYNC_ITERATIONS
from .data_models import Event, Frame, PixelObject
from .lorentz import transform, transform_many
from .paths import stage_count, stage_frame

logger = logging.getLogger(__name__)


def grid_offsets(radius: int) -> np.ndarray:
    """(N, 2) integer offsets of a (2R+1)^2 grid, row by row from (-R, -R)."""
    span = np.arange(-radius, radius + 1, dtype=np.float64)
    ys, xs = np.meshgrid(span, span, indexing="ij")
    return np.stack([xs.ravel(), ys.ravel()], axis=1)


def _offset_in_frame(frame: Frame, ev: Event, offsets: np.ndarray, c: float) -> np.ndarray:
    base = transform(frame, Frame.main(), ev, c)
    out = np.tile(np.asarray(base, dtype=np.float64), (offsets.shape[0], 1))
    out[:, :2] += offsets
    return out


def simultaneous_events(frame: Frame, ev: Event, offsets: np.ndarray, c: float) -> np.ndarray:
    """Boundary events: offset `ev` in `frame` at fixed time, back to main frame."""
    in_frame = _offset_in_frame(frame, ev, offsets, c)
    return transform_many(Frame.main(), frame, in_frame, c)


def solve_time_shift(f1: Frame, f2: Frame, ev1: np.ndarray, ev2: np.ndarray, c: float,
                     bracket: float = RESYNC_BRACKET,
                     iterations: int = RESYNC_ITERATIONS) -> np.ndarray:
    """
    Bisect, per sample, the f1 time shift that best maps ev1 onto ev2 in f2.

    Args:
        ev1: (N, 3) f1-offset transition events, f1 coordinates
        ev2: (N, 3) f2-offset transition events, f2 coordinates

    Returns:
        (N,) time shifts, in f1 time.
    """
    def objective(shift: np.ndarray) -> np.ndarray:
        moved = ev1.copy()
        moved[:, 2] += shift
        seen = transform_many(f2, f1, moved, c)
        return np.sum((seen[:, :2] - ev2[:, :2]) ** 2, axis=1)

    lo = np.full(ev1.shape[0], -bracket)
    hi = np.full(ev1.shape[0], bracket)
    for _ in range(iterations):
        center = (lo + hi) / 2.0
        toward_lo = objective(lo) < objective(hi)
        hi = np.where(toward_lo, center, hi)
        lo = np.where(toward_lo, lo, center)

    edge = np.abs(lo) >= bracket * (1.0 - 1e-9)
    if np.any(edge):
        logger.warning(
            "Resync shift hit the +/-%g bracket for %d sample(s); the shape may tear at this transition",
            bracket, int(edge.sum()),
        )
    return lo


def transition_events(f1: Frame, f2: Frame, ev: Event, offsets: np.ndarray, c: float) -> np.ndarray:
    """Resynchronized transition events (N, 3) in main-frame coordinates."""
    ev1 = _offset_in_frame(f1, ev, offsets, c)
    if f1.velocity == f2.velocity:
        # Same frame on both sides: nothing to resynchronize.
        return transform_many(Frame.main(), f1, ev1, c)

    ev2 = _offset_in_frame(f2, ev, offsets, c)
    shift = solve_time_shift(f1, f2, ev1, ev2, c)
    moved = ev1.copy()
    moved[:, 2] += shift
    return transform_many(Frame.main(), f1, moved, c)


def transition_event(f1: Frame, f2: Frame, ev: Event, offset: Tuple[float, float], c: float) -> Event:
    """Single-sample form of transition_events."""
    row = transition_events(f1, f2, ev, np.asarray([offset], dtype=np.float64), c)[0]
    return (float(row[0]), float(row[1]), float(row[2]))


def pixelate(path: Sequence[Event], color: int, c: float,
             radius: int = DEFAULT_GRID_RADIUS, name: Optional[str] = None) -> PixelObject:
    """
    Expand a nominal path into a PixelObject with one resynchronized path per
    grid offset.
    """
    offsets = grid_offsets(radius)
    last = stage_count(path) - 1

    columns = [simultaneous_events(stage_frame(path, 0), path[0], offsets, c)]
    for i in range(last):
        f1 = stage_frame(path, i)
        f2 = stage_frame(path, i + 1)
        columns.append(transition_events(f1, f2, path[i + 1], offsets, c))
    columns.append(simultaneous_events(stage_frame(path, last), path[-1], offsets, c))

    paths = np.stack(columns, axis=1)
    logger.debug("Pixelated %s into %d samples x %d events", name or "object", paths.shape[0], paths.shape[1])
    return PixelObject(name=name or "", color=int(color), offsets=offsets, paths=paths)
