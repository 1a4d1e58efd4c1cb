#!/usr/bin/env python3
"""
Vector helper functions for 2D operations.

These are small, fast functions for vector math used by the boost and the
tracker. Vectors are plain (x, y) tuples.
"""
import math
from typing import Tuple


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


def vec_len(a: Tuple[float, float]) -> float:
    return math.hypot(a[0], a[1])


def vec_lerp(a: Tuple[float, float], b: Tuple[float, float], d: float) -> Tuple[float, float]:
    """Linear interpolation a + (b - a) * d."""
    return (a[0] * (1.0 - d) + b[0] * d, a[1] * (1.0 - d) + b[1] * d)


def vec_rotate(a: Tuple[float, float], angle: float) -> Tuple[float, float]:
    """Rotate a counter-clockwise by angle (radians)."""
    c = math.cos(angle)
    s = math.sin(angle)
    return (a[0] * c - a[1] * s, a[0] * s + a[1] * c)
