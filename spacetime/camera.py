#!/usr/bin/env python3
"""
Camera utilities for 2D world-to-screen transforms.

World coordinates are observer-frame coordinates; the renderer re-centers the
camera on the observer's focus point every frame.
"""
from typing import Tuple

import numpy as np

from .constants import (
    DEFAULT_UNITS_PER_PIXEL,
    MIN_UNITS_PER_PIXEL,
    MAX_UNITS_PER_PIXEL,
    VIEW_WIDTH,
    VIEW_HEIGHT,
)
from .vector_utils import clamp


class Camera2D:
    """
    Simple 2D camera that maps world coordinates (units) to screen pixels.
    """

    def __init__(self, center=(0.0, 0.0), units_per_pixel=DEFAULT_UNITS_PER_PIXEL):
        self.center = [center[0], center[1]]
        self.upp = units_per_pixel
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (w, h)

    def follow(self, focus: Tuple[float, float]) -> None:
        self.center[0], self.center[1] = focus[0], focus[1]

    def world_to_screen(self, pos: Tuple[float, float]) -> Tuple[int, int]:
        cx, cy = self.center
        upp = self.upp
        px = (pos[0] - cx) / upp + self.viewport_size[0] / 2
        py = (pos[1] - cy) / upp + self.viewport_size[1] / 2
        return (int(px), int(py))

    def world_to_screen_many(self, positions: np.ndarray) -> np.ndarray:
        """(N, 2) world positions to (N, 2) integer pixel coordinates."""
        half = np.asarray(self.viewport_size, dtype=np.float64) / 2
        px = (positions - np.asarray(self.center)) / self.upp + half
        return np.floor(px).astype(np.int64)

    def zoom(self, factor: float) -> None:
        factor = clamp(factor, 0.05, 20.0)
        self.upp = clamp(self.upp * (1.0 / factor), MIN_UNITS_PER_PIXEL, MAX_UNITS_PER_PIXEL)

    @property
    def sample_size(self) -> int:
        """On-screen edge length, in pixels, of one unit-spaced sample."""
        return max(1, int(round(1.0 / self.upp)))
