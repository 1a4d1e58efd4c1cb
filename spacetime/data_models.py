#!/usr/bin/env python3
"""
Data models for the Relativity Simulator.

This module defines the value types shared between the kinematics core, the
scene loader, the tick loop and the renderer.

Conventions
- An Event is a plain (x, y, t) tuple. Which frame it is expressed in is known
  to the caller only; nothing in the value records it.
- A Path is a list of Events in main-frame coordinates. Consecutive pairs are
  stages, each moving at constant velocity.
- Sample grids are numpy arrays whose last axis holds (x, y, t).
- Everything built from a scene is immutable after the build; only the
  tracker mutates while ticking.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

Event = Tuple[float, float, float]
Path = List[Event]


@dataclass(frozen=True)
class Frame:
    """
    An inertial frame, identified by its velocity relative to the main frame.

    All frames share the spacetime origin (0, 0, 0).
    """
    velocity: Tuple[float, float] = (0.0, 0.0)

    @classmethod
    def main(cls) -> "Frame":
        return cls((0.0, 0.0))

    @property
    def is_main(self) -> bool:
        return self.velocity[0] == 0.0 and self.velocity[1] == 0.0


class ClockMode(Enum):
    ONCE = "once"
    REPEAT = "repeat"


@dataclass(frozen=True)
class PixelObject:
    """
    One scene object expanded into a square grid of co-moving samples.

    Fields:
    - name: Display name of the scene object
    - color: Packed 0xRRGGBB color shared by every sample
    - offsets: (N, 2) rest-frame offsets of the samples
    - paths: (N, E, 3) resynchronized sample paths, main-frame coordinates
    """
    name: str
    color: int
    offsets: np.ndarray = field(repr=False)
    paths: np.ndarray = field(repr=False)

    @property
    def sample_count(self) -> int:
        return int(self.paths.shape[0])


@dataclass(frozen=True)
class Clock:
    """A path reused purely for timing."""
    mode: ClockMode
    path: Path
    object_index: int = 0


@dataclass(frozen=True)
class Scene:
    """
    A validated scene, ready to tick.

    paths holds the nominal path of every scene object, in scene order; it is
    what "set-frame <index>" retargets to.
    """
    c: float
    follow_path: Path
    follow_index: int
    pixel_objects: List[PixelObject]
    clocks: List[Clock]
    paths: List[Path]
    names: List[str]
    time_scale: float = 1.0
    tick_step: Optional[float] = None
    clock_scale: float = 10.0
    display_name: str = ""


@dataclass(frozen=True)
class ClockReading:
    """Clock value for one tick; position and value are None while inactive."""
    object_index: int
    mode: ClockMode
    value: Optional[float]
    position: Optional[Tuple[float, float]]


@dataclass(frozen=True)
class Snapshot:
    """
    Everything the render surface needs for one tick.

    Positions are observer-frame coordinates; the surface centers on focus.
    """
    focus: Tuple[float, float]
    positions: np.ndarray = field(repr=False)
    colors: np.ndarray = field(repr=False)
    clocks: List[ClockReading] = field(default_factory=list)
    t: float = 0.0
    stage: int = 0
    observer_velocity: Tuple[float, float] = (0.0, 0.0)
    observer_label: str = ""
    paused: bool = False
