#!/usr/bin/env python3
"""
Tick orchestration.

SimulationController owns the observer tracker and turns one slice of real
time into one Snapshot for the render surface:

1) take at most one pending control command,
2) advance observer time (elapsed real time x time scale, or a fixed step),
3) move the observer onto later stages of the followed path,
4) evaluate every sample of every object at the observer's instant,
5) read the clocks.

Everything in steps 4 and 5 is recomputed from (t, observer frame) on every
tick; nothing is cached between ticks.

Threading
- tick() runs on the render thread. The control panel reads status() from
  the UI thread; both take the controller lock. Commands reach the tick loop
  only through the CommandInbox.
"""
import logging
import threading
from typing import List, Optional

import numpy as np

from .clocks import clock_value
from .commands import MAIN_FRAME_TARGET, Command, CommandInbox
from .constants import STAGE_TINT
from .data_models import ClockReading, Frame, Scene, Snapshot
from .errors import RetargetError
from .lorentz import transform
from .paths import current_position, sample_positions
from .tracker import ObserverTracker

logger = logging.getLogger(__name__)


def stage_tint(color: int, stages: np.ndarray) -> np.ndarray:
    """Packed colors per sample: odd stages get STAGE_TINT more blue, capped at 255."""
    stages = np.asarray(stages)
    blue = (color & 0xFF) + STAGE_TINT * (stages % 2)
    return (color & 0xFFFF00) | np.minimum(blue, 0xFF)


class SimulationController:
    """
    Drives the observer through a built scene, one tick at a time.
    """

    def __init__(self, scene: Scene, inbox: Optional[CommandInbox] = None):
        self.lock = threading.RLock()
        self.scene = scene
        self.inbox = inbox
        self.tracker = ObserverTracker(scene.follow_path, scene.c, label=scene.names[scene.follow_index])
        self.playing = True
        self.time_scale = scene.time_scale
        self.finished = False
        self.last_message: Optional[str] = None
        self._end_time = max(float(p.paths[..., 2].max()) for p in scene.pixel_objects)

    # -----------------------
    # Commands
    # -----------------------

    def apply_command(self, command: Command) -> None:
        with self.lock:
            logger.info("Applying command: %s %s", command.name, "" if command.argument is None else command.argument)
            try:
                if command.name == "set-frame":
                    if command.argument == MAIN_FRAME_TARGET:
                        self._follow_main_frame()
                    else:
                        self._follow_object(int(command.argument))
                elif command.name == "pause":
                    self.playing = False
                elif command.name == "play":
                    self.playing = True
                elif command.name == "time-scale":
                    self.time_scale = float(command.argument)
                else:
                    logger.warning("Unhandled command %s", command.name)
                    return
            except RetargetError as e:
                self.last_message = str(e)
                logger.warning("Cannot change frame: %s", e)
                return
            self.last_message = f"{command.name} {command.argument if command.argument is not None else ''}".strip()

    def _follow_object(self, index: int) -> None:
        if not 0 <= index < len(self.scene.paths):
            raise RetargetError(f"no object with index {index} (scene has {len(self.scene.paths)})")
        self.tracker.retarget(self.scene.paths[index], self.scene.names[index])
        self.finished = False

    def _follow_main_frame(self) -> None:
        """Hand the observer over to a stationary worldline at the current focus."""
        tr = self.tracker
        here = transform(Frame.main(), tr.frame, tr.observer_event(), tr.c)
        if here[2] >= self._end_time:
            raise RetargetError("the scene has already ended in the main frame")
        rest_path = [here, (here[0], here[1], self._end_time)]
        tr.retarget(rest_path, MAIN_FRAME_TARGET)
        self.finished = False

    # -----------------------
    # Ticking
    # -----------------------

    def time_step(self, dt_real_seconds: float) -> float:
        if self.scene.tick_step is not None:
            return self.scene.tick_step
        return max(0.0, dt_real_seconds) * self.time_scale

    def tick(self, dt_real_seconds: float) -> Optional[Snapshot]:
        """
        Advance by one frame and describe the scene at the new instant.

        Returns None once the followed path is exhausted.
        """
        with self.lock:
            if self.inbox is not None:
                command = self.inbox.take()
                if command is not None:
                    self.apply_command(command)

            if self.finished:
                return None
            if self.playing:
                self.tracker.advance(self.time_step(dt_real_seconds))
            if not self.tracker.resolve_transitions():
                self.finished = True
                return None
            return self.snapshot()

    def snapshot(self) -> Snapshot:
        """Describe the scene at the tracker's current instant."""
        tr = self.tracker
        t, frame, c = tr.t, tr.frame, tr.c
        focus = tr.observer_event()

        positions: List[np.ndarray] = []
        colors: List[np.ndarray] = []
        for pobj in self.scene.pixel_objects:
            active, stages, pos = sample_positions(pobj.paths, t, frame, c)
            positions.append(pos[active])
            colors.append(stage_tint(pobj.color, stages[active]))

        clocks = []
        for clock in self.scene.clocks:
            clocks.append(ClockReading(
                object_index=clock.object_index,
                mode=clock.mode,
                value=clock_value(clock, t, frame, c, self.scene.clock_scale),
                position=current_position(clock.path, t, frame, c),
            ))

        return Snapshot(
            focus=(focus[0], focus[1]),
            positions=np.concatenate(positions) if positions else np.empty((0, 2)),
            colors=np.concatenate(colors).astype(np.int64) if colors else np.empty(0, dtype=np.int64),
            clocks=clocks,
            t=t,
            stage=tr.stage,
            observer_velocity=frame.velocity,
            observer_label=tr.label,
            paused=not self.playing,
        )

    def status(self) -> dict:
        """Read-only summary for the control panel."""
        with self.lock:
            return {
                "t": self.tracker.t,
                "stage": self.tracker.stage,
                "following": self.tracker.label,
                "velocity": self.tracker.frame.velocity,
                "playing": self.playing,
                "time_scale": self.time_scale,
                "finished": self.finished,
                "message": self.last_message,
            }
