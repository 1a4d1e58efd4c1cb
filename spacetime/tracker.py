#!/usr/bin/env python3
"""
Observer tracker.

The observer rides along the followed path. Its clock t is the time
coordinate of the observer's *current* stage frame, so every stage change
redefines t: the new stage's start event is re-expressed in the new frame and
its time coordinate becomes the observer's time. Within a stage t only grows.
"""
import logging
from typing import Optional, Sequence, Tuple

from .data_models import Event, Frame, Path
from .errors import RetargetError
from .lorentz import transform
from .paths import current_position, find_stage, stage_count, stage_frame
from .vector_utils import vec_lerp

logger = logging.getLogger(__name__)


class ObserverTracker:
    """
    Tracks which stage of the followed path the observer is on, the
    observer's own time, and the observer frame derived from that stage.
    """

    def __init__(self, path: Sequence[Event], c: float, label: str = "follow"):
        self.c = float(c)
        self.path: Path = list(path)
        self.label = label
        self.stage = 0
        self.t = 0.0  # set by set_stage
        self.frame = Frame.main()  # set by set_stage
        self.finished = False
        self.set_stage(0)

    def to_observer(self, ev: Event) -> Event:
        """Translate a main-frame event into the observer frame."""
        return transform(self.frame, Frame.main(), ev, self.c)

    def set_stage(self, stage: int) -> None:
        self.stage = stage
        self.frame = stage_frame(self.path, stage)
        self.t = self.to_observer(self.path[stage])[2]

    def find_stage(self, path: Sequence[Event]) -> Optional[Tuple[int, Event, Event]]:
        return find_stage(path, self.t, self.frame, self.c)

    def current_position(self, path: Sequence[Event]) -> Optional[Tuple[float, float]]:
        return current_position(path, self.t, self.frame, self.c)

    def advance(self, dt: float) -> None:
        if dt < 0:
            raise ValueError(f"Observer time cannot run backwards (dt={dt})")
        self.t += dt

    def resolve_transitions(self) -> bool:
        """
        Move onto later stages whose start has already passed.

        Returns False once the followed path is exhausted; True otherwise.
        """
        if self.finished:
            return False
        while self.to_observer(self.path[self.stage + 1])[2] < self.t:
            if self.stage + 1 >= stage_count(self.path):
                self.finished = True
                logger.info("Followed path '%s' exhausted at stage %d", self.label, self.stage)
                return False
            self.set_stage(self.stage + 1)
            logger.debug("Observer entered stage %d, v=%s, t=%.6g", self.stage, self.frame.velocity, self.t)
        return True

    def observer_event(self) -> Event:
        """Current focus event in observer coordinates."""
        pos = self.current_position(self.path)
        if pos is None:
            # At the exact end of the path the half-open lookup misses; use the endpoint.
            end = self.to_observer(self.path[-1])
            return (end[0], end[1], self.t)
        return (pos[0], pos[1], self.t)

    def retarget(self, path: Sequence[Event], label: str) -> None:
        """
        Follow a different path, keeping the observer's spacetime position.

        The current focus event is expressed in main-frame coordinates; the new
        path's stage active at that main-frame time becomes the observer's
        stage and the new path's point at that time, seen from the new stage
        frame, defines the new observer time.

        Raises RetargetError if the new path is not active at that instant.
        """
        here = transform(Frame.main(), self.frame, self.observer_event(), self.c)
        t_main = here[2]
        new_path = list(path)

        for i in range(stage_count(new_path)):
            start, end = new_path[i], new_path[i + 1]
            if start[2] <= t_main < end[2]:
                d = (t_main - start[2]) / (end[2] - start[2])
                x, y = vec_lerp((start[0], start[1]), (end[0], end[1]), d)
                frame = stage_frame(new_path, i)
                self.path = new_path
                self.label = label
                self.stage = i
                self.frame = frame
                self.t = transform(frame, Frame.main(), (x, y, t_main), self.c)[2]
                self.finished = False
                logger.info("Observer now follows '%s' at stage %d (main-frame t=%.6g)", label, i, t_main)
                return

        raise RetargetError(f"'{label}' is not active at main-frame time {t_main:.6g}")
