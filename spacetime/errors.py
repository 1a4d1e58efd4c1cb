#!/usr/bin/env python3
"""
Exceptions raised by the Relativity Simulator.

SceneError and its subclasses are fatal and raised only while a scene is
being loaded and built; the tick loop never starts after one. CommandError
and RetargetError are raised at run time and are reported, not fatal.
"""


class SceneError(Exception):
    """A scene file is invalid and cannot be built."""


class SuperluminalError(SceneError):
    """A stage of some path moves at or above the speed of light."""


class FollowMarkerError(SceneError):
    """The scene does not mark exactly one object to follow."""


class CommandError(ValueError):
    """A control-channel line could not be parsed."""


class RetargetError(RuntimeError):
    """The observer cannot switch to the requested path at this instant."""
