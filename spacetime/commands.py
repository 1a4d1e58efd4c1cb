#!/usr/bin/env python3
"""
Control channel: operator commands delivered to the tick loop.

Commands arrive as single text lines, from stdin or from the control panel:

    set-frame main        observe from a stationary observer (main frame)
    set-frame <index>     follow scene object <index>
    pause | play          freeze / resume observer time
    time-scale <value>    observer ticks per real second

Lines are parsed on the producer side and handed over through a
CommandInbox: one slot, the newest command replaces an unread one, and the
tick loop takes at most one command per tick without blocking.
"""
import logging
import math
import sys
import threading
from dataclasses import dataclass
from typing import Optional, TextIO

from .errors import CommandError
from .utils import try_float

logger = logging.getLogger(__name__)

MAIN_FRAME_TARGET = "main"


@dataclass(frozen=True)
class Command:
    """A parsed control command. `argument` is "main", an object index or a number."""
    name: str
    argument: object = None


def parse_command(line: str) -> Command:
    """Parse one control line. Raises CommandError if it is not understood."""
    parts = line.strip().split()
    if not parts:
        raise CommandError("empty command")
    name = parts[0].lower()
    args = parts[1:]

    if name == "set-frame":
        if len(args) != 1:
            raise CommandError("usage: set-frame main | set-frame <index>")
        target = args[0].lower()
        if target == MAIN_FRAME_TARGET:
            return Command(name, MAIN_FRAME_TARGET)
        try:
            index = int(target)
        except ValueError:
            raise CommandError(f"set-frame expects 'main' or an object index, got {args[0]!r}")
        if index < 0:
            raise CommandError(f"object index must be non-negative, got {index}")
        return Command(name, index)

    if name in ("pause", "play"):
        if args:
            raise CommandError(f"{name} takes no arguments")
        return Command(name)

    if name == "time-scale":
        value = try_float(args[0]) if len(args) == 1 else None
        if value is None or not math.isfinite(value) or value <= 0:
            raise CommandError("usage: time-scale <positive number>")
        return Command(name, value)

    raise CommandError(f"unknown command {parts[0]!r}")


class CommandInbox:
    """
    Single-slot, latest-wins mailbox between one producer thread and the
    tick loop.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._slot: Optional[Command] = None

    def post(self, command: Command) -> None:
        with self._lock:
            if self._slot is not None:
                logger.debug("Dropping unread command %s in favour of %s", self._slot, command)
            self._slot = command

    def post_line(self, line: str) -> bool:
        """Parse and post a raw line. Malformed lines are logged and dropped."""
        try:
            command = parse_command(line)
        except CommandError as e:
            logger.warning("Ignoring command %r: %s", line.strip(), e)
            return False
        self.post(command)
        return True

    def take(self) -> Optional[Command]:
        """Non-blocking: return the pending command, if any, and empty the slot."""
        with self._lock:
            command, self._slot = self._slot, None
            return command


def _read_lines(stream: TextIO, inbox: CommandInbox) -> None:
    for line in stream:
        if line.strip():
            inbox.post_line(line)
    logger.debug("Command input closed")


def start_stdin_reader(inbox: CommandInbox, stream: Optional[TextIO] = None) -> threading.Thread:
    """Start a daemon thread feeding lines from `stream` (stdin) into `inbox`."""
    thread = threading.Thread(
        target=_read_lines,
        args=(stream if stream is not None else sys.stdin, inbox),
        name="command-reader",
        daemon=True,
    )
    thread.start()
    return thread
