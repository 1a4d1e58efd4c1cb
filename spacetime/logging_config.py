"""
Logging setup for the simulator.

Every module logs through `logging.getLogger(__name__)`, so all records land
under the "spacetime" package logger configured here. The entry script calls
`setup_logging` once, before the scene is built.
"""
import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "spacetime"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Route the package logger to stdout, and to `log_file` when one is given.

    `level` may be a number or a level name such as "DEBUG". Calling this
    again replaces the handlers installed by the previous call, so a record
    is never printed twice.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"unknown log level {level!r}")

    root = logging.getLogger(PACKAGE_LOGGER)
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root.addHandler(_handler(logging.StreamHandler(sys.stdout), level, formatter))
    if log_file:
        root.addHandler(_handler(logging.FileHandler(log_file, mode="w", encoding="utf-8"), level, formatter))

    root.debug("Logging at %s%s", logging.getLevelName(level), f", also to {log_file}" if log_file else "")
    return root
