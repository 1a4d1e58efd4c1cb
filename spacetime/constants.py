#!/usr/bin/env python3
"""
Shared constants for the Relativity Simulator.

Units are abstract: positions in "units", time in "ticks" of the main frame.
A scene file supplies the speed of light c in units per tick.
"""

# Pixelation / resynchronization
DEFAULT_GRID_RADIUS = 20  # samples per side = 2 * R + 1
RESYNC_BRACKET = 10000.0  # bisection bracket for the time shift, +/- ticks
RESYNC_ITERATIONS = 100

# Clocks
DEFAULT_CLOCK_SCALE = 10.0  # rest-frame ticks per full clock revolution
ONCE_CLOCK_LIMIT = 0.5

# Time flow
DEFAULT_TIME_SCALE = 1.0  # observer ticks per real second

# Stage parity tint added to the blue channel on odd stages
STAGE_TINT = 160

# Named colors accepted in scene files (packed 0xRRGGBB)
PALETTE = {
    "red": 0xFF0000,
    "blue": 0x0000FF,
    "green": 0x00FF00,
    "yellow": 0xFFFF00,
    "violet": 0xFF00FF,
    "cyan": 0x00FFFF,
    "white": 0xFFFFFF,
}

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
TARGET_FPS = 60
BACKGROUND_COLOR = (0, 0, 0)
FOCUS_COLOR = (255, 255, 0)
HUD_COLOR = (200, 200, 200)

# Camera zoom bounds (units-per-pixel)
DEFAULT_UNITS_PER_PIXEL = 1.0
MIN_UNITS_PER_PIXEL = 0.02
MAX_UNITS_PER_PIXEL = 50.0

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
