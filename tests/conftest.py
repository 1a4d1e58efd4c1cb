"""
Pytest configuration and shared fixtures for the simulator tests.
"""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from spacetime.data_models import Frame


# =============================================================================
# Frames and paths
# =============================================================================


@pytest.fixture
def c() -> float:
    return 30.0


@pytest.fixture
def accelerate_path():
    """Moves at (2, 0) for 5 ticks, then rests for 5 ticks."""
    return [(0.0, 0.0, 0.0), (10.0, 0.0, 5.0), (10.0, 0.0, 10.0)]


@pytest.fixture
def sample_frames():
    return [
        Frame.main(),
        Frame((2.0, 0.0)),
        Frame((0.0, -5.0)),
        Frame((7.0, 11.0)),
        Frame((-20.0, 15.0)),
    ]


@pytest.fixture
def sample_events():
    return [
        (0.0, 0.0, 0.0),
        (10.0, 0.0, 5.0),
        (-3.5, 12.25, 7.0),
        (100.0, -40.0, -2.0),
    ]


# =============================================================================
# Scenes
# =============================================================================


@pytest.fixture
def scene_data():
    """Small two-object scene: a followed ship that stops, a station at rest."""
    return {
        "name": "test scene",
        "c": 30.0,
        "time_scale": 1.0,
        "resolution": 2,
        "objects": [
            {"name": "ship", "follow": True, "clock": "repeat", "color": "red",
             "path": [[0, 0, 0], [10, 0, 5], [10, 0, 10]]},
            {"name": "station", "clock": "once", "color": "blue",
             "path": [[0, 60, 0], [0, 60, 10]]},
        ],
    }


# =============================================================================
# Numpy Test Utilities
# =============================================================================


@pytest.fixture
def assert_events_close():
    """Fixture for event comparison with tolerance."""

    def _assert_close(actual, expected, rtol=1e-9, atol=1e-9):
        np.testing.assert_allclose(np.asarray(actual), np.asarray(expected), rtol=rtol, atol=atol)

    return _assert_close
