#!/usr/bin/env python3
"""
General utilities for the Relativity Simulator.
"""
from typing import Optional


def try_float(val) -> Optional[float]:
    try:
        return float(val)
    except (TypeError, ValueError):
        return None
