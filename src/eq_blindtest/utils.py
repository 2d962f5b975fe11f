# src/eq_blindtest/utils.py

"""
Utility functions for frequency grids and input validation.
"""

import math

import numpy as np

from .errors import InvalidParameter


def log_frequency_grid(f_min, f_max, num_points):
    """
    Build a logarithmically spaced frequency grid from f_min to f_max (inclusive).
    Returns a read-only float64 array.
    """
    if num_points < 2:
        raise InvalidParameter("A frequency grid needs at least two points.")
    if not 0 < f_min < f_max:
        raise InvalidParameter(f"Invalid grid bounds: {f_min}..{f_max} Hz")
    log_min = math.log10(f_min)
    log_max = math.log10(f_max)
    steps = np.arange(num_points, dtype=float) / (num_points - 1)
    grid = 10.0 ** (log_min + steps * (log_max - log_min))
    grid.setflags(write=False)
    return grid


def require_finite(name, value):
    """Return value as float, raising InvalidParameter for NaN/inf or non-numbers."""
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise InvalidParameter(f"{name} must be finite, got {value!r}")
    return number
