"""Power values on the half-point grid."""

import math
from collections.abc import Iterable

GRID_STEP = 0.5
MIN_POWER = 1.0
MAX_POWER = 10.0

# Absorbs floating error when comparing values on the 0.5 grid
EPSILON = 0.01


def round_to_grid(value: float) -> float:
    """Round to the nearest 0.5, halves rounding up (6.25 -> 6.5)."""
    return math.floor(value / GRID_STEP + 0.5) * GRID_STEP


def mean_power(values: Iterable[float]) -> float:
    """Grid-rounded arithmetic mean of power values."""
    values = list(values)
    if not values:
        raise ValueError("Cannot take the mean of no power values")
    return round_to_grid(sum(values) / len(values))


def is_on_grid(value: float) -> bool:
    return abs(round_to_grid(value) - value) < EPSILON
