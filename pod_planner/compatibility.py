"""Compatibility model: deciding whether power values are close enough."""

import math
from collections import Counter
from collections.abc import Sequence

from pod_planner.power import EPSILON, GRID_STEP, MAX_POWER, MIN_POWER
from pod_planner.types import Unit
from pod_planner.units import unit_anchors


def matches(a: float, b: float, tolerance: float) -> bool:
    """Whether two power values are compatible under a tolerance."""
    diff = abs(a - b)
    return diff < EPSILON or diff <= tolerance


def admits(unit: Unit, power: float, tolerance: float) -> bool:
    """Whether a unit has at least one anchor compatible with `power`."""
    return any(matches(anchor, power, tolerance) for anchor in unit_anchors(unit))


def _grid_between(low: float, high: float) -> list[float]:
    """Grid power values in [low, high], clipped to the valid power range."""
    low, high = max(low, MIN_POWER), min(high, MAX_POWER)
    first = math.ceil(low / GRID_STEP - EPSILON)
    last = math.floor(high / GRID_STEP + EPSILON)
    return [step * GRID_STEP for step in range(first, last + 1)]


def common_anchors(units: Sequence[Unit], tolerance: float) -> list[float]:
    """Grid power values every unit can play at, sorted ascending.

    Values nobody lists still count: under a 0.5 tolerance, units at 6 and 7
    share 6.5.
    """
    if not units:
        return []
    anchors = [anchor for unit in units for anchor in unit_anchors(unit)]
    grid = _grid_between(min(anchors) - tolerance, max(anchors) + tolerance)
    return [
        power
        for power in grid
        if all(admits(unit, power, tolerance) for unit in units)
    ]


def best_anchor(
    units: Sequence[Unit], among: Sequence[float] | None = None
) -> float:
    """Most frequent anchor across all units, ties broken by first-seen order.

    Parameters:
        units: Units whose anchors are counted (must be non-empty)
        among: If given, only these power values are counted and the result
               is always one of them

    The returned value is not checked against every unit. Callers that need
    a value everyone admits should pass `among=common_anchors(...)`.
    """
    if not units:
        raise ValueError("best_anchor needs at least one unit")

    counts: Counter[float] = Counter()
    for unit in units:
        for anchor in unit_anchors(unit):
            if among is None:
                counts[anchor] += 1
                continue
            for allowed in among:
                if abs(anchor - allowed) < EPSILON:
                    counts[allowed] += 1
                    break

    if not counts:
        return among[0] if among else unit_anchors(units[0])[0]
    # Counter preserves insertion order, so max() keeps the first-seen value on ties
    return max(counts, key=lambda anchor: counts[anchor])
