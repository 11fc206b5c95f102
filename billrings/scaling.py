"""Axis scaling with "nice" round tick intervals.

Polar rings need bounds that are shared between the income and expense
halves, never collapse to a zero span and never end exactly on the largest
data point (a bar touching the boundary closes into a half circle).
"""

from __future__ import annotations

import math

DEFAULT_SPLIT_NUMBER = 5
MAX_MARGIN = 0.1


def nice_number(value: float) -> float:
    """Round ``value`` to 1, 2, 5 or 10 times a power of ten."""

    if value <= 0 or not math.isfinite(value):
        raise ValueError(f"nice_number expects a positive finite value, got {value}")

    exponent = math.floor(math.log10(value))
    base = 10.0**exponent
    fraction = value / base
    if fraction < 1.5:
        nice = 1
    elif fraction < 3:
        nice = 2
    elif fraction < 7:
        nice = 5
    else:
        nice = 10
    return nice * base


def _prepare(minimum: float, maximum: float, split_number: int) -> tuple[float, int, int]:
    if not (math.isfinite(minimum) and math.isfinite(maximum)):
        raise ValueError("Axis bounds must be finite")
    if minimum > maximum:
        raise ValueError(f"min ({minimum}) must not exceed max ({maximum})")
    if split_number <= 0:
        raise ValueError("split_number must be positive")

    lo, hi = float(minimum), float(maximum)
    if lo == hi:
        if lo != 0:
            lo -= abs(lo) / 2
            hi += abs(hi) / 2
        else:
            hi = 1.0
    else:
        hi += abs(hi) * MAX_MARGIN

    interval = nice_number((hi - lo) / split_number)
    return interval, math.floor(lo / interval), math.ceil(hi / interval)


def nice_bounds(
    minimum: float,
    maximum: float,
    split_number: int = DEFAULT_SPLIT_NUMBER,
) -> tuple[float, float]:
    """Return ``(lo, hi)`` snapped outward to multiples of a nice interval."""

    interval, first, last = _prepare(minimum, maximum, split_number)
    return first * interval, last * interval


def nice_interval(
    minimum: float,
    maximum: float,
    split_number: int = DEFAULT_SPLIT_NUMBER,
) -> list[float]:
    """Return every tick from the snapped minimum to the snapped maximum."""

    interval, first, last = _prepare(minimum, maximum, split_number)
    return [step * interval for step in range(first, last + 1)]
