"""Numeric helpers shared by the engines."""

from __future__ import annotations

import math
from typing import Any

INFINITY = float("inf")


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties towards +inf: ``floor(x * 10^n + 0.5) / 10^n``.

    Python's built-in ``round`` uses banker's rounding, which disagrees with
    the journal's published figures on exact ties (e.g. 2.5 -> 3).
    Infinite values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Half-up rounding to an integer score."""
    return int(round_half_up(value, 0))


def is_finite_number(value: Any) -> bool:
    """True for real numbers that are neither NaN nor infinite."""
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def safe_ratio(numerator: float, denominator: float) -> float:
    """Ratio with the journal's sentinel policy.

    Both positive -> ratio; denominator zero and numerator positive ->
    ``INFINITY``; otherwise 0.0.
    """
    if denominator > 0:
        return numerator / denominator
    if numerator > 0:
        return INFINITY
    return 0.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def mean(values: list[float]) -> float:
    """Arithmetic mean; 0.0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)
