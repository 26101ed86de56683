"""
Numeric helpers shared by the engine modules.

All helpers are total: empty or degenerate input returns a neutral value
(``0.0``, ``Trend.STABLE``) instead of raising, so callers can apply the
"insufficient data resolves to a neutral default" rule without guards.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

from trainiq.core.exceptions import InvalidInputError
from trainiq.schemas.common import Trend


class Regression(NamedTuple):
    slope: float
    intercept: float
    r_squared: float


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def round_to_step(value: float, step: float) -> float:
    """Round ``value`` to the nearest multiple of ``step`` (halves up)."""
    return math.floor(value / step + 0.5) * step


def quantize(value: float, quantum: float = 0.25) -> float:
    """Snap a weight to a non-negative multiple of ``quantum``.

    Raises:
        InvalidInputError: ``quantum`` is not strictly positive.
    """
    if quantum <= 0:
        raise InvalidInputError(f"Weight quantum must be positive, got {quantum}")
    if not math.isfinite(value) or value <= 0:
        return 0.0
    steps = math.floor(value / quantum + 0.5)
    # Strip float noise (0.1 * 3 -> 0.30000000000000004) without leaving the grid
    return round(steps * quantum, 10)


def population_stdev(values: Sequence[float]) -> float:
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    return math.sqrt(sum((v - avg) ** 2 for v in values) / len(values))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Standard deviation as a percentage of the mean (0 when the mean is 0)."""
    avg = mean(values)
    if avg == 0:
        return 0.0
    return population_stdev(values) / avg * 100.0


def relative_change(new: float, old: float) -> float:
    """``(new - old) / old``; 0 when ``old`` is 0."""
    if old == 0:
        return 0.0
    return (new - old) / old


def split_halves(values: Sequence[float]) -> tuple[list[float], list[float]]:
    """Split a chronological series into ``(earlier, recent)`` halves."""
    mid = len(values) // 2
    return list(values[:mid]), list(values[mid:])


def half_trend(values: Sequence[float], threshold: float, min_points: int = 2) -> Trend:
    """Compare the recent half of a chronological series to its earlier half.

    Returns ``INCREASING`` / ``DECREASING`` when the relative change of the
    half means exceeds ``threshold``, ``STABLE`` otherwise or when fewer than
    ``min_points`` values are available.
    """
    if len(values) < max(min_points, 2):
        return Trend.STABLE
    earlier, recent = split_halves(values)
    change = relative_change(mean(recent), mean(earlier))
    if change > threshold:
        return Trend.INCREASING
    if change < -threshold:
        return Trend.DECREASING
    return Trend.STABLE


def linear_regression(values: Sequence[float]) -> Regression:
    """Least-squares fit of ``values`` against their index ``0..n-1``.

    Fewer than three points produce a flat line through the mean with
    ``r_squared`` 0.
    """
    n = len(values)
    if n < 3:
        return Regression(0.0, mean(values), 0.0)

    x_mean = (n - 1) / 2.0
    y_mean = mean(values)
    ss_xx = sum((i - x_mean) ** 2 for i in range(n))
    ss_xy = sum((i - x_mean) * (y - y_mean) for i, y in enumerate(values))
    slope = ss_xy / ss_xx
    intercept = y_mean - slope * x_mean

    ss_tot = sum((y - y_mean) ** 2 for y in values)
    if ss_tot == 0:
        return Regression(slope, intercept, 0.0)
    ss_res = sum((y - (intercept + slope * i)) ** 2 for i, y in enumerate(values))
    r_squared = clamp(1.0 - ss_res / ss_tot, 0.0, 1.0)
    return Regression(slope, intercept, r_squared)


def normalized_slope(values: Sequence[float]) -> float:
    """Regression slope divided by the series mean (relative change per step)."""
    avg = mean(values)
    if avg == 0:
        return 0.0
    return linear_regression(values).slope / avg


def epley_one_rep_max(weight: float, reps: int) -> float:
    """Estimated one-rep max, ``weight x (1 + reps / 30)``."""
    if weight <= 0 or reps <= 0:
        return 0.0
    if reps == 1:
        return weight
    return weight * (1 + reps / 30.0)
