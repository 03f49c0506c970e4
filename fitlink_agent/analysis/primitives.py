"""
Statistical helpers shared by the recent, weekly and monthly analyzers.

All series arrive in the order they are stored in: newest first. Every helper
resolves insufficient data and zero divisors to a neutral value (0 or 100)
instead of NaN/Infinity, because the predictive flags compare these numbers
against fixed thresholds.
"""

import math
import statistics
from typing import Iterable, List, Optional, Sequence


class InvalidSeriesError(ValueError):
    """Raised when two series that must be paired have different lengths."""


def positive_values(values: Iterable[Optional[float]]) -> List[float]:
    """Drop missing and non-positive readings (wearables report 0 for 'no value')."""
    return [v for v in values if v is not None and v > 0]


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` places with halves going up (2.5 -> 3, -2.5 -> -2)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percent_trend(series: Sequence[float]) -> float:
    """Percent change from the oldest to the newest point of a newest-first series."""
    if len(series) < 2:
        return 0.0
    newest = series[0]
    oldest = series[-1]
    if oldest == 0:
        return 0.0
    return ((newest - oldest) / oldest) * 100


def consistency_score(values: Sequence[float]) -> float:
    """
    100 minus the coefficient of variation (population stddev / mean) in percent.

    Clamped to [0, 100]. Fewer than two values count as perfectly consistent.
    """
    if len(values) < 2:
        return 100.0
    mean = statistics.fmean(values)
    std = statistics.pstdev(values)
    if mean == 0:
        return 100.0 if std == 0 else 0.0
    cv = std / mean
    return max(0.0, min(100.0, 100 - cv * 100))


def baseline(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty series."""
    if not values:
        return 0.0
    return statistics.fmean(values)


def long_term_slope(values: Sequence[float], min_points: int = 10) -> float:
    """
    Least-squares slope per sample of a newest-first series.

    The series is put in chronological order before fitting, so a positive
    slope means the metric has been rising. Needs at least ``min_points``.
    """
    n = len(values)
    if n < min_points:
        return 0.0

    chronological = list(reversed(values))
    sum_x = n * (n - 1) / 2
    sum_xx = n * (n - 1) * (2 * n - 1) / 6
    sum_y = sum(chronological)
    sum_xy = sum(i * v for i, v in enumerate(chronological))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient in [-1, 1].

    Raises InvalidSeriesError if the series lengths differ. Returns 0 for
    fewer than two pairs or when either series is constant.
    """
    if len(x) != len(y):
        raise InvalidSeriesError(
            f"correlation needs paired series, got lengths {len(x)} and {len(y)}"
        )
    if len(x) < 2:
        return 0.0
    # Constant series have no variance to correlate
    if len(set(x)) == 1 or len(set(y)) == 1:
        return 0.0

    mean_x = statistics.fmean(x)
    mean_y = statistics.fmean(y)
    cov = sum((xi - mean_x) * (yi - mean_y) for xi, yi in zip(x, y))
    var_x = sum((xi - mean_x) ** 2 for xi in x)
    var_y = sum((yi - mean_y) ** 2 for yi in y)
    if var_x == 0 or var_y == 0:
        return 0.0

    r = cov / math.sqrt(var_x * var_y)
    return max(-1.0, min(1.0, r))
