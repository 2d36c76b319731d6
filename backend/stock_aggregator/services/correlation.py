from typing import Sequence

import numpy as np

from ..models.price_point import PricePoint
from ..models.results import CorrelationResult


def average_price(history: Sequence[PricePoint]) -> float:
    if not history:
        return 0.0
    return float(np.mean([p.price for p in history]))


def _mean(values: np.ndarray) -> float:
    return float(values.mean()) if len(values) else 0.0


def calculate_correlation(series_a: Sequence[float], series_b: Sequence[float]) -> float:
    """
    Sample Pearson correlation of two equal-length series.

    Returns 0.0 when either series has fewer than two points or is constant;
    callers that need to tell those apart from a true zero must look at the
    lengths themselves. The result is clamped to [-1, 1] to absorb rounding.
    """
    if len(series_a) < 2 or len(series_b) < 2:
        return 0.0
    if len(series_a) != len(series_b):
        raise ValueError(f"series lengths differ: {len(series_a)} != {len(series_b)}")

    a = np.asarray(series_a, dtype=float)
    b = np.asarray(series_b, dtype=float)
    n = len(a)

    diff_a = a - a.mean()
    diff_b = b - b.mean()

    cov = float(np.sum(diff_a * diff_b)) / (n - 1)
    std_a = float(np.sqrt(np.sum(diff_a * diff_a) / (n - 1)))
    std_b = float(np.sqrt(np.sum(diff_b * diff_b) / (n - 1)))

    if std_a == 0 or std_b == 0:
        return 0.0
    return float(np.clip(cov / (std_a * std_b), -1.0, 1.0))


def correlate(series_a: Sequence[float], series_b: Sequence[float]) -> CorrelationResult:
    a = np.asarray(series_a, dtype=float)
    b = np.asarray(series_b, dtype=float)
    return CorrelationResult(
        coefficient=calculate_correlation(series_a, series_b),
        mean_a=_mean(a),
        mean_b=_mean(b),
        sample_size=min(len(a), len(b)),
    )
