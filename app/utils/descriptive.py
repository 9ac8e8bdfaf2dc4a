"""
Descriptive statistics over indicator samples.
No external deps beyond NumPy.

Every helper cleans its input first (drops None / NaN / inf) and returns a
neutral value instead of raising when nothing is left to compute on.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np


@dataclass
class SummaryStats:
    min: float
    max: float
    mean: float
    median: float
    std: float
    count: int


def clean(values: Optional[Iterable]) -> np.ndarray:
    """Return a 1-D float array with None / NaN / non-finite entries removed."""
    if values is None:
        return np.empty(0, dtype=float)
    arr = np.asarray([np.nan if v is None else v for v in values], dtype=float).reshape(-1)
    return arr[np.isfinite(arr)]


def mean(values) -> float:
    x = clean(values)
    if x.size == 0:
        return 0.0
    return float(np.mean(x))


def standard_deviation(values) -> float:
    """Population standard deviation (ddof=0)."""
    x = clean(values)
    # constant samples: skip the float noise of x - mean(x)
    if x.size == 0 or np.ptp(x) == 0:
        return 0.0
    return float(np.std(x))


def median(values) -> float:
    x = clean(values)
    if x.size == 0:
        return 0.0
    return float(np.median(x))


def percentile(values, p: float) -> float:
    """
    Linear-interpolated percentile at fractional index p/100 * (n-1).
    p is clamped to [0, 100].
    """
    x = clean(values)
    if x.size == 0:
        return 0.0
    p = min(max(float(p), 0.0), 100.0)
    return float(np.percentile(x, p))


def coefficient_of_variation(values) -> float:
    """Standard deviation as a percentage of the mean; 0 when the mean is 0."""
    m = mean(values)
    if m == 0:
        return 0.0
    return standard_deviation(values) / m * 100.0


def summary(values) -> SummaryStats:
    x = clean(values)
    if x.size == 0:
        return SummaryStats(min=0.0, max=0.0, mean=0.0, median=0.0, std=0.0, count=0)
    return SummaryStats(
        min=float(np.min(x)),
        max=float(np.max(x)),
        mean=mean(x),
        median=median(x),
        std=standard_deviation(x),
        count=int(x.size),
    )


def moving_average(values, period: int) -> list[float]:
    """
    Sliding-window mean, one value per full window (length n - period + 1).
    No partial windows: returns [] when period < 1 or the sample is shorter.
    """
    x = clean(values)
    period = int(period)
    if period < 1 or x.size < period:
        return []
    # prefix sums keep integer-valued windows exact
    csum = np.concatenate(([0.0], np.cumsum(x)))
    return ((csum[period:] - csum[:-period]) / period).tolist()
