"""
Regression, correlation and trend helpers used by the dashboard pages.
No external deps beyond NumPy.

Paired inputs are truncated to the shorter length (index alignment is the
caller's job), then any pair with an invalid side is dropped.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, TypeVar

import numpy as np

from app.utils.descriptive import clean

T = TypeVar("T")


@dataclass
class RegressionResult:
    slope: float
    intercept: float
    r2: float


@dataclass
class CorrelationStrength:
    strength: str
    color: str          # tailwind-style class used by the front-end
    description: str


def _as_float(values) -> np.ndarray:
    return np.asarray([np.nan if v is None else v for v in values], dtype=float).reshape(-1)


def paired(x, y) -> tuple[np.ndarray, np.ndarray]:
    """Truncate x and y to min(len(x), len(y)) and drop pairs with a None / NaN side."""
    x = _as_float(x)
    y = _as_float(y)
    n = min(x.size, y.size)
    x, y = x[:n], y[:n]
    m = np.isfinite(x) & np.isfinite(y)
    return x[m], y[m]


def linear_regression(x, y) -> RegressionResult:
    """
    Fit y = slope*x + intercept with the sum-based least squares formulas.

    - n < 2 -> all zeros.
    - constant y -> r2 = 0 (not NaN).
    - constant x -> flat line through mean(y), r2 = 0.
    """
    xs, ys = paired(x, y)
    n = xs.size
    if n < 2:
        return RegressionResult(slope=0.0, intercept=0.0, r2=0.0)

    sum_x = float(np.sum(xs))
    sum_y = float(np.sum(ys))
    sum_xy = float(np.sum(xs * ys))
    sum_x2 = float(np.sum(xs * xs))
    mean_x = sum_x / n
    mean_y = sum_y / n

    denom = n * sum_x2 - sum_x * sum_x
    if np.ptp(xs) == 0 or denom == 0:
        return RegressionResult(slope=0.0, intercept=mean_y, r2=0.0)

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = mean_y - slope * mean_x

    y_hat = slope * xs + intercept
    ss_res = float(np.sum((ys - y_hat) ** 2))
    ss_tot = float(np.sum((ys - mean_y) ** 2))
    r2 = 0.0 if np.ptp(ys) == 0 or ss_tot == 0 else 1.0 - ss_res / ss_tot

    return RegressionResult(slope=float(slope), intercept=float(intercept), r2=float(r2))


def trend_regression(values) -> RegressionResult:
    """Regress a cleaned sample against its index 0..n-1."""
    ys = clean(values)
    return linear_regression(np.arange(ys.size, dtype=float), ys)


def predict_value(regression: RegressionResult, x: float) -> float:
    return regression.slope * x + regression.intercept


def pearson_correlation(x, y) -> float:
    """Pearson r in [-1, 1]; 0 for fewer than 2 pairs or zero variance."""
    xs, ys = paired(x, y)
    n = xs.size
    if n < 2 or np.ptp(xs) == 0 or np.ptp(ys) == 0:
        return 0.0

    sum_x = np.sum(xs)
    sum_y = np.sum(ys)
    numerator = n * np.sum(xs * ys) - sum_x * sum_y
    denominator = np.sqrt((n * np.sum(xs * xs) - sum_x ** 2) * (n * np.sum(ys * ys) - sum_y ** 2))
    if not np.isfinite(denominator) or denominator == 0:
        return 0.0
    return float(np.clip(numerator / denominator, -1.0, 1.0))


def detect_trend(slope: float, threshold: float = 0.01) -> str:
    if slope > threshold:
        return "up"
    if slope < -threshold:
        return "down"
    return "stable"


def get_correlation_strength(r: float) -> CorrelationStrength:
    abs_r = abs(r)
    direction = "positive" if r >= 0 else "negative"

    if abs_r >= 0.9:
        return CorrelationStrength(
            "Very Strong", "text-green-500" if r >= 0 else "text-red-500",
            f"Very strong {direction} correlation",
        )
    if abs_r >= 0.7:
        return CorrelationStrength(
            "Strong", "text-green-400" if r >= 0 else "text-red-400",
            f"Strong {direction} correlation",
        )
    if abs_r >= 0.5:
        return CorrelationStrength("Moderate", "text-yellow-500", f"Moderate {direction} correlation")
    if abs_r >= 0.3:
        return CorrelationStrength("Weak", "text-gray-400", f"Weak {direction} correlation")
    return CorrelationStrength("Very Weak", "text-gray-500", "Negligible correlation")


def get_correlation_strength_pt_br(r: float) -> CorrelationStrength:
    # Labels shown by the Portuguese front-end; keep wording as-is.
    abs_r = abs(r)
    direction = "positiva" if r >= 0 else "negativa"

    if abs_r >= 0.9:
        return CorrelationStrength(
            "Muito Forte", "text-green-500" if r >= 0 else "text-red-500",
            f"Correlação {direction} muito forte",
        )
    if abs_r >= 0.7:
        return CorrelationStrength(
            "Forte", "text-green-400" if r >= 0 else "text-red-400",
            f"Correlação {direction} forte",
        )
    if abs_r >= 0.5:
        return CorrelationStrength("Moderada", "text-yellow-500", f"Correlação {direction} moderada")
    if abs_r >= 0.3:
        return CorrelationStrength("Fraca", "text-gray-400", f"Correlação {direction} fraca")
    return CorrelationStrength("Muito Fraca", "text-gray-500", "Correlação insignificante")


def generate_pairs(items: Sequence[T]) -> list[tuple[T, T]]:
    """All unordered pairs (i < j), in input order."""
    return [(items[i], items[j]) for i in range(len(items)) for j in range(i + 1, len(items))]
