"""
Straight-line projection of an indicator from its index regression.
"""
from __future__ import annotations

import numpy as np

from app.utils.descriptive import clean
from app.utils.regression import RegressionResult, predict_value, trend_regression

__all__ = ["forecast", "forecast_with_fit", "predict_value"]


def forecast_with_fit(values, periods: int) -> tuple[list[float], RegressionResult]:
    """Like forecast(), but also returns the fitted index regression."""
    y = clean(values)
    fit = trend_regression(y)
    if y.size < 2 or periods <= 0:
        return [], fit
    idx = np.arange(y.size, y.size + int(periods), dtype=float)
    return [predict_value(fit, float(i)) for i in idx], fit


def forecast(values, periods: int) -> list[float]:
    """
    Project `periods` future points at indices n .. n+periods-1 using
    slope*index + intercept. Empty when fewer than 2 valid points or periods <= 0.
    """
    projected, _ = forecast_with_fit(values, periods)
    return projected
