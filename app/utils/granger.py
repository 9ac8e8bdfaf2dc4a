"""
Granger causality between two indicator series.

Compares a restricted autoregression of Y on its own lags with an unrestricted
one that adds lags of X; the F test on the RSS drop tells whether past X helps
predict Y. Both directions are tested at a shared lag picked by AIC on Y.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy import stats

from app.utils.regression import paired

logger = logging.getLogger(__name__)


@dataclass
class GrangerResult:
    x_causes_y: bool
    y_causes_x: bool
    f_stat_xy: float
    f_stat_yx: float
    p_value_xy: float
    p_value_yx: float
    optimal_lag: int
    interpretation: str
    causality_type: str     # x_causes_y | y_causes_x | bidirectional | none


def lag_matrix(series: np.ndarray, lag: int) -> np.ndarray:
    """Row t (t = lag..n-1) holds series[t-1], ..., series[t-lag]."""
    n = series.size
    return np.column_stack([series[lag - i:n - i] for i in range(1, lag + 1)])


def residual_sum_of_squares(target: np.ndarray, regressors: np.ndarray) -> float:
    """OLS with intercept; inf when there is nothing to fit."""
    if target.size == 0 or regressors.size == 0:
        return float("inf")
    X = np.c_[np.ones(target.size), regressors]
    beta, *_ = np.linalg.lstsq(X, target, rcond=None)
    resid = target - X @ beta
    return float(np.sum(resid ** 2))


def autoregression_aic(y: np.ndarray, lag: int) -> float:
    effective_n = y.size - lag
    if effective_n < lag + 2:
        return float("inf")
    rss = residual_sum_of_squares(y[lag:], lag_matrix(y, lag))
    if not np.isfinite(rss) or rss == 0:
        return float("inf")
    return effective_n * np.log(rss / effective_n) + 2 * (lag + 1)


def granger_direction(x: np.ndarray, y: np.ndarray, lag: int) -> tuple[float, float]:
    """F statistic and p-value for "x Granger-causes y" at the given lag."""
    effective_n = y.size - lag
    if effective_n < lag + 2:
        return 0.0, 1.0

    target = y[lag:]
    y_lags = lag_matrix(y, lag)
    rss_restricted = residual_sum_of_squares(target, y_lags)
    rss_unrestricted = residual_sum_of_squares(target, np.c_[y_lags, lag_matrix(x, lag)])

    q = lag
    k = 1 + 2 * lag
    if rss_unrestricted <= 0 or effective_n <= k:
        return 0.0, 1.0

    f_stat = ((rss_restricted - rss_unrestricted) / q) / (rss_unrestricted / (effective_n - k))
    if not np.isfinite(f_stat) or f_stat <= 0:
        return 0.0, 1.0
    p_value = float(stats.f.sf(f_stat, q, effective_n - k))
    return float(f_stat), min(max(p_value, 0.0), 1.0)


def granger_causality_test(x, y, max_lag: int = 4, significance: float = 0.05) -> GrangerResult:
    xs, ys = paired(x, y)
    n = xs.size
    max_lag = max(int(max_lag), 1)

    if n < max_lag + 5:
        logger.debug("Granger skipped: %d points for max_lag=%d", n, max_lag)
        return GrangerResult(
            x_causes_y=False, y_causes_x=False,
            f_stat_xy=0.0, f_stat_yx=0.0,
            p_value_xy=1.0, p_value_yx=1.0,
            optimal_lag=1,
            interpretation="Insufficient data for the Granger test",
            causality_type="none",
        )

    best_lag, best_aic = 1, float("inf")
    for lag in range(1, max_lag + 1):
        aic = autoregression_aic(ys, lag)
        if aic < best_aic:
            best_lag, best_aic = lag, aic

    f_xy, p_xy = granger_direction(xs, ys, best_lag)
    f_yx, p_yx = granger_direction(ys, xs, best_lag)
    x_causes_y = p_xy < significance
    y_causes_x = p_yx < significance

    if x_causes_y and y_causes_x:
        causality_type = "bidirectional"
        interpretation = (
            f"Bidirectional causality detected (lag={best_lag}). "
            "The series help predict each other."
        )
    elif x_causes_y:
        causality_type = "x_causes_y"
        interpretation = (
            f"X Granger-causes Y (F={f_xy:.2f}, p={p_xy:.4f}). Past values of X help predict Y."
        )
    elif y_causes_x:
        causality_type = "y_causes_x"
        interpretation = (
            f"Y Granger-causes X (F={f_yx:.2f}, p={p_yx:.4f}). Past values of Y help predict X."
        )
    else:
        causality_type = "none"
        interpretation = f"No significant Granger causality at α={significance}."

    return GrangerResult(
        x_causes_y=x_causes_y,
        y_causes_x=y_causes_x,
        f_stat_xy=f_xy,
        f_stat_yx=f_yx,
        p_value_xy=p_xy,
        p_value_yx=p_yx,
        optimal_lag=best_lag,
        interpretation=interpretation,
        causality_type=causality_type,
    )
