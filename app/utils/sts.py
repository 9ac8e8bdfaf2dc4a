"""
Structural Time Series (local linear trend) for indicator histories.

Forward Kalman filter over level (mu) and slope (beta), backward smoothing,
95% bands on the final states, a one-step forecast distribution, trend /
uncertainty classification and innovation-based anomaly flags.

Output feeds the STS analysis page; inputs are {date, value} records.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import pandas as pd

from app.utils.formatting import format_number_pt_br
from app.utils.periods import next_period_label

logger = logging.getLogger(__name__)

Z95 = 1.96
Z90 = 1.645
Z50 = 0.675
MIN_POINTS = 3


@dataclass
class ForecastDistribution:
    next_period: str = "N/A"
    mean: float = 0.0
    p05: float = 0.0
    p25: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p95: float = 0.0


@dataclass
class STSResult:
    # final smoothed states and 95% bands
    mu_smoothed: float = 0.0
    mu_ci_low: float = 0.0
    mu_ci_high: float = 0.0
    beta_smoothed: float = 0.0
    beta_ci_low: float = 0.0
    beta_ci_high: float = 0.0

    mu_series: list = field(default_factory=list)
    beta_series: list = field(default_factory=list)

    sigma2_epsilon: float = 0.0     # observation noise
    sigma2_eta: float = 0.0         # level shock
    sigma2_zeta: float = 0.0        # slope shock

    forecast: ForecastDistribution = field(default_factory=ForecastDistribution)

    direction: str = "stable"       # up | down | stable
    strength: str = "weak"          # strong | moderate | weak
    uncertainty: str = "high"       # low | moderate | high

    innovations: list = field(default_factory=list)
    anomaly_indices: list = field(default_factory=list)


def to_series_frame(data) -> pd.DataFrame:
    """
    Normalise {date, value} records, (date, value) pairs or a DataFrame into a
    date-sorted frame with finite float values.
    """
    if isinstance(data, pd.DataFrame):
        df = data[["date", "value"]].copy()
    else:
        df = pd.DataFrame(list(data or []), columns=["date", "value"])
    if df.empty:
        return df
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["value"] = pd.to_numeric(df["value"], errors="coerce")
    df = df[df["date"].notna() & np.isfinite(df["value"].astype(float))]
    return df.sort_values("date", kind="mergesort").reset_index(drop=True)


def population_std(values: np.ndarray) -> float:
    if values.size < 2:
        return 0.0
    return float(np.std(values))


def initial_slope(y: np.ndarray) -> float:
    n = y.size
    if n <= 5:
        return 0.0
    k = min(5, n - 1)
    return float((y[k] - y[0]) / k)


def classify_trend(slope: float, y: np.ndarray) -> tuple[str, str]:
    """Direction and strength from slope as a percentage of the series mean."""
    slope_pct = slope / max(float(np.mean(y)), 0.001) * 100.0
    if abs(slope_pct) < 0.5:
        return "stable", "weak"
    if slope_pct > 0:
        return "up", "strong" if slope_pct > 2 else "moderate"
    return "down", "strong" if slope_pct < -2 else "moderate"


def run_structural_time_series(data, frequency: Optional[str]) -> STSResult:
    df = to_series_frame(data)
    y = df["value"].to_numpy(dtype=float) if not df.empty else np.empty(0)
    n = y.size

    if n < MIN_POINTS:
        logger.debug("STS skipped: %d points (need %d)", n, MIN_POINTS)
        return STSResult()

    level = float(y[0])
    slope = initial_slope(y)

    y_std = population_std(y)
    sigma2_epsilon = (y_std * 0.5) ** 2
    sigma2_eta = (y_std * 0.1) ** 2
    sigma2_zeta = (y_std * 0.05) ** 2

    mu_filtered = np.empty(n)
    beta_filtered = np.empty(n)
    p_level = np.empty(n)
    p_slope = np.empty(n)
    innovations = np.empty(n)

    # ---- forward pass ----
    p_l, p_s = sigma2_eta, sigma2_zeta
    for t in range(n):
        level_pred = level + slope
        slope_pred = slope
        p_l_pred = p_l + sigma2_eta
        p_s_pred = p_s + sigma2_zeta

        innovation = y[t] - level_pred
        innovations[t] = innovation

        f = p_l_pred + sigma2_epsilon
        if f > 0:
            k_l = p_l_pred / f
            k_s = p_s_pred / f * 0.5     # attenuated slope gain
        else:
            # flat series: no noise at all, follow the observations
            k_l, k_s = 1.0, 0.0

        level = level_pred + k_l * innovation
        slope = slope_pred + k_s * innovation
        p_l = p_l_pred * (1 - k_l)
        p_s = p_s_pred * (1 - k_s * 0.5)

        mu_filtered[t] = level
        beta_filtered[t] = slope
        p_level[t] = p_l
        p_slope[t] = p_s

    # ---- backward smoother ----
    mu_smoothed = mu_filtered.copy()
    beta_smoothed = beta_filtered.copy()
    for t in range(n - 2, -1, -1):
        denom = p_level[t] + sigma2_eta
        gain = p_level[t] / denom if denom > 0 else 0.0
        mu_smoothed[t] = mu_filtered[t] + gain * (mu_smoothed[t + 1] - mu_filtered[t] - beta_filtered[t])
        beta_smoothed[t] = beta_filtered[t] + gain * 0.5 * (beta_smoothed[t + 1] - beta_filtered[t])

    last_mu = float(mu_smoothed[-1])
    last_beta = float(beta_smoothed[-1])
    sd_l = float(np.sqrt(max(p_level[-1], 0.0)))
    sd_s = float(np.sqrt(max(p_slope[-1], 0.0)))

    mu_ci_low, mu_ci_high = last_mu - Z95 * sd_l, last_mu + Z95 * sd_l
    beta_ci_low, beta_ci_high = last_beta - Z95 * sd_s, last_beta + Z95 * sd_s

    # ---- one-step forecast ----
    f_mean = last_mu + last_beta
    f_std = float(np.sqrt(max(p_level[-1] + p_slope[-1] + sigma2_epsilon, 0.0)))
    forecast = ForecastDistribution(
        next_period=next_period_label(df["date"].iloc[-1], frequency),
        mean=f_mean,
        p05=f_mean - Z90 * f_std,
        p25=f_mean - Z50 * f_std,
        p50=f_mean,
        p75=f_mean + Z50 * f_std,
        p95=f_mean + Z90 * f_std,
    )

    direction, strength = classify_trend(last_beta, y)

    relative_width = (mu_ci_high - mu_ci_low) / max(abs(last_mu), 0.001)
    if relative_width < 0.1:
        uncertainty = "low"
    elif relative_width < 0.25:
        uncertainty = "moderate"
    else:
        uncertainty = "high"

    innov_std = population_std(innovations)
    if innov_std > 0:
        anomalies = np.flatnonzero(np.abs(innovations / innov_std) > 2).tolist()
    else:
        anomalies = []

    return STSResult(
        mu_smoothed=last_mu,
        mu_ci_low=mu_ci_low,
        mu_ci_high=mu_ci_high,
        beta_smoothed=last_beta,
        beta_ci_low=beta_ci_low,
        beta_ci_high=beta_ci_high,
        mu_series=mu_smoothed.tolist(),
        beta_series=beta_smoothed.tolist(),
        sigma2_epsilon=sigma2_epsilon,
        sigma2_eta=sigma2_eta,
        sigma2_zeta=sigma2_zeta,
        forecast=forecast,
        direction=direction,
        strength=strength,
        uncertainty=uncertainty,
        innovations=innovations.tolist(),
        anomaly_indices=anomalies,
    )


def format_sts_value(value: float, unit: Optional[str]) -> str:
    u = (unit or "").lower()
    if "%" in u or "a.m." in u or "a.a." in u:
        return f"{value:.2f}%"
    if "r$" in u or "mil" in u or "reais" in u or u == "brl":
        return f"R$ {format_number_pt_br(value)}"
    s = format_number_pt_br(value)
    return s.rstrip("0").rstrip(",") if "," in s else s
