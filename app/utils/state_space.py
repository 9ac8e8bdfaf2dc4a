"""
Lightweight state-space trend model: fixed-gain filter over level + slope.
Cheaper companion to sts.run_structural_time_series for summary tiles.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from app.utils.periods import next_period_label
from app.utils.sts import classify_trend, initial_slope, population_std, to_series_frame

KALMAN_GAIN = 0.3
SLOPE_GAIN = 0.1


@dataclass
class StateSpaceResult:
    trend: list = field(default_factory=list)
    forecast_value: float = 0.0
    forecast_lower: float = 0.0
    forecast_upper: float = 0.0
    confidence: float = 0.68
    direction: str = "stable"
    strength: str = "weak"
    uncertainty: str = "high"
    next_period_label: str = "N/A"
    percentage_change: float = 0.0


def analyze_time_series(data, frequency: Optional[str]) -> StateSpaceResult:
    df = to_series_frame(data)
    if len(df) < 3:
        return StateSpaceResult()

    values = df["value"].to_numpy(dtype=float)
    level = float(values[0])
    slope = initial_slope(values)
    sigma_obs = population_std(values) * 0.5

    trend = []
    for v in values:
        predicted_level = level + slope
        error = v - predicted_level
        level = predicted_level + KALMAN_GAIN * error
        slope = slope + KALMAN_GAIN * error * SLOPE_GAIN
        trend.append(level)

    forecast_value = level + slope
    forecast_std = sigma_obs * 1.5

    direction, strength = classify_trend(slope, values)

    cv = forecast_std / max(abs(forecast_value), 0.001) * 100
    uncertainty = "low" if cv < 5 else "moderate" if cv < 15 else "high"

    last_value = float(values[-1])
    pct = (forecast_value - last_value) / abs(last_value) * 100 if last_value != 0 else 0.0

    return StateSpaceResult(
        trend=trend,
        forecast_value=forecast_value,
        forecast_lower=forecast_value - 1.96 * forecast_std,
        forecast_upper=forecast_value + 1.96 * forecast_std,
        direction=direction,
        strength=strength,
        uncertainty=uncertainty,
        next_period_label=next_period_label(df["date"].iloc[-1], frequency),
        percentage_change=float(pct),
    )


def get_trend_description(result: StateSpaceResult) -> str:
    if result.direction == "stable":
        return "Stable trend"
    direction_label = {"up": "Upward", "down": "Downward"}[result.direction]
    change = f"{result.percentage_change:+.1f}%"
    return f"{direction_label} {result.strength} ({change})"


def get_uncertainty_bar_width(uncertainty: str) -> int:
    return {"low": 33, "moderate": 66, "high": 100}.get(uncertainty, 50)


def get_uncertainty_label(uncertainty: str) -> str:
    return {"low": "Low", "moderate": "Moderate", "high": "High"}.get(uncertainty, "N/A")
