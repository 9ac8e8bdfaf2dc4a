import os
from pathlib import Path
from typing import Any, Optional

import yaml

CONFIG_PATH = Path(os.environ.get("KNOWYOU_CONFIG", "config/config.yaml"))

DEFAULT_THRESHOLDS = {
    "trend_slope": 0.01,
    "cv_warn_pct": 30,
    "cv_low_pct": 15,
    "r2_trend": 0.7,
    "slope_alert": 0.1,
    "ma_band_pct": 0.02,
}

DEFAULT_ANALYSIS = {
    "ma_window": 3,
    "max_lag": 12,
    "top_n": 5,
    "correlation_method": "spearman",
    "granger_max_lag": 4,
    "granger_significance": 0.05,
    "sts_min_points": 10,
    "forecast_periods": 6,
    "min_series_points": 5,
}


def load_cfg(path: Optional[Path] = None) -> dict:
    """Read the YAML config; a missing or empty file means defaults."""
    path = Path(path) if path else CONFIG_PATH
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _section(name: str, defaults: dict, path: Optional[Path]) -> dict[str, Any]:
    merged = dict(defaults)
    merged.update(load_cfg(path).get(name) or {})
    return merged


def load_thresholds(path: Optional[Path] = None) -> dict[str, Any]:
    return _section("thresholds", DEFAULT_THRESHOLDS, path)


def load_analysis(path: Optional[Path] = None) -> dict[str, Any]:
    return _section("analysis", DEFAULT_ANALYSIS, path)
