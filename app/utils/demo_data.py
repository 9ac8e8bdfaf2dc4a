"""
Deterministic demo indicator histories (monthly, Brazilian macro flavour) so
the app and CI can run without the real indicator exports.

Relationships baked in for the correlation pages:
- IPCA leads the Selic rate by 3 months (positive).
- Selic leads retail sales (PMC) by 6 months (negative).
- Household income trends up; unemployment trends down with seasonality.
"""
from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from app.utils.regional import UF_REGIONS

INDICATORS = [
    # id, name, unit, frequency
    ("ipca", "IPCA inflation", "%", "monthly"),
    ("selic", "Selic rate", "% a.a.", "monthly"),
    ("pmc", "Retail sales (PMC)", "índice", "monthly"),
    ("unemployment", "Unemployment rate", "%", "monthly"),
    ("income", "Average household income", "R$", "monthly"),
    ("usd_brl", "USD/BRL exchange rate", "R$", "monthly"),
]

REGION_FACTOR = {"Norte": 0.75, "Nordeste": 0.7, "Sudeste": 1.25, "Sul": 1.15, "Centro-Oeste": 1.1}


def _shift(x: np.ndarray, k: int) -> np.ndarray:
    """x delayed by k steps, padding the head with the first value."""
    return np.concatenate([np.full(k, x[0]), x[:-k]]) if k > 0 else x


def demo_indicators() -> pd.DataFrame:
    return pd.DataFrame(INDICATORS, columns=["indicator_id", "name", "unit", "frequency"])


def demo_indicator_values(n_periods: int = 60, seed: int = 7, start: str = "2019-01-01") -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    t = np.arange(n_periods, dtype=float)
    dates = pd.date_range(start, periods=n_periods, freq="MS")

    ipca = 4.0 + 1.5 * np.sin(2 * np.pi * t / 24) + rng.normal(0, 0.15, n_periods)
    selic = 6.0 + 1.5 * (_shift(ipca, 3) - 4.0) + rng.normal(0, 0.1, n_periods)
    pmc = 100.0 + 0.3 * t - 2.5 * (_shift(selic, 6) - 6.0) + rng.normal(0, 0.8, n_periods)
    unemployment = 12.0 - 0.05 * t + 0.8 * np.sin(2 * np.pi * t / 12) + rng.normal(0, 0.2, n_periods)
    income = 2500.0 * 1.004 ** t + rng.normal(0, 15.0, n_periods)
    usd_brl = 4.0 + np.cumsum(rng.normal(0, 0.05, n_periods))

    # one reporting gap, as the real exports have
    unemployment[n_periods // 2] = np.nan

    series = {
        "ipca": ipca,
        "selic": selic,
        "pmc": pmc,
        "unemployment": unemployment,
        "income": income,
        "usd_brl": usd_brl,
    }
    frames = [
        pd.DataFrame({"indicator_id": key, "reference_date": dates, "value": np.round(values, 4)})
        for key, values in series.items()
    ]
    return pd.concat(frames, ignore_index=True)


def demo_regional_values(seed: int = 7, latest: str = "2023-12-01") -> pd.DataFrame:
    """Household income per UF for the previous and latest year."""
    rng = np.random.default_rng(seed + 1)
    latest_ts = pd.Timestamp(latest)
    previous_ts = latest_ts - pd.DateOffset(years=1)

    rows = []
    for uf_code, region in sorted(UF_REGIONS.items()):
        base = 2800.0 * REGION_FACTOR[region] * rng.uniform(0.9, 1.1)
        growth = rng.normal(0.03, 0.04)
        rows.append(("income", uf_code, previous_ts, round(base, 2)))
        rows.append(("income", uf_code, latest_ts, round(base * (1 + growth), 2)))
    return pd.DataFrame(rows, columns=["indicator_id", "uf_code", "reference_date", "value"])


def write_demo_csvs(folder: Path, n_periods: int = 60, seed: int = 7) -> list[Path]:
    folder = Path(folder)
    folder.mkdir(parents=True, exist_ok=True)
    outputs = {
        "indicators.csv": demo_indicators(),
        "indicator_values.csv": demo_indicator_values(n_periods=n_periods, seed=seed),
        "regional_values.csv": demo_regional_values(seed=seed),
    }
    written = []
    for fname, df in outputs.items():
        path = folder / fname
        df.to_csv(path, index=False)
        written.append(path)
    return written
