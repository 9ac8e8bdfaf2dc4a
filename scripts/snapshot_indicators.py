#!/usr/bin/env python3
"""
Create lightweight indicator snapshots as CI artifacts (no browser needed).
Outputs:
  artifacts/<indicator_id>_trend.png   observed values, OLS trend, STS level
  artifacts/forecast_overview.png      next-period STS forecast per indicator
"""
from __future__ import annotations

import os
from pathlib import Path

import duckdb
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from app.utils import warehouse
from app.utils.regression import trend_regression, predict_value
from app.utils.sts import run_structural_time_series

DB = os.environ.get("DUCKDB_PATH", "warehouse/knowyou.duckdb")
ART = Path(os.environ.get("ARTIFACTS_DIR", "artifacts"))


def _read_indicators(db: str) -> pd.DataFrame:
    try:
        with duckdb.connect(db, read_only=True) as con:
            return warehouse.list_indicators(con)
    except duckdb.Error:
        return pd.DataFrame()


def _read_series(db: str, indicator_id: str) -> pd.DataFrame:
    with duckdb.connect(db, read_only=True) as con:
        return warehouse.fetch_series(con, indicator_id).dropna(subset=["value"]).reset_index(drop=True)


def indicator_trend(db: str, row: pd.Series, out_dir: Path) -> Path | None:
    df = _read_series(db, row["indicator_id"])
    if len(df) < 3:
        print(f"[snapshot] {row['indicator_id']}: not enough points; skipping")
        return None

    values = df["value"].tolist()
    reg = trend_regression(values)
    sts = run_structural_time_series(df, row["frequency"])
    x = pd.to_datetime(df["date"])

    plt.figure(figsize=(8, 4.5))
    plt.plot(x, values, color="#999999", label="observed")
    plt.plot(x, [predict_value(reg, i) for i in range(len(values))], "--", label=f"trend (R²={reg.r2:.2f})")
    plt.plot(x, sts.mu_series, label="STS level")
    if sts.anomaly_indices:
        plt.scatter(x.iloc[sts.anomaly_indices], df["value"].iloc[sts.anomaly_indices], color="#d62728", zorder=3, label="anomaly")
    plt.title(row["name"])
    plt.xlabel("Date")
    plt.ylabel(row["unit"] or "value")
    plt.legend(loc="best", fontsize=8)
    out = out_dir / f"{row['indicator_id']}_trend.png"
    plt.tight_layout()
    plt.savefig(out)
    plt.close()
    print(f"[snapshot] Wrote {out}")
    return out


def forecast_overview(db: str, ind: pd.DataFrame, out_dir: Path) -> Path | None:
    rows = []
    for _, row in ind.iterrows():
        df = _read_series(db, row["indicator_id"])
        sts = run_structural_time_series(df, row["frequency"])
        if not sts.mu_series:
            continue
        last = float(df["value"].iloc[-1])
        change = (sts.forecast.mean - last) / abs(last) * 100 if last else 0.0
        rows.append((row["name"], change))
    if not rows:
        print("[snapshot] No forecastable indicator; skipping forecast_overview.png")
        return None

    names, changes = zip(*rows)
    plt.figure(figsize=(8, 4.5))
    plt.barh(names, changes, color=["#2ca02c" if c >= 0 else "#d62728" for c in changes])
    plt.axvline(0, color="black", linewidth=0.8)
    plt.title("Next-period forecast vs latest value")
    plt.xlabel("Change (%)")
    out = out_dir / "forecast_overview.png"
    plt.tight_layout()
    plt.savefig(out)
    plt.close()
    print(f"[snapshot] Wrote {out}")
    return out


def snapshot(db: str = DB, out_dir: Path = ART) -> list[Path]:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    ind = _read_indicators(db)
    if ind.empty:
        print("[snapshot] No indicators found.")
        return []

    written = [indicator_trend(db, row, out_dir) for _, row in ind.iterrows()]
    written.append(forecast_overview(db, ind, out_dir))
    return [p for p in written if p is not None]


def main():
    snapshot()


if __name__ == "__main__":
    main()
