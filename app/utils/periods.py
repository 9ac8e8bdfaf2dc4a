"""
Frequency-aware date labels for indicator series (daily / monthly / quarterly / yearly).
"""
from __future__ import annotations

from typing import Optional

import pandas as pd

MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
YEARLY = ("yearly", "annual", "anual")


def _parse(date) -> Optional[pd.Timestamp]:
    ts = pd.to_datetime(date, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return pd.Timestamp(ts)


def _norm(frequency: Optional[str]) -> str:
    return (frequency or "").strip().lower()


def _quarter(ts: pd.Timestamp) -> int:
    return (ts.month - 1) // 3 + 1


def format_date_by_frequency(date, frequency: Optional[str]) -> str:
    """2025 | Q1 2025 | 1/2025 | 2025-12-14; unparseable dates are echoed back."""
    ts = _parse(date)
    if ts is None:
        return str(date)

    freq = _norm(frequency)
    if freq in YEARLY:
        return str(ts.year)
    if freq == "quarterly":
        return f"Q{_quarter(ts)} {ts.year}"
    if freq == "daily":
        return ts.strftime("%Y-%m-%d")
    return f"{ts.month}/{ts.year}"


def format_axis_date(date, frequency: Optional[str]) -> str:
    """Compact chart-axis label: 2025 | Q1/25 | 1/25 | 14/12."""
    ts = _parse(date)
    if ts is None:
        return str(date)

    freq = _norm(frequency)
    yy = f"{ts.year % 100:02d}"
    if freq in YEARLY:
        return str(ts.year)
    if freq == "quarterly":
        return f"Q{_quarter(ts)}/{yy}"
    if freq == "daily":
        return f"{ts.day}/{ts.month}"
    return f"{ts.month}/{yy}"


def next_period_label(last_date, frequency: Optional[str]) -> str:
    """Label of the period right after `last_date` (forecast target)."""
    ts = _parse(last_date)
    if ts is None:
        return "N/A"

    freq = _norm(frequency)
    if freq == "daily":
        return (ts + pd.DateOffset(days=1)).strftime("%Y-%m-%d")
    if freq == "monthly":
        nxt = ts + pd.DateOffset(months=1)
        return f"{MONTH_ABBR[nxt.month - 1]}/{nxt.year}"
    if freq == "quarterly":
        nxt = ts + pd.DateOffset(months=3)
        return f"Q{_quarter(nxt)} {nxt.year}"
    if freq in YEARLY:
        return str(ts.year + 1)

    nxt = ts + pd.DateOffset(months=1)
    return f"{nxt.month}/{nxt.year}"


def period_offset(frequency: Optional[str]) -> pd.DateOffset:
    freq = _norm(frequency)
    if freq == "daily":
        return pd.DateOffset(days=1)
    if freq == "quarterly":
        return pd.DateOffset(months=3)
    if freq in YEARLY:
        return pd.DateOffset(years=1)
    return pd.DateOffset(months=1)


def future_period_labels(last_date, frequency: Optional[str], periods: int) -> list[str]:
    """Labels for the `periods` steps after `last_date`."""
    ts = _parse(last_date)
    if ts is None:
        return ["N/A"] * max(int(periods), 0)
    step = period_offset(frequency)
    labels = []
    for _ in range(max(int(periods), 0)):
        labels.append(next_period_label(ts, frequency))
        ts = ts + step
    return labels


def detect_frequency_from_data(count: int, start_date, end_date) -> str:
    """Guess the frequency from the average number of observations per month."""
    start = _parse(start_date)
    end = _parse(end_date)
    if start is None or end is None:
        return "monthly"
    months_diff = (end.year - start.year) * 12 + (end.month - start.month)
    avg_per_month = count / max(months_diff, 1)

    if avg_per_month > 20:
        return "daily"
    # monthly ~1/month, quarterly ~0.33/month, yearly ~0.08/month
    if avg_per_month > 0.7:
        return "monthly"
    if avg_per_month > 0.2:
        return "quarterly"
    return "yearly"
