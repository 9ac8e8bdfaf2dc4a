import math

import numpy as np
import pandas as pd
import pytest

from app.utils.sts import (
    classify_trend,
    format_sts_value,
    run_structural_time_series,
    to_series_frame,
)


def _monthly(values, start="2019-01-01"):
    dates = pd.date_range(start, periods=len(values), freq="MS")
    return [{"date": d, "value": v} for d, v in zip(dates, values)]


def test_too_short_series_gives_neutral_result():
    res = run_structural_time_series(_monthly([1.0, 2.0]), "monthly")
    assert res.mu_series == []
    assert res.forecast.next_period == "N/A"
    assert res.direction == "stable"


def test_to_series_frame_sorts_and_cleans():
    df = to_series_frame([
        ("2020-03-01", 3.0),
        ("2020-01-01", 1.0),
        ("not a date", 9.0),
        ("2020-02-01", float("nan")),
        ("2020-04-01", None),
    ])
    assert df["value"].tolist() == [1.0, 3.0]
    assert list(df["date"]) == [pd.Timestamp("2020-01-01"), pd.Timestamp("2020-03-01")]


def test_upward_series_is_classified_up_with_ordered_forecast():
    values = [100 + 2.0 * t for t in range(24)]
    res = run_structural_time_series(_monthly(values), "monthly")
    assert len(res.mu_series) == len(values)
    assert len(res.innovations) == len(values)
    assert res.direction == "up"
    assert res.beta_smoothed > 0
    assert res.mu_ci_low <= res.mu_smoothed <= res.mu_ci_high
    fc = res.forecast
    assert fc.p05 <= fc.p25 <= fc.p50 <= fc.p75 <= fc.p95
    assert fc.p50 == fc.mean
    assert fc.next_period == "Jan/2021"


def test_flat_series_does_not_produce_nan():
    res = run_structural_time_series(_monthly([5.0] * 12), "monthly")
    assert res.mu_smoothed == pytest.approx(5.0)
    assert res.forecast.mean == pytest.approx(5.0)
    assert not any(math.isnan(v) for v in res.mu_series)
    assert res.direction == "stable"
    assert res.anomaly_indices == []
    assert res.uncertainty == "low"


def test_spike_is_flagged_as_anomaly():
    values = [10.0] * 30
    values[15] = 60.0
    res = run_structural_time_series(_monthly(values), "monthly")
    assert 15 in res.anomaly_indices, f"spike not flagged: {res.anomaly_indices}"


def test_accepts_dataframe_input():
    df = pd.DataFrame(_monthly(list(np.linspace(50, 40, 15))))
    res = run_structural_time_series(df, "quarterly")
    assert res.direction == "down"
    assert res.forecast.next_period.startswith("Q")


@pytest.mark.parametrize(
    "slope, expected",
    [(0.0, ("stable", "weak")), (3.0, ("up", "strong")), (1.0, ("up", "moderate")),
     (-1.0, ("down", "moderate")), (-5.0, ("down", "strong"))],
)
def test_classify_trend_uses_slope_share_of_mean(slope, expected):
    assert classify_trend(slope, np.array([100.0, 100.0])) == expected


def test_format_sts_value_by_unit():
    assert format_sts_value(3.14159, "%") == "3.14%"
    assert format_sts_value(1234.5, "R$") == "R$ 1.234,50"
    assert format_sts_value(1234.5, "índice") == "1.234,5"
    assert format_sts_value(12.0, None) == "12"
