import pandas as pd
import pytest

from app.utils.state_space import (
    StateSpaceResult,
    analyze_time_series,
    get_trend_description,
    get_uncertainty_bar_width,
    get_uncertainty_label,
)


def _series(values, freq="MS"):
    dates = pd.date_range("2022-01-01", periods=len(values), freq=freq)
    return pd.DataFrame({"date": dates, "value": values})


def test_short_series_returns_defaults():
    res = analyze_time_series(_series([1.0, 2.0]), "monthly")
    assert res == StateSpaceResult()
    assert res.next_period_label == "N/A"


def test_rising_series_forecasts_above_last_value():
    values = [50 + 1.5 * t for t in range(20)]
    res = analyze_time_series(_series(values), "monthly")
    assert len(res.trend) == 20
    assert res.direction == "up"
    assert res.forecast_lower < res.forecast_value < res.forecast_upper
    assert res.percentage_change > 0
    assert res.next_period_label == "Sep/2023"
    assert res.confidence == pytest.approx(0.68)


def test_flat_series_is_stable_with_tight_band():
    res = analyze_time_series(_series([8.0] * 10), "monthly")
    assert res.direction == "stable"
    assert res.forecast_value == pytest.approx(8.0)
    assert res.forecast_lower == pytest.approx(res.forecast_upper)
    assert res.uncertainty == "low"
    assert get_trend_description(res) == "Stable trend"


def test_trend_description_formats_change():
    res = StateSpaceResult(direction="down", strength="strong", percentage_change=-3.456)
    assert get_trend_description(res) == "Downward strong (-3.5%)"
    up = StateSpaceResult(direction="up", strength="moderate", percentage_change=1.2)
    assert get_trend_description(up) == "Upward moderate (+1.2%)"


def test_uncertainty_helpers():
    assert [get_uncertainty_bar_width(u) for u in ("low", "moderate", "high", "??")] == [33, 66, 100, 50]
    assert get_uncertainty_label("moderate") == "Moderate"
    assert get_uncertainty_label("unknown") == "N/A"
