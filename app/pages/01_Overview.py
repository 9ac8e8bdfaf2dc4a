import altair as alt
import pandas as pd
import streamlit as st

from app.utils.db import table_exists, indicators_df, series_df
from app.utils.glossary import STAT_TOOLTIPS
from app.utils.config import load_thresholds, load_analysis
from app.utils.descriptive import summary, coefficient_of_variation, moving_average, percentile
from app.utils.regression import trend_regression, detect_trend, predict_value
from app.utils.forecasting import forecast
from app.utils.formatting import format_value_with_unit
from app.utils.periods import format_axis_date, format_date_by_frequency, future_period_labels
from app.utils.state_space import analyze_time_series, get_trend_description, get_uncertainty_label

st.set_page_config(page_title="Overview", layout="wide")

TH = load_thresholds()
AN = load_analysis()

st.title("Overview")

if not table_exists("fct_indicator_values"):
    st.warning("Expected table `fct_indicator_values` not found. Run `python scripts/ingest_indicators.py` and reload.")
    st.stop()

ind = indicators_df()
if ind.empty:
    st.info("No indicators available.")
    st.stop()

# ---- Controls ----
c1, c2, c3 = st.columns([2, 1, 1])
with c1:
    name = st.selectbox("Indicator", ind["name"].tolist())
with c2:
    ma_window = st.slider("Moving average window", 2, 24, int(AN["ma_window"]))
with c3:
    horizon = st.slider("Forecast periods", 1, 24, int(AN["forecast_periods"]))

meta = ind[ind["name"] == name].iloc[0]
unit, freq = meta["unit"], meta["frequency"]
df = series_df(meta["indicator_id"])
if df.empty:
    st.info("No observations for this indicator.")
    st.stop()

values = df["value"].tolist()
stats = summary(values)
cv = coefficient_of_variation(values)
fit = trend_regression(values)
trend = detect_trend(fit.slope, TH["trend_slope"])
ma = moving_average(values, ma_window)

def fmt(v):
    return format_value_with_unit(v, unit)

# ---- Tiles ----
cols = st.columns(6)
def tile(col, label, value, tip_key=None, delta=None):
    with col:
        if tip_key and tip_key in STAT_TOOLTIPS:
            st.caption(f"{label} — {STAT_TOOLTIPS[tip_key]}")
        else:
            st.caption(label)
        st.metric(label=label, value=value, delta=delta, label_visibility="collapsed")

tile(cols[0], "Observations", f"{stats.count:,}")
tile(cols[1], "Mean", fmt(stats.mean), "Mean")
tile(cols[2], "Median", fmt(stats.median), "Median")
tile(cols[3], "Std Dev", fmt(stats.std), "Std Dev")
tile(cols[4], "CV", f"{cv:.1f}%", "CV")
tile(cols[5], "Trend", trend.upper(), "Trend", delta=f"{fit.slope:+.4f} / period")

st.caption(
    f"Range {fmt(stats.min)} – {fmt(stats.max)} · "
    f"IQR {fmt(percentile(values, 25))} – {fmt(percentile(values, 75))} · R² {fit.r2:.3f}"
)

# ---- Chart: series, trend line, moving average ----
# trend line follows the cleaned index, so map it over the non-null rows only
obs = df.dropna(subset=["value"]).reset_index(drop=True)
obs["trend_line"] = [predict_value(fit, i) for i in range(len(obs))]
obs["moving_avg"] = [None] * (ma_window - 1) + ma if len(ma) else None
obs["period"] = [format_axis_date(d, freq) for d in obs["date"]]
long = obs.melt(id_vars=["date", "period"], value_vars=["value", "trend_line", "moving_avg"], var_name="series")

with st.expander("Series, trend and moving average", expanded=True):
    chart = alt.Chart(long.dropna()).mark_line().encode(
        x=alt.X("date:T", title="Date"),
        y=alt.Y("value:Q", title=unit or "value", scale=alt.Scale(zero=False)),
        color=alt.Color("series:N", title=""),
        tooltip=["period:N", "series:N", alt.Tooltip("value:Q", format=",.3f")],
    )
    st.altair_chart(chart, use_container_width=True)

# ---- Suggestions ----
st.subheader("Suggestions")
suggestions = []
if cv > TH["cv_warn_pct"]:
    suggestions.append("📊 High variability. Consider looking at specific periods or external drivers.")
if fit.r2 > TH["r2_trend"]:
    suggestions.append(f"📈 Clear trend (R² > {int(TH['r2_trend'] * 100)}%). Projections below are meaningful.")
if trend == "down" and fit.slope < -TH["slope_alert"]:
    suggestions.append("⚠️ Significant downward trend. Compare with correlated indicators on the Correlations page.")
if trend == "up" and fit.slope > TH["slope_alert"]:
    suggestions.append("✅ Sustained growth. Check whether it matches market expectations.")
if stats.std > stats.mean * 0.5:
    suggestions.append("🔄 Std dev is high relative to the mean. Check for seasonality or one-off events.")
if suggestions:
    for s in suggestions:
        st.write(s)
else:
    st.success("Nothing unusual in this series.")

# ---- Forecasts ----
left, right = st.columns([1, 1])
with left:
    st.subheader(f"Linear projection ({horizon} periods)")
    projected = forecast(values, horizon)
    if not projected:
        st.info("Need at least two observations to project.")
    else:
        labels = future_period_labels(obs["date"].iloc[-1], freq, len(projected))
        st.dataframe(pd.DataFrame({"period": labels, "projected": [fmt(v) for v in projected]}), use_container_width=True)

with right:
    st.subheader("State-space trend")
    ssm = analyze_time_series(df, freq)
    st.metric(
        f"Next period ({ssm.next_period_label})",
        fmt(ssm.forecast_value),
        delta=f"{ssm.percentage_change:+.1f}%",
    )
    st.caption(f"{get_trend_description(ssm)} · uncertainty {get_uncertainty_label(ssm.uncertainty).lower()}")
    st.caption(f"Band: {fmt(ssm.forecast_lower)} – {fmt(ssm.forecast_upper)}")

with st.expander("Raw observations"):
    raw = df.copy()
    raw["period"] = [format_date_by_frequency(d, freq) for d in raw["date"]]
    st.dataframe(raw[["period", "date", "value"]], use_container_width=True)
