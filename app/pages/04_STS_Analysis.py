import altair as alt
import numpy as np
import pandas as pd
import streamlit as st

from app.utils.db import table_exists, indicators_df, series_df
from app.utils.config import load_thresholds, load_analysis
from app.utils.glossary import STAT_TOOLTIPS
from app.utils.descriptive import mean, standard_deviation, coefficient_of_variation, moving_average
from app.utils.sts import run_structural_time_series, format_sts_value

st.set_page_config(page_title="STS Analysis", layout="wide")

TH = load_thresholds()
AN = load_analysis()
st.title("Structural Time Series")
st.caption(STAT_TOOLTIPS["STS"])

if not table_exists("fct_indicator_values"):
    st.warning("Expected table `fct_indicator_values` not found. Run `python scripts/ingest_indicators.py`.")
    st.stop()

ind = indicators_df()
if ind.empty:
    st.info("No indicators available.")
    st.stop()

name = st.selectbox("Indicator", ind["name"].tolist())
meta = ind[ind["name"] == name].iloc[0]
unit, freq = meta["unit"], meta["frequency"]
df = series_df(meta["indicator_id"]).dropna(subset=["value"]).reset_index(drop=True)

if len(df) < int(AN["sts_min_points"]):
    st.info(f"Need at least {AN['sts_min_points']} observations for the STS model (have {len(df)}).")
    st.stop()

sts = run_structural_time_series(df, freq)
values = df["value"].tolist()

def fmt(v):
    return format_sts_value(v, unit)

# -------- Headline --------
strength_word = {"strong": "STRONG", "moderate": "MODERATE", "weak": "SLIGHT"}[sts.strength]
headline = {"up": f"{strength_word} RISE", "down": f"{strength_word} FALL"}.get(sts.direction, "STABILITY")
k1, k2, k3, k4 = st.columns(4)
k1.metric("Trend", headline)
k2.metric("Level (μ)", fmt(sts.mu_smoothed), help=f"95% band {fmt(sts.mu_ci_low)} – {fmt(sts.mu_ci_high)}")
k3.metric("Slope (β) / period", f"{sts.beta_smoothed:+.4f}", help=f"95% band {sts.beta_ci_low:+.4f} – {sts.beta_ci_high:+.4f}")
k4.metric("Uncertainty", sts.uncertainty.upper())

# -------- Level with band --------
plot = df.copy()
plot["level"] = sts.mu_series
band_sd = (sts.mu_ci_high - sts.mu_ci_low) / (2 * 1.96)
plot["low"] = plot["level"] - 1.96 * band_sd
plot["high"] = plot["level"] + 1.96 * band_sd
plot["anomaly"] = False
plot.loc[sts.anomaly_indices, "anomaly"] = True

base = alt.Chart(plot).encode(x=alt.X("date:T", title="Date"))
band = base.mark_area(opacity=0.2).encode(y=alt.Y("low:Q", scale=alt.Scale(zero=False), title=unit or "value"), y2="high:Q")
observed = base.mark_line(color="#999999").encode(y="value:Q")
level = base.mark_line(color="#4c78a8").encode(y="level:Q")
anomalies = alt.Chart(plot[plot["anomaly"]]).mark_circle(size=70, color="#d62728").encode(
    x="date:T", y="value:Q", tooltip=["date:T", alt.Tooltip("value:Q", format=",.3f")]
)
st.altair_chart(band + observed + level + anomalies, use_container_width=True)
st.caption(f"{len(sts.anomaly_indices)} observation(s) deviate more than 2σ from the one-step prediction.")

# -------- Forecast distribution --------
st.subheader(f"Forecast for {sts.forecast.next_period}")
fc = sts.forecast
dist = pd.DataFrame({
    "percentile": ["p05", "p25", "p50", "p75", "p95"],
    "value": [fc.p05, fc.p25, fc.p50, fc.p75, fc.p95],
})
c1, c2 = st.columns([1, 2])
with c1:
    st.metric("Expected value", fmt(fc.mean))
    st.write(f"50% range: **{fmt(fc.p25)} – {fmt(fc.p75)}**")
    st.write(f"90% range: **{fmt(fc.p05)} – {fmt(fc.p95)}**")
with c2:
    st.dataframe(dist.assign(value=dist["value"].map(fmt)), use_container_width=True)

# -------- Context: moving average & variability --------
st.subheader("Context")
ma_window = {"daily": 30, "monthly": 12, "quarterly": 4, "annual": 5, "yearly": 5}.get(freq, 4)
ma = moving_average(values, ma_window)
ma_last = ma[-1] if ma else mean(values)
current = values[-1]
band_pct = TH["ma_band_pct"]
if current > ma_last * (1 + band_pct):
    position = "above"
elif current < ma_last * (1 - band_pct):
    position = "below"
else:
    position = "near"
cv = coefficient_of_variation(values)
cv_class = "low" if cv < TH["cv_low_pct"] else "moderate" if cv < TH["cv_warn_pct"] else "high"

st.markdown(f"""
- The latest value **{fmt(current)}** is **{position}** the {ma_window}-period moving average (**{fmt(ma_last)}**).
- Standard deviation **{fmt(standard_deviation(values))}**, coefficient of variation **{cv:.1f}%** ({cv_class} variability).
- Noise variances: observation σ²ε = {sts.sigma2_epsilon:.4g}, level σ²η = {sts.sigma2_eta:.4g}, slope σ²ζ = {sts.sigma2_zeta:.4g}.
""")

with st.expander("Innovations (one-step prediction errors)"):
    inn = pd.DataFrame({"date": df["date"], "innovation": np.round(sts.innovations, 6)})
    st.bar_chart(inn.set_index("date"))
