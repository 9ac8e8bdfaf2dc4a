import altair as alt
import pandas as pd
import streamlit as st

from app.utils.db import table_exists, indicators_df, wide_df
from app.utils.config import load_analysis
from app.utils.lag_analysis import cross_correlation, find_optimal_lag, interpret_lag
from app.utils.regression import get_correlation_strength
from app.utils.granger import granger_causality_test

st.set_page_config(page_title="Lag & Causality", layout="wide")

AN = load_analysis()
st.title("Lag & Causality")

if not table_exists("fct_indicator_values"):
    st.warning("Expected table `fct_indicator_values` not found. Run `python scripts/ingest_indicators.py`.")
    st.stop()

ind = indicators_df()
wide = wide_df()
if len(ind) < 2 or wide.empty:
    st.info("Need at least two indicators with observations.")
    st.stop()

names = ind["name"].tolist()
ids = dict(zip(ind["name"], ind["indicator_id"]))

# -------- Controls --------
left, right = st.columns([1, 2])
with left:
    x_name = st.selectbox("Series X (possible leader)", names, index=0)
    y_name = st.selectbox("Series Y", names, index=1)
    max_lag = st.slider("Max lag (periods)", 1, 24, int(AN["max_lag"]))
    granger_lag = st.slider("Granger max lag", 1, 8, int(AN["granger_max_lag"]))
    alpha = st.select_slider("Significance (α)", [0.01, 0.05, 0.10], value=float(AN["granger_significance"]))
with right:
    st.caption(
        "Lags are clipped to a third of the overlap so every shifted pair keeps enough points. "
        "Positive lag: X moves first and Y follows."
    )

if x_name == y_name:
    st.info("Pick two different indicators.")
    st.stop()

pair = wide[[ids[x_name], ids[y_name]]].dropna(how="all")
x = pair[ids[x_name]].tolist()
y = pair[ids[y_name]].tolist()

# -------- Cross-correlation --------
ccf = cross_correlation(x, y, max_lag)
best = find_optimal_lag(x, y, max_lag)
strength = get_correlation_strength(best.correlation)

k1, k2, k3, k4 = st.columns(4)
k1.metric("Best lag", f"{best.lag:+d}")
k2.metric("Correlation at best lag", f"{best.correlation:.3f}")
k3.metric("Strength", strength.strength)
k4.metric("Direction", best.direction)
st.write(f"**{interpret_lag(best.lag, x_name, y_name)}** · {strength.description}")

ccf_df = pd.DataFrame([{"lag": c.lag, "correlation": c.correlation} for c in ccf]).sort_values("lag")
bars = alt.Chart(ccf_df).mark_bar().encode(
    x=alt.X("lag:O", title="Lag (periods)"),
    y=alt.Y("correlation:Q", title="Pearson r", scale=alt.Scale(domain=[-1, 1])),
    color=alt.condition(alt.datum.lag == best.lag, alt.value("#d62728"), alt.value("#4c78a8")),
    tooltip=["lag:O", alt.Tooltip("correlation:Q", format=".3f")],
)
st.altair_chart(bars, use_container_width=True)

# -------- Granger --------
st.subheader("Granger causality")
g = granger_causality_test(x, y, max_lag=granger_lag, significance=alpha)
g1, g2, g3 = st.columns(3)
g1.metric("Lag (AIC)", g.optimal_lag)
g2.metric("X → Y", f"F={g.f_stat_xy:.2f}", delta=f"p={g.p_value_xy:.4f}", delta_color="off")
g3.metric("Y → X", f"F={g.f_stat_yx:.2f}", delta=f"p={g.p_value_yx:.4f}", delta_color="off")
st.caption(f"X = {x_name} · Y = {y_name}")
if g.causality_type == "none":
    st.info(g.interpretation)
else:
    st.success(g.interpretation)

with st.expander("Aligned data"):
    st.dataframe(pair.rename(columns={ids[x_name]: x_name, ids[y_name]: y_name}), use_container_width=True)
