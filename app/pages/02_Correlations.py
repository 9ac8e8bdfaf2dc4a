import altair as alt
import pandas as pd
import streamlit as st

from app.utils.db import table_exists, indicators_df, wide_df
from app.utils.config import load_analysis
from app.utils.lag_analysis import CorrelationCandidate, find_best_correlations, spearman_correlation
from app.utils.regression import pearson_correlation, get_correlation_strength, generate_pairs

st.set_page_config(page_title="Correlations", layout="wide")

AN = load_analysis()
st.title("Correlations")

if not table_exists("fct_indicator_values"):
    st.warning("Expected table `fct_indicator_values` not found. Run `python scripts/ingest_indicators.py`.")
    st.stop()

ind = indicators_df()
wide = wide_df()
if ind.empty or wide.empty or len(ind) < 2:
    st.info("Need at least two indicators with observations.")
    st.stop()

names = dict(zip(ind["indicator_id"], ind["name"]))

# ---- Controls ----
c1, c2, c3, c4 = st.columns([2, 1, 1, 1])
with c1:
    target_name = st.selectbox("Target indicator", ind["name"].tolist())
with c2:
    methods = ["spearman", "pearson", "crosscorr"]
    method = st.radio("Method", methods, index=methods.index(AN["correlation_method"]))
with c3:
    top_n = st.number_input("Top N", min_value=1, max_value=len(ind) - 1, value=min(int(AN["top_n"]), len(ind) - 1))
with c4:
    max_lag = st.slider("Max lag (periods)", 1, 24, int(AN["max_lag"]), disabled=method != "crosscorr")

st.caption(
    "Series are aligned on reference date before comparison. Spearman is robust to outliers and "
    "monotonic rescaling; cross-correlation also searches for the lead/lag with the strongest relationship."
)

# ---- Auto-discovery ----
def candidate(indicator_id: str) -> CorrelationCandidate:
    return CorrelationCandidate(id=indicator_id, name=names[indicator_id], values=wide[indicator_id].tolist())

target_id = ind.loc[ind["name"] == target_name, "indicator_id"].iloc[0]
cands = [candidate(c) for c in wide.columns if c in names]
best = find_best_correlations(candidate(target_id), cands, method=method, top_n=top_n, max_lag=max_lag)

st.subheader(f"Indicators most related to {target_name}")
if not best:
    st.info("No candidate has at least 5 aligned observations with the target.")
else:
    rows = []
    for b in best:
        s = get_correlation_strength(b.correlation)
        rows.append({
            "indicator": b.name,
            "correlation": round(b.correlation, 4),
            "strength": s.strength,
            "reading": s.description,
            "lag": b.lag,
            "lead/lag": b.lag_interpretation,
        })
    out = pd.DataFrame(rows)
    if method != "crosscorr":
        out = out.drop(columns=["lag", "lead/lag"])
    st.dataframe(out, use_container_width=True)
    st.download_button(
        "Download (CSV)",
        out.to_csv(index=False).encode("utf-8"),
        file_name=f"correlations_{target_id}_{method}.csv",
        mime="text/csv",
    )

# ---- Correlation matrix ----
st.subheader("Correlation matrix")
matrix_method = st.radio("Matrix method", ["pearson", "spearman"], horizontal=True)
corr = pearson_correlation if matrix_method == "pearson" else spearman_correlation

ids = [c for c in wide.columns if c in names]
cells = [{"a": names[i], "b": names[i], "r": 1.0} for i in ids]
for a, b in generate_pairs(ids):
    r = corr(wide[a].tolist(), wide[b].tolist())
    cells.append({"a": names[a], "b": names[b], "r": r})
    cells.append({"a": names[b], "b": names[a], "r": r})

heat = alt.Chart(pd.DataFrame(cells)).mark_rect().encode(
    x=alt.X("a:N", title=""),
    y=alt.Y("b:N", title=""),
    color=alt.Color("r:Q", scale=alt.Scale(scheme="redblue", domain=[-1, 1])),
    tooltip=["a:N", "b:N", alt.Tooltip("r:Q", format=".3f")],
)
st.altair_chart(heat, use_container_width=True)

with st.expander("How to read this page"):
    st.markdown("""
- **|r| ≥ 0.9** very strong · **≥ 0.7** strong · **≥ 0.5** moderate · **≥ 0.3** weak · below that negligible.
- **Sign**: positive means the series move together; negative means they move in opposite directions.
- **Lag > 0**: the candidate moves first and the target follows `lag` periods later.
- Correlation is not causation: use the Lag & Causality page for a Granger test.
""")
