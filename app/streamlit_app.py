import os
from pathlib import Path

import streamlit as st


from app.utils.glossary import STAT_TOOLTIPS
from app.utils.db import DUCKDB_PATH, table_exists, indicators_df, series_df, ensure_demo_db
from app.utils.config import load_thresholds
from app.utils.formatting import format_value_with_unit
from app.utils.regression import trend_regression, detect_trend
from app.utils.warehouse import MODELED_TABLES

# ensure a tiny demo DB exists when running in the cloud
ensure_demo_db()

APP_TITLE = "KnowYOU Indicator Analytics"
MODE = st.secrets.get("MODE", os.environ.get("MODE", "demo"))
TH = load_thresholds()

st.set_page_config(page_title=APP_TITLE, layout="wide")

# ---- Header / status ----
with st.sidebar:
    st.markdown(f"### {APP_TITLE}")
    st.caption("DuckDB + NumPy + Streamlit")
    st.write(f"**Mode:** `{MODE}`")
    st.write(f"**DB:** `{DUCKDB_PATH}`")
    run_checks = st.checkbox("Run quick health checks", value=True)
    if st.button("Refresh"):
        st.cache_data.clear()
        st.rerun()

st.title(APP_TITLE)
st.write("Use the left sidebar to switch pages. This home view shows a quick health/status summary.")

# ---- Health checks ----
def health() -> dict:
    checks = {}
    checks["db_file_present"] = Path(DUCKDB_PATH).exists()
    checks["known_tables"] = {k: table_exists(k) for k in MODELED_TABLES}
    return checks

if run_checks:
    with st.expander("Health checks", expanded=True):
        h = health()
        st.write(f"DB file present: **{h['db_file_present']}**")
        st.write("Known tables:")
        st.json(h["known_tables"])

# ---- Indicator snapshot ----
ARROWS = {"up": "▲", "down": "▼", "stable": "■"}

def render_snapshot():
    if not table_exists("dim_indicators"):
        st.info("Waiting for ingest… Expected table `dim_indicators` not found yet.")
        return
    ind = indicators_df()
    if ind.empty:
        st.info("No indicators loaded.")
        return

    st.caption(f"Trend  ⓘ {STAT_TOOLTIPS['Trend']}")
    cols = st.columns(min(len(ind), 3))
    for i, row in enumerate(ind.itertuples(index=False)):
        s = series_df(row.indicator_id)
        values = s["value"].tolist()
        fit = trend_regression(values)
        trend = detect_trend(fit.slope, TH["trend_slope"])
        last = s["value"].dropna()
        with cols[i % len(cols)]:
            st.metric(
                label=row.name,
                value=format_value_with_unit(float(last.iloc[-1]) if not last.empty else None, row.unit),
                delta=f"{fit.slope:+.3f} / period",
                delta_color="off" if trend == "stable" else "normal",
                help=f"{ARROWS[trend]} trend {trend}, R² {fit.r2:.2f}",
            )

render_snapshot()

st.caption("Tip: run `python scripts/ingest_indicators.py --source demo` to rebuild the local warehouse.")
