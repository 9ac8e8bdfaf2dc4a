import pandas as pd
import streamlit as st

from app.utils.db import table_exists, indicators_df, regional_df
from app.utils.regression import detect_trend
from app.utils.regional import (
    RegionalStoryData,
    generate_regional_narrative,
    get_region_by_uf_code,
    get_uf_name_by_code,
    get_uf_sigla_by_code,
)
from app.utils.formatting import format_value_with_unit

st.set_page_config(page_title="Regional", layout="wide")

st.title("Regional breakdown")

# ---- Guards ----
if not table_exists("fct_regional_values"):
    st.warning("Missing table `fct_regional_values`. Ingest `regional_values.csv` and reload.")
    st.stop()

ind = indicators_df()
available = [i for i in ind["indicator_id"] if not regional_df(i).empty]
if not available:
    st.info("No indicator has a regional breakdown yet.")
    st.stop()

names = dict(zip(ind["indicator_id"], ind["name"]))
units = dict(zip(ind["indicator_id"], ind["unit"]))
indicator_id = st.selectbox("Indicator", available, format_func=lambda i: names[i])
unit = units[indicator_id]

reg = regional_df(indicator_id)

# latest vs previous reference date per UF
story = []
for uf_code, g in reg.groupby("uf_code"):
    g = g.sort_values("reference_date")
    latest = float(g["value"].iloc[-1])
    previous = float(g["value"].iloc[-2]) if len(g) > 1 else latest
    change = (latest - previous) / abs(previous) * 100 if previous else 0.0
    uf_code = int(uf_code)
    story.append(RegionalStoryData(
        uf_code=uf_code,
        uf_sigla=get_uf_sigla_by_code(uf_code),
        uf_name=get_uf_name_by_code(uf_code),
        region=get_region_by_uf_code(uf_code),
        value=latest,
        trend=detect_trend(change, 0.5),
        percent_change=change,
    ))

narrative = generate_regional_narrative(story, names[indicator_id], unit)

st.subheader(narrative.title)
for h in narrative.highlights:
    st.write(h)
st.markdown(narrative.story)

left, right = st.columns([2, 1])
with left:
    st.subheader("Ranking")
    st.dataframe(pd.DataFrame([{
        "rank": i + 1,
        "UF": d.uf_sigla,
        "state": d.uf_name,
        "region": d.region,
        "value": format_value_with_unit(d.value, unit),
        "change %": round(d.percent_change, 2),
        "trend": d.trend,
    } for i, d in enumerate(narrative.ranking)]), use_container_width=True)
with right:
    st.subheader("By region")
    st.dataframe(pd.DataFrame([{
        "region": c.region,
        "average": format_value_with_unit(c.avg_value, unit),
        "states": c.count,
    } for c in narrative.region_comparison]), use_container_width=True)
