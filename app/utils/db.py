import os
from functools import lru_cache

import duckdb
import pandas as pd
import streamlit as st

from app.utils import warehouse
from app.utils.demo_data import demo_indicator_values, demo_indicators, demo_regional_values

# On Streamlit Cloud, /mount/data is writable during the session
DUCKDB_PATH = st.secrets.get("DUCKDB_PATH", os.environ.get("DUCKDB_PATH", "/mount/data/knowyou.duckdb"))


@lru_cache(maxsize=1)
def _connect() -> duckdb.DuckDBPyConnection:
    return warehouse.connect(DUCKDB_PATH)


def get_con() -> duckdb.DuckDBPyConnection:
    return _connect()


def table_exists(name: str) -> bool:
    return warehouse.table_exists(get_con(), name)


@st.cache_data(show_spinner=False)
def indicators_df() -> pd.DataFrame:
    return warehouse.list_indicators(get_con())


@st.cache_data(show_spinner=False)
def series_df(indicator_id: str) -> pd.DataFrame:
    return warehouse.fetch_series(get_con(), indicator_id)


@st.cache_data(show_spinner=False)
def wide_df() -> pd.DataFrame:
    return warehouse.fetch_wide(get_con())


@st.cache_data(show_spinner=False)
def regional_df(indicator_id: str) -> pd.DataFrame:
    return warehouse.fetch_regional(get_con(), indicator_id)


def ensure_demo_db() -> None:
    """
    If the DuckDB file has no modeled tables, load the deterministic demo
    indicators as raw_* tables and build the models the app expects. This
    avoids needing the real indicator exports on Streamlit Cloud.
    """
    con = get_con()
    if warehouse.table_exists(con, "fct_indicator_values"):
        return

    warehouse.load_frames(con, {
        "raw_indicators": demo_indicators(),
        "raw_indicator_values": demo_indicator_values(),
        "raw_regional_values": demo_regional_values(),
    })
    warehouse.build_models(con)

    print("[bootstrap] Demo DuckDB created with indicator marts.")
