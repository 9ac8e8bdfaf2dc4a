"""
DuckDB warehouse for indicator histories: raw_* loading, modeled tables and
the read helpers the pages and scripts share. Streamlit-free so scripts and
tests can use it directly.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

import duckdb
import pandas as pd

CSV_TABLES = {
    "indicators.csv": "raw_indicators",
    "indicator_values.csv": "raw_indicator_values",
    "regional_values.csv": "raw_regional_values",
}

MODELED_TABLES = ["dim_indicators", "fct_indicator_values", "fct_regional_values"]


def connect(db_path: str, read_only: bool = False) -> duckdb.DuckDBPyConnection:
    if not read_only:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(db_path, read_only=read_only)


def table_exists(con: duckdb.DuckDBPyConnection, name: str) -> bool:
    try:
        con.execute(f"SELECT 1 FROM {name} LIMIT 1")
        return True
    except duckdb.Error:
        return False


def read_csv_into_table(con: duckdb.DuckDBPyConnection, csv_path: Path, table: str) -> int:
    """
    Create or replace a DuckDB table from a CSV using read_csv_auto.
    Returns row count loaded.
    """
    con.execute(f"""
        CREATE OR REPLACE TABLE {table} AS
        SELECT * FROM read_csv_auto(
            '{Path(csv_path).as_posix()}',
            header = true,
            sample_size = -1
        );
    """)
    return int(con.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])


def load_frames(con: duckdb.DuckDBPyConnection, frames: dict[str, pd.DataFrame]) -> None:
    """Write in-memory DataFrames as raw_* tables (demo bootstrap)."""
    for table, df in frames.items():
        view = f"df_{table}"
        con.register(view, df)
        con.execute(f"CREATE OR REPLACE TABLE {table} AS SELECT * FROM {view}")
        con.unregister(view)


def build_models(con: duckdb.DuckDBPyConnection) -> None:
    """raw_* -> dim_indicators / fct_indicator_values / fct_regional_values."""
    con.execute("""
        CREATE OR REPLACE TABLE dim_indicators AS
        SELECT
          CAST(indicator_id AS VARCHAR)          AS indicator_id,
          any_value(name)                        AS name,
          any_value(unit)                        AS unit,
          lower(any_value(frequency))            AS frequency
        FROM raw_indicators
        WHERE indicator_id IS NOT NULL
        GROUP BY 1;
    """)
    con.execute("""
        CREATE OR REPLACE TABLE fct_indicator_values AS
        SELECT
          CAST(indicator_id AS VARCHAR)          AS indicator_id,
          CAST(reference_date AS DATE)           AS reference_date,
          AVG(CAST(value AS DOUBLE))             AS value
        FROM raw_indicator_values
        WHERE indicator_id IS NOT NULL AND reference_date IS NOT NULL
          AND isfinite(CAST(value AS DOUBLE))    -- NULL / NaN / inf gaps never reach the marts
        GROUP BY 1, 2
        ORDER BY 1, 2;
    """)
    if table_exists(con, "raw_regional_values"):
        con.execute("""
            CREATE OR REPLACE TABLE fct_regional_values AS
            SELECT
              CAST(indicator_id AS VARCHAR)      AS indicator_id,
              CAST(uf_code AS INTEGER)           AS uf_code,
              CAST(reference_date AS DATE)       AS reference_date,
              AVG(CAST(value AS DOUBLE))         AS value
            FROM raw_regional_values
            WHERE indicator_id IS NOT NULL AND uf_code IS NOT NULL AND reference_date IS NOT NULL
              AND isfinite(CAST(value AS DOUBLE))
            GROUP BY 1, 2, 3
            ORDER BY 1, 2, 3;
        """)


def list_indicators(con: duckdb.DuckDBPyConnection) -> pd.DataFrame:
    return con.execute("""
        SELECT d.indicator_id, d.name, d.unit, d.frequency,
               COUNT(v.value) AS n_points,
               MIN(v.reference_date) AS first_date,
               MAX(v.reference_date) AS last_date
        FROM dim_indicators d
        LEFT JOIN fct_indicator_values v USING (indicator_id)
        GROUP BY ALL
        ORDER BY d.name
    """).fetchdf()


def fetch_series(con: duckdb.DuckDBPyConnection, indicator_id: str) -> pd.DataFrame:
    """One indicator as a date-sorted frame with columns date, value."""
    return con.execute("""
        SELECT reference_date AS date, value
        FROM fct_indicator_values
        WHERE indicator_id = ?
        ORDER BY reference_date
    """, [indicator_id]).fetchdf()


def fetch_wide(con: duckdb.DuckDBPyConnection, indicator_ids: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """Date-aligned matrix: one column per indicator, NaN where a series has no point."""
    df = con.execute(
        "SELECT indicator_id, reference_date, value FROM fct_indicator_values ORDER BY reference_date"
    ).fetchdf()
    if indicator_ids is not None:
        df = df[df["indicator_id"].isin(list(indicator_ids))]
    if df.empty:
        return pd.DataFrame()
    return df.pivot_table(index="reference_date", columns="indicator_id", values="value", aggfunc="mean").sort_index()


def fetch_regional(con: duckdb.DuckDBPyConnection, indicator_id: str) -> pd.DataFrame:
    if not table_exists(con, "fct_regional_values"):
        return pd.DataFrame(columns=["uf_code", "reference_date", "value"])
    return con.execute("""
        SELECT uf_code, reference_date, value
        FROM fct_regional_values
        WHERE indicator_id = ?
        ORDER BY uf_code, reference_date
    """, [indicator_id]).fetchdf()
