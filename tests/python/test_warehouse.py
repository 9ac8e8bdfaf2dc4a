import pandas as pd
import pytest

from app.utils import warehouse
from app.utils.demo_data import (
    demo_indicator_values,
    demo_indicators,
    demo_regional_values,
    write_demo_csvs,
)


@pytest.fixture
def con(tmp_path):
    c = warehouse.connect(str(tmp_path / "wh" / "test.duckdb"))
    warehouse.load_frames(c, {
        "raw_indicators": demo_indicators(),
        "raw_indicator_values": demo_indicator_values(n_periods=24),
        "raw_regional_values": demo_regional_values(),
    })
    warehouse.build_models(c)
    yield c
    c.close()


def test_models_are_built(con):
    for t in warehouse.MODELED_TABLES:
        assert warehouse.table_exists(con, t), f"{t} missing"
    assert not warehouse.table_exists(con, "does_not_exist")


def test_list_indicators_counts_valid_points(con):
    ind = warehouse.list_indicators(con).set_index("indicator_id")
    assert set(ind.columns) >= {"name", "unit", "frequency", "n_points", "first_date", "last_date"}
    assert ind.loc["ipca", "n_points"] == 24
    assert ind.loc["unemployment", "n_points"] == 23, "NULL values are not counted"
    assert ind.loc["ipca", "frequency"] == "monthly"


def test_fetch_series_is_date_sorted(con):
    s = warehouse.fetch_series(con, "selic")
    assert list(s.columns) == ["date", "value"]
    assert len(s) == 24
    assert s["date"].is_monotonic_increasing
    assert warehouse.fetch_series(con, "unknown").empty


def test_fetch_wide_aligns_on_dates(con):
    wide = warehouse.fetch_wide(con, ["ipca", "pmc"])
    assert sorted(wide.columns) == ["ipca", "pmc"]
    assert len(wide) == 24
    assert wide.index.is_monotonic_increasing


def test_fetch_regional(con):
    reg = warehouse.fetch_regional(con, "income")
    assert list(reg.columns) == ["uf_code", "reference_date", "value"]
    assert reg["uf_code"].nunique() == 27
    assert warehouse.fetch_regional(con, "ipca").empty


def test_fetch_regional_without_table(tmp_path):
    c = warehouse.connect(str(tmp_path / "empty.duckdb"))
    try:
        assert warehouse.fetch_regional(c, "income").empty
    finally:
        c.close()


def test_read_csv_into_table_roundtrips_rows(tmp_path):
    write_demo_csvs(tmp_path / "csv", n_periods=12)
    c = warehouse.connect(str(tmp_path / "csv.duckdb"))
    try:
        rows = warehouse.read_csv_into_table(c, tmp_path / "csv" / "indicator_values.csv", "raw_indicator_values")
        assert rows == 12 * len(demo_indicators())
        got = c.execute("SELECT COUNT(*) FROM raw_indicator_values WHERE value IS NULL").fetchone()[0]
        assert got == 1, "empty CSV cells load as NULL"
    finally:
        c.close()


def test_build_models_averages_duplicate_dates(tmp_path):
    c = warehouse.connect(str(tmp_path / "dup.duckdb"))
    try:
        warehouse.load_frames(c, {
            "raw_indicators": pd.DataFrame([("x", "X", "%", "Monthly")],
                                           columns=["indicator_id", "name", "unit", "frequency"]),
            "raw_indicator_values": pd.DataFrame({
                "indicator_id": ["x", "x", "x"],
                "reference_date": pd.to_datetime(["2024-01-01", "2024-01-01", "2024-02-01"]),
                "value": [1.0, 3.0, 5.0],
            }),
        })
        warehouse.build_models(c)
        s = warehouse.fetch_series(c, "x")
        assert s["value"].tolist() == [2.0, 5.0]
        assert warehouse.list_indicators(c)["frequency"].tolist() == ["monthly"]
        assert not warehouse.table_exists(c, "fct_regional_values")
    finally:
        c.close()


def test_csv_ingest_keeps_column_names_and_builds_models(tmp_path):
    """`name` / `value` headers must survive the CSV load so the models can bind them."""
    write_demo_csvs(tmp_path / "csv", n_periods=12)
    c = warehouse.connect(str(tmp_path / "models.duckdb"))
    try:
        for fname, table in warehouse.CSV_TABLES.items():
            warehouse.read_csv_into_table(c, tmp_path / "csv" / fname, table)
        cols = [r[0] for r in c.execute("DESCRIBE raw_indicator_values").fetchall()]
        assert cols == ["indicator_id", "reference_date", "value"], f"unexpected columns: {cols}"
        cols = [r[0] for r in c.execute("DESCRIBE raw_indicators").fetchall()]
        assert cols == ["indicator_id", "name", "unit", "frequency"], f"unexpected columns: {cols}"

        warehouse.build_models(c)
        for t in warehouse.MODELED_TABLES:
            assert warehouse.table_exists(c, t), f"{t} missing after CSV ingest"
        ind = warehouse.list_indicators(c).set_index("indicator_id")
        assert ind.loc["ipca", "n_points"] == 12
        assert ind.loc["unemployment", "n_points"] == 11
    finally:
        c.close()
