"""
E2E smoke: proves the pipeline can ingest → build models → pass quality checks
→ feed the statistics helpers the pages use.
Builds its own demo warehouse under a temp dir (same path CI takes with
  - python scripts/ingest_indicators.py --source demo
  - python scripts/quality_checks.py
).
"""

import duckdb
import pytest

from app.utils import warehouse
from app.utils.config import load_analysis
from app.utils.descriptive import summary
from app.utils.forecasting import forecast
from app.utils.granger import granger_causality_test
from app.utils.lag_analysis import CorrelationCandidate, find_best_correlations
from app.utils.sts import run_structural_time_series
from scripts import ingest_indicators, quality_checks, snapshot_indicators


@pytest.fixture(scope="module")
def db_path(tmp_path_factory):
    root = tmp_path_factory.mktemp("e2e")
    path = str(root / "warehouse" / "knowyou.duckdb")
    results = ingest_indicators.run("demo", path, root / "demo", n_periods=60, seed=7)
    assert {t for t, _ in results} == set(warehouse.CSV_TABLES.values())
    return path


def connect(path: str) -> duckdb.DuckDBPyConnection:
    return duckdb.connect(path, read_only=True)


@pytest.mark.order(1)
def test_core_tables_exist_and_nonempty(db_path):
    con = connect(db_path)
    missing = [t for t in warehouse.MODELED_TABLES if not warehouse.table_exists(con, t)]
    assert not missing, f"Missing modeled tables: {missing}"

    for t in warehouse.MODELED_TABLES:
        n = con.execute(f"SELECT COUNT(*) FROM {t}").fetchone()[0]
        assert n >= 1, f"Table {t} is empty"
    con.close()


@pytest.mark.order(2)
def test_quality_contracts_pass(db_path):
    con = connect(db_path)
    failures = quality_checks.check_indicators(con, load_analysis())
    con.close()
    assert failures == [], f"Quality failures: {failures}"


@pytest.mark.order(3)
def test_quality_contracts_catch_orphan_values(tmp_path, db_path):
    src = connect(db_path)
    indicators = src.execute("SELECT * FROM raw_indicators WHERE indicator_id <> 'pmc'").fetchdf()
    values = src.execute("SELECT * FROM raw_indicator_values").fetchdf()
    src.close()

    con = warehouse.connect(str(tmp_path / "broken.duckdb"))
    warehouse.load_frames(con, {"raw_indicators": indicators, "raw_indicator_values": values})
    failures = quality_checks.check_indicators(con, load_analysis())
    con.close()
    assert any(f.startswith("FK missing") for f in failures), f"orphans not caught: {failures}"


@pytest.mark.order(4)
def test_statistics_run_on_warehouse_series(db_path):
    con = connect(db_path)
    ind = warehouse.list_indicators(con)
    series = {i: warehouse.fetch_series(con, i)["value"].tolist() for i in ind["indicator_id"]}
    con.close()

    s = summary(series["income"])
    assert s.count == 60 and s.min <= s.mean <= s.max
    assert len(forecast(series["income"], 6)) == 6
    assert summary(series["unemployment"]).count == 59, "gap row is dropped from the marts"

    names = dict(zip(ind["indicator_id"], ind["name"]))
    target = CorrelationCandidate("selic", names["selic"], series["selic"])
    candidates = [CorrelationCandidate(i, names[i], v) for i, v in series.items()]
    best = find_best_correlations(target, candidates, method="crosscorr", top_n=3, max_lag=6)
    assert best[0].id == "ipca", f"expected IPCA first, got {[b.id for b in best]}"
    assert best[0].lag == 3

    g = granger_causality_test(series["ipca"], series["selic"], max_lag=4)
    assert g.causality_type in ("x_causes_y", "y_causes_x", "bidirectional", "none")
    assert 0.0 <= g.p_value_xy <= 1.0 and 1 <= g.optimal_lag <= 4


@pytest.mark.order(5)
def test_sts_runs_for_every_indicator(db_path):
    con = connect(db_path)
    ind = warehouse.list_indicators(con)
    for _, row in ind.iterrows():
        res = run_structural_time_series(warehouse.fetch_series(con, row["indicator_id"]), row["frequency"])
        assert len(res.mu_series) == row["n_points"], f"{row['indicator_id']}: level series length"
        assert res.forecast.next_period == "Jan/2024"
    con.close()


@pytest.mark.order(6)
def test_snapshots_are_written(tmp_path, db_path):
    written = snapshot_indicators.snapshot(db_path, tmp_path / "artifacts")
    names = {p.name for p in written}
    assert "forecast_overview.png" in names
    assert "ipca_trend.png" in names
    assert all(p.stat().st_size > 0 for p in written)
