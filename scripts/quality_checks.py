#!/usr/bin/env python3
"""
Fast-fail data contracts & sanity checks on the ingested indicator tables.

Usage:
  python scripts/quality_checks.py --db warehouse/knowyou.duckdb
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import Iterable, Tuple

import duckdb

from app.utils import warehouse
from app.utils.config import load_analysis
from app.utils.regional import UF_REGIONS

FREQUENCIES = ("daily", "monthly", "quarterly", "yearly", "annual")


def _run_count(con: duckdb.DuckDBPyConnection, sql: str) -> int:
    return int(con.execute(sql).fetchone()[0])


def _assert_zero(con: duckdb.DuckDBPyConnection, sql: str, msg: str, failures: list[str]) -> None:
    cnt = _run_count(con, sql)
    if cnt != 0:
        failures.append(f"{msg} (violations={cnt})")


def _assert_positive(con: duckdb.DuckDBPyConnection, sql: str, msg: str, failures: list[str]) -> None:
    cnt = _run_count(con, sql)
    if cnt <= 0:
        failures.append(f"{msg} (count={cnt})")


def check_indicators(con: duckdb.DuckDBPyConnection, analysis: dict) -> list[str]:
    """Contracts for raw_indicators / raw_indicator_values (and regional values when present)."""
    failures: list[str] = []

    # ---------- presence ----------
    for t in ["raw_indicators", "raw_indicator_values"]:
        if not warehouse.table_exists(con, t):
            failures.append(f"Missing table: {t}")
    if failures:
        return failures
    for t in ["raw_indicators", "raw_indicator_values"]:
        _assert_positive(con, f"SELECT COUNT(*) FROM {t}", f"Empty table: {t}", failures)

    # ---------- PK uniqueness ----------
    uniq_checks: Iterable[Tuple[str, str]] = [
        ("raw_indicators", "indicator_id"),
        ("raw_indicator_values", "indicator_id, reference_date"),
    ]
    for table, cols in uniq_checks:
        _assert_zero(
            con,
            f"""
            WITH a AS (
              SELECT {cols}, COUNT(*) c
              FROM {table}
              GROUP BY {cols}
            )
            SELECT COUNT(*) FROM a WHERE c>1
            """,
            f"PK not unique on {table} ({cols})",
            failures,
        )
        _assert_zero(
            con,
            f"SELECT COUNT(*) FROM {table} WHERE { ' OR '.join([c.strip() + ' IS NULL' for c in cols.split(',')]) }",
            f"PK contains NULLs on {table} ({cols})",
            failures,
        )

    # ---------- FK integrity ----------
    _assert_zero(
        con,
        """
        SELECT COUNT(*) FROM raw_indicator_values v
        LEFT JOIN raw_indicators i ON CAST(v.indicator_id AS VARCHAR) = CAST(i.indicator_id AS VARCHAR)
        WHERE i.indicator_id IS NULL
        """,
        "FK missing: raw_indicator_values.indicator_id → raw_indicators(indicator_id)",
        failures,
    )

    # ---------- value constraints ----------
    allowed = ", ".join(f"'{f}'" for f in FREQUENCIES)
    _assert_zero(
        con,
        f"SELECT COUNT(*) FROM raw_indicators WHERE frequency IS NULL OR lower(frequency) NOT IN ({allowed})",
        "Unknown or missing frequency in raw_indicators",
        failures,
    )
    _assert_zero(
        con,
        "SELECT COUNT(*) FROM raw_indicator_values WHERE isinf(CAST(value AS DOUBLE))",
        "Infinite values in raw_indicator_values",
        failures,
    )

    # ---------- enough history to analyse ----------
    min_points = int(analysis.get("min_series_points", 5))
    _assert_zero(
        con,
        f"""
        WITH n AS (
          SELECT i.indicator_id, COUNT(v.value) AS n_points
          FROM raw_indicators i
          LEFT JOIN raw_indicator_values v
            ON CAST(v.indicator_id AS VARCHAR) = CAST(i.indicator_id AS VARCHAR)
          GROUP BY 1
        )
        SELECT COUNT(*) FROM n WHERE n_points < {min_points}
        """,
        f"Indicators with fewer than {min_points} valid observations",
        failures,
    )

    # ---------- regional breakdown (optional) ----------
    if warehouse.table_exists(con, "raw_regional_values"):
        codes = ", ".join(str(c) for c in sorted(UF_REGIONS))
        _assert_zero(
            con,
            f"SELECT COUNT(*) FROM raw_regional_values WHERE uf_code IS NULL OR CAST(uf_code AS INTEGER) NOT IN ({codes})",
            "Unknown UF code in raw_regional_values",
            failures,
        )
        _assert_zero(
            con,
            """
            WITH a AS (
              SELECT indicator_id, uf_code, reference_date, COUNT(*) c
              FROM raw_regional_values GROUP BY 1, 2, 3
            )
            SELECT COUNT(*) FROM a WHERE c>1
            """,
            "PK not unique on raw_regional_values (indicator_id, uf_code, reference_date)",
            failures,
        )

    return failures


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Indicator data quality checks")
    p.add_argument("--db", default=os.environ.get("DUCKDB_PATH", "warehouse/knowyou.duckdb"))
    return p.parse_args()


def main():
    args = parse_args()
    con = warehouse.connect(args.db)

    print(f"[quality] DB={args.db}")
    failures = check_indicators(con, load_analysis())

    if failures:
        print("\n[QUALITY FAIL] One or more data contracts were violated:")
        for i, f in enumerate(failures, 1):
            print(f" {i:02d}. {f}")
        print("\nFix the above issues (or data files) and rerun.")
        sys.exit(2)

    print("[quality] All checks passed ✔")
    con.close()


if __name__ == "__main__":
    try:
        main()
    except duckdb.Error as e:
        print(f"[FATAL][DuckDB] {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"[FATAL] {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)
