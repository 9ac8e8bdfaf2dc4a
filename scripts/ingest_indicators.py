#!/usr/bin/env python3
"""
Ingest indicator CSV exports (or the deterministic demo set) into DuckDB as
raw_* tables, then build the modeled tables the app reads.

Usage:
  python scripts/ingest_indicators.py --source real --db warehouse/knowyou.duckdb
  python scripts/ingest_indicators.py --source demo --db warehouse/knowyou.duckdb
Env (optional):
  INDICATOR_DATA_DIR (default: data/real)
  DEMO_DATA_DIR (default: data/demo)
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import duckdb

from app.utils import warehouse
from app.utils.demo_data import write_demo_csvs

REQUIRED_FILES = ("indicators.csv", "indicator_values.csv")


def eprint(*a, **k):
    print(*a, file=sys.stderr, **k)


def ingest_folder(con: duckdb.DuckDBPyConnection, folder: Path, mapping: dict[str, str]) -> list[tuple[str, int]]:
    if not folder.exists():
        raise FileNotFoundError(f"Data directory not found: {folder}")

    results: list[tuple[str, int]] = []
    for fname, table in mapping.items():
        fpath = folder / fname
        if not fpath.exists():
            if fname in REQUIRED_FILES:
                raise FileNotFoundError(f"Expected file missing: {fpath}")
            eprint(f"→ Skipping optional {fname} (not found)")
            continue
        eprint(f"→ Loading {fname} → {table}")
        rows = warehouse.read_csv_into_table(con, fpath, table)
        results.append((table, rows))
    return results


def run(source: str, db_path: str, data_dir: Path, n_periods: int = 60, seed: int = 7) -> list[tuple[str, int]]:
    """Ingest + model. Returns (table, rows) for every raw table loaded."""
    if source == "demo":
        write_demo_csvs(data_dir, n_periods=n_periods, seed=seed)
        eprint(f"[ingest] Wrote demo CSVs to {data_dir}")

    con = warehouse.connect(db_path)
    try:
        eprint(f"[ingest] Connected to DuckDB at {db_path}")
        results = ingest_folder(con, data_dir, warehouse.CSV_TABLES)
        warehouse.build_models(con)
    finally:
        con.close()
    return results


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Ingest indicator CSVs into DuckDB")
    p.add_argument("--source", choices=["real", "demo"], required=True, help="Data source")
    p.add_argument("--db", default=os.environ.get("DUCKDB_PATH", "warehouse/knowyou.duckdb"), help="DuckDB path")
    p.add_argument("--data-dir", default=os.environ.get("INDICATOR_DATA_DIR", "data/real"), help="Indicator CSV folder")
    p.add_argument("--demo-dir", default=os.environ.get("DEMO_DATA_DIR", "data/demo"), help="Demo CSV folder")
    p.add_argument("--periods", type=int, default=60, help="Demo history length (months)")
    p.add_argument("--seed", type=int, default=7, help="Demo RNG seed")
    return p.parse_args()


def main():
    args = parse_args()
    folder = Path(args.demo_dir if args.source == "demo" else args.data_dir)
    results = run(args.source, args.db, folder, n_periods=args.periods, seed=args.seed)

    total = sum(r for _, r in results)
    longest = max((len(t) for t, _ in results), default=0)
    eprint("\n=== Ingest Summary ===")
    for t, r in results:
        eprint(f"{t.ljust(longest)}  rows={r:,}")
    eprint(f"TOTAL rows ingested: {total:,}")
    eprint("[ingest] Modeled tables: " + ", ".join(warehouse.MODELED_TABLES))


if __name__ == "__main__":
    try:
        main()
    except FileNotFoundError as e:
        eprint(f"[ERROR] {e}")
        sys.exit(2)
    except duckdb.Error as e:
        eprint(f"[FATAL][DuckDB] {e}")
        sys.exit(1)
    except Exception as e:
        eprint(f"[FATAL] {type(e).__name__}: {e}")
        sys.exit(1)
