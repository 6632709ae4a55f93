"""
Print the most recent quarters of an investor dataset as a table.

Usage: python dump_returns.py [path/to/dataset.json] [--quarters N]
"""
import argparse
import json
import logging
import os
import sys

import pandas as pd

from config import DATA_DIR, configure_logging
from data_loader import list_datasets
from portfolio_engine import run_engine

logger = logging.getLogger(__name__)


def build_report(rows: pd.DataFrame, quarters: int = 8) -> pd.DataFrame:
    """Last `quarters` rows with GAAP begin, denominator and annualized rates in percent."""
    out = rows.tail(quarters)
    return pd.DataFrame({
        "Quarter": out["label"],
        "GAAP Begin": out["beginning_gaap"].map(lambda v: f"{v:.2f}"),
        "Denominator": out["denominator"].map(lambda v: f"{v:.2f}"),
        "Realised %": (out["realized_rate_annualized"] * 100).map(lambda v: f"{v:.2f}"),
        "Total %": (out["total_return_rate_annualized"] * 100).map(lambda v: f"{v:.2f}"),
    }).reset_index(drop=True)


def _default_path():
    names = list_datasets()
    if not names:
        return None
    return os.path.join(DATA_DIR, f"{names[0]}.json")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Dump quarterly realized/total returns for a dataset.")
    parser.add_argument("path", nargs="?", help="JSON array of raw transactions (defaults to the first bundled dataset)")
    parser.add_argument("--quarters", type=int, default=8, help="number of trailing quarters to print")
    args = parser.parse_args(argv)

    configure_logging()

    path = args.path or _default_path()
    if not path or not os.path.exists(path):
        print(f"File not found: {path}", file=sys.stderr)
        return 1

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        print(f"{path} must contain a JSON array of transactions", file=sys.stderr)
        return 1

    result = run_engine(raw)
    for msg in result["errors"]:
        logger.warning(msg)

    report = build_report(result["rows"], args.quarters)
    if report.empty:
        print("No quarterly activity.")
    else:
        print(report.to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
