import json
import logging
import os

import numpy as np
import pandas as pd
import requests

from config import (
    AMOUNT_FIELD,
    DATA_DIR,
    DATE_FIELD_PRECEDENCE,
    EQUITY_API_TIMEOUT,
    EQUITY_API_URL,
    INVESTOR_FIELD,
    TYPE_FIELD,
)

logger = logging.getLogger(__name__)

NORMALIZED_COLUMNS = ["record", "date", "amount", "transaction_type", "investor"]

# ------------------------------------------------------------
# Dataset registry (bundled JSON files, one per investor)
# ------------------------------------------------------------

def list_datasets(data_dir: str = None) -> list:
    """Names of the bundled datasets: every <name>.json in data_dir, sorted."""
    data_dir = data_dir or DATA_DIR
    if not os.path.isdir(data_dir):
        logger.warning("Dataset directory %s does not exist", data_dir)
        return []
    return sorted(
        f[: -len(".json")] for f in os.listdir(data_dir) if f.endswith(".json")
    )


def load_dataset(name: str, data_dir: str = None) -> list:
    """Load the raw transaction list stored in <data_dir>/<name>.json."""
    if not name or os.sep in name or "/" in name or name.startswith("."):
        raise ValueError(f"Invalid dataset name: {name!r}")

    data_dir = data_dir or DATA_DIR
    path = os.path.join(data_dir, f"{name}.json")
    if not os.path.exists(path):
        raise FileNotFoundError(f"Dataset not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    if not isinstance(payload, list):
        raise ValueError(f"Dataset {name} must contain a JSON array of transactions")
    return payload


# ------------------------------------------------------------
# Remote equity endpoint
# ------------------------------------------------------------

def fetch_equity_data(investor: str, url: str = None, timeout: float = None) -> list:
    """
    GET {url}?investor=<id> and return the raw transaction list.

    Raises requests.RequestException on network errors and non-2xx responses,
    ValueError when the body is not a JSON array. Callers turn either into a
    data-quality diagnostic.
    """
    url = url or EQUITY_API_URL
    timeout = timeout or EQUITY_API_TIMEOUT
    resp = requests.get(
        url,
        params={"investor": investor},
        headers={"Accept": "application/json"},
        timeout=timeout,
    )
    resp.raise_for_status()
    data = resp.json()

    if not isinstance(data, list):
        raise ValueError(f"Equity endpoint returned {type(data).__name__} for {investor}, expected a list")
    return data


# ------------------------------------------------------------
# Normalization (raw strings -> typed values)
# ------------------------------------------------------------

def parse_amounts(values: pd.Series) -> pd.Series:
    """
    "1,234.56" -> 1234.56. Anything that is not a finite decimal becomes NaN;
    callers decide what to do with it (never coerced to 0).
    """
    cleaned = values.astype(str).str.replace(",", "", regex=False).str.strip()
    amounts = pd.to_numeric(cleaned, errors="coerce").astype(float)
    return amounts.where(np.isfinite(amounts))


def parse_dates(values: pd.Series) -> pd.Series:
    """Parse RFC 1123 ("Tue, 30 Jun 2015 00:00:00 GMT") or ISO dates to naive UTC."""
    parsed = pd.to_datetime(values, errors="coerce", utc=True, format="mixed")
    return parsed.dt.tz_convert(None)


def normalize_transactions(raw_transactions, date_fields=DATE_FIELD_PRECEDENCE) -> pd.DataFrame:
    """
    Turn raw ledger records into a typed frame with columns
    record, date, amount, transaction_type, investor.

    The date comes from the first field in `date_fields` that parses.
    Records with an unparseable amount or no parseable date are dropped and
    described in `df.attrs["errors"]`.
    """
    raw = pd.DataFrame(list(raw_transactions))
    if raw.empty:
        out = pd.DataFrame(columns=NORMALIZED_COLUMNS)
        out.attrs["errors"] = []
        return out

    missing = pd.Series([None] * len(raw), index=raw.index, dtype=object)

    amount_raw = raw[AMOUNT_FIELD] if AMOUNT_FIELD in raw.columns else missing
    amounts = parse_amounts(amount_raw)

    dates = None
    for field in date_fields:
        if field not in raw.columns:
            continue
        parsed = parse_dates(raw[field])
        dates = parsed if dates is None else dates.combine_first(parsed)
    if dates is None:
        dates = pd.Series(pd.NaT, index=raw.index, dtype="datetime64[ns]")

    types = raw[TYPE_FIELD] if TYPE_FIELD in raw.columns else missing
    investors = raw[INVESTOR_FIELD] if INVESTOR_FIELD in raw.columns else missing

    df = pd.DataFrame({
        "record": raw.index,
        "date": dates,
        "amount": amounts,
        "transaction_type": types.fillna("").astype(str).str.strip(),
        "investor": investors.fillna("").astype(str),
    })

    bad_amount = df["amount"].isna()
    bad_date = df["date"].isna()

    errors = []
    for idx in df.index[bad_amount | bad_date]:
        reasons = []
        if bad_amount[idx]:
            reasons.append(f"unparseable amount {amount_raw[idx]!r}")
        if bad_date[idx]:
            reasons.append("no parseable date in " + "/".join(date_fields))
        msg = f"Record {idx} ({df.at[idx, 'transaction_type'] or 'untyped'}): {', '.join(reasons)}; skipped"
        logger.warning(msg)
        errors.append(msg)

    df = df[~(bad_amount | bad_date)].reset_index(drop=True)
    df.attrs["errors"] = errors
    return df


def normalize_transaction(raw: dict, date_fields=DATE_FIELD_PRECEDENCE):
    """Single-record form of normalize_transactions. Returns None when the record is rejected."""
    df = normalize_transactions([raw], date_fields=date_fields)
    if df.empty:
        return None
    row = df.iloc[0]
    return {
        "amount": float(row["amount"]),
        "date": row["date"],
        "transaction_type": row["transaction_type"],
    }


def investor_greeting_name(raw_transactions) -> str:
    """
    Name used in the welcome banner: the second word of the Investor field
    (surname for "First Last ..." strings), else the first word.
    """
    for tx in raw_transactions:
        investor = str(tx.get(INVESTOR_FIELD) or "").split()
        if len(investor) > 1:
            return investor[1]
        if investor:
            return investor[0]
        break
    return "Investor"
