import logging

import pandas as pd

from config import (
    DATE_FIELD_PRECEDENCE,
    EARNINGS_TYPE_PREFIXES,
    QUARTER_CUTOFF_DAY,
    UNCLASSIFIED_POLICY,
)
from data_loader import investor_greeting_name, normalize_transactions
from financial_math import (
    aggregate_quarters,
    annualize,
    bucket_transactions,
    unclassified_types,
)

logger = logging.getLogger(__name__)

ROW_COLUMNS = [
    "period",
    "label",
    "year",
    "quarter",
    "beginning_gaap",
    "beginning_nav",
    "contribution_dollar",
    "redemption_gaap_dollar",
    "redemption_nav_dollar",
    "income_paid_dollar",
    "income_reinvested_dollar",
    "income_realized_dollar",
    "unrealized_dollar",
    "tax_dollar",
    "other_dollar",
    "total_return_dollar",
    "gaap_end",
    "nav_end",
    "denominator",
    "realized_rate",
    "total_return_rate",
    "realized_rate_annualized",
    "total_return_rate_annualized",
    "action",
    "net_flow",
    "capital_flow",
    "transaction_count",
]

EMPTY_SUMMARY = {
    "latest_label": "",
    "latest_realized_rate_annualized": 0.0,
    "latest_total_return_rate_annualized": 0.0,
    "latest_realized_dollar": 0.0,
    "latest_total_return_dollar": 0.0,
    "latest_gaap_balance": 0.0,
    "latest_nav_balance": 0.0,
    "lifetime_realized_dollar": 0.0,
    "lifetime_total_return_dollar": 0.0,
    "beginning_balance": 0.0,
    "ending_gaap_balance": 0.0,
    "ending_nav_balance": 0.0,
    "quarter_count": 0,
}


def run_engine(
    raw_transactions,
    date_fields=DATE_FIELD_PRECEDENCE,
    cutoff_day: int = QUARTER_CUTOFF_DAY,
    earnings_prefixes=EARNINGS_TYPE_PREFIXES,
    unclassified_policy: str = UNCLASSIFIED_POLICY,
) -> dict:
    """
    Full pipeline over one investor's raw ledger:
    normalize -> bucket by quarter -> aggregate -> summarize.

    Pure: the input list is not modified and the same input always gives
    the same result. Skipped records and unrecognised transaction types are
    reported in result["errors"] rather than raised.
    """
    raw_transactions = list(raw_transactions)

    tx = normalize_transactions(raw_transactions, date_fields=date_fields)
    errors = list(tx.attrs.get("errors", []))

    for t in unclassified_types(tx):
        target = "realized income" if unclassified_policy == "realized" else "other (excluded from returns)"
        msg = f"Unrecognised transaction type {t!r} counted as {target}"
        logger.info(msg)
        errors.append(msg)

    buckets, keys = bucket_transactions(
        tx, cutoff_day=cutoff_day, earnings_prefixes=earnings_prefixes
    )
    rows = pd.DataFrame(
        aggregate_quarters(buckets, keys, unclassified_policy=unclassified_policy),
        columns=ROW_COLUMNS,
    )

    if raw_transactions and rows.empty:
        logger.warning("No usable transactions out of %d records", len(raw_transactions))

    return {
        "rows": rows,
        "summary": summarize(rows),
        "transactions": tx,
        "investor_name": investor_greeting_name(raw_transactions),
        "errors": errors,
    }


def summarize(rows) -> dict:
    """
    Headline numbers from the quarterly rows: the latest quarter's
    annualized rates and dollars, lifetime sums, and the first/last balances.

    Accepts the engine's DataFrame or a list of row dicts. Empty input gives
    zeroed defaults.
    """
    if not isinstance(rows, pd.DataFrame):
        rows = pd.DataFrame(list(rows), columns=ROW_COLUMNS)
    if rows.empty:
        return dict(EMPTY_SUMMARY)

    first = rows.iloc[0]
    latest = rows.iloc[-1]

    return {
        "latest_label": latest["label"],
        "latest_realized_rate_annualized": annualize(float(latest["realized_rate"])),
        "latest_total_return_rate_annualized": annualize(float(latest["total_return_rate"])),
        "latest_realized_dollar": float(latest["income_realized_dollar"]),
        "latest_total_return_dollar": float(latest["total_return_dollar"]),
        "latest_gaap_balance": float(latest["gaap_end"]),
        "latest_nav_balance": float(latest["nav_end"]),
        "lifetime_realized_dollar": float(rows["income_realized_dollar"].sum()),
        "lifetime_total_return_dollar": float(rows["total_return_dollar"].sum()),
        "beginning_balance": float(first["beginning_gaap"]),
        "ending_gaap_balance": float(latest["gaap_end"]),
        "ending_nav_balance": float(latest["nav_end"]),
        "quarter_count": int(len(rows)),
    }
