"""Shared fixtures: raw ledger record factory and an isolated dataset directory."""

import json

import pytest

import dash_wrappers as dw


def raw_tx(transaction_type, amount, date, investor="Stelck Boeger 1998 Revocable Trust (i2)", tran_date=None):
    """One raw ledger record shaped like the equity export."""
    record = {
        "Actual_Transaction_Amount": amount,
        "Effective_Date": date,
        "Transaction_Type": transaction_type,
        "Investor": investor,
    }
    if tran_date is not None:
        record["Tran_Date"] = tran_date
    return record


@pytest.fixture
def make_tx():
    return raw_tx


@pytest.fixture
def scenario_transactions():
    """$100k contributed in Q1, $6k income paid in Q2."""
    return [
        raw_tx("Contribution - Equity", "100,000.00", "2015-01-01"),
        raw_tx("Income Paid", "6,000.00", "2015-06-30"),
    ]


@pytest.fixture
def data_dir(tmp_path, scenario_transactions):
    d = tmp_path / "data"
    d.mkdir()
    (d / "brian_schmidt.json").write_text(json.dumps(scenario_transactions))
    (d / "empty_investor.json").write_text("[]")
    (d / "notes.txt").write_text("not a dataset")
    return str(d)


@pytest.fixture(autouse=True)
def _clear_data_cache():
    dw.refresh_data()
    yield
    dw.refresh_data()
