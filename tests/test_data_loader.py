import json
import math
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest
import requests

from data_loader import (
    fetch_equity_data,
    investor_greeting_name,
    list_datasets,
    load_dataset,
    normalize_transaction,
    normalize_transactions,
    parse_amounts,
)


class TestParseAmounts:
    def test_thousands_separators_and_sign(self):
        out = parse_amounts(pd.Series(["1,234.56", "-4.71", "500,000.00"]))
        assert list(out) == pytest.approx([1234.56, -4.71, 500000.0])

    def test_numeric_values_pass_through(self):
        out = parse_amounts(pd.Series([100000, 2.5], dtype=object))
        assert list(out) == pytest.approx([100000.0, 2.5])

    def test_malformed_values_become_nan_not_zero(self):
        out = parse_amounts(pd.Series(["abc", None, "", "inf"], dtype=object))
        assert all(math.isnan(v) for v in out)


class TestNormalizeTransactions:
    def test_typed_columns(self, make_tx):
        df = normalize_transactions([
            make_tx("Income Paid", "6,168.15", "Tue, 30 Jun 2015 00:00:00 GMT"),
        ])
        assert list(df.columns) == ["record", "date", "amount", "transaction_type", "investor"]
        row = df.iloc[0]
        assert row["amount"] == pytest.approx(6168.15)
        assert row["date"] == pd.Timestamp("2015-06-30")
        assert row["transaction_type"] == "Income Paid"
        assert df.attrs["errors"] == []

    def test_malformed_amount_is_skipped_with_diagnostic(self, make_tx):
        df = normalize_transactions([
            make_tx("Contribution - Equity", "1,000.00", "2015-01-15"),
            make_tx("Income Paid", "twelve", "2015-02-15"),
        ])
        assert len(df) == 1
        assert len(df.attrs["errors"]) == 1
        assert "unparseable amount" in df.attrs["errors"][0]
        assert "Record 1" in df.attrs["errors"][0]

    def test_falls_back_to_tran_date(self, make_tx):
        df = normalize_transactions([
            make_tx("Income Paid", "10.00", "", tran_date="Fri, 30 Sep 2016 00:00:00 GMT"),
        ])
        assert len(df) == 1
        assert df.iloc[0]["date"] == pd.Timestamp("2016-09-30")

    def test_effective_date_wins_over_tran_date(self, make_tx):
        df = normalize_transactions([
            make_tx("Income Paid", "10.00", "2016-03-31", tran_date="2016-04-02"),
        ])
        assert df.iloc[0]["date"] == pd.Timestamp("2016-03-31")

    def test_precedence_is_configurable(self, make_tx):
        df = normalize_transactions(
            [make_tx("Income Paid", "10.00", "2016-03-31", tran_date="2016-04-02")],
            date_fields=("Tran_Date", "Effective_Date"),
        )
        assert df.iloc[0]["date"] == pd.Timestamp("2016-04-02")

    def test_no_parseable_date_is_skipped(self, make_tx):
        df = normalize_transactions([make_tx("Income Paid", "10.00", "not a date")])
        assert df.empty
        assert "no parseable date" in df.attrs["errors"][0]

    def test_missing_amount_field(self):
        df = normalize_transactions([{"Transaction_Type": "Income Paid", "Effective_Date": "2015-06-30"}])
        assert df.empty
        assert len(df.attrs["errors"]) == 1

    def test_empty_input(self):
        df = normalize_transactions([])
        assert df.empty
        assert df.attrs["errors"] == []

    def test_single_record_form(self, make_tx):
        tx = normalize_transaction(make_tx("Contribution - Equity", "1,234.56", "2015-01-01"))
        assert tx["amount"] == pytest.approx(1234.56)
        assert tx["date"] == pd.Timestamp("2015-01-01")
        assert normalize_transaction(make_tx("Contribution - Equity", "n/a", "2015-01-01")) is None


class TestDatasets:
    def test_list_datasets(self, data_dir):
        assert list_datasets(data_dir) == ["brian_schmidt", "empty_investor"]

    def test_list_datasets_missing_dir(self, tmp_path):
        assert list_datasets(str(tmp_path / "nope")) == []

    def test_load_dataset(self, data_dir):
        raw = load_dataset("brian_schmidt", data_dir=data_dir)
        assert len(raw) == 2
        assert raw[0]["Transaction_Type"] == "Contribution - Equity"

    def test_unknown_dataset(self, data_dir):
        with pytest.raises(FileNotFoundError):
            load_dataset("nobody", data_dir=data_dir)

    @pytest.mark.parametrize("name", ["", "../secrets", "a/b", ".hidden"])
    def test_invalid_names(self, data_dir, name):
        with pytest.raises(ValueError):
            load_dataset(name, data_dir=data_dir)

    def test_payload_must_be_a_list(self, tmp_path):
        (tmp_path / "bad.json").write_text(json.dumps({"rows": []}))
        with pytest.raises(ValueError):
            load_dataset("bad", data_dir=str(tmp_path))


class TestFetchEquityData:
    def test_success(self, make_tx):
        payload = [make_tx("Income Paid", "1.00", "2015-06-30")]
        resp = MagicMock()
        resp.json.return_value = payload
        with patch("data_loader.requests.get", return_value=resp) as get:
            assert fetch_equity_data("boe", url="http://example.test/equity") == payload
        _, kwargs = get.call_args
        assert get.call_args[0][0] == "http://example.test/equity"
        assert kwargs["params"] == {"investor": "boe"}
        assert kwargs["headers"]["Accept"] == "application/json"

    def test_network_error_propagates(self):
        with patch("data_loader.requests.get", side_effect=requests.ConnectionError("down")):
            with pytest.raises(requests.ConnectionError):
                fetch_equity_data("boe")

    def test_http_error_propagates(self):
        resp = MagicMock()
        resp.raise_for_status.side_effect = requests.HTTPError("500")
        with patch("data_loader.requests.get", return_value=resp):
            with pytest.raises(requests.HTTPError):
                fetch_equity_data("boe")

    def test_non_list_payload_is_rejected(self):
        resp = MagicMock()
        resp.json.return_value = {"error": "nope"}
        with patch("data_loader.requests.get", return_value=resp):
            with pytest.raises(ValueError, match="expected a list"):
                fetch_equity_data("boe")


class TestInvestorGreetingName:
    def test_second_word(self, make_tx):
        assert investor_greeting_name([make_tx("Income Paid", "1", "2015-01-01")]) == "Boeger"

    def test_single_word(self, make_tx):
        assert investor_greeting_name([make_tx("Income Paid", "1", "2015-01-01", investor="Brian")]) == "Brian"

    def test_default(self):
        assert investor_greeting_name([]) == "Investor"
        assert investor_greeting_name([{"Investor": ""}]) == "Investor"
