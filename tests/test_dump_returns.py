import json

from dump_returns import build_report, main
from portfolio_engine import run_engine


def test_build_report(scenario_transactions):
    report = build_report(run_engine(scenario_transactions)["rows"], quarters=1)
    assert report.to_dict("records") == [{
        "Quarter": "2015 Q2",
        "GAAP Begin": "100000.00",
        "Denominator": "100000.00",
        "Realised %": "24.00",
        "Total %": "24.00",
    }]


def test_main_prints_table(tmp_path, scenario_transactions, capsys):
    path = tmp_path / "investor.json"
    path.write_text(json.dumps(scenario_transactions))
    assert main([str(path), "--quarters", "4"]) == 0
    out = capsys.readouterr().out
    assert "2015 Q1" in out
    assert "24.00" in out


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.json")]) == 1
    assert "File not found" in capsys.readouterr().err


def test_main_rejects_non_array(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"rows": []}))
    assert main([str(path)]) == 1
