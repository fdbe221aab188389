"""
Integration Tests - CLI
"""
import logging

import pytest

from analysis.reports import REPORTS
from config import PipelineConfig
from database.sink import SQLiteSink
from main import main, parse_args, phase2_load


@pytest.fixture(autouse=True)
def reset_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()


def test_parse_args_collects_reports():
    args = parse_args(["--report", "kpi_total_revenue", "--report", "pareto_analysis"])

    assert args.reports == ["kpi_total_revenue", "pareto_analysis"]
    assert not args.skip_charts


def test_list_prints_report_names(capsys):
    assert main(["--list"]) == 0

    assert capsys.readouterr().out.split() == list(REPORTS)


def test_selected_reports_end_to_end(tmp_path):
    exit_code = main([
        "--db-path", str(tmp_path / "rental.db"),
        "--output-dir", str(tmp_path / "out"),
        "--report", "kpi_total_revenue",
        "--report", "pareto_analysis",
        "--skip-charts",
    ])

    assert exit_code == 0
    sink = SQLiteSink(tmp_path / "out" / "reports.db")
    assert sink.names() == ["kpi_total_revenue", "pareto_analysis"]
    assert (tmp_path / "out" / "rental_reports.xlsx").exists()


def test_unknown_report_fails_run(tmp_path):
    exit_code = main([
        "--db-path", str(tmp_path / "rental.db"),
        "--output-dir", str(tmp_path / "out"),
        "--report", "no_such_report",
        "--skip-charts",
        "--skip-excel",
    ])

    assert exit_code == 1


def test_load_phase_logs_row_counts(monkeypatch, source, caplog):
    monkeypatch.setattr("main.load_source_data", lambda db_path: source)

    with caplog.at_level(logging.INFO, logger="main"):
        assert phase2_load(PipelineConfig()) is source

    assert "payments" in caplog.text
    assert "6 Zeilen" in caplog.text
    assert "customers" in caplog.text
