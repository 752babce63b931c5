"""
CLI smoke tests via typer.testing.CliRunner.

Covers:
  - validate-config (default and --full, bad path)
  - list-kpis (all, --department, unknown department)
  - validate-csv (valid, invalid → exit 1, non-UTF-8 file reported as FAIL)
  - score (table output, export, failing file → exit 1, non-UTF-8 file
    isolated, bad format)
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from dealer_benchmark.cli import app

runner = CliRunner()


@pytest.fixture
def csv_file(tmp_path, sample_csv_text):
    path = tmp_path / "dealer.csv"
    path.write_text(sample_csv_text, encoding="utf-8")
    return path


@pytest.fixture
def empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    return path


@pytest.fixture
def latin1_file(tmp_path, build_csv, build_row):
    path = tmp_path / "latin1.csv"
    text = build_csv([build_row("Net Sales", Department="Caf\xe9", MYDEALER_CY="1")])
    path.write_bytes(text.encode("latin-1"))
    return path


class TestValidateConfig:
    def test_default(self):
        result = runner.invoke(app, ["validate-config"])
        assert result.exit_code == 0
        assert "National prefix:  ABC" in result.output
        assert "[OK] Config is valid." in result.output

    def test_full(self):
        result = runner.invoke(app, ["validate-config", "--full"])
        assert result.exit_code == 0
        assert '"national_prefix": "ABC"' in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "no.toml")])
        assert result.exit_code == 1


class TestListKpis:
    def test_all(self):
        result = runner.invoke(app, ["list-kpis"])
        assert result.exit_code == 0
        assert "[OK] 78 KPIs listed." in result.output

    def test_department(self):
        result = runner.invoke(app, ["list-kpis", "--department", "SERVICE"])
        assert result.exit_code == 0
        assert "[OK] 15 KPIs listed." in result.output

    def test_unknown_department(self):
        result = runner.invoke(app, ["list-kpis", "--department", "marketing"])
        assert result.exit_code == 1


class TestValidateCsv:
    def test_valid(self, csv_file):
        result = runner.invoke(app, ["validate-csv", str(csv_file)])
        assert result.exit_code == 0
        assert "[OK]    dealer.csv" in result.output

    def test_invalid_exits_1(self, csv_file, empty_file):
        result = runner.invoke(app, ["validate-csv", str(csv_file), str(empty_file)])
        assert result.exit_code == 1
        assert "[FAIL]  empty.csv: CSV file is empty" in result.output

    def test_non_utf8_file_fails_without_crashing(self, csv_file, latin1_file):
        result = runner.invoke(app, ["validate-csv", str(csv_file), str(latin1_file)])
        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert "[OK]    dealer.csv" in result.output
        assert "[FAIL]  latin1.csv: CSV file is not valid UTF-8" in result.output


class TestScore:
    def test_prints_table(self, csv_file):
        result = runner.invoke(app, ["score", str(csv_file)])
        assert result.exit_code == 0
        assert "Total Absorption" in result.output
        assert "[OK] 1 file(s) scored." in result.output

    def test_export_json(self, csv_file, tmp_path):
        out_dir = tmp_path / "exports"
        result = runner.invoke(app, ["score", str(csv_file), "--export-dir", str(out_dir)])
        assert result.exit_code == 0
        files = list(out_dir.glob("*.json"))
        assert len(files) == 1
        assert json.loads(files[0].read_text(encoding="utf-8"))["dealer_code"] == "MYDEALER"

    def test_export_csv(self, csv_file, tmp_path):
        out_dir = tmp_path / "exports"
        result = runner.invoke(
            app, ["score", str(csv_file), "--export-dir", str(out_dir), "--format", "csv"]
        )
        assert result.exit_code == 0
        assert len(list(out_dir.glob("*.csv"))) == 1

    def test_failing_file_exits_1_but_scores_others(self, csv_file, empty_file):
        result = runner.invoke(app, ["score", str(csv_file), str(empty_file)])
        assert result.exit_code == 1
        assert "Total Absorption" in result.output
        assert "[FAIL]  empty.csv" in result.output

    def test_non_utf8_file_is_isolated(self, csv_file, latin1_file):
        result = runner.invoke(app, ["score", str(csv_file), str(latin1_file)])
        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert "Total Absorption" in result.output
        assert "=== Batch Summary ===" in result.output
        assert "[FAIL]  latin1.csv" in result.output
        assert "not valid UTF-8" in result.output

    def test_bad_format(self, csv_file):
        result = runner.invoke(app, ["score", str(csv_file), "--format", "xml"])
        assert result.exit_code == 1

    def test_missing_file_rejected(self, tmp_path):
        result = runner.invoke(app, ["score", str(tmp_path / "missing.csv")])
        assert result.exit_code != 0
