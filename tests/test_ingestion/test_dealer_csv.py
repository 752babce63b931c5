"""
Tests for dealer_benchmark.ingestion.dealer_csv — dealer CSV parsing.

Covers:
  - parse_dealer_csv(): identity, period expansion, per-row values
  - Structural errors: empty, header only, ragged rows, missing columns
  - parse_float() conversion rules
  - Byte input: UTF-8 decoding and non-UTF-8 rejection
  - validate_csv_structure() pre-check
  - REQUIRED_CSV_COLUMNS order and completeness
"""

from __future__ import annotations

import math

import pytest

from dealer_benchmark.errors import CsvStructureError, DealerCsvError, MissingDealerColumnError
from dealer_benchmark.ingestion.dealer_csv import (
    REQUIRED_CSV_COLUMNS,
    decode_csv_content,
    parse_dealer_csv,
    parse_float,
    validate_csv_structure,
)


# ── REQUIRED_CSV_COLUMNS ───────────────────────────────────────────────────────

def test_required_columns_lists_mandatory_fields_in_check_order():
    assert REQUIRED_CSV_COLUMNS == ("Start_Date", "End_Date", "Department", "Description")


def test_first_missing_required_column_is_reported():
    result = validate_csv_structure("Department,Description,B_Class_CY\n")
    assert result.error == "Missing required column: Start_Date"


# ── parse_dealer_csv — happy path ──────────────────────────────────────────────

class TestParseDealerCsvValid:
    def test_identity_and_period(self, sample_csv_text):
        parsed = parse_dealer_csv(sample_csv_text)
        assert parsed.dealer_code == "MYDEALER"
        assert parsed.dealer_name == "MYDEALER_ABC-Moto"
        assert parsed.period_start == "January 2025"
        assert parsed.period_end == "December 2025"
        assert parsed.class_label == "B-Class"

    def test_rows_in_file_order(self, sample_csv_text):
        parsed = parse_dealer_csv(sample_csv_text)
        assert [r.description for r in parsed.rows] == [
            "Total Absorption", "Current Ratio", "Some Unlisted Metric",
        ]

    def test_row_values(self, sample_csv_text):
        row = parse_dealer_csv(sample_csv_text).rows[0]
        assert row.department == "Overall"
        assert row.current_value == pytest.approx(1.1)
        assert row.yoy_change_absolute == pytest.approx(0.1)
        assert row.yoy_change_percent == pytest.approx(0.1)
        assert row.class_average == pytest.approx(1.0)
        assert row.class_yoy_change == pytest.approx(0.05)
        assert row.percent_of_class == pytest.approx(1.1)
        assert row.national_average == pytest.approx(0.95)
        assert row.national_yoy_change == pytest.approx(0.02)
        assert row.percent_of_national == pytest.approx(1.157)

    def test_blank_cells_become_zero(self, sample_csv_text):
        row = parse_dealer_csv(sample_csv_text).rows[2]
        assert row.current_value == 5.0
        assert row.class_average == 0.0
        assert row.percent_of_class == 0.0
        assert row.national_average == 0.0

    def test_prior_year_value(self, sample_csv_text):
        row = parse_dealer_csv(sample_csv_text).rows[0]
        assert row.prior_year_value == pytest.approx(1.0)

    def test_bad_numeric_cell_does_not_affect_siblings(self, build_csv, build_row):
        text = build_csv([build_row("X", MYDEALER_CY="n/a", B_Class_CY="12.5")])
        row = parse_dealer_csv(text).rows[0]
        assert row.current_value == 0.0
        assert row.class_average == 12.5

    def test_bom_and_blank_lines_are_tolerated(self, build_csv, build_row):
        text = "\ufeff" + build_csv([build_row("X", MYDEALER_CY="1")]) + "\n,,,,,,,,,,,,\n\n"
        parsed = parse_dealer_csv(text)
        assert len(parsed.rows) == 1
        assert parsed.rows[0].current_value == 1.0

    def test_missing_companion_columns_default_to_zero(self, build_csv):
        headers = ["Start_Date", "End_Date", "Department", "Description", "D1_CY", "A_class_CY"]
        text = build_csv(
            [{"Start_Date": "24-Mar", "End_Date": "24-Apr", "Department": "Service",
              "Description": "Efficiency", "D1_CY": "0.95", "A_class_CY": "0.9"}],
            headers,
        )
        parsed = parse_dealer_csv(text)
        row = parsed.rows[0]
        assert parsed.class_label == "A-Class"
        assert parsed.dealer_name == "D1"
        assert row.yoy_change_absolute == 0.0
        assert row.percent_of_class == 0.0
        assert row.prior_year_value == 0.95

    def test_unrecognized_period_passes_through(self, build_csv, build_row):
        row = build_row("X", MYDEALER_CY="1")
        row["Start_Date"] = "2025-01-01"
        row["End_Date"] = "Q4 2025"
        parsed = parse_dealer_csv(build_csv([row]))
        assert parsed.period_start == "2025-01-01"
        assert parsed.period_end == "Q4 2025"

    def test_custom_national_prefix(self, build_csv):
        headers = ["Start_Date", "End_Date", "Department", "Description",
                   "D1_CY", "B_Class_CY", "XYZ_CY"]
        text = build_csv(
            [{"Start_Date": "25-Jan", "End_Date": "25-Jan", "Department": "Overall",
              "Description": "X", "D1_CY": "1", "B_Class_CY": "2", "XYZ_CY": "3"}],
            headers,
        )
        parsed = parse_dealer_csv(text, national_prefix="XYZ")
        assert parsed.dealer_name == "D1_XYZ"
        assert parsed.rows[0].national_average == 3.0


# ── parse_dealer_csv — structural errors ───────────────────────────────────────

class TestParseDealerCsvErrors:
    def test_empty_content_raises(self):
        with pytest.raises(CsvStructureError, match="empty"):
            parse_dealer_csv("")

    def test_whitespace_only_raises(self):
        with pytest.raises(CsvStructureError):
            parse_dealer_csv("  \n\n  ")

    def test_header_only_raises(self, standard_headers):
        with pytest.raises(CsvStructureError, match="header row only"):
            parse_dealer_csv(",".join(standard_headers) + "\n")

    def test_ragged_row_raises(self, standard_headers):
        text = ",".join(standard_headers) + "\n25-Jan,25-Dec,Overall,Net Sales,1\n"
        with pytest.raises(CsvStructureError, match="fields"):
            parse_dealer_csv(text)

    @pytest.mark.parametrize("missing", ["Start_Date", "End_Date", "Department", "Description"])
    def test_missing_basic_column_raises(self, build_csv, build_row, standard_headers, missing):
        headers = [h for h in standard_headers if h != missing]
        row = {k: v for k, v in build_row("X", MYDEALER_CY="1").items() if k != missing}
        with pytest.raises(CsvStructureError, match=f"Missing required column: {missing}"):
            parse_dealer_csv(build_csv([row], headers))

    def test_missing_class_column_raises(self, build_csv, build_row, standard_headers):
        headers = [h for h in standard_headers if "lass" not in h]
        row = {k: v for k, v in build_row("X").items() if k in headers}
        with pytest.raises(CsvStructureError, match="class column"):
            parse_dealer_csv(build_csv([row], headers))

    def test_missing_dealer_column_raises(self, build_csv):
        headers = ["Start_Date", "End_Date", "Department", "Description", "B_Class_CY"]
        text = build_csv(
            [{"Start_Date": "25-Jan", "End_Date": "25-Jan", "Department": "Overall",
              "Description": "X", "B_Class_CY": "1"}],
            headers,
        )
        with pytest.raises(MissingDealerColumnError):
            parse_dealer_csv(text)

    def test_all_structural_errors_share_a_base(self):
        with pytest.raises(DealerCsvError):
            parse_dealer_csv("")


# ── Byte input ─────────────────────────────────────────────────────────────────

class TestByteContent:
    def test_utf8_bytes_parse_like_text(self, sample_csv_text):
        parsed = parse_dealer_csv(sample_csv_text.encode("utf-8"))
        assert parsed.dealer_code == "MYDEALER"
        assert len(parsed.rows) == 3

    def test_utf8_bom_bytes_are_tolerated(self, sample_csv_text):
        parsed = parse_dealer_csv(sample_csv_text.encode("utf-8-sig"))
        assert parsed.period_start == "January 2025"

    def test_latin1_bytes_raise_structure_error(self, build_csv, build_row):
        text = build_csv([build_row("Net Sales", Department="Caf\xe9", MYDEALER_CY="1")])
        with pytest.raises(CsvStructureError, match="not valid UTF-8"):
            parse_dealer_csv(text.encode("latin-1"))

    def test_decode_reports_offending_byte(self):
        with pytest.raises(CsvStructureError, match="0xe9"):
            decode_csv_content(b"Caf\xe9")

    def test_decode_passes_text_through(self):
        assert decode_csv_content("Start_Date\n") == "Start_Date\n"


# ── parse_float ────────────────────────────────────────────────────────────────

class TestParseFloat:
    @pytest.mark.parametrize("cell, expected", [
        ("1.5", 1.5),
        (" -2 ", -2.0),
        ("1e3", 1000.0),
        (7, 7.0),
        (2.25, 2.25),
        ("", 0.0),
        ("   ", 0.0),
        (None, 0.0),
        ("abc", 0.0),
        ("1,000", 0.0),
        ("nan", 0.0),
        ("inf", 0.0),
        (float("-inf"), 0.0),
        (True, 0.0),
    ])
    def test_conversion(self, cell, expected):
        result = parse_float(cell)
        assert result == expected
        assert math.isfinite(result)


# ── validate_csv_structure ─────────────────────────────────────────────────────

class TestValidateCsvStructure:
    def test_valid_header(self, standard_headers):
        result = validate_csv_structure(",".join(standard_headers) + "\n")
        assert result.valid
        assert result.error is None

    def test_empty(self):
        result = validate_csv_structure("")
        assert not result.valid
        assert result.error == "CSV file is empty"

    def test_missing_basic_column(self):
        result = validate_csv_structure("Start_Date,End_Date,Description,B_Class_CY\n")
        assert not result.valid
        assert result.error == "Missing required column: Department"

    def test_missing_class_column(self):
        result = validate_csv_structure("Start_Date,End_Date,Department,Description,D1_CY\n")
        assert not result.valid
        assert "class column" in result.error

    def test_utf8_bytes_accepted(self, standard_headers):
        result = validate_csv_structure((",".join(standard_headers) + "\n").encode("utf-8"))
        assert result.valid

    def test_non_utf8_bytes_rejected_without_raising(self):
        result = validate_csv_structure(b"Start_Date,End_Date,D\xe9partement\n")
        assert not result.valid
        assert "not valid UTF-8" in result.error

    def test_never_raises_on_garbage(self):
        result = validate_csv_structure('"unterminated\n')
        assert result.valid is False
