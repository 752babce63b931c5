"""
Dealer performance CSV parser.

Format — comma delimited, one header row, one data row per KPI.
Required columns:
  Start_Date, End_Date, Department, Description, and a benchmark-class
  column such as ``B_Class_CY`` (see ``column_detector``).

Dynamic columns (names vary per dealer / class / brand):
  ``<DEALER>_CY``, ``<DEALER>_CY_vs_LY``, ``<DEALER>_YoY_Change``
  ``<L>_Class_CY``, ``<L>_Class_CY_vs_LY``, ``<L>_class_%_of_Class``
  ``ABC<brand>_CY``, ``ABC<brand>_CY_vs_LY``, ``ABC<brand>_%_of_Nat_Avg``

Numeric cells:
  Every numeric field is converted on its own by ``parse_float()``.  Blank,
  missing, non-numeric and non-finite cells become ``0.0``; a malformed cell
  never invalidates the rest of its row.

Reporting period:
  Taken from the first data row's ``Start_Date`` / ``End_Date`` and expanded
  with ``expand_period_label()`` (``"25-Jan"`` → ``"January 2025"``).

Encoding:
  Content may be passed as ``bytes``; it must decode as UTF-8 (a leading BOM
  is dropped).  Spreadsheet exports saved as cp1252 or latin-1 are rejected.

Structural failures (bad encoding, empty file, header only, ragged rows,
missing required headers) raise ``CsvStructureError`` and abort the whole file.
"""

from __future__ import annotations

import csv
import io
import logging
import math
from typing import Any, Optional, Union

from dealer_benchmark.errors import CsvStructureError
from dealer_benchmark.ingestion.column_detector import (
    BASIC_COLUMNS,
    DEFAULT_CLASS_LABEL,
    DEFAULT_NATIONAL_PREFIX,
    ColumnRoles,
    dealer_identity,
    detect_columns,
    has_class_column,
)
from dealer_benchmark.models.dealer_csv import CsvValidationResult, ParsedCsvRow, ParsedDealerCsv
from dealer_benchmark.utils.time_utils import expand_period_label

logger = logging.getLogger(__name__)

# Checked in this order; the first absent one is reported.
REQUIRED_CSV_COLUMNS: tuple[str, ...] = BASIC_COLUMNS

_MISSING_CLASS_MSG = "Missing required class column (e.g., B_Class_CY or A_class_CY)"


def parse_dealer_csv(
    content: Union[str, bytes],
    national_prefix: str = DEFAULT_NATIONAL_PREFIX,
    default_class_label: str = DEFAULT_CLASS_LABEL,
) -> ParsedDealerCsv:
    """Parse one dealer CSV export into typed rows.

    Args:
        content:             Full CSV text (header row + data rows), or the
                             raw UTF-8 bytes of the file.
        national_prefix:     Brand prefix of the national-average columns.
        default_class_label: Class label used if the class column has no letter.

    Returns:
        ``ParsedDealerCsv`` with every data row in file order.

    Raises:
        CsvStructureError: Content that is not UTF-8, empty content,
            header-only content, ragged rows, or missing required headers.
        MissingDealerColumnError: No header qualifies as the dealer column.
    """
    headers, records = _read_records(decode_csv_content(content))

    missing = _first_missing_column(headers)
    if missing is not None:
        raise CsvStructureError(f"Missing required column: {missing}")
    if not has_class_column(headers):
        raise CsvStructureError(_MISSING_CLASS_MSG)

    roles = detect_columns(
        headers,
        national_prefix=national_prefix,
        default_class_label=default_class_label,
    )
    dealer_code, dealer_name = dealer_identity(roles)

    first = records[0]
    period_start = expand_period_label((first.get("Start_Date") or "").strip())
    period_end = expand_period_label((first.get("End_Date") or "").strip())

    rows = tuple(extract_row(record, roles) for record in records)

    logger.info(
        "Parsed %d rows for dealer %s (%s - %s, %s)",
        len(rows), dealer_code, period_start, period_end, roles.class_label,
    )
    return ParsedDealerCsv(
        dealer_code=dealer_code,
        dealer_name=dealer_name,
        period_start=period_start,
        period_end=period_end,
        class_label=roles.class_label,
        rows=rows,
    )


def extract_row(record: dict[str, str], roles: ColumnRoles) -> ParsedCsvRow:
    """Reduce one raw CSV record to the fixed ``ParsedCsvRow`` schema."""
    return ParsedCsvRow(
        department=record.get("Department") or "",
        description=record.get("Description") or "",
        current_value=_cell(record, roles.dealer_col),
        yoy_change_absolute=_cell(record, roles.dealer_yoy_abs_col),
        yoy_change_percent=_cell(record, roles.dealer_yoy_pct_col),
        class_average=_cell(record, roles.class_col),
        class_yoy_change=_cell(record, roles.class_yoy_col),
        percent_of_class=_cell(record, roles.class_pct_col),
        national_average=_cell(record, roles.national_col),
        national_yoy_change=_cell(record, roles.national_yoy_col),
        percent_of_national=_cell(record, roles.national_pct_col),
    )


def parse_float(cell: Any) -> float:
    """Convert a CSV cell to ``float``; anything unusable becomes ``0.0``."""
    if cell is None or isinstance(cell, bool):
        return 0.0
    if isinstance(cell, (int, float)):
        value = float(cell)
    else:
        text = str(cell).strip()
        if not text:
            return 0.0
        try:
            value = float(text)
        except ValueError:
            return 0.0
    return value if math.isfinite(value) else 0.0


def validate_csv_structure(content: Union[str, bytes]) -> CsvValidationResult:
    """Non-raising upload pre-check: encoding, basic headers and a class column.

    Only the header row is inspected; data rows are not required.
    """
    try:
        headers = _read_header(decode_csv_content(content))
    except CsvStructureError as exc:
        return CsvValidationResult(valid=False, error=str(exc))
    except csv.Error as exc:
        return CsvValidationResult(valid=False, error=f"CSV parsing error: {exc}")

    if not headers:
        return CsvValidationResult(valid=False, error="CSV file is empty")

    missing = _first_missing_column(headers)
    if missing is not None:
        return CsvValidationResult(valid=False, error=f"Missing required column: {missing}")

    if not has_class_column(headers):
        return CsvValidationResult(valid=False, error=_MISSING_CLASS_MSG)

    return CsvValidationResult(valid=True)


def decode_csv_content(content: Union[str, bytes]) -> str:
    """Return CSV text, decoding raw file bytes as UTF-8.

    Raises:
        CsvStructureError: The bytes are not valid UTF-8.
    """
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CsvStructureError(
            f"CSV file is not valid UTF-8 (byte 0x{content[exc.start]:02x} at offset "
            f"{exc.start}); re-save the export as CSV UTF-8"
        ) from exc


# ── Private helpers ────────────────────────────────────────────────────────────

def _cell(record: dict[str, str], column: Optional[str]) -> float:
    if column is None:
        return 0.0
    return parse_float(record.get(column))


def _first_missing_column(headers: list[str]) -> Optional[str]:
    for required in REQUIRED_CSV_COLUMNS:
        if required not in headers:
            return required
    return None


def _strip_bom(content: str) -> str:
    return content[1:] if content.startswith("\ufeff") else content


def _read_header(content: str) -> list[str]:
    reader = csv.reader(io.StringIO(_strip_bom(content)))
    for row in reader:
        if any(cell.strip() for cell in row):
            return row
    return []


def _read_records(content: str) -> tuple[list[str], list[dict[str, str]]]:
    """Split CSV text into a header list and one dict per data row.

    Rows with no non-blank cell are skipped.

    Raises:
        CsvStructureError: Empty content, header only, or a row whose field
            count differs from the header.
    """
    if not content or not content.strip():
        raise CsvStructureError("CSV file is empty")

    try:
        raw_rows = [
            row for row in csv.reader(io.StringIO(_strip_bom(content)))
            if any(cell.strip() for cell in row)
        ]
    except csv.Error as exc:
        raise CsvStructureError(f"CSV parsing error: {exc}") from exc

    if not raw_rows:
        raise CsvStructureError("CSV file is empty")

    headers, data_rows = raw_rows[0], raw_rows[1:]
    if not data_rows:
        raise CsvStructureError("CSV file is empty (header row only)")

    records: list[dict[str, str]] = []
    for i, row in enumerate(data_rows):
        if len(row) != len(headers):
            raise CsvStructureError(
                f"CSV parsing error: data row {i + 1} has {len(row)} fields, "
                f"expected {len(headers)}"
            )
        records.append(dict(zip(headers, row)))
    return headers, records
