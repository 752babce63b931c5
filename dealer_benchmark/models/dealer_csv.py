"""
Parsed dealer CSV models — the typed boundary between raw CSV text and scoring.

A dealer export has one row per KPI with dynamically-named value columns
(``MYDEALER_CY``, ``B_Class_CY``, ``ABC-Moto_CY`` ...).  After column
detection every row is reduced to the same fixed schema, ``ParsedCsvRow``,
whose numeric fields are always present and default to ``0.0``.

``percent_of_class`` and ``percent_of_national`` are ratios as exported
(dealer value / benchmark value), never pre-multiplied by 100.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ParsedCsvRow(BaseModel):
    """One KPI row after column-role extraction."""

    model_config = ConfigDict(frozen=True)

    department: str = ""
    description: str = ""
    current_value: float = 0.0
    yoy_change_absolute: float = 0.0
    yoy_change_percent: float = 0.0
    class_average: float = 0.0
    class_yoy_change: float = 0.0
    percent_of_class: float = 0.0
    national_average: float = 0.0
    national_yoy_change: float = 0.0
    percent_of_national: float = 0.0

    @property
    def prior_year_value(self) -> float:
        """Derived prior-year value: current minus the absolute YoY change."""
        return self.current_value - self.yoy_change_absolute


class ParsedDealerCsv(BaseModel):
    """A whole dealer export: identity, reporting period, and parsed rows.

    Attributes:
        dealer_code: Dealer column base name with whitespace removed.
        dealer_name: Dealer code, suffixed with the national brand base when
            the code does not already contain it.
        period_start: Reporting period start, e.g. ``"January 2025"``.
        period_end: Reporting period end.
        class_label: Benchmark class label, e.g. ``"B-Class"``.
        rows: Every data row in file order (matched or not).
    """

    model_config = ConfigDict(frozen=True)

    dealer_code: str
    dealer_name: str
    period_start: str
    period_end: str
    class_label: str
    rows: tuple[ParsedCsvRow, ...]


class CsvValidationResult(BaseModel):
    """Outcome of the non-raising upload pre-check."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    error: Optional[str] = None
