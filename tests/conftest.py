"""
Shared pytest fixtures for the dealer benchmark test suite.

Provides:
  - ``STANDARD_HEADERS``: a realistic dealer export header row.
  - ``make_csv()``: builds CSV text from row dicts keyed by header.
  - ``sample_csv_text``: a three-row export (two catalog KPIs + one unknown).
  - ``net_sales_catalog``: a one-KPI catalog (``Net Sales``, ruleset A).
"""

from __future__ import annotations

import csv
import io

import pytest

from dealer_benchmark.catalog.kpi_catalog import KpiCatalog
from dealer_benchmark.models.kpi import KpiDefinition
from dealer_benchmark.taxonomy.benchmark_taxonomy import DataFormat, DepartmentCode, RulesetId

STANDARD_HEADERS = [
    "Start_Date", "End_Date", "Department", "Description",
    "MYDEALER_CY", "MYDEALER_CY_vs_LY", "MYDEALER_YoY_Change",
    "B_Class_CY", "B_Class_CY_vs_LY", "B_class_%_of_Class",
    "ABC-Moto_CY", "ABC-Moto_CY_vs_LY", "ABC-Moto_%_of_Nat_Avg",
]


def make_csv(rows: list[dict], headers: list[str] | None = None) -> str:
    """Render ``rows`` as CSV text; missing keys become blank cells."""
    headers = headers or STANDARD_HEADERS
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=headers, restval="", lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue()


def make_row(description: str, **values) -> dict:
    """One data row for ``STANDARD_HEADERS`` with period 25-Jan..25-Dec."""
    row = {
        "Start_Date": "25-Jan",
        "End_Date": "25-Dec",
        "Department": "Overall",
        "Description": description,
    }
    row.update(values)
    return row


# ── CSV fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture
def sample_csv_text() -> str:
    """Dealer export with two catalog KPIs and one unknown description."""
    return make_csv([
        make_row(
            "Total Absorption",
            **{
                "MYDEALER_CY": "1.1", "MYDEALER_CY_vs_LY": "0.1",
                "MYDEALER_YoY_Change": "0.1",
                "B_Class_CY": "1.0", "B_Class_CY_vs_LY": "0.05",
                "B_class_%_of_Class": "1.1",
                "ABC-Moto_CY": "0.95", "ABC-Moto_CY_vs_LY": "0.02",
                "ABC-Moto_%_of_Nat_Avg": "1.157",
            },
        ),
        make_row(
            "Current Ratio",
            **{"MYDEALER_CY": "2.9", "B_Class_CY": "1.6", "B_class_%_of_Class": "1.81"},
        ),
        make_row("Some Unlisted Metric", **{"MYDEALER_CY": "5"}),
    ])


# ── Catalog fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def net_sales_catalog() -> KpiCatalog:
    """Minimal catalog with one ruleset-A currency KPI described as ``Net Sales``."""
    return KpiCatalog([
        KpiDefinition(
            kpi_code="NET_SALES",
            kpi_name="Net Sales",
            csv_description="Net Sales",
            department=DepartmentCode.OVERALL,
            data_format=DataFormat.CURRENCY,
            higher_is_better=True,
            ruleset=RulesetId.A,
            display_order=1,
        )
    ])


# ── Builders (exposed as fixtures; importlib mode keeps conftest off sys.path) ─

@pytest.fixture
def standard_headers() -> list[str]:
    return list(STANDARD_HEADERS)


@pytest.fixture
def build_csv():
    """Return ``make_csv`` so tests can render their own rows."""
    return make_csv


@pytest.fixture
def build_row():
    """Return ``make_row`` so tests can build rows for ``STANDARD_HEADERS``."""
    return make_row
