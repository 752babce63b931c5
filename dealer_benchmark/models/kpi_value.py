"""
Assembled KPI value records — what the pipeline hands to its collaborators.

Three shapes are produced for every matched CSV row:

  ``KpiValueRecord``         — dealer-specific values stored per dealer-upload.
  ``BenchmarkContextRecord`` — class/national figures.  These are period-level
                               facts shared by every dealer in the same period,
                               so they are stored once per period.
  ``ReportKpiValue``         — the denormalized record a report renderer needs:
                               dealer values, catalog metadata and benchmark
                               context inlined together.

All three are immutable once assembled.  Regenerating a report reuses them;
only narrative is recomputed.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from dealer_benchmark.taxonomy.benchmark_taxonomy import (
    BenchmarkScore,
    DataFormat,
    DepartmentCode,
)


class KpiValueRecord(BaseModel):
    """Dealer-specific KPI values for persistence (no benchmark context)."""

    model_config = ConfigDict(frozen=True)

    kpi_code: str
    current_value: float
    prior_year_value: float
    yoy_change_absolute: float
    yoy_change_percent: float
    percent_of_class: float
    percent_of_national: float
    benchmark_score: BenchmarkScore


class BenchmarkContextRecord(BaseModel):
    """Benchmark-class and national figures for one KPI in one period."""

    model_config = ConfigDict(frozen=True)

    kpi_code: str
    class_average: float
    class_yoy_change: float
    national_average: float
    national_yoy_change: float


class ReportKpiValue(BaseModel):
    """Report-ready KPI record with benchmark context inlined."""

    model_config = ConfigDict(frozen=True)

    kpi_code: str
    kpi_name: str
    csv_description: str
    department: DepartmentCode
    data_format: DataFormat
    higher_is_better: bool
    benchmark_min: Optional[float] = None
    benchmark_max: Optional[float] = None
    class_label: str

    current_value: float
    prior_year_value: float
    yoy_change_absolute: float
    yoy_change_percent: float
    class_average: float
    class_yoy_change: float
    percent_of_class: float
    national_average: float
    national_yoy_change: float
    percent_of_national: float
    benchmark_score: BenchmarkScore


class AssembledDealerKpis(BaseModel):
    """Everything produced from one dealer CSV, ready for persistence and rendering.

    The three lists are index-aligned: entry ``i`` of each describes the same
    matched CSV row.
    """

    model_config = ConfigDict(frozen=True)

    dealer_code: str
    dealer_name: str
    period_start: str
    period_end: str
    class_label: str
    report_values: tuple[ReportKpiValue, ...] = ()
    stored_values: tuple[KpiValueRecord, ...] = ()
    benchmark_context: tuple[BenchmarkContextRecord, ...] = ()
    unmatched_descriptions: tuple[str, ...] = ()

    @property
    def period_key(self) -> tuple[str, str]:
        return (self.period_start, self.period_end)
