"""
Report value assembly: parsed CSV rows → scored, catalog-resolved KPI values.

Each parsed row is matched to a catalog definition by normalized description.
A matched row yields three index-aligned records (see
``dealer_benchmark.models.kpi_value``).  Rows that match nothing are dropped;
their descriptions are kept on the result for diagnostics.
"""

from __future__ import annotations

import logging

from dealer_benchmark.catalog.kpi_catalog import KpiCatalog
from dealer_benchmark.models.dealer_csv import ParsedCsvRow, ParsedDealerCsv
from dealer_benchmark.models.kpi import KpiDefinition
from dealer_benchmark.models.kpi_value import (
    AssembledDealerKpis,
    BenchmarkContextRecord,
    KpiValueRecord,
    ReportKpiValue,
)
from dealer_benchmark.scoring.engine import score_kpi

logger = logging.getLogger(__name__)


def assemble_kpi_values(parsed: ParsedDealerCsv, catalog: KpiCatalog) -> AssembledDealerKpis:
    """Resolve, score and reshape every row of one parsed dealer CSV.

    Args:
        parsed:  Output of ``parse_dealer_csv``.
        catalog: KPI catalog to match descriptions against.

    Returns:
        ``AssembledDealerKpis`` with one entry per matched row, in CSV order.
    """
    report_values: list[ReportKpiValue] = []
    stored_values: list[KpiValueRecord] = []
    context: list[BenchmarkContextRecord] = []
    unmatched: list[str] = []

    for row in parsed.rows:
        definition = catalog.match_description(row.description)
        if definition is None:
            logger.debug("No catalog KPI for description %r; row skipped.", row.description)
            unmatched.append(row.description)
            continue

        report, stored, ctx = build_kpi_records(definition, row, parsed.class_label)
        report_values.append(report)
        stored_values.append(stored)
        context.append(ctx)

    logger.info(
        "Assembled %d KPI values for dealer %s (%d unmatched rows)",
        len(report_values), parsed.dealer_code, len(unmatched),
    )
    return AssembledDealerKpis(
        dealer_code=parsed.dealer_code,
        dealer_name=parsed.dealer_name,
        period_start=parsed.period_start,
        period_end=parsed.period_end,
        class_label=parsed.class_label,
        report_values=tuple(report_values),
        stored_values=tuple(stored_values),
        benchmark_context=tuple(context),
        unmatched_descriptions=tuple(unmatched),
    )


def build_kpi_records(
    definition: KpiDefinition,
    row: ParsedCsvRow,
    class_label: str,
) -> tuple[ReportKpiValue, KpiValueRecord, BenchmarkContextRecord]:
    """Build the report, storage and benchmark-context records for one row."""
    benchmark_score = score_kpi(definition, row)
    prior_year_value = row.prior_year_value

    report = ReportKpiValue(
        kpi_code=definition.kpi_code,
        kpi_name=definition.kpi_name,
        csv_description=row.description.strip(),
        department=definition.department,
        data_format=definition.data_format,
        higher_is_better=definition.higher_is_better,
        benchmark_min=definition.benchmark_min,
        benchmark_max=definition.benchmark_max,
        class_label=class_label,
        current_value=row.current_value,
        prior_year_value=prior_year_value,
        yoy_change_absolute=row.yoy_change_absolute,
        yoy_change_percent=row.yoy_change_percent,
        class_average=row.class_average,
        class_yoy_change=row.class_yoy_change,
        percent_of_class=row.percent_of_class,
        national_average=row.national_average,
        national_yoy_change=row.national_yoy_change,
        percent_of_national=row.percent_of_national,
        benchmark_score=benchmark_score,
    )
    stored = KpiValueRecord(
        kpi_code=definition.kpi_code,
        current_value=row.current_value,
        prior_year_value=prior_year_value,
        yoy_change_absolute=row.yoy_change_absolute,
        yoy_change_percent=row.yoy_change_percent,
        percent_of_class=row.percent_of_class,
        percent_of_national=row.percent_of_national,
        benchmark_score=benchmark_score,
    )
    ctx = BenchmarkContextRecord(
        kpi_code=definition.kpi_code,
        class_average=row.class_average,
        class_yoy_change=row.class_yoy_change,
        national_average=row.national_average,
        national_yoy_change=row.national_yoy_change,
    )
    return report, stored, ctx
