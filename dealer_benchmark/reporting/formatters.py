"""
ASCII terminal formatters for CLI reporting commands.

All formatters return plain multi-line strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Value display
-------------
``format_value()`` renders a number according to the KPI's data format::

  currency     $12,345
  percentage   13.4%      (values are ratios: 0.134 → 13.4%)
  ratio        1.85
  count        1,204
  score        72.5
"""

from __future__ import annotations

from typing import Iterable, Optional

from dealer_benchmark.models.batch import BatchRun
from dealer_benchmark.models.kpi import KpiDefinition
from dealer_benchmark.models.kpi_value import AssembledDealerKpis, ReportKpiValue
from dealer_benchmark.taxonomy.benchmark_taxonomy import DataFormat, DepartmentCode


# ── Value formatting ─────────────────────────────────────────────────────────


def format_value(value: Optional[float], data_format: DataFormat) -> str:
    """Render ``value`` for display according to ``data_format``."""
    if value is None:
        return "-"
    if data_format == DataFormat.CURRENCY:
        sign = "-" if value < 0 else ""
        return f"{sign}${abs(value):,.0f}"
    if data_format == DataFormat.PERCENTAGE:
        return f"{value:.1%}"
    if data_format == DataFormat.COUNT:
        return f"{value:,.0f}"
    if data_format == DataFormat.SCORE:
        return f"{value:.1f}"
    return f"{value:.2f}"


def format_bounds(definition: KpiDefinition) -> str:
    if definition.bounds is None:
        return ""
    return (
        f"{format_value(definition.benchmark_min, definition.data_format)}"
        f"..{format_value(definition.benchmark_max, definition.data_format)}"
    )


# ── KPI value table ──────────────────────────────────────────────────────────


def format_kpi_table(
    assembled: AssembledDealerKpis,
    department: Optional[DepartmentCode] = None,
) -> str:
    """Format one dealer's scored KPI values as an ASCII table.

    Columns: KPI, current, prior year, YoY %, class average, % of class,
    benchmark tier.

    Args:
        assembled:  Output of ``assemble_kpi_values``.
        department: Optional department filter.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== {assembled.dealer_name} ===")
    lines.append(f"  Dealer code: {assembled.dealer_code}")
    lines.append(f"  Period:      {assembled.period_start} - {assembled.period_end}")
    lines.append(f"  Class:       {assembled.class_label}")

    values: Iterable[ReportKpiValue] = assembled.report_values
    if department is not None:
        lines.append(f"  Department:  {department.display_name}")
        values = [v for v in values if v.department == department]
    values = list(values)

    if not values:
        lines.append("")
        lines.append("  (no catalog KPIs matched)")
        return "\n".join(lines)

    lines.append("")
    header = (
        f"  {'KPI':<40}  {'Current':>12}  {'Prior Yr':>12}  {'YoY':>8}  "
        f"{'Class Avg':>12}  {'% Class':>8}  {'Tier':<11}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    for v in values:
        fmt = v.data_format
        lines.append(
            f"  {v.kpi_name[:40]:<40}  "
            f"{format_value(v.current_value, fmt):>12}  "
            f"{format_value(v.prior_year_value, fmt):>12}  "
            f"{v.yoy_change_percent:>+8.1%}  "
            f"{format_value(v.class_average, fmt):>12}  "
            f"{v.percent_of_class:>8.1%}  "
            f"{v.benchmark_score.label:<11}"
        )

    if assembled.unmatched_descriptions:
        lines.append(
            f"  ... {len(assembled.unmatched_descriptions)} CSV rows matched no catalog KPI"
        )

    return "\n".join(lines)


# ── Batch summary ────────────────────────────────────────────────────────────


def format_batch_summary(run: BatchRun) -> str:
    """One line per file plus a status footer."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Batch Summary ===")
    lines.append(f"  Run:    {run.run_slug}")
    lines.append(f"  Status: {run.status}")
    lines.append("")
    for outcome in run.outcomes:
        if outcome.result is not None:
            detail = (
                f"{outcome.result.dealer_code}  "
                f"{len(outcome.result.report_values)} KPIs"
            )
            lines.append(f"  [OK]    {outcome.file_name:<32}  {detail}")
        else:
            lines.append(f"  [FAIL]  {outcome.file_name:<32}  {outcome.error_message}")
    lines.append("")
    lines.append(
        f"  {len(run.succeeded)} extracted, {len(run.failed)} failed, "
        f"{len(run.benchmark_snapshots)} benchmark period(s)"
    )
    return "\n".join(lines)


# ── Catalog listing ──────────────────────────────────────────────────────────


def format_kpi_catalog(definitions: Iterable[KpiDefinition]) -> str:
    """List catalog KPIs grouped by department, in display order."""
    by_dept: dict[DepartmentCode, list[KpiDefinition]] = {}
    for d in definitions:
        by_dept.setdefault(d.department, []).append(d)

    lines: list[str] = []
    for dept in DepartmentCode:
        defs = by_dept.get(dept)
        if not defs:
            continue
        lines.append("")
        lines.append(f"  [{dept.display_name.upper()}]")
        header = f"    {'Code':<34}  {'Rule':<4}  {'Format':<10}  {'Dir':<4}  {'Bounds':<18}"
        lines.append(header)
        lines.append("    " + "-" * (len(header) - 4))
        for d in sorted(defs, key=lambda x: x.display_order):
            direction = "up" if d.higher_is_better else "down"
            lines.append(
                f"    {d.kpi_code:<34}  {d.ruleset.value:<4}  {d.data_format.value:<10}  "
                f"{direction:<4}  {format_bounds(d):<18}"
            )
    return "\n".join(lines)
