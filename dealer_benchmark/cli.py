"""
Dealer benchmark — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (catalog listing, CSV validation, batch scoring).
  5. Report result to stdout.

Install and run::

    pip install -e .
    dealer-benchmark --help
    dealer-benchmark validate-config
    dealer-benchmark list-kpis --department service
    dealer-benchmark validate-csv exports/*.csv
    dealer-benchmark score exports/*.csv --export-dir data/exports --format csv
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="dealer-benchmark",
    help="Dealer KPI benchmark scoring — CSV normalization and tier classification.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from dealer_benchmark.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from dealer_benchmark.utils.logging import configure_logging
    configure_logging(config.logging)


def _parse_department_or_exit(department: Optional[str]):
    from dealer_benchmark.taxonomy.benchmark_taxonomy import DepartmentCode

    if department is None:
        return None
    try:
        return DepartmentCode(department.lower())
    except ValueError:
        valid = ", ".join(d.value for d in DepartmentCode)
        typer.echo(f"[ERROR] Unknown department '{department}'. Valid: {valid}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  National prefix:  {config.detection.national_prefix}")
    typer.echo(f"  Default class:    {config.detection.default_class_label}")
    typer.echo(f"  Export dir:       {config.export.export_dir}")
    typer.echo(f"  Export format:    {config.export.default_format}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("list-kpis")
def list_kpis(
    department: Optional[str] = typer.Option(
        None,
        "--department",
        help="Only list KPIs for this department code (e.g. service, fi).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """List the KPI catalog with rulesets, formats and benchmark bounds."""
    from dealer_benchmark.catalog.kpi_catalog import DEFAULT_CATALOG
    from dealer_benchmark.reporting.formatters import format_kpi_catalog

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    dept = _parse_department_or_exit(department)

    definitions = (
        DEFAULT_CATALOG.kpis_for_department(dept) if dept else DEFAULT_CATALOG.definitions
    )
    typer.echo(format_kpi_catalog(definitions))
    typer.echo("")
    typer.echo(f"[OK] {len(definitions)} KPIs listed.")


@app.command("validate-csv")
def validate_csv(
    files: list[Path] = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Dealer CSV export(s) to check.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Check that each CSV has the required headers and a class column.

    Exits with code 1 if any file fails.
    """
    from dealer_benchmark.ingestion.dealer_csv import validate_csv_structure

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    failures = 0
    for path in files:
        result = validate_csv_structure(path.read_bytes())
        if result.valid:
            typer.echo(f"  [OK]    {path.name}")
        else:
            failures += 1
            typer.echo(f"  [FAIL]  {path.name}: {result.error}")

    typer.echo("")
    if failures:
        typer.echo(f"[ERROR] {failures} of {len(files)} file(s) failed validation.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"[OK] {len(files)} file(s) valid.")


@app.command("score")
def score(
    files: list[Path] = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Dealer CSV export(s) to score.",
    ),
    department: Optional[str] = typer.Option(
        None,
        "--department",
        help="Only show KPIs for this department code.",
    ),
    export_dir: Optional[str] = typer.Option(
        None,
        "--export-dir",
        help="Write one export file per dealer to this directory.",
    ),
    export: bool = typer.Option(
        False,
        "--export",
        help="Export to the configured export_dir (implied by --export-dir).",
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format",
        help="Export format: json or csv (default from config).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Parse, match and score dealer CSVs, then print one table per dealer.

    Each file is processed independently; a failing file does not stop the
    others.  Exits with code 1 if any file fails.
    """
    from dealer_benchmark.catalog.kpi_catalog import DEFAULT_CATALOG
    from dealer_benchmark.pipeline.batch import load_upload, process_batch
    from dealer_benchmark.reporting.export import export_batch
    from dealer_benchmark.reporting.formatters import format_batch_summary, format_kpi_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    dept = _parse_department_or_exit(department)

    export_format = (fmt or config.export.default_format).lower()
    if export_format not in ("json", "csv"):
        typer.echo(f"[ERROR] Unknown export format '{fmt}'. Use json or csv.", err=True)
        raise typer.Exit(code=1)

    uploads = [load_upload(path) for path in files]
    run = process_batch(uploads, catalog=DEFAULT_CATALOG, detection=config.detection)

    for outcome in run.succeeded:
        typer.echo(format_kpi_table(outcome.result, department=dept))
    typer.echo(format_batch_summary(run))

    target_dir = export_dir or (config.export.export_dir if export else None)
    if target_dir is not None and run.succeeded:
        written = export_batch(run, Path(target_dir), fmt=export_format)
        typer.echo("")
        for path in written:
            typer.echo(f"  Exported: {path}")

    typer.echo("")
    if run.failed:
        typer.echo(
            f"[ERROR] {len(run.failed)} of {len(run.outcomes)} file(s) failed.", err=True
        )
        raise typer.Exit(code=1)
    typer.echo(f"[OK] {len(run.succeeded)} file(s) scored.")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
