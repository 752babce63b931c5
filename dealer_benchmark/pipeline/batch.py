"""
Batch orchestration for multi-file dealer CSV uploads.

``process_batch`` runs every upload through parse → match → score → assemble
in submission order.

Failure isolation
-----------------
- A ``DealerCsvError`` from one file (not UTF-8, empty file, missing columns,
  ragged rows, no dealer column) is recorded on that file's ``FileOutcome`` with
  ``status="failed"``; the remaining files are still processed.
- Any other exception is a programming error and propagates.

Benchmark snapshots
-------------------
Class and national figures are period-level facts.  The first successfully
extracted dealer for each ``(period_start, period_end)`` supplies that
period's snapshot; later dealers in the same period do not overwrite it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional
from uuid import uuid4

from dealer_benchmark.catalog.kpi_catalog import DEFAULT_CATALOG, KpiCatalog
from dealer_benchmark.config import DetectionConfig
from dealer_benchmark.errors import DealerCsvError
from dealer_benchmark.ingestion.dealer_csv import parse_dealer_csv
from dealer_benchmark.models.batch import BatchRun, CsvUpload, FileOutcome
from dealer_benchmark.pipeline.assembler import assemble_kpi_values
from dealer_benchmark.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def process_batch(
    uploads: Iterable[CsvUpload],
    catalog: Optional[KpiCatalog] = None,
    detection: Optional[DetectionConfig] = None,
) -> BatchRun:
    """Process a batch of dealer CSV uploads independently.

    Args:
        uploads:   Files to process, in submission order.
        catalog:   KPI catalog (defaults to ``DEFAULT_CATALOG``).
        detection: Column-detection settings (defaults to ``DetectionConfig()``).

    Returns:
        Finalized ``BatchRun`` with one outcome per upload and the
        deduplicated benchmark snapshots.
    """
    catalog = DEFAULT_CATALOG if catalog is None else catalog
    detection = detection or DetectionConfig()

    run = BatchRun(run_slug=str(uuid4()), started_at=utcnow())
    logger.info("Batch starting", extra={"run_slug": run.run_slug})

    for upload in uploads:
        outcome = process_upload(upload, catalog, detection, run_slug=run.run_slug)
        run.outcomes.append(outcome)

        if outcome.result is None:
            continue
        period = outcome.result.period_key
        if period not in run.benchmark_snapshots:
            run.benchmark_snapshots[period] = outcome.result.benchmark_context
        else:
            logger.debug(
                "Benchmark snapshot for %s already stored; %s not reused.",
                period, outcome.file_name,
            )

    run.status = _final_status(len(run.succeeded), len(run.failed))
    run.finished_at = utcnow()
    logger.info(
        "Batch %s | extracted=%d | failed=%d | periods=%d",
        run.status, len(run.succeeded), len(run.failed), len(run.benchmark_snapshots),
        extra={"run_slug": run.run_slug},
    )
    return run


def process_upload(
    upload: CsvUpload,
    catalog: KpiCatalog,
    detection: DetectionConfig,
    run_slug: Optional[str] = None,
) -> FileOutcome:
    """Parse and assemble one upload; structural failures become a failed outcome."""
    try:
        parsed = parse_dealer_csv(
            upload.content,
            national_prefix=detection.national_prefix,
            default_class_label=detection.default_class_label,
        )
    except DealerCsvError as exc:
        logger.warning(
            "File %s FAILED: %s", upload.file_name, exc,
            extra={"run_slug": run_slug, "file_name": upload.file_name},
        )
        return FileOutcome(file_name=upload.file_name, status="failed", error_message=str(exc))

    result = assemble_kpi_values(parsed, catalog)
    return FileOutcome(file_name=upload.file_name, status="extracted", result=result)


def load_upload(path: Path) -> CsvUpload:
    """Read a CSV file from disk into a ``CsvUpload``.

    The raw bytes are kept; decoding happens in ``process_upload`` so an
    encoding problem fails only this file.
    """
    return CsvUpload(file_name=path.name, content=path.read_bytes())


def _final_status(succeeded: int, failed: int) -> str:
    if succeeded and not failed:
        return "completed"
    if succeeded:
        return "partial"
    return "failed"
