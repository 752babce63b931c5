"""
Export helpers for scored KPI values.

All functions write to disk and return the written ``Path``.
``export_to_csv`` and ``export_to_json`` accept generic ``list[dict]`` data
to stay decoupled from specific record shapes.

CSV exports are flat (no nested dicts) so they load directly in Excel or
any BI tool without pre-processing.

``flatten_kpi_values_for_export()`` is the adapter: one row per scored KPI
with dealer and period metadata repeated on every row.
"""

from __future__ import annotations

import csv
import json
import re
from pathlib import Path

from dealer_benchmark.models.batch import BatchRun
from dealer_benchmark.models.kpi_value import AssembledDealerKpis

EXPORT_FIELDNAMES = [
    "dealer_code", "dealer_name", "period_start", "period_end", "class_label",
    "department", "kpi_code", "kpi_name", "csv_description", "data_format",
    "higher_is_better", "benchmark_min", "benchmark_max",
    "current_value", "prior_year_value", "yoy_change_absolute", "yoy_change_percent",
    "class_average", "class_yoy_change", "percent_of_class",
    "national_average", "national_yoy_change", "percent_of_national",
    "benchmark_score", "benchmark_label",
]

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records and not fieldnames:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def flatten_kpi_values_for_export(assembled: AssembledDealerKpis) -> list[dict]:
    """Flatten one dealer's report values into export rows.

    Each row carries the ``EXPORT_FIELDNAMES`` keys.  ``benchmark_score`` is
    the tier's machine value (``"great"``); ``benchmark_label`` is its
    display label (``"Great"``, ``"N/A"``).
    """
    rows: list[dict] = []
    for v in assembled.report_values:
        row = v.model_dump(mode="json")
        row.update(
            dealer_code=assembled.dealer_code,
            dealer_name=assembled.dealer_name,
            period_start=assembled.period_start,
            period_end=assembled.period_end,
            benchmark_label=v.benchmark_score.label,
        )
        rows.append({key: row.get(key) for key in EXPORT_FIELDNAMES})
    return rows


def export_batch(run: BatchRun, export_dir: Path, fmt: str = "json") -> list[Path]:
    """Write one export file per extracted dealer.

    Files are named ``<dealer_code>_<period_start>_<period_end>.<fmt>``.  When
    two outcomes in the run map to the same name (the same export uploaded
    twice), later ones get a ``_2``, ``_3``, ... suffix, so no outcome
    overwrites another.  JSON exports wrap the rows with the batch ``run_slug``.

    Args:
        run:        Finalized batch run.
        export_dir: Output directory (created if missing).
        fmt:        ``"json"`` or ``"csv"``.

    Returns:
        Paths written, in outcome order.
    """
    written: list[Path] = []
    used_stems: set[str] = set()
    for outcome in run.succeeded:
        assembled = outcome.result
        rows = flatten_kpi_values_for_export(assembled)
        stem = _unique_stem(
            _safe_filename(
                f"{assembled.dealer_code}_{assembled.period_start}_{assembled.period_end}"
            ),
            used_stems,
        )
        if fmt == "csv":
            written.append(export_to_csv(rows, export_dir / f"{stem}.csv", EXPORT_FIELDNAMES))
        else:
            payload = {
                "run_slug":    run.run_slug,
                "source_file": outcome.file_name,
                "dealer_code": assembled.dealer_code,
                "period":      list(assembled.period_key),
                "kpi_values":  rows,
            }
            written.append(export_to_json(payload, export_dir / f"{stem}.json"))
    return written


def _safe_filename(stem: str) -> str:
    return _UNSAFE_FILENAME_RE.sub("_", stem).strip("_") or "dealer"


def _unique_stem(stem: str, used: set[str]) -> str:
    # Case-folded so D1 and d1 do not collide on case-insensitive filesystems.
    candidate, n = stem, 1
    while candidate.lower() in used:
        n += 1
        candidate = f"{stem}_{n}"
    used.add(candidate.lower())
    return candidate
