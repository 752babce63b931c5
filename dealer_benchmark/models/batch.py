"""
Batch run models — the audit trail for one multi-file upload.

``CsvUpload`` is one input file: its name plus either decoded text or the
raw file bytes.  Bytes are decoded per file during processing, so a file
with a bad encoding fails on its own.

``FileOutcome`` records what happened to one file.  A failed file carries
its error message and no KPI values; it never affects its siblings.

``BatchRun`` is the only mutable model here: ``status``, ``finished_at``
and the per-file outcomes are filled in as the batch executes.  Benchmark
snapshots are keyed by ``(period_start, period_end)`` and stored once per
period, so dealers sharing a period share one snapshot.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from dealer_benchmark.models.kpi_value import AssembledDealerKpis, BenchmarkContextRecord

VALID_FILE_STATUSES = frozenset({"pending", "extracted", "failed"})
VALID_BATCH_STATUSES = frozenset({"started", "completed", "partial", "failed"})


class CsvUpload(BaseModel):
    """One dealer CSV file submitted in a batch."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    content: Union[str, bytes]


class FileOutcome(BaseModel):
    """Processing result for one uploaded file.

    Attributes:
        file_name: Name of the uploaded file.
        status: ``"extracted"`` on success, ``"failed"`` otherwise.
        error_message: Failure description when ``status == "failed"``.
        result: Assembled KPI values when extraction succeeded.
    """

    model_config = ConfigDict(frozen=True)

    file_name: str
    status: str = "pending"
    error_message: Optional[str] = None
    result: Optional[AssembledDealerKpis] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in VALID_FILE_STATUSES:
            raise ValueError(
                f"Unknown file status '{v}'. Must be one of {sorted(VALID_FILE_STATUSES)}."
            )
        return v


class BatchRun(BaseModel):
    """Execution record for one batch of dealer CSV uploads.

    Attributes:
        run_slug: UUID4 string identifying this batch.
        status: ``"completed"`` when every file extracted, ``"partial"`` when
            some failed, ``"failed"`` when all failed (or the batch was empty).
        outcomes: One ``FileOutcome`` per upload, in submission order.
        benchmark_snapshots: Period key → benchmark context, first dealer wins.
        started_at: UTC datetime when the batch began.
        finished_at: UTC datetime when the batch completed.
    """

    # Not frozen: status and outcomes are filled in during execution
    model_config = ConfigDict(frozen=False)

    run_slug: str
    status: str = "started"
    outcomes: list[FileOutcome] = []
    benchmark_snapshots: dict[tuple[str, str], tuple[BenchmarkContextRecord, ...]] = {}
    started_at: datetime
    finished_at: Optional[datetime] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in VALID_BATCH_STATUSES:
            raise ValueError(
                f"Unknown status '{v}'. Must be one of {sorted(VALID_BATCH_STATUSES)}."
            )
        return v

    @property
    def succeeded(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.status == "extracted"]

    @property
    def failed(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.status == "failed"]
