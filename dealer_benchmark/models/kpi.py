"""
KPI catalog models — the static definitions CSV rows are matched against.

``KpiDefinition`` is one canonical KPI: its matching description, value
format, polarity, ruleset assignment and optional benchmark bounds.

``ReportGrouping`` lists the KPI codes rendered in one department report.

``RulesetDefinition`` is descriptive metadata for one scoring ruleset; the
executable thresholds live in ``dealer_benchmark.scoring.rulesets``.

All models are frozen: the catalog is loaded once and never mutated.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from dealer_benchmark.taxonomy.benchmark_taxonomy import DataFormat, DepartmentCode, RulesetId


class BenchmarkBounds(BaseModel):
    """Absolute [minimum, maximum] thresholds for the bounded rulesets (F, G)."""

    model_config = ConfigDict(frozen=True)

    minimum: float
    maximum: float

    @model_validator(mode="after")
    def validate_ordering(self) -> "BenchmarkBounds":
        if self.minimum > self.maximum:
            raise ValueError(
                f"Benchmark minimum ({self.minimum}) must be <= maximum ({self.maximum})."
            )
        return self

    @classmethod
    def from_optional(
        cls,
        minimum: Optional[float],
        maximum: Optional[float],
    ) -> Optional["BenchmarkBounds"]:
        """Return bounds only when both ends are present, else ``None``."""
        if minimum is None or maximum is None:
            return None
        return cls(minimum=minimum, maximum=maximum)


class KpiDefinition(BaseModel):
    """One canonical KPI in the catalog.

    Attributes:
        kpi_code: Unique machine key, e.g. ``"CURRENT_RATIO"``.
        kpi_name: Display name used in reports.
        csv_description: Description text as it appears in dealer CSV exports.
            Matched after ``normalize_csv_description()``.
        department: Owning department (drives report grouping).
        data_format: How the raw value is interpreted downstream.
        higher_is_better: Polarity used by narrative layers.
        ruleset: Scoring ruleset assigned to this KPI.
        bounds: Absolute thresholds for rulesets F/G; ``None`` otherwise.
        display_order: 1-based order within the department report.
    """

    model_config = ConfigDict(frozen=True)

    kpi_code: str
    kpi_name: str
    csv_description: str
    department: DepartmentCode
    data_format: DataFormat
    higher_is_better: bool
    ruleset: RulesetId = RulesetId.UNSCORED
    bounds: Optional[BenchmarkBounds] = None
    display_order: int = 0

    @field_validator("kpi_code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        if not v or v != v.strip() or " " in v:
            raise ValueError(f"kpi_code must be a non-empty token without spaces, got '{v}'.")
        return v

    @property
    def benchmark_min(self) -> Optional[float]:
        return self.bounds.minimum if self.bounds is not None else None

    @property
    def benchmark_max(self) -> Optional[float]:
        return self.bounds.maximum if self.bounds is not None else None


class ReportGrouping(BaseModel):
    """One department report layout and the KPI codes it renders, in order."""

    model_config = ConfigDict(frozen=True)

    report_code: str
    report_id: str
    title: str
    department: DepartmentCode
    kpi_codes: tuple[str, ...]


class RulesetDefinition(BaseModel):
    """Descriptive metadata for a scoring ruleset."""

    model_config = ConfigDict(frozen=True)

    ruleset_id: RulesetId
    name: str
    description: str
    logic: str
    is_scored: bool = True
