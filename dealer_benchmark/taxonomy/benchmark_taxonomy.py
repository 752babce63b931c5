"""
Benchmark taxonomy for dealer KPI scoring.

Four enums describe every scored KPI:
  - ``BenchmarkScore`` — the *outcome*: which tier did the KPI land in?
  - ``RulesetId``      — the *how*: which scoring ruleset applies?
  - ``DataFormat``     — the *shape* of the raw value (currency, ratio, ...).
  - ``DepartmentCode`` — the *where*: which dealership department owns it?

Not every ruleset can produce every tier.  ``BenchmarkScore.rank`` gives a
total order for comparing tiers (higher rank = better performance); ``NA``
ranks below every scored tier.

Usage example::

    from dealer_benchmark.taxonomy.benchmark_taxonomy import BenchmarkScore, RulesetId

    ruleset = RulesetId.A
    tier    = BenchmarkScore.GREAT

This module has NO imports from any other ``dealer_benchmark`` package.
"""

from enum import StrEnum


class BenchmarkScore(StrEnum):
    """Discrete qualitative tier assigned to a KPI by its ruleset."""

    EXCEPTIONAL = "exceptional"
    """Top tier for rulesets A, B and E."""

    EXCELLENT = "excellent"
    """Top tier for the min/max department rulesets (F, G)."""

    GREAT = "great"
    """Second tier for ruleset A; top tier for market position (C)."""

    GOOD = "good"
    """Above-benchmark performance."""

    ACCEPTABLE = "acceptable"
    """In line with the benchmark class."""

    WEAK = "weak"
    """Slightly below benchmark."""

    SUBSTANDARD = "substandard"
    """Bottom tier for every ruleset except C."""

    POOR = "poor"
    """Bottom tier for market position (C)."""

    NA = "na"
    """Unscored KPI, or a bounded ruleset with no bounds configured."""

    @property
    def label(self) -> str:
        """Human-readable label used by report layouts."""
        return _SCORE_LABELS[self]

    @property
    def rank(self) -> int:
        """Ordinal rank; higher is better.  ``NA`` is 0."""
        return _SCORE_RANKS[self]


_SCORE_LABELS: dict[BenchmarkScore, str] = {
    BenchmarkScore.EXCEPTIONAL: "Exceptional",
    BenchmarkScore.EXCELLENT:   "Excellent",
    BenchmarkScore.GREAT:       "Great",
    BenchmarkScore.GOOD:        "Good",
    BenchmarkScore.ACCEPTABLE:  "Acceptable",
    BenchmarkScore.WEAK:        "Weak",
    BenchmarkScore.SUBSTANDARD: "Substandard",
    BenchmarkScore.POOR:        "Poor",
    BenchmarkScore.NA:          "N/A",
}

# Substandard and Poor never appear in the same ruleset; both are the floor.
_SCORE_RANKS: dict[BenchmarkScore, int] = {
    BenchmarkScore.EXCEPTIONAL: 7,
    BenchmarkScore.EXCELLENT:   6,
    BenchmarkScore.GREAT:       5,
    BenchmarkScore.GOOD:        4,
    BenchmarkScore.ACCEPTABLE:  3,
    BenchmarkScore.WEAK:        2,
    BenchmarkScore.SUBSTANDARD: 1,
    BenchmarkScore.POOR:        1,
    BenchmarkScore.NA:          0,
}


class RulesetId(StrEnum):
    """Identifier of the scoring ruleset assigned to a KPI."""

    UNSCORED = "ZZZ"
    """Comparison data only; always scores ``NA``."""

    A = "A"
    """Overall income-type, scored on percent of benchmark class."""

    B = "B"
    """Overall expense-type, scored on percent of benchmark class (lower is better)."""

    C = "C"
    """Market position, scored on percent of benchmark class."""

    D = "D"
    """Current ratio, scored on the absolute value (too high is also bad)."""

    E = "E"
    """Return on operating assets, simplified percent-of-class bands."""

    F = "F"
    """Department income-type, absolute value against [min, max] bounds."""

    G = "G"
    """Department expense-type, absolute value against [min, max] bounds."""


class DataFormat(StrEnum):
    """How a KPI's raw value should be interpreted by presentation layers."""

    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    RATIO = "ratio"
    COUNT = "count"
    SCORE = "score"


class DepartmentCode(StrEnum):
    """Dealership department that owns a KPI and its department report."""

    OVERALL = "overall"
    NEW_VEHICLE = "new_vehicle"
    USED_VEHICLE = "used_vehicle"
    FI = "fi"
    PA = "pa"
    AL = "al"
    SERVICE = "service"

    @property
    def display_name(self) -> str:
        return DEPARTMENT_NAMES[self]


DEPARTMENT_NAMES: dict[DepartmentCode, str] = {
    DepartmentCode.OVERALL:      "Financial Performance",
    DepartmentCode.NEW_VEHICLE:  "New Vehicle Sales",
    DepartmentCode.USED_VEHICLE: "Used Vehicle Sales",
    DepartmentCode.FI:           "F&I Sales",
    DepartmentCode.PA:           "P&A Sales",
    DepartmentCode.AL:           "A&L Sales",
    DepartmentCode.SERVICE:      "Service Sales",
}
