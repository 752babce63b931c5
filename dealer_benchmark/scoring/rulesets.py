"""
Ruleset variants for benchmark scoring.

Each ruleset is a frozen variant object carrying exactly the parameters it
needs:

  ``UnscoredRuleset``  — ZZZ; no parameters, always ``NA``.
  ``BandedRuleset``    — A–E; ascending half-open bands over one input
                         (percent of class, or the absolute current value).
  ``BoundedRuleset``   — F, G; three tiers against per-KPI [min, max] bounds.
                         Bounds arrive as ``Optional[BenchmarkBounds]`` and a
                         missing value scores ``NA``.

Band semantics (all banded rulesets)
------------------------------------
Bands are ``(upper_limit, tier)`` pairs in ascending order of
``upper_limit``.  The first band with ``value < upper_limit`` wins; a value
at or above every limit gets ``top_tier``.  Bands cannot overlap.

Ruleset D is deliberately non-monotonic: its ``top_tier`` is SUBSTANDARD,
the same tier as its lowest band.  A current ratio at or above 2.8 means
idle capital, not strength.

Thresholds
----------
    A  <0.93 Substandard | <1.10 Acceptable | <1.20 Great | else Exceptional
    B  <0.90 Exceptional | <0.95 Good | <1.05 Acceptable | <1.15 Weak | else Substandard
    C  <0.90 Poor | <0.95 Weak | <1.05 Acceptable | <1.15 Good | else Great
    D  <0.7 Substandard | <1.0 Weak | <2.0 Acceptable | <2.8 Good | else Substandard
    E  <0.90 Substandard | <1.20 Acceptable | else Exceptional
    F  <min Substandard | <max Good | else Excellent
    G  <min Excellent | <max Good | else Substandard
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, Union

from dealer_benchmark.models.kpi import BenchmarkBounds, RulesetDefinition
from dealer_benchmark.taxonomy.benchmark_taxonomy import BenchmarkScore, RulesetId


class ScoreBasis(StrEnum):
    """Which input a banded ruleset reads."""

    PERCENT_OF_CLASS = "percent_of_class"
    CURRENT_VALUE = "current_value"


@dataclass(frozen=True)
class UnscoredRuleset:
    """Comparison-only KPIs; never scored."""

    ruleset_id: RulesetId = RulesetId.UNSCORED

    def score(self, percent_of_class: float, current_value: float) -> BenchmarkScore:
        return BenchmarkScore.NA


@dataclass(frozen=True)
class BandedRuleset:
    """Ascending half-open bands over a single input.

    Attributes:
        ruleset_id: Which ruleset this is (A–E).
        basis:      Input the bands are evaluated against.
        bands:      ``(upper_limit, tier)`` pairs, strictly ascending limits.
        top_tier:   Tier for values at or above the last limit.
    """

    ruleset_id: RulesetId
    basis: ScoreBasis
    bands: tuple[tuple[float, BenchmarkScore], ...]
    top_tier: BenchmarkScore

    def __post_init__(self) -> None:
        limits = [limit for limit, _ in self.bands]
        if any(b <= a for a, b in zip(limits, limits[1:])):
            raise ValueError(
                f"Ruleset {self.ruleset_id} band limits must be strictly ascending, got {limits}."
            )

    def score(self, percent_of_class: float, current_value: float) -> BenchmarkScore:
        value = percent_of_class if self.basis is ScoreBasis.PERCENT_OF_CLASS else current_value
        return classify_bands(value, self.bands, self.top_tier)


@dataclass(frozen=True)
class BoundedRuleset:
    """Three tiers against per-KPI absolute bounds.

    Attributes:
        ruleset_id:  F or G.
        below_min:   Tier when ``value < minimum``.
        within:      Tier when ``minimum <= value < maximum``.
        at_or_above_max: Tier when ``value >= maximum``.
    """

    ruleset_id: RulesetId
    below_min: BenchmarkScore
    within: BenchmarkScore
    at_or_above_max: BenchmarkScore

    def score(
        self,
        percent_of_class: float,
        current_value: float,
        bounds: Optional[BenchmarkBounds] = None,
    ) -> BenchmarkScore:
        if bounds is None:
            return BenchmarkScore.NA
        return classify_bands(
            current_value,
            ((bounds.minimum, self.below_min), (bounds.maximum, self.within)),
            self.at_or_above_max,
        )


Ruleset = Union[UnscoredRuleset, BandedRuleset, BoundedRuleset]


def classify_bands(
    value: float,
    bands: tuple[tuple[float, BenchmarkScore], ...],
    top_tier: BenchmarkScore,
) -> BenchmarkScore:
    """Return the tier of the first band whose limit exceeds ``value``."""
    for limit, tier in bands:
        if value < limit:
            return tier
    return top_tier


# ── Ruleset registry ──────────────────────────────────────────────────────────

_S = BenchmarkScore

RULESETS: dict[RulesetId, Ruleset] = {
    RulesetId.UNSCORED: UnscoredRuleset(),
    RulesetId.A: BandedRuleset(
        ruleset_id=RulesetId.A,
        basis=ScoreBasis.PERCENT_OF_CLASS,
        bands=((0.93, _S.SUBSTANDARD), (1.10, _S.ACCEPTABLE), (1.20, _S.GREAT)),
        top_tier=_S.EXCEPTIONAL,
    ),
    RulesetId.B: BandedRuleset(
        ruleset_id=RulesetId.B,
        basis=ScoreBasis.PERCENT_OF_CLASS,
        bands=(
            (0.90, _S.EXCEPTIONAL), (0.95, _S.GOOD),
            (1.05, _S.ACCEPTABLE), (1.15, _S.WEAK),
        ),
        top_tier=_S.SUBSTANDARD,
    ),
    RulesetId.C: BandedRuleset(
        ruleset_id=RulesetId.C,
        basis=ScoreBasis.PERCENT_OF_CLASS,
        bands=(
            (0.90, _S.POOR), (0.95, _S.WEAK),
            (1.05, _S.ACCEPTABLE), (1.15, _S.GOOD),
        ),
        top_tier=_S.GREAT,
    ),
    RulesetId.D: BandedRuleset(
        ruleset_id=RulesetId.D,
        basis=ScoreBasis.CURRENT_VALUE,
        bands=(
            (0.7, _S.SUBSTANDARD), (1.0, _S.WEAK),
            (2.0, _S.ACCEPTABLE), (2.8, _S.GOOD),
        ),
        top_tier=_S.SUBSTANDARD,  # too high: idle capital
    ),
    RulesetId.E: BandedRuleset(
        ruleset_id=RulesetId.E,
        basis=ScoreBasis.PERCENT_OF_CLASS,
        bands=((0.90, _S.SUBSTANDARD), (1.20, _S.ACCEPTABLE)),
        top_tier=_S.EXCEPTIONAL,
    ),
    RulesetId.F: BoundedRuleset(
        ruleset_id=RulesetId.F,
        below_min=_S.SUBSTANDARD,
        within=_S.GOOD,
        at_or_above_max=_S.EXCELLENT,
    ),
    RulesetId.G: BoundedRuleset(
        ruleset_id=RulesetId.G,
        below_min=_S.EXCELLENT,
        within=_S.GOOD,
        at_or_above_max=_S.SUBSTANDARD,
    ),
}


RULESET_DEFINITIONS: dict[RulesetId, RulesetDefinition] = {
    d.ruleset_id: d
    for d in (
        RulesetDefinition(
            ruleset_id=RulesetId.UNSCORED,
            name="No Benchmark Scoring",
            description="Comparison data only",
            logic="N/A",
            is_scored=False,
        ),
        RulesetDefinition(
            ruleset_id=RulesetId.A,
            name="Overall Income-Type",
            description="Higher % of volume class = better",
            logic="<93%: Substandard, 93-110%: Acceptable, 110-120%: Great, >=120%: Exceptional",
        ),
        RulesetDefinition(
            ruleset_id=RulesetId.B,
            name="Overall Expense-Type",
            description="Lower % of volume class = better",
            logic=(
                "<90%: Exceptional, 90-95%: Good, 95-105%: Acceptable, "
                "105-115%: Weak, >=115%: Substandard"
            ),
        ),
        RulesetDefinition(
            ruleset_id=RulesetId.C,
            name="Market Position",
            description="Higher % contribution = better",
            logic="<90%: Poor, 90-95%: Weak, 95-105%: Acceptable, 105-115%: Good, >=115%: Great",
        ),
        RulesetDefinition(
            ruleset_id=RulesetId.D,
            name="Current Ratio",
            description="Absolute value ranges",
            logic="<0.7: Substandard, 0.7-1.0: Weak, 1.0-2.0: Acceptable, 2.0-2.8: Good, >=2.8: Substandard",
        ),
        RulesetDefinition(
            ruleset_id=RulesetId.E,
            name="ROA Scoring",
            description="Simplified ROA thresholds",
            logic="<90%: Substandard, 90-120%: Acceptable, >=120%: Exceptional",
        ),
        RulesetDefinition(
            ruleset_id=RulesetId.F,
            name="Department Income-Type",
            description="Min/Max thresholds - higher is better",
            logic="<Min: Substandard, Min-Max: Good, >=Max: Excellent",
        ),
        RulesetDefinition(
            ruleset_id=RulesetId.G,
            name="Department Expense-Type",
            description="Min/Max thresholds - lower is better",
            logic="<Min: Excellent, Min-Max: Good, >=Max: Substandard",
        ),
    )
}
