"""
Benchmark scoring entry points.

``score()`` is the single dispatch point from a ruleset identifier to a
``BenchmarkScore``.  It is pure and total: unknown ruleset identifiers, an
unscored ruleset, and a bounded ruleset without both bounds all return
``BenchmarkScore.NA``; nothing raises.

``score_kpi()`` is the convenience form used by the assembler: it scores a
parsed CSV row against its catalog definition.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from dealer_benchmark.models.dealer_csv import ParsedCsvRow
from dealer_benchmark.models.kpi import BenchmarkBounds, KpiDefinition
from dealer_benchmark.scoring.rulesets import RULESETS, BoundedRuleset, Ruleset
from dealer_benchmark.taxonomy.benchmark_taxonomy import BenchmarkScore, RulesetId

logger = logging.getLogger(__name__)


def score(
    percent_of_class: float,
    current_value: float,
    ruleset_id: Union[RulesetId, str],
    benchmark_min: Optional[float] = None,
    benchmark_max: Optional[float] = None,
) -> BenchmarkScore:
    """Classify one KPI reading into a benchmark tier.

    Args:
        percent_of_class: Dealer value / benchmark-class value (a ratio).
        current_value:    The dealer's absolute current-year value.
        ruleset_id:       ``RulesetId`` or its string value (``"A"``, ``"ZZZ"`` ...).
        benchmark_min:    Lower bound for rulesets F/G.
        benchmark_max:    Upper bound for rulesets F/G.

    Returns:
        The ``BenchmarkScore`` tier.  ``NA`` for unscored or unknown
        rulesets, and for F/G when either bound is missing.
    """
    ruleset = _resolve_ruleset(ruleset_id)
    if ruleset is None:
        return BenchmarkScore.NA
    if isinstance(ruleset, BoundedRuleset):
        bounds = _bounds_or_none(benchmark_min, benchmark_max)
        return ruleset.score(percent_of_class, current_value, bounds)
    return ruleset.score(percent_of_class, current_value)


def score_kpi(definition: KpiDefinition, row: ParsedCsvRow) -> BenchmarkScore:
    """Score a parsed CSV row against the ruleset of its catalog definition."""
    return score(
        row.percent_of_class,
        row.current_value,
        definition.ruleset,
        definition.benchmark_min,
        definition.benchmark_max,
    )


def _resolve_ruleset(ruleset_id: Union[RulesetId, str]) -> Optional[Ruleset]:
    try:
        key = RulesetId(ruleset_id)
    except ValueError:
        logger.debug("Unknown ruleset id %r; scoring as N/A.", ruleset_id)
        return None
    return RULESETS[key]


def _bounds_or_none(
    benchmark_min: Optional[float],
    benchmark_max: Optional[float],
) -> Optional[BenchmarkBounds]:
    # Inverted bounds are a catalog error; score them N/A rather than raise.
    if benchmark_min is None or benchmark_max is None or benchmark_min > benchmark_max:
        return None
    return BenchmarkBounds(minimum=benchmark_min, maximum=benchmark_max)
