"""
Tests for dealer_benchmark.scoring.engine — the score() dispatcher.

Covers:
  - Threshold edges for every banded ruleset (A–E)
  - Monotonicity of A, C, E (higher is better) and B (lower is better)
  - Ruleset D high-tail wrap to Substandard
  - F/G with and without bounds; inverted bounds
  - ZZZ and unknown ruleset ids → NA
  - score_kpi() with a catalog definition
"""

from __future__ import annotations

import pytest

from dealer_benchmark.models.dealer_csv import ParsedCsvRow
from dealer_benchmark.models.kpi import BenchmarkBounds, KpiDefinition
from dealer_benchmark.scoring.engine import score, score_kpi
from dealer_benchmark.taxonomy.benchmark_taxonomy import (
    BenchmarkScore,
    DataFormat,
    DepartmentCode,
    RulesetId,
)

S = BenchmarkScore

SWEEP = [round(0.5 + i * 0.01, 2) for i in range(121)]  # 0.50 .. 1.70


# ── Banded rulesets ───────────────────────────────────────────────────────────

class TestRulesetA:
    @pytest.mark.parametrize("pct, expected", [
        (0.0, S.SUBSTANDARD),
        (0.9299, S.SUBSTANDARD),
        (0.93, S.ACCEPTABLE),
        (1.0999, S.ACCEPTABLE),
        (1.10, S.GREAT),
        (1.1999, S.GREAT),
        (1.20, S.EXCEPTIONAL),
        (5.0, S.EXCEPTIONAL),
    ])
    def test_band_edges(self, pct, expected):
        assert score(pct, 0.0, "A") == expected

    def test_ignores_current_value(self):
        assert score(1.0, -1_000_000.0, RulesetId.A) == S.ACCEPTABLE


class TestRulesetB:
    @pytest.mark.parametrize("pct, expected", [
        (0.5, S.EXCEPTIONAL),
        (0.90, S.GOOD),
        (0.95, S.ACCEPTABLE),
        (1.05, S.WEAK),
        (1.15, S.SUBSTANDARD),
        (2.0, S.SUBSTANDARD),
    ])
    def test_band_edges(self, pct, expected):
        assert score(pct, 0.0, "B") == expected


class TestRulesetC:
    @pytest.mark.parametrize("pct, expected", [
        (0.89, S.POOR),
        (0.90, S.WEAK),
        (0.95, S.ACCEPTABLE),
        (1.05, S.GOOD),
        (1.15, S.GREAT),
    ])
    def test_band_edges(self, pct, expected):
        assert score(pct, 0.0, "C") == expected


class TestRulesetE:
    @pytest.mark.parametrize("pct, expected", [
        (0.89, S.SUBSTANDARD),
        (0.90, S.ACCEPTABLE),
        (1.19, S.ACCEPTABLE),
        (1.20, S.EXCEPTIONAL),
    ])
    def test_band_edges(self, pct, expected):
        assert score(pct, 0.0, "E") == expected


class TestMonotonicity:
    @pytest.mark.parametrize("ruleset", ["A", "C", "E"])
    def test_higher_pct_never_lowers_rank(self, ruleset):
        ranks = [score(p, 0.0, ruleset).rank for p in SWEEP]
        assert ranks == sorted(ranks)

    def test_ruleset_b_lower_pct_never_lowers_rank(self):
        ranks = [score(p, 0.0, "B").rank for p in reversed(SWEEP)]
        assert ranks == sorted(ranks)


class TestRulesetD:
    def test_high_tail_wraps_to_substandard(self):
        assert score(0.0, 2.9, "D") == S.SUBSTANDARD
        assert score(0.0, 0.5, "D") == S.SUBSTANDARD
        assert score(0.0, 2.9, "D") == score(0.0, 0.5, "D")

    @pytest.mark.parametrize("value, expected", [
        (0.7, S.WEAK),
        (1.0, S.ACCEPTABLE),
        (2.0, S.ACCEPTABLE),
        (2.0 - 1e-9, S.ACCEPTABLE),
        (2.5, S.GOOD),
        (2.8, S.SUBSTANDARD),
    ])
    def test_band_edges(self, value, expected):
        assert score(0.0, value, "D") == expected

    def test_reads_current_value_not_pct(self):
        assert score(5.0, 1.5, "D") == S.ACCEPTABLE


# ── Bounded rulesets ──────────────────────────────────────────────────────────

class TestRulesetF:
    @pytest.mark.parametrize("value, expected", [
        (0.10, S.SUBSTANDARD),
        (0.13, S.GOOD),
        (0.149, S.GOOD),
        (0.15, S.EXCELLENT),
        (0.30, S.EXCELLENT),
    ])
    def test_against_bounds(self, value, expected):
        assert score(1.0, value, "F", 0.13, 0.15) == expected

    @pytest.mark.parametrize("lo, hi", [(None, None), (0.13, None), (None, 0.15)])
    def test_missing_bound_is_na(self, lo, hi):
        for value in (-1.0, 0.0, 0.14, 100.0):
            assert score(1.0, value, "F", lo, hi) == S.NA

    def test_inverted_bounds_is_na(self):
        assert score(1.0, 0.14, "F", 0.15, 0.13) == S.NA

    def test_equal_bounds(self):
        assert score(1.0, 0.1, "F", 0.2, 0.2) == S.SUBSTANDARD
        assert score(1.0, 0.2, "F", 0.2, 0.2) == S.EXCELLENT


class TestRulesetG:
    @pytest.mark.parametrize("value, expected", [
        (0.10, S.EXCELLENT),
        (0.15, S.GOOD),
        (0.20, S.SUBSTANDARD),
    ])
    def test_against_bounds(self, value, expected):
        assert score(1.0, value, "G", 0.15, 0.20) == expected

    def test_missing_bounds_is_na(self):
        assert score(1.0, 0.10, "G") == S.NA


# ── Unscored / unknown ────────────────────────────────────────────────────────

class TestUnscored:
    @pytest.mark.parametrize("pct", [0.0, 1.0, 99.0])
    def test_zzz_is_always_na(self, pct):
        assert score(pct, pct, "ZZZ") == S.NA
        assert score(pct, pct, RulesetId.UNSCORED, 0.0, 1.0) == S.NA

    @pytest.mark.parametrize("ruleset_id", ["H", "", "a", "unknown"])
    def test_unknown_ruleset_is_na(self, ruleset_id):
        assert score(1.5, 1.5, ruleset_id) == S.NA


# ── score_kpi ─────────────────────────────────────────────────────────────────

class TestScoreKpi:
    def _definition(self, ruleset: RulesetId, bounds=None) -> KpiDefinition:
        return KpiDefinition(
            kpi_code="TEST_KPI",
            kpi_name="Test",
            csv_description="Test",
            department=DepartmentCode.SERVICE,
            data_format=DataFormat.PERCENTAGE,
            higher_is_better=True,
            ruleset=ruleset,
            bounds=bounds,
        )

    def test_uses_definition_bounds(self):
        d = self._definition(RulesetId.F, BenchmarkBounds(minimum=0.6, maximum=0.64))
        row = ParsedCsvRow(department="Service", description="Test", current_value=0.62)
        assert score_kpi(d, row) == S.GOOD

    def test_uses_row_percent_of_class(self):
        d = self._definition(RulesetId.A)
        row = ParsedCsvRow(department="Overall", description="Test", percent_of_class=1.25)
        assert score_kpi(d, row) == S.EXCEPTIONAL

    def test_bounded_without_bounds_is_na(self):
        d = self._definition(RulesetId.G)
        row = ParsedCsvRow(department="P&A", description="Test", current_value=0.01)
        assert score_kpi(d, row) == S.NA
