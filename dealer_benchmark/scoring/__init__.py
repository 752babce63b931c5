"""Benchmark tier scoring: ruleset variants and the ``score()`` dispatcher."""
