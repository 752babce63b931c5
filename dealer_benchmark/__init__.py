"""
dealer_benchmark — dealer KPI benchmark scoring and CSV normalization.

Pipeline: dealer CSV text → column detection → row extraction → catalog
match by normalized description → ruleset scoring → assembled KPI values.
"""

__version__ = "0.1.0"
