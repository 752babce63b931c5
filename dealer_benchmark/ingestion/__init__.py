"""
Ingestion layer — dealer CSV parsing and description normalization.

Submodules:
  column_detector — Maps CSV headers to dealer / class / national roles
  dealer_csv      — CSV text → ParsedDealerCsv; structural pre-check
  descriptions    — Canonical form of KPI descriptions for catalog matching
"""
