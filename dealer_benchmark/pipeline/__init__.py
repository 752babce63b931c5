"""
Pipeline — turns parsed CSVs into scored, catalog-resolved KPI values.

Modules:
  assembler — one parsed CSV → AssembledDealerKpis
  batch     — many uploads, per-file failure isolation, period snapshots
"""
