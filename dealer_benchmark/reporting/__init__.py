"""
dealer_benchmark.reporting — terminal formatting and flat-file export.

Modules:
  formatters — ASCII tables for Typer CLI commands.
  export     — CSV/JSON export helpers.
"""
