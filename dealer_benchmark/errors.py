"""
Typed failures raised by the dealer CSV pipeline.

Per-file failures derive from ``DealerCsvError`` (itself a ``ValueError``), so
a batch caller can isolate one bad upload with a single ``except`` clause and
keep processing the rest of the batch.

Non-errors, by contract:
  - A row whose description has no catalog match is dropped, not raised.
  - A malformed numeric cell becomes ``0.0``.
  - A bounded ruleset (F/G) with no bounds scores ``NA``.
"""

from __future__ import annotations


class DealerCsvError(ValueError):
    """Base class for failures that abort processing of one CSV file."""


class CsvStructureError(DealerCsvError):
    """The CSV is empty, header-only, ragged, or missing required headers."""


class MissingDealerColumnError(DealerCsvError):
    """No header could be identified as the dealer's current-year column."""

    def __init__(self, headers: list[str] | None = None) -> None:
        self.headers = list(headers or [])
        super().__init__(
            "Could not find dealer column in CSV. "
            f"Expected a '<DEALER>_CY' header; found: {self.headers}"
        )


class CatalogIntegrityError(ValueError):
    """The KPI catalog violates an authoring invariant (duplicate keys, dangling codes)."""
