"""
Column-role detection for dealer performance CSV exports.

Header names vary per dealer and per benchmark class, so columns are
identified by pattern rather than by name:

  Class column     ``<L>_class_CY`` (any case), e.g. ``B_Class_CY``
                   companions ``<L>_class_CY_vs_LY`` and ``<L>_class_%_of_Class``
  National column  ``<PREFIX><no underscore>_CY``, e.g. ``ABC-Moto_CY``
                   companions ``..._CY_vs_LY`` and ``..._%_of_(Class|Nat_Avg|Nat)``
  Dealer column    the first other header ending in ``_CY`` that is not a
                   basic field and is not a YoY / percent-of companion

The brand prefix defaults to ``ABC`` and can be overridden through
``DetectionConfig.national_prefix``.

The heuristic is kept as-is for compatibility with existing exports.  A
dealer code that itself starts with the national prefix will be read as the
national column; explicit column-role headers would be a format change.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from dealer_benchmark.errors import MissingDealerColumnError

logger = logging.getLogger(__name__)

DEFAULT_NATIONAL_PREFIX = "ABC"
DEFAULT_CLASS_LABEL = "B-Class"

BASIC_COLUMNS: tuple[str, ...] = ("Start_Date", "End_Date", "Department", "Description")

_CLASS_CY_RE = re.compile(r"^[A-Z]_class_CY$", re.IGNORECASE)
_CLASS_YOY_RE = re.compile(r"^[A-Z]_class_CY_vs_LY$", re.IGNORECASE)
_CLASS_PCT_RE = re.compile(r"^[A-Z]_class_%_of_Class$", re.IGNORECASE)
_CLASS_LETTER_RE = re.compile(r"^([A-Z])_class", re.IGNORECASE)

_NON_DEALER_MARKERS: tuple[str, ...] = ("_vs_LY", "YoY_Change", "%_of_")


@dataclass(frozen=True)
class ColumnRoles:
    """Header names resolved for each logical column role.

    Companion columns are ``None`` when absent; their values then default
    to ``0.0`` during row extraction.
    """

    dealer_col: str
    dealer_yoy_abs_col: Optional[str]
    dealer_yoy_pct_col: Optional[str]
    class_col: Optional[str]
    class_yoy_col: Optional[str]
    class_pct_col: Optional[str]
    national_col: Optional[str]
    national_yoy_col: Optional[str]
    national_pct_col: Optional[str]
    class_label: str

    @property
    def dealer_base(self) -> str:
        """Dealer column name with its trailing ``_CY`` removed."""
        return _strip_cy_suffix(self.dealer_col)

    @property
    def national_base(self) -> Optional[str]:
        """National column name with its trailing ``_CY`` removed."""
        if self.national_col is None:
            return None
        return _strip_cy_suffix(self.national_col)


def detect_columns(
    headers: Sequence[str],
    national_prefix: str = DEFAULT_NATIONAL_PREFIX,
    default_class_label: str = DEFAULT_CLASS_LABEL,
) -> ColumnRoles:
    """Identify the dealer, class and national columns in a header row.

    Args:
        headers:             The CSV header row, in file order.
        national_prefix:     Brand prefix of the national-average columns.
        default_class_label: Label used when no class column is present.

    Returns:
        Fully resolved ``ColumnRoles``.

    Raises:
        MissingDealerColumnError: If no header qualifies as the dealer column.
    """
    headers = [h for h in headers if h is not None]

    class_col = _first_match(headers, _CLASS_CY_RE)
    class_yoy_col = _first_match(headers, _CLASS_YOY_RE)
    class_pct_col = _first_match(headers, _CLASS_PCT_RE)

    prefix = re.escape(national_prefix)
    national_col = _first_match(headers, re.compile(rf"^{prefix}[^_]*_CY$"))
    national_yoy_col = _first_match(headers, re.compile(rf"^{prefix}[^_]*_CY_vs_LY$"))
    national_pct_col = _first_match(
        headers,
        re.compile(rf"^{prefix}[^_]*_%_of_(Class|Nat_Avg|Nat)$", re.IGNORECASE),
    )

    class_label = derive_class_label(class_col, default=default_class_label)

    benchmark_cols = {
        c for c in (
            class_col, class_yoy_col, class_pct_col,
            national_col, national_yoy_col, national_pct_col,
        )
        if c
    }
    dealer_col = _find_dealer_column(headers, benchmark_cols)
    if dealer_col is None:
        raise MissingDealerColumnError(headers)

    dealer_base = _strip_cy_suffix(dealer_col)
    dealer_yoy_abs_col = next(
        (h for h in headers if h.startswith(dealer_base) and h.endswith("_CY_vs_LY")),
        None,
    )
    dealer_yoy_pct_col = next(
        (h for h in headers if h.startswith(dealer_base) and h.endswith("_YoY_Change")),
        None,
    )

    roles = ColumnRoles(
        dealer_col=dealer_col,
        dealer_yoy_abs_col=dealer_yoy_abs_col,
        dealer_yoy_pct_col=dealer_yoy_pct_col,
        class_col=class_col,
        class_yoy_col=class_yoy_col,
        class_pct_col=class_pct_col,
        national_col=national_col,
        national_yoy_col=national_yoy_col,
        national_pct_col=national_pct_col,
        class_label=class_label,
    )
    logger.debug(
        "Detected columns: dealer=%s class=%s national=%s label=%s",
        dealer_col, class_col, national_col, class_label,
    )
    return roles


def derive_class_label(class_col: Optional[str], default: str = DEFAULT_CLASS_LABEL) -> str:
    """``"A_class_CY"`` → ``"A-Class"``; ``None`` → ``default``."""
    if not class_col:
        return default
    match = _CLASS_LETTER_RE.match(class_col)
    if match is None:
        return default
    return f"{match.group(1).upper()}-Class"


def has_class_column(headers: Sequence[str]) -> bool:
    """Return ``True`` if any header looks like a benchmark-class column."""
    return _first_match(headers, _CLASS_CY_RE) is not None


def dealer_identity(roles: ColumnRoles) -> tuple[str, str]:
    """Derive ``(dealer_code, dealer_name)`` from resolved column roles.

    The code is the dealer column with its first ``_CY`` removed and all
    whitespace stripped.  The name appends the national brand base (e.g.
    ``"_ABC-Moto"``) unless the code already contains it.
    """
    dealer_code = re.sub(r"\s+", "", roles.dealer_col.replace("_CY", "", 1))
    brand = roles.national_base
    if brand and brand not in dealer_code:
        return dealer_code, f"{dealer_code}_{brand}"
    return dealer_code, dealer_code


# ── Private helpers ────────────────────────────────────────────────────────────

def _first_match(headers: Sequence[str], pattern: re.Pattern[str]) -> Optional[str]:
    return next((h for h in headers if pattern.match(h)), None)


def _find_dealer_column(headers: Sequence[str], benchmark_cols: set[str]) -> Optional[str]:
    for h in headers:
        if not h.endswith("_CY"):
            continue
        if h in benchmark_cols or h in BASIC_COLUMNS:
            continue
        if any(marker in h for marker in _NON_DEALER_MARKERS):
            continue
        return h
    return None


def _strip_cy_suffix(col: str) -> str:
    return col[: -len("_CY")] if col.endswith("_CY") else col
