"""
KPI description normalization for catalog matching.

Dealer exports and the KPI catalog disagree on whether a currency KPI's
description carries a trailing ``$`` or a ``($)`` marker, and exported cells
often carry stray whitespace.  ``normalize_csv_description()`` maps both
sides to the same lookup key:

  1. ``($)``  → ``()``
  2. every ``$`` is removed, along with the whitespace around it, leaving a
     single space in its place
  3. whitespace runs collapse to one space
  4. leading/trailing whitespace is trimmed

Examples::

    "Net Sales $"                  -> "Net Sales"
    "Advertising $ Per Unit ($)"   -> "Advertising Per Unit ()"
    "Service Sales $ Per Total"    -> "Service Sales Per Total"
"""

from __future__ import annotations

import re

_PAREN_DOLLAR_RE = re.compile(r"\(\$\)")
_DOLLAR_RE = re.compile(r"\s*\$\s*")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_csv_description(description: str) -> str:
    """Return the canonical matching key for a KPI description."""
    text = _PAREN_DOLLAR_RE.sub("()", description)
    text = _DOLLAR_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()
