"""
Time and reporting-period utilities.

Dealer exports label their reporting period either with a short ``YY-Mon``
form (``"25-Jan"``) or with an already human-readable string.  Report
layouts want ``"January 2025"``; ``expand_period_label()`` does that
expansion and passes anything it does not recognise through unchanged.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

_SHORT_PERIOD_RE = re.compile(r"^(\d{2})-([A-Za-z]{3})$")

# "Jan" -> "January" ...  Keys are title-case; other casings are kept as-is.
MONTH_NAMES: dict[str, str] = {
    "Jan": "January", "Feb": "February", "Mar": "March", "Apr": "April",
    "May": "May", "Jun": "June", "Jul": "July", "Aug": "August",
    "Sep": "September", "Oct": "October", "Nov": "November", "Dec": "December",
}

# Two-digit years at or above this pivot belong to the 1900s.
CENTURY_PIVOT = 50


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def expand_two_digit_year(year: int) -> int:
    """``25`` → ``2025``, ``49`` → ``2049``, ``50`` → ``1950``."""
    return 1900 + year if year >= CENTURY_PIVOT else 2000 + year


def expand_period_label(raw: str) -> str:
    """Expand a ``YY-Mon`` period label to ``"Month YYYY"``.

    Args:
        raw: Period cell text, e.g. ``"25-Jan"`` or ``"January 2025"``.

    Returns:
        ``"January 2025"`` for ``"25-Jan"``.  An unknown month abbreviation
        is kept verbatim (``"25-Foo"`` → ``"Foo 2025"``).  Empty strings and
        any other format are returned unchanged.
    """
    if not raw:
        return raw
    match = _SHORT_PERIOD_RE.match(raw)
    if match is None:
        return raw
    year = expand_two_digit_year(int(match.group(1)))
    abbr = match.group(2)
    return f"{MONTH_NAMES.get(abbr, abbr)} {year}"
