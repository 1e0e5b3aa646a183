"""Usage-duration labels ("1 tháng", "6 tháng", "1 năm", "Vĩnh viễn").

Two conversions live here and they intentionally disagree:

* ``days_for`` uses a fixed 30-day month / 365-day year. Refund proration is
  built on it.
* ``expiry_date`` uses calendar arithmetic (``relativedelta``). Order list
  filtering (active / expired) is built on it.

Changing either one changes amounts or list membership the operator sees.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

LIFETIME_LABEL = "vĩnh viễn"
MONTH_TOKEN = "tháng"
YEAR_TOKEN = "năm"
DAY_TOKEN = "ngày"

DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365

_LEADING_INT = re.compile(r"^\s*(\d+)")


def _normalize(label: str | None) -> str:
    if not label:
        return ""
    return unicodedata.normalize("NFC", label).lower()


def _leading_int(label: str) -> int | None:
    match = _LEADING_INT.match(label)
    if match is None:
        return None
    return int(match.group(1))


def is_lifetime(label: str | None) -> bool:
    return LIFETIME_LABEL in _normalize(label)


def days_for(label: str | None) -> int:
    """Length of a duration label in days; 0 means unbounded or unknown."""
    text = _normalize(label)
    amount = _leading_int(text)
    if amount is None:
        return 0
    if MONTH_TOKEN in text:
        return amount * DAYS_PER_MONTH
    if YEAR_TOKEN in text:
        return amount * DAYS_PER_YEAR
    if DAY_TOKEN in text:
        return amount
    return 0


def expiry_date(start: datetime, label: str | None) -> datetime | None:
    """Calendar expiry of an item bought at ``start``; ``None`` never expires.

    Month and year steps clamp to the last day of the target month, so
    2024-01-31 + 1 tháng is 2024-02-29 and 2023-01-31 + 1 tháng is 2023-02-28.
    """
    text = _normalize(label)
    if not text or is_lifetime(text):
        return None
    amount = _leading_int(text)
    if amount is None:
        return None
    if MONTH_TOKEN in text:
        return start + relativedelta(months=amount)
    if YEAR_TOKEN in text:
        return start + relativedelta(years=amount)
    if DAY_TOKEN in text:
        return start + timedelta(days=amount)
    return start
