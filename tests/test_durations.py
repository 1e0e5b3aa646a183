from __future__ import annotations

import unicodedata
from datetime import datetime, timedelta, timezone

import pytest

from horder.domain.durations import days_for, expiry_date, is_lifetime


@pytest.mark.parametrize(
    "label, expected",
    [
        ("1 tháng", 30),
        ("6 tháng", 180),
        ("1 năm", 365),
        ("2 năm", 730),
        ("15 ngày", 15),
        ("Vĩnh viễn", 0),
        ("", 0),
        (None, 0),
        ("tháng", 0),
        ("3 tuần", 0),
    ],
)
def test_days_for(label, expected):
    assert days_for(label) == expected


def test_lifetime_never_expires():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert expiry_date(start, "Vĩnh viễn") is None
    assert expiry_date(start, "vĩnh viễn") is None
    assert expiry_date(start, unicodedata.normalize("NFD", "Gói Vĩnh viễn")) is None
    assert is_lifetime("Vĩnh viễn")


def test_unparsable_label_never_expires():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert expiry_date(start, "") is None
    assert expiry_date(start, "abc") is None
    assert expiry_date(start, None) is None


def test_month_addition_clamps_to_month_end():
    assert expiry_date(datetime(2024, 1, 31, tzinfo=timezone.utc), "1 tháng") == datetime(
        2024, 2, 29, tzinfo=timezone.utc
    )
    assert expiry_date(datetime(2023, 1, 31, tzinfo=timezone.utc), "1 tháng") == datetime(
        2023, 2, 28, tzinfo=timezone.utc
    )
    assert expiry_date(datetime(2024, 8, 31, 9, 30, tzinfo=timezone.utc), "6 tháng") == datetime(
        2025, 2, 28, 9, 30, tzinfo=timezone.utc
    )


def test_year_addition_is_calendar_aware():
    assert expiry_date(datetime(2024, 2, 29, tzinfo=timezone.utc), "1 năm") == datetime(
        2025, 2, 28, tzinfo=timezone.utc
    )
    assert expiry_date(datetime(2024, 5, 10, tzinfo=timezone.utc), "1 năm") == datetime(
        2025, 5, 10, tzinfo=timezone.utc
    )


def test_calendar_expiry_differs_from_fixed_day_count():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    # 31 calendar days vs the fixed 30 used for refunds.
    assert expiry_date(start, "1 tháng") - start == timedelta(days=31)
    assert days_for("1 tháng") == 30


def test_day_label_adds_days():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert expiry_date(start, "10 ngày") == start + timedelta(days=10)
