from __future__ import annotations

from datetime import date

import pytest

from plaid_tx_sync.core.time_ranges import parse_date, today_in, window_last_days


def test_window_last_days_is_inclusive_calendar_range():
    w = window_last_days(7, today=date(2024, 3, 1))

    assert w.start == date(2024, 2, 23)
    assert w.end == date(2024, 3, 1)
    assert w.contains(date(2024, 2, 23))
    assert w.contains(date(2024, 3, 1))
    assert not w.contains(date(2024, 2, 22))
    assert w.to_payload() == {"start_date": "2024-02-23", "end_date": "2024-03-01"}


def test_window_zero_days_is_just_today():
    w = window_last_days(0, today=date(2024, 1, 1))
    assert w.start == w.end == date(2024, 1, 1)


def test_window_rejects_negative_days():
    with pytest.raises(ValueError):
        window_last_days(-3)


def test_today_in_defaults_to_local_date():
    assert today_in(None) == date.today()


def test_today_in_timezone_is_a_date():
    d = today_in("UTC")
    assert abs((d - date.today()).days) <= 1


def test_parse_date_variants():
    assert parse_date("2024-01-05") == date(2024, 1, 5)
    assert parse_date("2024-01-05T10:00:00Z") == date(2024, 1, 5)
    assert parse_date(date(2024, 1, 5)) == date(2024, 1, 5)
    assert parse_date("yesterday") is None
    assert parse_date(None) is None
    assert parse_date(20240105) is None


def test_parse_date_rejects_trailing_junk():
    assert parse_date("2024-03-14garbage") is None
    assert parse_date("2024-03-14 ") == date(2024, 3, 14)
