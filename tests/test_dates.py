from datetime import date, datetime, timezone

import pytest

from dates import apply_reschedule, calendar_day, calendar_day_bounds, parse_booking_date, parse_day


def test_calendar_day_bounds_cover_whole_day():
    start, end = calendar_day_bounds(datetime(2025, 6, 1, 21, 30))
    assert start == datetime(2025, 6, 1, 0, 0)
    assert end == datetime(2025, 6, 2, 0, 0)
    assert calendar_day_bounds(date(2025, 6, 1)) == (start, end)


def test_calendar_day_bounds_cross_month_end():
    start, end = calendar_day_bounds(date(2025, 12, 31))
    assert end == datetime(2026, 1, 1)


def test_calendar_day_uses_restaurant_timezone():
    # 23:30 UTC on 1 June is already 2 June in Rome (UTC+2)
    assert calendar_day(datetime(2025, 6, 1, 23, 30, tzinfo=timezone.utc)) == date(2025, 6, 2)


def test_parse_date_only():
    value, has_time = parse_booking_date("2025-07-04")
    assert value == datetime(2025, 7, 4)
    assert has_time is False


def test_parse_datetime():
    value, has_time = parse_booking_date("2025-07-04T19:30")
    assert value == datetime(2025, 7, 4, 19, 30)
    assert has_time is True


def test_parse_utc_datetime_converts_to_local():
    value, has_time = parse_booking_date("2025-07-04T17:30:00Z")
    assert value == datetime(2025, 7, 4, 19, 30)
    assert value.tzinfo is None
    assert has_time is True


@pytest.mark.parametrize("text", ["", "domani", "2025-13-01", "2025-02-30", "04/07/2025"])
def test_parse_rejects_malformed(text):
    with pytest.raises(ValueError):
        parse_booking_date(text)


def test_parse_day():
    assert parse_day("2025-07-04T22:00") == date(2025, 7, 4)


def test_apply_reschedule():
    stored = datetime(2025, 6, 1, 20, 30)
    assert apply_reschedule(stored, datetime(2025, 6, 9), False) == datetime(2025, 6, 9, 20, 30)
    assert apply_reschedule(stored, datetime(2025, 6, 9, 19, 0), True) == datetime(2025, 6, 9, 19, 0)
