from datetime import datetime

import pytest

from reminder_engine.schema import TimeOfDay
from reminder_engine.time_utils import (
    day_of_week,
    expand_day_filter,
    format_time_of_day,
    next_occurrence,
    parse_time_of_day,
)


def test_parse_and_format_round_trip():
    for value in ("00:00", "07:05", "12:30", "23:59"):
        assert format_time_of_day(parse_time_of_day(value)) == value


def test_parse_rejects_out_of_range_and_garbage():
    assert parse_time_of_day("24:00") is None
    assert parse_time_of_day("9:60") is None
    assert parse_time_of_day("abc") is None
    assert parse_time_of_day("") is None
    assert parse_time_of_day(None) is None
    assert parse_time_of_day("12:3") is None


def test_parse_accepts_single_digit_hour():
    assert parse_time_of_day("9:30") == TimeOfDay(9, 30)


def test_next_occurrence_daily_time_passed_moves_to_tomorrow():
    now = datetime(2026, 1, 2, 10, 0)
    assert next_occurrence(TimeOfDay(9, 30), None, now) == datetime(2026, 1, 3, 9, 30)


def test_next_occurrence_daily_time_ahead_stays_today():
    now = datetime(2026, 1, 2, 8, 0)
    assert next_occurrence(TimeOfDay(9, 30), None, now) == datetime(2026, 1, 2, 9, 30)


def test_next_occurrence_daily_exactly_now_is_not_in_future():
    now = datetime(2026, 1, 2, 9, 30)
    assert next_occurrence(TimeOfDay(9, 30), None, now) == datetime(2026, 1, 3, 9, 30)


def test_next_occurrence_weekday_jumps_to_following_monday():
    now = datetime(2026, 1, 2, 10, 0)  # Friday
    assert day_of_week(now) == 5
    assert next_occurrence(TimeOfDay(9, 30), 1, now) == datetime(2026, 1, 5, 9, 30)


def test_next_occurrence_same_weekday_passed_moves_a_full_week():
    now = datetime(2026, 1, 2, 10, 0)  # Friday
    assert next_occurrence(TimeOfDay(9, 30), 5, now) == datetime(2026, 1, 9, 9, 30)
    assert next_occurrence(TimeOfDay(18, 0), 5, now) == datetime(2026, 1, 2, 18, 0)


def test_next_occurrence_rejects_invalid_weekday():
    with pytest.raises(ValueError):
        next_occurrence(TimeOfDay(9, 30), 7, datetime(2026, 1, 2, 10, 0))


def test_expand_day_filter():
    assert expand_day_filter(None) == [None]
    assert expand_day_filter("all") == [None]
    assert expand_day_filter("weekdays") == [1, 2, 3, 4, 5]
    assert expand_day_filter("weekend") == [0, 6]
    assert expand_day_filter(3) == [3]
    assert expand_day_filter("6") == [6]
    assert expand_day_filter("fortnightly") == []


def test_parse_rejects_non_ascii_digits():
    assert parse_time_of_day("１２:３０") is None
    assert parse_time_of_day("٠٨:١٥") is None
