from datetime import date, datetime

import pytest

from nursecare.shared.time_utils import format_shift_date, shift_hours, start_of_month, week_bounds
from nursecare.shared.validators import validate_phone, validate_time_string


def test_day_shift_with_break():
    assert shift_hours("09:00", "17:00", 30) == 7.5


def test_day_shift_without_break():
    assert shift_hours("09:00", "17:00") == 8.0


def test_overnight_shift_wraps_past_midnight():
    assert shift_hours("22:00", "06:00") == 8.0
    assert shift_hours("20:00", "08:00", 60) == 11.0


def test_equal_start_and_end_is_a_full_day():
    assert shift_hours("07:00", "07:00") == 24.0


def test_break_longer_than_shift_never_goes_negative():
    assert shift_hours("09:00", "09:30", 45) == 0


def test_format_shift_date():
    assert format_shift_date(date(2025, 1, 5)) == "Jan 5, 2025"


def test_start_of_month():
    assert start_of_month(datetime(2025, 3, 17, 14, 30)) == datetime(2025, 3, 1)


def test_week_bounds_monday_to_sunday():
    start, end = week_bounds(date(2025, 1, 8))  # Wednesday
    assert start == date(2025, 1, 6)
    assert end == date(2025, 1, 12)


def test_time_string_normalized():
    assert validate_time_string("9:05") == "09:05"
    assert validate_time_string("17:00:00") == "17:00"


@pytest.mark.parametrize("value", ["25:00", "9am", "12:60"])
def test_time_string_rejected(value):
    with pytest.raises(ValueError):
        validate_time_string(value)


def test_phone_keeps_leading_plus():
    assert validate_phone("+1 (555) 123-4567") == "+15551234567"
    with pytest.raises(ValueError):
        validate_phone("12345")
