"""Clock-time arithmetic shared by shift scheduling, invoicing and reports"""

from datetime import date, datetime, timedelta


def _minutes_since_midnight(value: str) -> int:
    parts = value.strip().split(":")
    return int(parts[0]) * 60 + int(parts[1])


def shift_hours(start_time: str, end_time: str, break_minutes: int = 0) -> float:
    """
    Duration in hours between two HH:MM times.

    An end time at or before the start time means the shift runs past midnight,
    so 24h is added to the end. Break minutes are deducted; the result is never negative.

    >>> shift_hours("09:00", "17:00", 30)
    7.5
    >>> shift_hours("22:00", "06:00")
    8.0
    """
    start = _minutes_since_midnight(start_time)
    end = _minutes_since_midnight(end_time)
    if end <= start:
        end += 24 * 60

    minutes = end - start - (break_minutes or 0)
    return max(minutes, 0) / 60


def format_shift_date(value: date) -> str:
    """'Jan 5, 2025' style date used in invoice line descriptions"""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def week_bounds(today: date) -> tuple[date, date]:
    """Monday..Sunday of the week containing today"""
    start = today - timedelta(days=today.weekday())
    return start, start + timedelta(days=6)
