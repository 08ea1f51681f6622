"""
Helpers for the "HH:MM" and "YYYY-MM-DD" strings used throughout the data model.
"""

from datetime import date as _date
from typing import Tuple

import pendulum
from pendulum import DateTime


def parse_hhmm(value: str) -> Tuple[int, int]:
    """Split an "HH:MM" 24-hour string into (hour, minute)."""
    hour, minute = value.split(":")
    return int(hour), int(minute)


def anchor_of(day: _date) -> DateTime:
    """
    Midnight of the given calendar day as a naive DateTime.

    Any time-of-day component on the input is dropped; no timezone
    conversion takes place.
    """
    return pendulum.naive(day.year, day.month, day.day)


def at_time(anchor: DateTime, value: str) -> DateTime:
    """Place an "HH:MM" string on the anchor's calendar day."""
    hour, minute = parse_hhmm(value)
    return anchor.set(hour=hour, minute=minute, second=0, microsecond=0)


def day_of_week(day: _date) -> str:
    """English weekday name in lowercase, e.g. "monday"."""
    return anchor_of(day).format("dddd", locale="en").lower()


def date_string(day: _date) -> str:
    """Format a calendar day as "YYYY-MM-DD"."""
    return anchor_of(day).to_date_string()


def hhmm(dt: DateTime) -> str:
    return f"{dt.hour:02d}:{dt.minute:02d}"


def format_time(value: str) -> str:
    """
    Format "HH:MM" for display, e.g. "19:00" -> "7:00 PM".
    """
    hour, minute = value.split(":")
    hour_num = int(hour)
    suffix = "PM" if hour_num >= 12 else "AM"
    display_hour = 12 if hour_num % 12 == 0 else hour_num % 12
    return f"{display_hour}:{minute} {suffix}"
