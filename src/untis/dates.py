"""
Conversion between Python dates and the compact numeric encodings WebUntis uses.

Dates travel as ``YYYYMMDD`` (e.g. ``20240307``) and times of day as ``[H]HMM``
without a leading zero (e.g. ``800`` for 08:00, ``0`` for midnight).
"""

from __future__ import annotations

from datetime import date, datetime, time

__all__ = [
    "format_date_to_untis",
    "parse_untis_date",
    "parse_untis_time",
    "parse_untis_datetime",
    "to_iso_format",
]


def format_date_to_untis(value: date) -> str:
    """Format a date (or datetime) as the ``YYYYMMDD`` string WebUntis expects."""
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"


def parse_untis_date(value: int | str) -> date:
    digits = str(value)
    if len(digits) != 8 or not digits.isdigit():
        raise ValueError(f"Not a YYYYMMDD date: {value!r}")
    return date(int(digits[0:4]), int(digits[4:6]), int(digits[6:8]))


def parse_untis_time(value: int | str) -> time:
    digits = str(value).zfill(4)
    if len(digits) != 4 or not digits.isdigit():
        raise ValueError(f"Not a [H]HMM time: {value!r}")
    return time(int(digits[0:2]), int(digits[2:4]))


def parse_untis_datetime(date_value: int | str, time_value: int | str) -> datetime:
    """
    Combine a ``YYYYMMDD`` date and a ``[H]HMM`` time into a naive datetime.

    >>> parse_untis_datetime(20240307, 930)
    datetime.datetime(2024, 3, 7, 9, 30)
    """
    return datetime.combine(parse_untis_date(date_value), parse_untis_time(time_value))


def to_iso_format(value: datetime) -> str:
    """
    Render ``value`` as ``YYYY-MM-DDTHH:MM:SS.000Z``.

    The wall-clock fields are written as-is; no conversion to UTC happens even
    though the suffix says ``Z``. The calendar endpoint matches on these local
    fields.
    """
    return value.strftime("%Y-%m-%dT%H:%M:%S") + ".000Z"
