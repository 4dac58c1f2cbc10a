"""
date_time_helper.py

Provides helper functions for conversion and formatting of date and time values
used on exported documents, certificates and in audit records.

Document-facing formats follow US conventions (MM/DD/YYYY, "October 19, 2026").
All features and modules should use ONLY these helpers for date/time logic.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """
    Returns the current UTC time as an ISO8601 string (YYYY-MM-DDTHH:MM:SS+00:00).
    Used for audit records.
    """
    return utc_now().replace(microsecond=0).isoformat()


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parses an API timestamp into an aware datetime.

    Accepts datetimes and ISO8601 strings, including the trailing "Z" the
    remote API emits. Naive values are treated as UTC.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def us_short_date(day: Optional[date] = None) -> str:
    """MM/DD/YYYY, zero padded. Defaults to today (local time)."""
    day = day or date.today()
    return f"{day.month:02d}/{day.day:02d}/{day.year}"


def us_long_date(day: Optional[date] = None) -> str:
    """'October 19, 2026'. Defaults to today (local time)."""
    day = day or date.today()
    return f"{day:%B} {day.day}, {day.year}"


def us_long_timestamp(moment: datetime) -> str:
    """
    Long timestamp used for signing times on certificates, e.g.
    'October 19, 2026 at 03:04:05 PM UTC'.
    """
    moment = parse_timestamp(moment)
    zone = moment.tzname() or "UTC"
    return f"{us_long_date(moment.date())} at {moment:%I:%M:%S %p} {zone}"


def iso_date(day: Optional[date] = None) -> str:
    """YYYY-MM-DD, used in output file names."""
    return (day or date.today()).isoformat()
