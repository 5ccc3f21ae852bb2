"""Utilities for timestamps and human-readable durations.

Durations accept compact unit strings such as `90s`, `15m`, `1d12h` or `2w`;
a bare number is taken as seconds.
"""

from __future__ import annotations

from datetime import datetime, timedelta
import re

_DURATION_UNITS: dict[str, int] = {
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
}

_DURATION_PART = re.compile(r"(\d+)\s*([a-z]+)")


def now_local() -> datetime:
    """Current time as a timezone-aware datetime in the local zone."""
    return datetime.now().astimezone()


def format_display_datetime(dt: datetime) -> str:
    """Short local rendering used in history tables."""
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def parse_duration(value: str) -> timedelta:
    """Parse a duration like `1d12h` or `30m` into a timedelta.

    Raises:
        ValueError: If the string is empty or contains an unknown unit.
    """
    text = value.strip().lower()
    if not text:
        raise ValueError("empty duration")
    if text.isdigit():
        return timedelta(seconds=int(text))

    total = 0
    pos = 0
    compact = text.replace(" ", "")
    for match in _DURATION_PART.finditer(compact):
        if match.start() != pos:
            raise ValueError(f"invalid duration: {value!r}")
        amount, unit = match.groups()
        if unit not in _DURATION_UNITS:
            raise ValueError(f"unknown duration unit {unit!r} in {value!r}")
        total += int(amount) * _DURATION_UNITS[unit]
        pos = match.end()
    if pos != len(compact):
        raise ValueError(f"invalid duration: {value!r}")
    return timedelta(seconds=total)
