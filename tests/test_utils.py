from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from infrastructure.utils import format_display_datetime, now_local, parse_duration


@pytest.mark.parametrize(
    "text, expected",
    [
        ("90", timedelta(seconds=90)),
        ("90s", timedelta(seconds=90)),
        ("15m", timedelta(minutes=15)),
        ("2h", timedelta(hours=2)),
        ("1d12h", timedelta(days=1, hours=12)),
        ("1 day 2 hours", timedelta(days=1, hours=2)),
        ("2w", timedelta(weeks=2)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "  ", "3x", "d", "1d-2h", "abc"])
def test_parse_duration_rejects(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_now_local_is_aware():
    assert now_local().tzinfo is not None


def test_format_display_datetime_is_local():
    dt = datetime(2024, 5, 1, 13, 45, 10, tzinfo=timezone.utc)
    assert format_display_datetime(dt) == dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")
