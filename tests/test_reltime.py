"""Tests for relative time formatting."""

import pytest

from gymticks.reltime import DAY, HOUR, MINUTE, rel_time

NOW = 1_700_000_000


@pytest.mark.parametrize(
    "seconds, words, compact",
    [
        (0, "now", "now"),
        (MINUTE - 1, "now", "now"),
        (MINUTE, "1 min", "1m"),
        (59 * MINUTE + 59, "59 min", "59m"),
        (HOUR - 1, "59 min", "59m"),
        (HOUR, "1 hr", "1h"),
        (2 * HOUR + 30 * MINUTE, "2 hr", "2h"),
        (DAY - 1, "23 hr", "23h"),
        (DAY, "1 day", "1d"),
        (2 * DAY - 1, "1 day", "1d"),
        (2 * DAY, "2 days", "2d"),
        (30 * DAY + 5, "30 days", "30d"),
    ],
)
def test_boundaries(seconds, words, compact):
    assert rel_time(NOW - seconds, NOW) == words
    assert rel_time(NOW - seconds, NOW, compact=True) == compact


def test_future_timestamp_is_now():
    assert rel_time(NOW + 500, NOW) == "now"
