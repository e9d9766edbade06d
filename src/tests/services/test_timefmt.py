from datetime import datetime, timedelta, timezone

import pytest

from devit.services.timefmt import as_utc, relative_time

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(seconds=30), "0 minutes ago"),
        (timedelta(minutes=1), "1 minutes ago"),
        (timedelta(minutes=59), "59 minutes ago"),
        (timedelta(hours=1), "1 hour ago"),
        (timedelta(hours=5, minutes=59), "5 hours ago"),
        (timedelta(days=1), "1 day ago"),
        (timedelta(days=30), "30 days ago"),
    ],
)
def test_relative_time(delta: timedelta, expected: str) -> None:
    assert relative_time(NOW - delta, now=NOW) == expected


def test_relative_time_never() -> None:
    assert relative_time(None) == "Never"


def test_future_moments_clamp_to_zero() -> None:
    assert relative_time(NOW + timedelta(hours=2), now=NOW) == "0 minutes ago"


def test_naive_datetimes_are_utc() -> None:
    naive = datetime(2024, 5, 1, 10, 0)

    assert as_utc(naive) == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert relative_time(naive, now=NOW) == "2 hours ago"
