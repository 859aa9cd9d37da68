from datetime import timedelta

import pytest

from transcoder.utils.format_utils import format_seconds, format_timedelta, formatted_size


def test_format_timedelta() -> None:
    assert format_timedelta(timedelta(seconds=7261)) == "02:01:01"
    assert format_timedelta("not a timedelta") == "00:00:00"


def test_format_seconds_clamps_negative() -> None:
    assert format_seconds(-5) == "00:00:00"
    assert format_seconds(90.7) == "00:01:30"


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 B"), (512, "512 B"), (1536, "1.50 KB"), (2 * 1024 * 1024, "2 MB")],
)
def test_formatted_size(size: int, expected: str) -> None:
    assert formatted_size(size) == expected
