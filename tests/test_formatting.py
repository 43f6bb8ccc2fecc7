import pytest

from bandcamp_expand.utils.formatting import format_duration, pluralize


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "0s"),
        (0.4, "0s"),
        (59, "59s"),
        (60, "1m"),
        (72, "1m 12s"),
        (3725, "1h 2m 5s"),
    ],
)
def test_format_duration(seconds: float, expected: str) -> None:
    assert format_duration(seconds) == expected


def test_pluralize() -> None:
    assert pluralize(1, "archive") == "1 archive"
    assert pluralize(0, "archive") == "0 archives"
    assert pluralize(3, "archive") == "3 archives"
