"""Tests for compact duration parsing and formatting."""

from __future__ import annotations

import pytest

from varload._internal.durations import format_duration, parse_duration, to_nanoseconds
from varload._internal.errors import ProfileParseError


class TestParseDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("30s", 30.0),
            ("2m", 120.0),
            ("1m30s", 90.0),
            ("1.5h", 5400.0),
            ("250ms", 0.25),
            ("500us", 0.0005),
            ("500µs", 0.0005),
            ("0", 0.0),
            (" 5s ", 5.0),
        ],
    )
    def test_valid(self, text: str, expected: float):
        """Valid durations convert to seconds."""
        assert parse_duration(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "10", "abc", "-1s", "5 s", "1d", "s"])
    def test_invalid_raises(self, text: str):
        """Malformed durations raise ProfileParseError quoting the input."""
        with pytest.raises(ProfileParseError, match="invalid duration") as exc_info:
            parse_duration(text)
        assert exc_info.value.token == text


class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0, "0s"),
            (2.5, "2.5s"),
            (30, "30s"),
            (90.1234, "1m30s"),
            (3600, "1h0m0s"),
            (0.00025, "250µs"),
            (0.0125, "12.5ms"),
        ],
    )
    def test_rendering(self, seconds: float, expected: str):
        assert format_duration(seconds) == expected

    def test_negative_clamps_to_zero(self):
        assert format_duration(-3) == "0s"


def test_to_nanoseconds():
    assert to_nanoseconds(1.5) == 1_500_000_000
    assert to_nanoseconds(0) == 0
