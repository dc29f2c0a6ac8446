"""Duration literal parsing tests."""

from datetime import timedelta

import pytest

from pyjsonbind import parse_duration
from pyjsonbind._duration import duration_from_nanoseconds


class TestParseDuration:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("10s", timedelta(seconds=10)),
            ("0", timedelta(0)),
            ("-0", timedelta(0)),
            ("1h", timedelta(hours=1)),
            ("1h30m", timedelta(hours=1, minutes=30)),
            ("1.5h", timedelta(hours=1, minutes=30)),
            ("300ms", timedelta(milliseconds=300)),
            ("2us", timedelta(microseconds=2)),
            ("2µs", timedelta(microseconds=2)),
            ("2μs", timedelta(microseconds=2)),
            ("1500ns", timedelta(microseconds=1)),
            ("-1m", timedelta(minutes=-1)),
            ("+5s", timedelta(seconds=5)),
            (".5s", timedelta(milliseconds=500)),
            ("1.s", timedelta(seconds=1)),
            ("1h2m3s4ms", timedelta(hours=1, minutes=2, seconds=3, milliseconds=4)),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_duration(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["", "-", "10", "s", ".s", "ain't valid", "10 s", "1d", "3x", "9999999999h"],
    )
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)


class TestNanoseconds:
    def test_truncates_to_microseconds(self):
        assert duration_from_nanoseconds(1_999) == timedelta(microseconds=1)

    def test_negative(self):
        assert duration_from_nanoseconds(-1_000_000) == timedelta(milliseconds=-1)

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            duration_from_nanoseconds(2**63)
