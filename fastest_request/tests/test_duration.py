import sys
from pathlib import Path

import pytest

# Ensure package path for local src
ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "fastest_request" / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fastest_request.duration import format_duration, parse_duration
from fastest_request.errors import InvalidTimeout


@pytest.mark.parametrize(
    "text,expected",
    [
        ("300ms", 0.3),
        ("1s", 1.0),
        ("1.5h", 5400.0),
        ("-1.5h", -5400.0),
        ("2h45m", 9900.0),
        ("1m30s", 90.0),
        ("+5s", 5.0),
        ("0", 0.0),
        ("-0", 0.0),
        ("1us", 1e-6),
        ("1µs", 1e-6),
        ("1μs", 1e-6),
        ("250ns", 250e-9),
        (".5s", 0.5),
        ("1h1m1s1ms", 3661.001),
        ("2562047h", 2562047 * 3600.0),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == pytest.approx(expected)


@pytest.mark.parametrize(
    "text",
    ["", "error", "1", "s", "1x", "1.5", "-", "1h 30m", " 1s", "1s-2s", "99999999999999999999999h", "-2562048h"],
)
def test_parse_duration_rejects_malformed_input(text):
    with pytest.raises(InvalidTimeout):
        parse_duration(text)


def test_parse_duration_rejects_non_strings():
    with pytest.raises(InvalidTimeout):
        parse_duration(1.5)


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (0, "0s"),
        (1.0, "1s"),
        (0.3, "300ms"),
        (1e-6, "1µs"),
        (2.5e-8, "25ns"),
        (90.0, "1m30s"),
        (9900.0, "2h45m0s"),
        (-5400.0, "-1h30m0s"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
