"""Tests for display formatting and parsing helpers."""

import pytest

from bike_wear_server.formatting import (
    format_duration_ms,
    format_duration_seconds,
    format_for_display,
    format_remaining_seconds,
    format_type_for_display,
    is_valid_http_url,
    parse_duration,
    parse_interval_time,
)

HOUR = 3600
DAY = 24 * HOUR


def test_format_for_display():
    assert format_for_display("Default brake_rotor (front)") == "Default brake rotor (front)"


def test_format_type_for_display_handles_unknown_types():
    assert format_type_for_display("brake_rotor") == "Brake Rotor"
    assert format_type_for_display("my_custom_thing") == "My Custom Thing"


def test_format_duration():
    assert format_duration_seconds(754) == "0:12:34"
    assert format_duration_seconds(3900) == "1:05:00"
    assert format_duration_seconds(-5) == "0:00:00"
    assert format_duration_ms(3_661_999) == "1:01:01"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1:05:00", 3900),
        ("12:34", 754),
        ("90", 90),
        ("", None),
        ("abc", None),
        ("1:2:3:4", None),
        ("1:-5", None),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "0"),
        (-10, "0"),
        (5 * HOUR, "5h"),
        (3 * DAY, "3d"),
        (14 * DAY, "2w"),
        (120 * DAY, "4mo"),
        (800 * DAY, "2y"),
    ],
)
def test_format_remaining_seconds(seconds, expected):
    assert format_remaining_seconds(seconds) == expected


def test_parse_interval_time():
    assert parse_interval_time("2 weeks") == 14 * DAY
    assert parse_interval_time("50 hours") == 50 * HOUR
    assert parse_interval_time("1.5 months") == 45 * DAY
    assert parse_interval_time("1 year") == 365 * DAY
    assert parse_interval_time("3 fortnights") is None
    assert parse_interval_time("weeks") is None
    assert parse_interval_time("two weeks") is None


def test_is_valid_http_url():
    assert is_valid_http_url("https://shop.example.com/chain")
    assert is_valid_http_url("HTTP://example.com")
    assert not is_valid_http_url("ftp://example.com")
    assert not is_valid_http_url("example.com")
    assert not is_valid_http_url("  ")
    assert not is_valid_http_url(None)
