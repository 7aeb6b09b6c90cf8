"""Display formatting and parsing helpers for durations and identifiers."""

import re
from urllib.parse import urlparse

_HOUR = 3600
_DAY = 24 * _HOUR

_UNIT_SECONDS = (
    ("hour", _HOUR),
    ("day", _DAY),
    ("week", 7 * _DAY),
    ("month", 30 * _DAY),
    ("year", 365 * _DAY),
)


def format_for_display(text: str) -> str:
    """Replace underscores with spaces ("Default brake_rotor" -> "Default brake rotor")."""
    return text.replace("_", " ")


def format_type_for_display(component_type: str) -> str:
    """Title-case a type key ("brake_rotor" -> "Brake Rotor")."""
    words = component_type.replace("_", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def format_duration_seconds(total_seconds: int) -> str:
    """Format seconds as H:MM:SS, e.g. "0:12:34" or "1:05:00"."""
    seconds = max(0, int(total_seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_duration_ms(duration_ms: int) -> str:
    """Format milliseconds as H:MM:SS, truncating partial seconds."""
    return format_duration_seconds(max(0, duration_ms // 1000))


def parse_duration(text: str) -> int | None:
    """Parse H:MM:SS, M:SS or plain seconds into seconds.

    Returns:
        Total seconds, or None if the text is not a duration
    """
    parts = [part.strip() for part in text.strip().split(":")]
    if not parts[0] and len(parts) == 1:
        return None
    if len(parts) > 3:
        return None
    try:
        values = [int(part) for part in parts]
    except ValueError:
        return None
    if len(values) == 1:
        return max(0, values[0])
    if any(value < 0 for value in values):
        return None
    total = 0
    for value in values:
        total = total * 60 + value
    return total


def format_remaining_seconds(seconds: int) -> str:
    """Compact remaining time: "5h", "3d", "2w", "4mo", "1y" ("0" when elapsed)."""
    if seconds <= 0:
        return "0"
    hours = seconds // _HOUR
    days = hours // 24
    if hours < 24:
        return f"{hours}h"
    if days < 14:
        return f"{days}d"
    if days <= 31:
        return f"{days // 7}w"
    if days <= 365:
        return f"{days // 30}mo"
    return f"{days // 365}y"


def parse_interval_time(text: str) -> int | None:
    """Parse "2 weeks", "50 hours", "1.5 months" into seconds.

    Returns:
        Seconds, or None if the number or unit is not understood
    """
    parts = re.split(r"\s+", text.strip().lower())
    if len(parts) < 2:
        return None
    try:
        amount = float(parts[0])
    except ValueError:
        return None
    unit = parts[1]
    for prefix, unit_seconds in _UNIT_SECONDS:
        if unit.startswith(prefix):
            return max(0, int(amount * unit_seconds))
    return None


def is_valid_http_url(url: str | None) -> bool:
    """Whether url parses with an http or https scheme."""
    if url is None or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme.lower() in ("http", "https")
