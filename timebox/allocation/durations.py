"""
Duration parsing and formatting for session planning.
"""

import math
import re

from timebox import config

_MINUTES_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*(?:min|m)$")
_HOURS_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*h$")


def _round(value: float) -> int:
    return math.floor(value + 0.5)


def parse_duration(text: str) -> int | None:
    """
    Parse a user-entered duration into minutes.

    Accepted forms:
        "1:30"         -> 90   (h:mm)
        "90m", "90min" -> 90   (explicit minutes)
        "2h", "1.5h"   -> 120, 90
        "2"            -> 120  (bare number means hours)

    Returns None for anything unparseable or non-positive.
    """
    trimmed = text.strip().lower()
    if not trimmed:
        return None

    if ":" in trimmed:
        hours_str, _, minutes_str = trimmed.partition(":")
        try:
            hours = int(hours_str)
            minutes = int(minutes_str)
        except ValueError:
            return None
        if hours < 0 or minutes < 0 or minutes >= 60:
            return None
        return hours * 60 + minutes

    match = _MINUTES_RE.match(trimmed)
    if match:
        minutes = float(match.group(1))
        return _round(minutes) if minutes > 0 else None

    match = _HOURS_RE.match(trimmed)
    if match:
        hours = float(match.group(1))
        return _round(hours * 60) if hours > 0 else None

    try:
        hours = float(trimmed)
    except ValueError:
        return None
    if not math.isfinite(hours) or hours <= 0:
        return None
    return _round(hours * 60)


def format_duration(minutes: float) -> str:
    """Format minutes as 'Xh Ym', 'Xh' or 'Ym'. Negative values show as '0m'."""
    if minutes < 0:
        return "0m"

    hours = int(minutes // 60)
    mins = _round(minutes % 60)
    if mins == 60:
        hours, mins = hours + 1, 0

    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def validate_duration(minutes: int) -> tuple[bool, str | None]:
    """
    Check a session length against the configured bounds.

    Returns:
        (valid, error message)
    """
    if minutes < config.MIN_SESSION_MINUTES:
        unit = "minute" if config.MIN_SESSION_MINUTES == 1 else "minutes"
        return False, f"Duration must be at least {config.MIN_SESSION_MINUTES} {unit}"
    if minutes > config.MAX_SESSION_MINUTES:
        return (
            False,
            f"Duration cannot exceed {format_duration(config.MAX_SESSION_MINUTES)} "
            f"({config.MAX_SESSION_MINUTES} minutes)",
        )
    return True, None


def format_clock(total_seconds: float) -> str:
    """
    Format seconds as M:SS or H:MM:SS.

    Negative values are overtime and carry a '+' prefix.
    """
    prefix = "+" if total_seconds < 0 else ""
    seconds_abs = abs(total_seconds)

    hours = int(seconds_abs // 3600)
    minutes = int((seconds_abs % 3600) // 60)
    seconds = int(seconds_abs % 60)

    if hours > 0:
        return f"{prefix}{hours}:{minutes:02d}:{seconds:02d}"
    return f"{prefix}{minutes}:{seconds:02d}"
