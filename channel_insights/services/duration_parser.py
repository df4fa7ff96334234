"""ISO 8601 video duration parsing (``PT#H#M#S``)"""

import re
from typing import Any, Optional, Tuple

# Any subset of the hour/minute/second groups may be present
DURATION_PATTERN = re.compile(r'PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?')

SHORT_MAX_MINUTES = 1.0


def _duration_parts(token: Any) -> Optional[Tuple[int, int, int]]:
    """Split a duration token into (hours, minutes, seconds), or None if malformed"""
    if not isinstance(token, str):
        return None
    match = DURATION_PATTERN.fullmatch(token.strip())
    if not match:
        return None
    hours, minutes, seconds = (int(group or 0) for group in match.groups())
    return hours, minutes, seconds


def parse_duration_minutes(token: Any) -> float:
    """
    Convert a duration token to total minutes.

    Malformed tokens are treated as zero-length rather than raising.

    >>> parse_duration_minutes("PT1H2M30S")
    62.5
    """
    parts = _duration_parts(token)
    if parts is None:
        return 0.0
    hours, minutes, seconds = parts
    return hours * 60 + minutes + seconds / 60


def parse_duration_seconds(token: Any) -> int:
    """Convert a duration token to total seconds (0 when malformed)"""
    parts = _duration_parts(token)
    if parts is None:
        return 0
    hours, minutes, seconds = parts
    return hours * 3600 + minutes * 60 + seconds


def format_duration(token: Any) -> str:
    """Render a duration token as ``H:MM:SS`` (with hours) or ``M:SS``"""
    parts = _duration_parts(token)
    if parts is None:
        return "0:00"
    hours, minutes, seconds = parts
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def is_short(token: Any) -> bool:
    """True when the total duration is at most one minute"""
    return parse_duration_minutes(token) <= SHORT_MAX_MINUTES
