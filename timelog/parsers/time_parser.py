"""Duration parsing for free-text time answers.

This module converts expressions such as "2h30m", "45m" or "1.5h" into a
whole number of minutes. Hour and minute components are matched
independently, so "30m 2h" and "2 h 30 m" parse the same way.
"""

import re
from typing import Optional, Tuple

DEFAULT_DURATION_MINUTES = 30

_HOUR_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*h", re.IGNORECASE)
_MINUTE_PATTERN = re.compile(r"(\d+)\s*m", re.IGNORECASE)


def _components(text: str) -> Tuple[Optional[float], Optional[int]]:
    hour_match = _HOUR_PATTERN.search(text)
    minute_match = _MINUTE_PATTERN.search(text)
    hours = float(hour_match.group(1)) if hour_match else None
    minutes = int(minute_match.group(1)) if minute_match else None
    return hours, minutes


def has_duration(text: str) -> bool:
    """Check whether text contains an hour or minute component.

    Args:
        text: Free-text answer

    Returns:
        True if "<number>h" or "<number>m" occurs in the text

    Example:
        >>> has_duration("about 2h")
        True
        >>> has_duration("the quarterly report")
        False
    """
    hours, minutes = _components(text or "")
    return hours is not None or minutes is not None


def parse_duration(text: str) -> int:
    """Parse a free-text duration into minutes.

    The hour component may be fractional and is rounded to whole minutes
    after conversion. When neither component is present the default of
    30 minutes is returned.

    Args:
        text: Free-text duration such as "2h30m"

    Returns:
        Duration in minutes

    Example:
        >>> parse_duration("2h30m")
        150
        >>> parse_duration("1.5h")
        90
        >>> parse_duration("let's see")
        30
    """
    hours, minutes = _components(text or "")
    if hours is None and minutes is None:
        return DEFAULT_DURATION_MINUTES

    total = 0
    if hours is not None:
        total += round(hours * 60)
    if minutes is not None:
        total += minutes
    return total
