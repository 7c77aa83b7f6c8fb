"""Free-text duration parsing for recipe display."""

import re

_HOURS_PATTERN = re.compile(r"(\d+)\s*(?:hour|hr)", re.IGNORECASE)
_MINUTES_PATTERN = re.compile(r"(\d+)\s*(?:min|minute)", re.IGNORECASE)
_DIGITS_PATTERN = re.compile(r"\d+")


def parse_minutes(text: str) -> int:
    """Extract a minute count from strings like ``"1 hour 30 min"``.

    The first hour match and the first minute match are both added, each
    searched over the whole text. When neither yields anything the first
    run of digits is used as-is. Returns 0 when nothing is parseable.

    This is a display heuristic, not a duration parser: ``"1 hour 90 min"``
    gives 150.
    """
    if not text:
        return 0
    total = 0
    hours = _HOURS_PATTERN.search(text)
    if hours:
        total += int(hours.group(1)) * 60
    minutes = _MINUTES_PATTERN.search(text)
    if minutes:
        total += int(minutes.group(1))
    if total == 0:
        first_number = _DIGITS_PATTERN.search(text)
        if first_number:
            total = int(first_number.group(0))
    return total


def format_minutes(minutes: int) -> str:
    """Render a minute count, or ``N/A`` when unknown."""
    return f"{minutes} min" if minutes > 0 else "N/A"
