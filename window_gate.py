"""Time-of-day helpers and the window predicate that gates each tick."""

from __future__ import annotations

from datetime import datetime, time
from typing import Union

from models import InvalidConfiguration

TimeLike = Union[str, time, datetime]


def parse_hhmm(value: object) -> time:
    """
    Parse an ``H:MM`` / ``HH:MM`` string into a time of day.

    Raises:
        InvalidConfiguration: if the value is missing or malformed
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str) or ":" not in value:
        raise InvalidConfiguration(f"Invalid time of day: {value!r} (expected HH:MM)")

    hours_text, _, minutes_text = value.strip().partition(":")
    if not (hours_text.isdigit() and minutes_text.isdigit()) or len(minutes_text) != 2 or len(hours_text) > 2:
        raise InvalidConfiguration(f"Invalid time of day: {value!r} (expected HH:MM)")

    hours, minutes = int(hours_text), int(minutes_text)
    if hours > 23 or minutes > 59:
        raise InvalidConfiguration(f"Invalid time of day: {value!r} (out of range)")
    return time(hours, minutes)


def format_hhmm(value: TimeLike) -> str:
    """Zero-padded ``HH:MM`` text; seconds are dropped."""
    if isinstance(value, (datetime, time)):
        return f"{value.hour:02d}:{value.minute:02d}"
    return format_hhmm(parse_hhmm(value))


def in_window(now: TimeLike, start: TimeLike, end: TimeLike) -> bool:
    """
    True when ``now`` lies in ``[start, end]``, inclusive on both ends.

    Comparison is on minute resolution HH:MM text, so 17:00:59 is still
    inside a window ending at 17:00. A start later than the end is not
    treated as an overnight window: nothing matches it.
    """
    current = format_hhmm(now)
    return format_hhmm(start) <= current <= format_hhmm(end)
