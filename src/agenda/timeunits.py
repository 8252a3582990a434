"""Conversions between ``HH:mm`` text, ``YYYY-MM-DD`` day keys and minute offsets."""

from __future__ import annotations

import re
from datetime import date
from functools import lru_cache
from typing import TYPE_CHECKING

from .errors import FormatError, RangeError

if TYPE_CHECKING:  # pragma: no cover
    from .models import DayWindow

MINUTES_PER_DAY = 24 * 60
END_OF_DAY = "24:00"

_TIME_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2})")
_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_time(text: str, *, end_of_day: bool = False) -> int:
    """Parse ``HH:mm`` into minutes since midnight.

    ``end_of_day`` additionally accepts ``24:00`` so an interval may close at
    the very end of a full-day window.
    """

    if not isinstance(text, str):
        raise FormatError(f"Time must be text in HH:mm format, got {text!r}")
    if end_of_day and text == END_OF_DAY:
        return MINUTES_PER_DAY
    match = _TIME_PATTERN.fullmatch(text)
    if match is None:
        raise FormatError(f"Invalid time format: {text!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise FormatError(f"Invalid time value: {text!r}")
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise RangeError(f"Minute offset {minutes} is outside [0, {MINUTES_PER_DAY})")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_boundary(minutes: int) -> str:
    """Like :func:`format_time`, but renders the end of the day as ``24:00``."""

    if minutes == MINUTES_PER_DAY:
        return END_OF_DAY
    return format_time(minutes)


@lru_cache(maxsize=32)
def generate_slots(window: DayWindow) -> tuple[int, ...]:
    return tuple(range(window.start, window.end, window.step))


def slot_labels(window: DayWindow) -> list[str]:
    return [format_time(minutes) for minutes in generate_slots(window)]


def start_options(window: DayWindow) -> list[str]:
    return slot_labels(window)


def end_options(window: DayWindow) -> list[str]:
    boundaries = list(generate_slots(window)[1:]) + [window.end]
    return [format_boundary(minutes) for minutes in boundaries]


def parse_date(text: str) -> date:
    if not isinstance(text, str) or _DATE_PATTERN.fullmatch(text) is None:
        raise FormatError(f"Invalid date format: {text!r}, expected YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise FormatError(f"Invalid date value: {text!r}") from exc


def format_date(value: date) -> str:
    return value.isoformat()
