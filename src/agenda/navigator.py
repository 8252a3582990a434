from __future__ import annotations

import logging
from datetime import date, timedelta
from enum import Enum
from typing import Sequence, Tuple

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)
WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
DAYS_PER_WEEK = 7


class StepUnit(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class ViewMode(str, Enum):
    DAY = "day"
    WEEK = "week"


_STEP_DELTAS = {
    StepUnit.DAY: relativedelta(days=1),
    StepUnit.WEEK: relativedelta(weeks=1),
    StepUnit.MONTH: relativedelta(months=1),
    StepUnit.YEAR: relativedelta(years=1),
}


def week_start_of(anchor: date, week_start: int = SUNDAY) -> date:
    offset = (anchor.weekday() - week_start) % DAYS_PER_WEEK
    return anchor - timedelta(days=offset)


def visible_range(
    anchor: date,
    mode: ViewMode = ViewMode.WEEK,
    week_start: int = SUNDAY,
) -> Tuple[date, ...]:
    """Dates rendered for ``anchor``: the anchor alone, or its whole week."""

    if ViewMode(mode) is ViewMode.DAY:
        return (anchor,)
    first = week_start_of(anchor, week_start)
    return tuple(first + timedelta(days=offset) for offset in range(DAYS_PER_WEEK))


def step(anchor: date, unit: StepUnit, direction: Direction) -> date:
    """Move ``anchor`` by one calendar unit.

    Month and year steps clamp to the last valid day of the target month, so
    January 31 plus one month is the last day of February.
    """

    unit = StepUnit(unit)
    direction = Direction(direction)
    delta = _STEP_DELTAS[unit]
    if direction is Direction.BACKWARD:
        result = anchor - delta
    else:
        result = anchor + delta
    logger.debug("Stepped %s %s one %s -> %s", anchor, direction.value, unit.value, result)
    return result


advance = step


def range_label(dates: Sequence[date]) -> str:
    if not dates:
        return ""
    first, last = dates[0], dates[-1]
    if first == last:
        return f"{first:%b} {first.day}, {first.year}"
    if first.year != last.year:
        return f"{first:%b} {first.day}, {first.year} - {last:%b} {last.day}, {last.year}"
    return f"{first:%b} {first.day} - {last:%b} {last.day}, {last.year}"


def parse_weekday(name: str) -> int:
    try:
        return WEEKDAY_NAMES.index(name.strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown weekday: {name!r}") from exc
