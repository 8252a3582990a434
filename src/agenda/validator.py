"""Acceptance rules for newly entered events."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Optional, Union

from .errors import FormatError
from .models import Category, DayWindow, Department, Event, EventDraft
from .overlap import conflicts_of
from .timeunits import format_boundary, format_time, parse_date, parse_time

logger = logging.getLogger(__name__)


class RejectionReason(str, Enum):
    EMPTY_TITLE = "empty_title"
    INVALID_FORMAT = "invalid_format"
    END_BEFORE_START = "end_before_start"
    OUTSIDE_WINDOW = "outside_window"
    BAD_GRANULARITY = "bad_granularity"


@dataclass(frozen=True)
class Accepted:
    """Successful validation. ``conflicts`` is advisory and never blocks creation."""

    draft: EventDraft
    conflicts: frozenset[int] = field(default_factory=frozenset)

    ok = True

    @property
    def has_overlap(self) -> bool:
        return bool(self.conflicts)


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    message: str
    field: Optional[str] = None

    ok = False


ValidationResult = Union[Accepted, Rejected]

OVERLAP_WARNING = "Warning: This event overlaps with an existing event."


def rejection_message(reason: RejectionReason, window: DayWindow) -> str:
    if reason is RejectionReason.EMPTY_TITLE:
        return "Title is required"
    if reason is RejectionReason.END_BEFORE_START:
        return "End time must be after start time"
    if reason is RejectionReason.OUTSIDE_WINDOW:
        if window.start == 0 and window.end == 24 * 60:
            return "Event times must be within the day"
        return (
            f"Event times must be within {format_time(window.start)}"
            f" and {format_boundary(window.end)}"
        )
    if reason is RejectionReason.BAD_GRANULARITY:
        return f"Time step must be in {window.step} minute increments"
    return "Invalid time or date format"


def validate_event(
    title: str,
    start_time: str,
    end_time: str,
    window: DayWindow,
    date_value: Union[date, str, None] = None,
    existing: Iterable[Event] = (),
) -> ValidationResult:
    """Decide whether a proposed event may be created.

    Checks run in a fixed order and stop at the first failure: title, text
    formats, ordering, window bounds, then step granularity. Overlap with
    ``existing`` events is reported on the accepted result, not rejected.
    """

    trimmed = (title or "").strip()
    if not trimmed:
        return _reject(RejectionReason.EMPTY_TITLE, window, "title")

    try:
        start = parse_time(start_time)
    except FormatError as exc:
        return _reject(RejectionReason.INVALID_FORMAT, window, "start_time", str(exc))
    try:
        end = parse_time(end_time, end_of_day=True)
    except FormatError as exc:
        return _reject(RejectionReason.INVALID_FORMAT, window, "end_time", str(exc))

    day: Optional[date]
    if isinstance(date_value, str):
        try:
            day = parse_date(date_value)
        except FormatError as exc:
            return _reject(RejectionReason.INVALID_FORMAT, window, "date", str(exc))
    else:
        day = date_value

    if end <= start:
        return _reject(RejectionReason.END_BEFORE_START, window, "end_time")
    if not window.contains(start, end):
        return _reject(RejectionReason.OUTSIDE_WINDOW, window, "start_time")
    if (end - start) % window.step != 0:
        return _reject(RejectionReason.BAD_GRANULARITY, window, "end_time")

    draft = EventDraft(title=trimmed, start_minutes=start, end_minutes=end, date=day)
    conflicts = conflicts_of(draft, existing)
    if conflicts:
        logger.warning(
            "Event %r (%s - %s) overlaps %s existing event(s)",
            trimmed,
            draft.start_time,
            draft.end_time,
            len(conflicts),
        )
    return Accepted(draft=draft, conflicts=conflicts)


def _reject(
    reason: RejectionReason,
    window: DayWindow,
    field_name: str,
    message: Optional[str] = None,
) -> Rejected:
    text = message or rejection_message(reason, window)
    logger.debug("Rejected event: %s (%s)", reason.value, text)
    return Rejected(reason=reason, message=text, field=field_name)


@dataclass
class FormDraft:
    """Fields of the "add event" form between submissions."""

    title: str
    start_time: str
    end_time: str
    category: Category = Category.WORK
    department: Department = Department.ENGINEERING
    date: Optional[date] = None

    @classmethod
    def blank(cls, window: DayWindow, day: Optional[date] = None) -> FormDraft:
        return cls(
            title="",
            start_time=format_time(window.start),
            end_time=format_boundary(window.start + window.step),
            date=day,
        )


def adjust_end_for_start(start_time: str, end_time: str, window: DayWindow) -> str:
    """Return the end time to show after the start picker changes.

    When the new start is at or past the current end, the end moves to one step
    after the start, clamped to the window end.
    """

    start = parse_time(start_time)
    end = parse_time(end_time, end_of_day=True)
    if start < end:
        return end_time
    return format_boundary(min(start + window.step, window.end))


def check_end_choice(start_time: str, end_time: str) -> Optional[Rejected]:
    """Refuse an end picker choice that is not after the start."""

    if parse_time(end_time, end_of_day=True) <= parse_time(start_time):
        return Rejected(
            reason=RejectionReason.END_BEFORE_START,
            message="End time must be after start time",
            field="end_time",
        )
    return None
