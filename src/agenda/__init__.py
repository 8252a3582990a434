"""Scheduling and layout engine for the agenda calendar."""

from .errors import AgendaError, FormatError, RangeError
from .layout import PlacedEvent, layout
from .models import (
    ALL_DEPARTMENTS,
    FULL_DAY_WINDOW,
    WORKDAY_WINDOW,
    Category,
    DayWindow,
    Department,
    Event,
    EventDraft,
)
from .navigator import Direction, StepUnit, ViewMode, advance, step, visible_range
from .overlap import conflicts_of, find_conflicts, overlaps
from .timeunits import format_time, generate_slots, parse_time, slot_labels
from .validator import Accepted, Rejected, RejectionReason, validate_event

__all__ = [
    "ALL_DEPARTMENTS",
    "Accepted",
    "AgendaError",
    "Category",
    "DayWindow",
    "Department",
    "Direction",
    "Event",
    "EventDraft",
    "FULL_DAY_WINDOW",
    "FormatError",
    "PlacedEvent",
    "RangeError",
    "Rejected",
    "RejectionReason",
    "StepUnit",
    "ViewMode",
    "WORKDAY_WINDOW",
    "advance",
    "conflicts_of",
    "find_conflicts",
    "format_time",
    "generate_slots",
    "layout",
    "overlaps",
    "parse_time",
    "slot_labels",
    "step",
    "validate_event",
    "visible_range",
]
