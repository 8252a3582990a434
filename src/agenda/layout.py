"""Map events onto a normalized time grid for a visible range of dates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from fractions import Fraction
from typing import Dict, Iterable, List, Optional, Sequence

from .models import DayWindow, DepartmentFilter, Event, matches_department
from .overlap import find_conflicts

logger = logging.getLogger(__name__)

CalendarLayout = Dict[Optional[date], List["PlacedEvent"]]


@dataclass(frozen=True)
class PlacedEvent:
    """An event with geometry relative to its day window.

    Fractions are exact; the renderer multiplies them by the column height.
    ``stack_order`` follows creation order so later events draw above earlier
    ones when they overlap.
    """

    event: Event
    top_fraction: Fraction
    height_fraction: Fraction
    top_slot: Fraction
    slot_span: Fraction
    has_conflict: bool
    stack_order: int

    @property
    def bottom_fraction(self) -> Fraction:
        return self.top_fraction + self.height_fraction

    @property
    def elevated(self) -> bool:
        return self.has_conflict


def place_event(
    event: Event,
    window: DayWindow,
    *,
    has_conflict: bool = False,
    stack_order: int = 0,
) -> PlacedEvent:
    if not window.contains(event.start_minutes, event.end_minutes):
        raise ValueError(
            f"Event {event.id} ({event.start_time}-{event.end_time}) lies outside window {window.label()}"
        )
    offset = event.start_minutes - window.start
    return PlacedEvent(
        event=event,
        top_fraction=Fraction(offset, window.length),
        height_fraction=Fraction(event.duration_minutes, window.length),
        top_slot=Fraction(offset, window.step),
        slot_span=Fraction(event.duration_minutes, window.step),
        has_conflict=has_conflict,
        stack_order=stack_order,
    )


def group_by_date(
    events: Iterable[Event],
    visible_range: Optional[Sequence[date]],
) -> Dict[Optional[date], List[Event]]:
    """Bucket events per visible date, keeping collection order inside buckets.

    ``None`` as the range means a single implicit day holding every event.
    """

    if visible_range is None:
        return {None: list(events)}

    buckets: Dict[Optional[date], List[Event]] = {day: [] for day in visible_range}
    for event in events:
        if event.date in buckets:
            buckets[event.date].append(event)
    return buckets


def layout(
    events: Sequence[Event],
    department_filter: DepartmentFilter,
    visible_range: Optional[Sequence[date]],
    window: DayWindow,
) -> CalendarLayout:
    """Filter, group and place ``events`` for rendering.

    ``events`` must be in creation order. Conflict flags only consider other
    events of the same bucket after filtering.
    """

    creation_order = {event.id: index for index, event in enumerate(events)}
    retained = [event for event in events if matches_department(event, department_filter)]
    buckets = group_by_date(retained, visible_range)

    result: CalendarLayout = {}
    for day, bucket in buckets.items():
        placed: List[PlacedEvent] = []
        for event in bucket:
            conflicts = find_conflicts(event, bucket, same_day_only=False)
            placed.append(
                place_event(
                    event,
                    window,
                    has_conflict=bool(conflicts),
                    stack_order=creation_order[event.id],
                )
            )
        result[day] = placed

    logger.debug(
        "Laid out %s of %s event(s) across %s day(s) with filter %r",
        sum(len(items) for items in result.values()),
        len(events),
        len(result),
        getattr(department_filter, "value", department_filter),
    )
    return result
