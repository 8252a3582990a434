"""Overlap detection for half-open ``[start, end)`` minute intervals."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Protocol

from .models import Event


class Interval(Protocol):
    start_minutes: int
    end_minutes: int
    date: Optional[date]


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Return whether two half-open intervals intersect.

    Back-to-back intervals (``a_end == b_start``) do not overlap.
    """

    return a_start < b_end and b_start < a_end


def find_conflicts(
    candidate: Interval,
    existing: Iterable[Event],
    same_day_only: bool | None = None,
) -> List[Event]:
    """Return every member of ``existing`` whose interval overlaps ``candidate``.

    Results keep collection order. ``same_day_only`` defaults to true when the
    candidate carries a date. An event sharing the candidate's id is skipped.
    """

    if same_day_only is None:
        same_day_only = candidate.date is not None
    candidate_id = getattr(candidate, "id", None)

    conflicts: List[Event] = []
    for event in existing:
        if candidate_id is not None and event.id == candidate_id:
            continue
        if same_day_only and event.date != candidate.date:
            continue
        if overlaps(
            candidate.start_minutes,
            candidate.end_minutes,
            event.start_minutes,
            event.end_minutes,
        ):
            conflicts.append(event)
    return conflicts


def conflicts_of(event: Interval, collection: Iterable[Event]) -> frozenset[int]:
    return frozenset(other.id for other in find_conflicts(event, collection))
