from datetime import date, timedelta
from fractions import Fraction

import pytest

from src.agenda.layout import layout, place_event
from src.agenda.models import FULL_DAY_WINDOW, WORKDAY_WINDOW, Category, Department, Event
from src.agenda.timeunits import parse_time

MONDAY = date(2024, 6, 10)
WEEK = tuple(date(2024, 6, 9) + timedelta(days=offset) for offset in range(7))


def _event(
    event_id: int,
    start: str,
    end: str,
    day: date | None = MONDAY,
    department: Department = Department.ENGINEERING,
) -> Event:
    return Event(
        id=event_id,
        title=f"event-{event_id}",
        start_minutes=parse_time(start),
        end_minutes=parse_time(end, end_of_day=True),
        category=Category.WORK,
        department=department,
        date=day,
    )


def test_place_event_uses_window_relative_fractions():
    placed = place_event(_event(1, "09:00", "10:30"), WORKDAY_WINDOW)

    assert placed.top_fraction == Fraction(60, 720)
    assert placed.height_fraction == Fraction(90, 720)
    assert placed.top_slot == 4
    assert placed.slot_span == 6


def test_events_touching_window_edges_reach_zero_and_one():
    first = place_event(_event(1, "08:00", "09:00"), WORKDAY_WINDOW)
    last = place_event(_event(2, "19:00", "20:00"), WORKDAY_WINDOW)
    whole = place_event(_event(3, "00:00", "24:00"), FULL_DAY_WINDOW)

    assert first.top_fraction == 0
    assert last.bottom_fraction == 1
    assert (whole.top_fraction, whole.height_fraction) == (0, 1)


def test_event_outside_window_is_a_precondition_violation():
    with pytest.raises(ValueError):
        place_event(_event(1, "07:00", "09:00"), WORKDAY_WINDOW)


def test_layout_buckets_every_visible_date_in_order():
    events = [
        _event(1, "09:00", "10:00", day=date(2024, 6, 12)),
        _event(2, "09:00", "10:00", day=MONDAY),
        _event(3, "09:00", "10:00", day=date(2024, 6, 20)),
    ]
    result = layout(events, "all", WEEK, WORKDAY_WINDOW)

    assert list(result) == list(WEEK)
    assert [placed.event.id for placed in result[MONDAY]] == [2]
    assert [placed.event.id for placed in result[date(2024, 6, 12)]] == [1]
    assert result[date(2024, 6, 9)] == []
    assert all(placed.event.id != 3 for column in result.values() for placed in column)


def test_layout_filters_by_department():
    events = [
        _event(1, "09:00", "10:00", department=Department.HR),
        _event(2, "09:30", "10:30", department=Department.SALES),
    ]
    result = layout(events, Department.HR, (MONDAY,), WORKDAY_WINDOW)

    assert [placed.event.id for placed in result[MONDAY]] == [1]
    assert result[MONDAY][0].has_conflict is False


def test_conflict_flags_are_scoped_to_one_day():
    events = [
        _event(1, "08:00", "09:00"),
        _event(2, "08:30", "09:30"),
        _event(3, "09:30", "10:00"),
        _event(4, "08:00", "09:00", day=date(2024, 6, 11)),
    ]
    result = layout(events, "all", WEEK, WORKDAY_WINDOW)
    flags = {placed.event.id: placed.has_conflict for column in result.values() for placed in column}

    assert flags == {1: True, 2: True, 3: False, 4: False}
    assert result[MONDAY][0].elevated


def test_stack_order_follows_creation_order():
    events = [_event(5, "08:00", "09:00"), _event(2, "08:00", "09:00"), _event(9, "12:00", "13:00")]
    placed = layout(events, "all", (MONDAY,), WORKDAY_WINDOW)[MONDAY]

    assert [item.stack_order for item in placed] == [0, 1, 2]


def test_single_day_variant_uses_one_implicit_bucket():
    events = [_event(1, "00:00", "01:00", day=None), _event(2, "00:30", "02:00", day=None)]
    result = layout(events, "all", None, FULL_DAY_WINDOW)

    assert list(result) == [None]
    assert [placed.has_conflict for placed in result[None]] == [True, True]


def test_geometry_stays_inside_the_column():
    starts = ["08:00", "10:15", "13:30", "18:45"]
    ends = ["08:15", "12:00", "17:00", "20:00"]
    events = [_event(index, start, end) for index, (start, end) in enumerate(zip(starts, ends), 1)]

    for placed in layout(events, "all", (MONDAY,), WORKDAY_WINDOW)[MONDAY]:
        assert 0 <= placed.top_fraction
        assert placed.top_fraction + placed.height_fraction <= 1
        assert placed.height_fraction > 0


def test_empty_collection_yields_empty_columns():
    assert layout([], "all", (MONDAY,), WORKDAY_WINDOW) == {MONDAY: []}
