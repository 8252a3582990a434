from datetime import date

import pytest

from src.agenda.config import CalendarSettings
from src.agenda.models import FULL_DAY_WINDOW, WORKDAY_WINDOW, Category, DayWindow, Department
from src.agenda.navigator import Direction, StepUnit, ViewMode
from src.agenda.state import AppState, UnknownEventError, counter_ids
from src.agenda.validator import Accepted, Rejected, RejectionReason

DEMO_DAY = date(2024, 6, 10)


def _state(**overrides) -> AppState:
    return AppState(anchor_date=DEMO_DAY, **overrides)


def test_demo_and_review_conflict_across_the_week_view():
    state = _state()

    _, demo = state.add_event("Demo", "08:00", "09:00", Category.WORK, Department.ENGINEERING, DEMO_DAY)
    outcome, review = state.add_event(
        "Review", "08:30", "09:30", Category.PERSONAL, Department.ENGINEERING, "2024-06-10"
    )

    assert isinstance(outcome, Accepted)
    assert outcome.conflicts == frozenset({demo.id})
    assert [event.title for event in state.events] == ["Demo", "Review"]

    placed = state.calendar()[DEMO_DAY]
    assert [item.event.id for item in placed] == [demo.id, review.id]
    assert all(item.has_conflict for item in placed)

    state.set_filter("HR")
    assert state.calendar()[DEMO_DAY] == []


def test_rejected_event_is_not_stored():
    state = _state()
    outcome, event = state.add_event("X", "09:00", "08:00")

    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectionReason.END_BEFORE_START
    assert event is None
    assert state.events == []


def test_ids_come_from_the_injected_factory():
    state = _state(id_factory=counter_ids(100))
    _, first = state.add_event("A", "08:00", "08:15", date_value=DEMO_DAY)
    _, second = state.add_event("B", "08:00", "08:15", date_value=DEMO_DAY)

    assert (first.id, second.id) == (100, 101)


def test_submit_uses_and_resets_the_form():
    state = _state()
    state.form_draft.title = "Planning"
    state.form_draft.start_time = "10:00"
    state.form_draft.end_time = "11:00"
    state.form_draft.department = Department.SALES

    outcome, event = state.submit()

    assert isinstance(outcome, Accepted)
    assert event.department is Department.SALES
    assert event.date == DEMO_DAY
    assert state.form_draft.title == ""
    assert state.form_draft.start_time == "08:00"


def test_failed_submit_keeps_the_form():
    state = _state()
    state.form_draft.start_time = "10:00"

    outcome, event = state.submit()

    assert outcome.reason is RejectionReason.EMPTY_TITLE
    assert event is None
    assert state.form_draft.start_time == "10:00"


def test_remove_event():
    state = _state()
    _, event = state.add_event("Demo", "08:00", "09:00", date_value=DEMO_DAY)

    assert state.remove_event(event.id) == event
    assert state.events == []
    with pytest.raises(UnknownEventError):
        state.remove_event(event.id)


def test_navigation_moves_the_visible_range():
    state = _state()
    state.navigate(StepUnit.WEEK, Direction.FORWARD)

    assert state.anchor_date == date(2024, 6, 17)
    assert state.visible_range()[0] == date(2024, 6, 16)

    state.go_to(DEMO_DAY)
    assert state.anchor_date == DEMO_DAY


def test_single_day_settings_use_a_full_day_window():
    state = _state(settings=CalendarSettings(window=FULL_DAY_WINDOW, view_mode=ViewMode.DAY))
    state.add_event("Late", "23:00", "24:00", date_value=DEMO_DAY)

    result = state.calendar()
    assert list(result) == [DEMO_DAY]
    assert result[DEMO_DAY][0].bottom_fraction == 1


def test_settings_cannot_orphan_existing_events():
    state = _state(settings=CalendarSettings(window=FULL_DAY_WINDOW))
    state.add_event("Early", "06:00", "07:00", date_value=DEMO_DAY)

    narrower = CalendarSettings(window=WORKDAY_WINDOW)
    assert [event.title for event in state.events_outside(narrower)] == ["Early"]
    with pytest.raises(ValueError):
        state.update_settings(narrower)

    wider = CalendarSettings(window=DayWindow(start=360, end=1320))
    state.update_settings(wider)
    assert state.settings is wider
    assert state.form_draft.start_time == "06:00"


def test_undated_event_is_scoped_to_the_anchor_day():
    state = _state()
    _, tuesday = state.add_event("Tue", "08:00", "09:00", date_value=date(2024, 6, 11))

    outcome, event = state.add_event("Nodate", "08:00", "09:00")

    assert outcome.conflicts == frozenset()
    assert event.date == DEMO_DAY
    columns = state.calendar()
    assert [item.event.title for item in columns[DEMO_DAY]] == ["Nodate"]
    assert [item.event.id for item in columns[tuesday.date]] == [tuesday.id]


def test_update_form_applies_picker_rules():
    state = _state()

    assert state.update_form(start_time="19:45") is None
    assert (state.form_draft.start_time, state.form_draft.end_time) == ("19:45", "20:00")

    refused = state.update_form(end_time="19:30")
    assert refused.reason is RejectionReason.END_BEFORE_START
    assert state.form_draft.end_time == "20:00"

    bad = state.update_form(start_time="7pm")
    assert bad.reason is RejectionReason.INVALID_FORMAT
    assert bad.field == "start_time"
    assert state.form_draft.start_time == "19:45"

    assert state.update_form(title="Wrap-up", date_value="2024-06-12", category=Category.HEALTH) is None
    assert state.form_draft.date == date(2024, 6, 12)
    assert state.form_draft.category is Category.HEALTH
