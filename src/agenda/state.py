from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Tuple

from .config import CalendarSettings
from .errors import FormatError
from .layout import CalendarLayout, layout
from .models import ALL_DEPARTMENTS, Category, Department, DepartmentFilter, Event
from .navigator import Direction, StepUnit, step, visible_range
from .timeunits import parse_date
from .validator import (
    Accepted,
    FormDraft,
    Rejected,
    RejectionReason,
    ValidationResult,
    adjust_end_for_start,
    check_end_choice,
    validate_event,
)

logger = logging.getLogger(__name__)

IdFactory = Callable[[], int]


def counter_ids(start: int = 1) -> IdFactory:
    return itertools.count(start).__next__


class UnknownEventError(KeyError):
    """Raised when removing an event id that is not in the store."""


@dataclass
class AppState:
    """Session state owned by the hosting shell.

    ``events`` is append-only apart from explicit removal, so its order is the
    creation order used for stacking.
    """

    anchor_date: date
    settings: CalendarSettings = field(default_factory=CalendarSettings)
    events: List[Event] = field(default_factory=list)
    department_filter: DepartmentFilter = ALL_DEPARTMENTS
    form_draft: Optional[FormDraft] = None
    id_factory: IdFactory = field(default_factory=counter_ids)

    def __post_init__(self) -> None:
        if self.form_draft is None:
            self.reset_form()

    # Events -------------------------------------------------------------------------
    def check(
        self,
        title: str,
        start_time: str,
        end_time: str,
        date_value: date | str | None = None,
    ) -> ValidationResult:
        """Validate against the stored events.

        Every view is keyed by real dates, so an event sent without one lands on
        the anchor date.
        """

        if date_value is None or date_value == "":
            date_value = self.anchor_date
        return validate_event(
            title,
            start_time,
            end_time,
            self.settings.window,
            date_value,
            existing=self.events,
        )

    def add_event(
        self,
        title: str,
        start_time: str,
        end_time: str,
        category: Category = Category.WORK,
        department: Department = Department.ENGINEERING,
        date_value: date | str | None = None,
    ) -> Tuple[ValidationResult, Optional[Event]]:
        """Validate and store a new event.

        Returns the validation outcome together with the created event, which
        is ``None`` when the outcome is a rejection.
        """

        outcome = self.check(title, start_time, end_time, date_value)
        if not isinstance(outcome, Accepted):
            return outcome, None

        event = outcome.draft.to_event(self.id_factory(), category, department)
        self.events.append(event)
        logger.info(
            "Added event %s %r on %s (%s - %s)",
            event.id,
            event.title,
            event.date or "the current day",
            event.start_time,
            event.end_time,
        )
        return outcome, event

    def submit(self) -> Tuple[ValidationResult, Optional[Event]]:
        """Create an event from the form draft and reset the form on success."""

        draft = self.form_draft
        assert draft is not None
        outcome, event = self.add_event(
            draft.title,
            draft.start_time,
            draft.end_time,
            draft.category,
            draft.department,
            draft.date,
        )
        if event is not None:
            self.reset_form()
        return outcome, event

    def remove_event(self, event_id: int) -> Event:
        for index, event in enumerate(self.events):
            if event.id == event_id:
                del self.events[index]
                logger.info("Removed event %s %r", event.id, event.title)
                return event
        raise UnknownEventError(event_id)

    def update_form(
        self,
        *,
        title: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        category: Optional[Category] = None,
        department: Optional[Department] = None,
        date_value: date | str | None = None,
    ) -> Optional[Rejected]:
        """Apply picker changes to the form draft.

        A new start at or past the end pushes the end one step later. An end at
        or before the start is refused and leaves the draft untouched.
        """

        draft = self.form_draft
        assert draft is not None
        window = self.settings.window
        new_end = draft.end_time
        field_name = "date"
        try:
            if isinstance(date_value, str):
                date_value = parse_date(date_value)
            if start_time is not None:
                field_name = "start_time"
                new_end = adjust_end_for_start(start_time, draft.end_time, window)
            if end_time is not None:
                field_name = "end_time"
                refused = check_end_choice(start_time or draft.start_time, end_time)
                if refused is not None:
                    return refused
        except FormatError as exc:
            return Rejected(
                reason=RejectionReason.INVALID_FORMAT,
                message=str(exc),
                field=field_name,
            )

        if start_time is not None:
            draft.start_time = start_time
            draft.end_time = new_end
        if end_time is not None:
            draft.end_time = end_time
        if title is not None:
            draft.title = title
        if category is not None:
            draft.category = Category(category)
        if department is not None:
            draft.department = Department(department)
        if date_value is not None:
            draft.date = date_value
        return None

    def reset_form(self) -> None:
        self.form_draft = FormDraft.blank(self.settings.window, self.anchor_date)

    # View ---------------------------------------------------------------------------
    def set_filter(self, department_filter: DepartmentFilter) -> None:
        if department_filter != ALL_DEPARTMENTS:
            department_filter = Department(department_filter)
        self.department_filter = department_filter

    def navigate(self, unit: StepUnit, direction: Direction) -> date:
        self.anchor_date = step(self.anchor_date, unit, direction)
        return self.anchor_date

    def go_to(self, anchor: date) -> date:
        self.anchor_date = anchor
        return self.anchor_date

    def visible_range(self) -> Tuple[date, ...]:
        return visible_range(self.anchor_date, self.settings.view_mode, self.settings.week_start)

    def calendar(self) -> CalendarLayout:
        return layout(
            self.events,
            self.department_filter,
            self.visible_range(),
            self.settings.window,
        )

    def events_outside(self, settings: CalendarSettings) -> List[Event]:
        window = settings.window
        return [
            event
            for event in self.events
            if not window.contains(event.start_minutes, event.end_minutes)
        ]

    def update_settings(self, settings: CalendarSettings) -> None:
        """Swap settings; callers must check :meth:`events_outside` first."""

        orphaned = self.events_outside(settings)
        if orphaned:
            raise ValueError(
                f"{len(orphaned)} event(s) fall outside window {settings.window.label()}"
            )
        self.settings = settings
        self.reset_form()
        logger.info("Calendar settings updated: %s", settings.describe())
