"""REST API exposing the calendar engine to a front end."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Literal, Optional, Union

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field, model_validator

from ..agenda.config import CalendarSettings, configure_logging
from ..agenda.layout import PlacedEvent
from ..agenda.models import Category, DayWindow, Department, Event
from ..agenda.navigator import (
    WEEKDAY_NAMES,
    Direction,
    StepUnit,
    ViewMode,
    parse_weekday,
    range_label,
)
from ..agenda.state import AppState, IdFactory, UnknownEventError
from ..agenda.timeunits import (
    end_options,
    format_boundary,
    format_date,
    format_time,
    parse_time,
    slot_labels,
    start_options,
)
from ..agenda.validator import OVERLAP_WARNING, Rejected, ValidationResult

logger = logging.getLogger(__name__)


class EventPayload(BaseModel):
    """Fields entered in the "add event" form."""

    title: str
    start_time: str = Field(description="Start time as HH:mm")
    end_time: str = Field(description="End time as HH:mm, 24:00 allowed")
    date: Optional[str] = Field(default=None, description="Day key as YYYY-MM-DD")


class EventCreateRequest(EventPayload):
    category: Category = Category.WORK
    department: Department = Department.ENGINEERING


class EventResponse(BaseModel):
    id: int
    title: str
    date: Optional[str]
    start_time: str
    end_time: str
    category: Category
    department: Department
    color: str
    tooltip: str


class PlacedEventResponse(EventResponse):
    top_fraction: float
    height_fraction: float
    top_slot: float
    slot_span: float
    has_conflict: bool
    elevated: bool
    stack_order: int


class DayColumn(BaseModel):
    date: Optional[str]
    events: List[PlacedEventResponse]


class WindowResponse(BaseModel):
    start: str
    end: str
    step: int


class CalendarResponse(BaseModel):
    anchor_date: str
    label: str
    view_mode: ViewMode
    week_start: str
    department_filter: str
    window: WindowResponse
    days: List[DayColumn]


class CreatedResponse(BaseModel):
    event: EventResponse
    conflicts: List[int]
    warning: Optional[str]


class CheckResponse(BaseModel):
    ok: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    field: Optional[str] = None
    conflicts: List[int] = Field(default_factory=list)
    warning: Optional[str] = None


class SlotsResponse(BaseModel):
    slots: List[str]
    start_options: List[str]
    end_options: List[str]


class FormResponse(BaseModel):
    title: str
    start_time: str
    end_time: str
    category: Category
    department: Department
    date: Optional[str]


class FormUpdate(BaseModel):
    """Partial form change, as sent by one picker or text field."""

    title: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    category: Optional[Category] = None
    department: Optional[Department] = None
    date: Optional[str] = None


class FilterUpdate(BaseModel):
    department: Union[Department, Literal["all"]]


class NavigationRequest(BaseModel):
    unit: Optional[StepUnit] = None
    direction: Optional[Direction] = None
    target: Optional[date] = Field(default=None, description="Jump straight to this date")
    today: bool = False

    @model_validator(mode="after")
    def _check_action(self) -> NavigationRequest:
        stepping = self.unit is not None or self.direction is not None
        if stepping and (self.unit is None or self.direction is None):
            raise ValueError("Stepping requires both 'unit' and 'direction'")
        actions = sum([stepping, self.target is not None, self.today])
        if actions != 1:
            raise ValueError("Provide exactly one of unit/direction, 'target' or 'today'")
        return self


class SettingsUpdate(BaseModel):
    day_start: str = Field(description="Window start as HH:mm")
    day_end: str = Field(description="Window end as HH:mm, 24:00 allowed")
    step: int = Field(default=15, gt=0)
    view_mode: ViewMode = ViewMode.WEEK
    week_start: str = "sunday"

    @model_validator(mode="after")
    def _check_bounds(self) -> SettingsUpdate:
        self.build_settings(CalendarSettings())
        return self

    def build_settings(self, current: CalendarSettings) -> CalendarSettings:
        window = DayWindow(
            start=parse_time(self.day_start),
            end=parse_time(self.day_end, end_of_day=True),
            step=self.step,
        )
        return CalendarSettings(
            window=window,
            view_mode=self.view_mode,
            week_start=parse_weekday(self.week_start),
            log_level=current.log_level,
        )


def _serialize_event(event: Event) -> EventResponse:
    return EventResponse(**_event_fields(event))


def _serialize_placed(placed: PlacedEvent) -> PlacedEventResponse:
    return PlacedEventResponse(
        **_event_fields(placed.event),
        top_fraction=float(placed.top_fraction),
        height_fraction=float(placed.height_fraction),
        top_slot=float(placed.top_slot),
        slot_span=float(placed.slot_span),
        has_conflict=placed.has_conflict,
        elevated=placed.elevated,
        stack_order=placed.stack_order,
    )


def _event_fields(event: Event) -> dict[str, object]:
    return {
        "id": event.id,
        "title": event.title,
        "date": format_date(event.date) if event.date else None,
        "start_time": event.start_time,
        "end_time": event.end_time,
        "category": event.category,
        "department": event.department,
        "color": event.category.color,
        "tooltip": event.describe(),
    }


def _serialize_form(state: AppState) -> FormResponse:
    draft = state.form_draft
    assert draft is not None
    return FormResponse(
        title=draft.title,
        start_time=draft.start_time,
        end_time=draft.end_time,
        category=draft.category,
        department=draft.department,
        date=format_date(draft.date) if draft.date else None,
    )


def _created_response(outcome: ValidationResult, event: Optional[Event]) -> CreatedResponse:
    if isinstance(outcome, Rejected) or event is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_rejection_detail(outcome),
        )
    return CreatedResponse(
        event=_serialize_event(event),
        conflicts=sorted(outcome.conflicts),
        warning=OVERLAP_WARNING if outcome.has_overlap else None,
    )


def _rejection_detail(outcome: Rejected) -> dict[str, object]:
    return {
        "reason": outcome.reason.value,
        "message": outcome.message,
        "field": outcome.field,
    }


def _check_response(outcome: ValidationResult) -> CheckResponse:
    if isinstance(outcome, Rejected):
        return CheckResponse(ok=False, **_rejection_detail(outcome))
    return CheckResponse(
        ok=True,
        conflicts=sorted(outcome.conflicts),
        warning=OVERLAP_WARNING if outcome.has_overlap else None,
    )


def create_app(
    settings: Optional[CalendarSettings] = None,
    *,
    today: Callable[[], date] = date.today,
    id_factory: Optional[IdFactory] = None,
) -> FastAPI:
    settings = settings or CalendarSettings.from_env()
    configure_logging(settings.log_level)

    state = AppState(anchor_date=today(), settings=settings)
    if id_factory is not None:
        state.id_factory = id_factory

    app = FastAPI(title="Agenda Calendar API")
    app.state.agenda = state
    logger.info("Agenda API ready: %s", settings.describe())

    @app.get("/api/calendar", response_model=CalendarResponse)
    def get_calendar() -> CalendarResponse:
        current = state.settings
        columns = state.calendar()
        dates = state.visible_range()
        department_filter = state.department_filter
        return CalendarResponse(
            anchor_date=format_date(state.anchor_date),
            label=range_label(dates),
            view_mode=current.view_mode,
            week_start=WEEKDAY_NAMES[current.week_start],
            department_filter=getattr(department_filter, "value", department_filter),
            window=WindowResponse(
                start=format_time(current.window.start),
                end=format_boundary(current.window.end),
                step=current.window.step,
            ),
            days=[
                DayColumn(
                    date=format_date(day) if day else None,
                    events=[_serialize_placed(placed) for placed in placed_events],
                )
                for day, placed_events in columns.items()
            ],
        )

    @app.get("/api/slots", response_model=SlotsResponse)
    def get_slots() -> SlotsResponse:
        window = state.settings.window
        return SlotsResponse(
            slots=slot_labels(window),
            start_options=start_options(window),
            end_options=end_options(window),
        )

    @app.post("/api/events/check", response_model=CheckResponse)
    def check_event(payload: EventPayload) -> CheckResponse:
        outcome = state.check(payload.title, payload.start_time, payload.end_time, payload.date)
        return _check_response(outcome)

    @app.post("/api/events", status_code=status.HTTP_201_CREATED, response_model=CreatedResponse)
    def create_event(payload: EventCreateRequest) -> CreatedResponse:
        outcome, event = state.add_event(
            payload.title,
            payload.start_time,
            payload.end_time,
            payload.category,
            payload.department,
            payload.date,
        )
        return _created_response(outcome, event)

    @app.get("/api/form", response_model=FormResponse)
    def get_form() -> FormResponse:
        return _serialize_form(state)

    @app.put("/api/form", response_model=FormResponse)
    def update_form(payload: FormUpdate) -> FormResponse:
        refused = state.update_form(
            title=payload.title,
            start_time=payload.start_time,
            end_time=payload.end_time,
            category=payload.category,
            department=payload.department,
            date_value=payload.date,
        )
        if refused is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=_rejection_detail(refused),
            )
        return _serialize_form(state)

    @app.post("/api/form/submit", status_code=status.HTTP_201_CREATED, response_model=CreatedResponse)
    def submit_form() -> CreatedResponse:
        outcome, event = state.submit()
        return _created_response(outcome, event)

    @app.delete("/api/events/{event_id}", response_model=EventResponse)
    def delete_event(event_id: int) -> EventResponse:
        try:
            removed = state.remove_event(event_id)
        except UnknownEventError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Event '{event_id}' was not found.",
            )
        return _serialize_event(removed)

    @app.put("/api/filter", response_model=CalendarResponse)
    def update_filter(payload: FilterUpdate) -> CalendarResponse:
        state.set_filter(payload.department)
        return get_calendar()

    @app.post("/api/navigation", response_model=CalendarResponse)
    def navigate(payload: NavigationRequest) -> CalendarResponse:
        if payload.today:
            state.go_to(today())
        elif payload.target is not None:
            state.go_to(payload.target)
        else:
            assert payload.unit is not None and payload.direction is not None
            state.navigate(payload.unit, payload.direction)
        return get_calendar()

    @app.put("/api/settings", response_model=CalendarResponse)
    def update_settings(payload: SettingsUpdate) -> CalendarResponse:
        new_settings = payload.build_settings(state.settings)
        orphaned = state.events_outside(new_settings)
        if orphaned:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "message": f"{len(orphaned)} event(s) fall outside the new day window",
                    "events": [event.id for event in orphaned],
                },
            )
        state.update_settings(new_settings)
        return get_calendar()

    return app


app = create_app()
