from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Literal, Union

from .timeunits import MINUTES_PER_DAY, format_boundary, format_time


class Category(str, Enum):
    """Presentational grouping of an event."""

    WORK = "Work"
    PERSONAL = "Personal"
    HEALTH = "Health"
    OTHER = "Other"

    @property
    def color(self) -> str:
        return _CATEGORY_COLORS[self]


_CATEGORY_COLORS = {
    Category.WORK: "purple",
    Category.PERSONAL: "green",
    Category.HEALTH: "pink",
    Category.OTHER: "gray",
}


class Department(str, Enum):
    HR = "HR"
    ENGINEERING = "Engineering"
    MARKETING = "Marketing"
    SALES = "Sales"


ALL_DEPARTMENTS = "all"
DepartmentFilter = Union[Department, Literal["all"]]


@dataclass(frozen=True)
class DayWindow:
    """Schedulable portion of a day, expressed in minute offsets."""

    start: int
    end: int
    step: int = 15

    def __post_init__(self) -> None:
        if not 0 <= self.start < self.end <= MINUTES_PER_DAY:
            raise ValueError(
                f"Day window must satisfy 0 <= start < end <= {MINUTES_PER_DAY}, "
                f"got {self.start}-{self.end}"
            )
        if self.step <= 0:
            raise ValueError("Step must be positive")
        if (self.end - self.start) % self.step != 0:
            raise ValueError(
                f"Day window length {self.end - self.start} is not a multiple of step {self.step}"
            )

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, start_minutes: int, end_minutes: int) -> bool:
        return start_minutes >= self.start and end_minutes <= self.end

    def label(self) -> str:
        return f"{format_time(self.start)}-{format_boundary(self.end)}"


WORKDAY_WINDOW = DayWindow(start=8 * 60, end=20 * 60)
FULL_DAY_WINDOW = DayWindow(start=0, end=MINUTES_PER_DAY)


@dataclass(frozen=True)
class EventDraft:
    """Accepted but not yet stored event fields."""

    title: str
    start_minutes: int
    end_minutes: int
    date: date | None = None

    @property
    def start_time(self) -> str:
        return format_time(self.start_minutes)

    @property
    def end_time(self) -> str:
        return format_boundary(self.end_minutes)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def to_event(
        self,
        event_id: int,
        category: Category = Category.WORK,
        department: Department = Department.ENGINEERING,
    ) -> Event:
        return Event(
            id=event_id,
            title=self.title,
            start_minutes=self.start_minutes,
            end_minutes=self.end_minutes,
            category=Category(category),
            department=Department(department),
            date=self.date,
        )


@dataclass(frozen=True)
class Event:
    """A single scheduled occurrence."""

    id: int
    title: str
    start_minutes: int
    end_minutes: int
    category: Category
    department: Department
    date: date | None = None

    def __post_init__(self) -> None:
        if not self.title or self.title != self.title.strip():
            raise ValueError("Event title must be non-empty and trimmed")
        if not 0 <= self.start_minutes < self.end_minutes <= MINUTES_PER_DAY:
            raise ValueError("Event must start before it ends within a single day")

    @property
    def start_time(self) -> str:
        return format_time(self.start_minutes)

    @property
    def end_time(self) -> str:
        return format_boundary(self.end_minutes)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def describe(self) -> str:
        return (
            f"{self.title} ({self.start_time} - {self.end_time})\n"
            f"Category: {self.category.value}\n"
            f"Department: {self.department.value}"
        )


def matches_department(event: Event, department_filter: DepartmentFilter) -> bool:
    if department_filter == ALL_DEPARTMENTS:
        return True
    return event.department == Department(department_filter)
