"""Runtime configuration for the calendar engine and its HTTP shell."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .models import WORKDAY_WINDOW, DayWindow
from .navigator import SUNDAY, WEEKDAY_NAMES, ViewMode, parse_weekday
from .timeunits import parse_time

LOGGER_NAMES = ("src.agenda", "src.api")
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

ENV_DAY_START = "AGENDA_DAY_START"
ENV_DAY_END = "AGENDA_DAY_END"
ENV_STEP_MINUTES = "AGENDA_STEP_MINUTES"
ENV_VIEW = "AGENDA_VIEW"
ENV_WEEK_START = "AGENDA_WEEK_START"
ENV_LOG_LEVEL = "AGENDA_LOG_LEVEL"


@dataclass(frozen=True)
class CalendarSettings:
    """Day window, view shape and logging level shared by a session."""

    window: DayWindow = WORKDAY_WINDOW
    view_mode: ViewMode = ViewMode.WEEK
    week_start: int = SUNDAY
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not 0 <= self.week_start < len(WEEKDAY_NAMES):
            raise ValueError(f"week_start must be a weekday index 0-6, got {self.week_start}")
        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> CalendarSettings:
        env = os.environ if environ is None else environ
        default = cls()

        start = env.get(ENV_DAY_START)
        end = env.get(ENV_DAY_END)
        step = env.get(ENV_STEP_MINUTES)
        window = DayWindow(
            start=parse_time(start) if start else default.window.start,
            end=parse_time(end, end_of_day=True) if end else default.window.end,
            step=int(step) if step else default.window.step,
        )

        view = env.get(ENV_VIEW)
        week_start = env.get(ENV_WEEK_START)
        return cls(
            window=window,
            view_mode=ViewMode(view.strip().lower()) if view else default.view_mode,
            week_start=parse_weekday(week_start) if week_start else default.week_start,
            log_level=env.get(ENV_LOG_LEVEL, default.log_level).upper(),
        )

    def with_window(self, window: DayWindow) -> CalendarSettings:
        return replace(self, window=window)

    def describe(self) -> str:
        return (
            f"window={self.window.label()}"
            f" step={self.window.step} view={self.view_mode.value}"
            f" week_start={WEEKDAY_NAMES[self.week_start]}"
        )


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one console handler each to the engine and API loggers.

    Returns the engine logger.
    """

    loggers = [logging.getLogger(name) for name in LOGGER_NAMES]
    for logger in loggers:
        logger.setLevel(level.upper())
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
            logger.addHandler(handler)
    return loggers[0]
