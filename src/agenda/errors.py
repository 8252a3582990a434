from __future__ import annotations


class AgendaError(Exception):
    """Base error for the agenda engine."""


class FormatError(AgendaError, ValueError):
    """Raised when time or date text does not match its wire format."""


class RangeError(AgendaError, ValueError):
    """Raised when a minute offset falls outside a single day."""
