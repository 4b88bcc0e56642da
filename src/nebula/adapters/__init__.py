"""Adapters - I/O implementations of ports."""

from .json_store import JsonTaskRepository
from .google_calendar import GoogleCalendarProvider
from .icalpal import IcalPalProvider
from .composite_calendar import CompositeCalendarProvider

__all__ = [
    "JsonTaskRepository",
    "GoogleCalendarProvider",
    "IcalPalProvider",
    "CompositeCalendarProvider",
]
