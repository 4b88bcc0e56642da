"""Calendar provider interface."""

from datetime import datetime
from enum import Enum
from typing import Protocol

from nebula.core.calendar import CalendarEvent


class AuthorizationStatus(Enum):
    """Consent state for reading the user's calendar."""

    NOT_DETERMINED = "not_determined"
    GRANTED = "granted"
    DENIED = "denied"


class CalendarProvider(Protocol):
    """Interface for reading events from an externally owned calendar."""

    def authorization_status(self) -> AuthorizationStatus:
        """Current consent state, without prompting the user."""
        ...

    def request_access(self) -> bool:
        """Ask for consent. True if granted. Raises AuthorizationError."""
        ...

    def fetch_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """Events intersecting [start, end). Raises CalendarError."""
        ...
