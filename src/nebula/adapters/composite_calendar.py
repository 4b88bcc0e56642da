"""Composite calendar adapter - combines multiple calendar sources."""

import logging
from datetime import datetime

from nebula.core.calendar import CalendarEvent, sort_events_by_start
from nebula.errors import AuthorizationError, CalendarError
from nebula.ports.calendar_provider import AuthorizationStatus, CalendarProvider

logger = logging.getLogger(__name__)


class CompositeCalendarProvider:
    """
    Composite calendar provider over several sources.

    Implements CalendarProvider protocol. Granted when any source is granted,
    denied when every source is denied. Fetches only from granted sources.
    """

    def __init__(self, providers: list[CalendarProvider]):
        self.providers = providers

    def authorization_status(self) -> AuthorizationStatus:
        statuses = [p.authorization_status() for p in self.providers]
        if AuthorizationStatus.GRANTED in statuses:
            return AuthorizationStatus.GRANTED
        if statuses and all(s == AuthorizationStatus.DENIED for s in statuses):
            return AuthorizationStatus.DENIED
        return AuthorizationStatus.NOT_DETERMINED

    def request_access(self) -> bool:
        """Request access from every source that is not yet granted."""
        errors = []
        for provider in self.providers:
            if provider.authorization_status() == AuthorizationStatus.GRANTED:
                continue
            try:
                provider.request_access()
            except AuthorizationError as e:
                logger.warning(f"Calendar source refused access request: {e}")
                errors.append(e)

        if self.authorization_status() == AuthorizationStatus.GRANTED:
            return True
        if errors and len(errors) == len(self.providers):
            raise AuthorizationError("; ".join(str(e) for e in errors))
        return False

    def fetch_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """Fetch from every granted source and merge by start time."""
        events = []
        failures = []
        granted = [
            p for p in self.providers
            if p.authorization_status() == AuthorizationStatus.GRANTED
        ]

        for provider in granted:
            try:
                events.extend(provider.fetch_events(start, end))
            except CalendarError as e:
                logger.warning(f"Calendar source failed: {e}")
                failures.append(e)

        if granted and len(failures) == len(granted):
            raise CalendarError("; ".join(str(e) for e in failures))

        return sort_events_by_start(events)
