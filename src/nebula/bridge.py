"""Calendar bridge - read-only cache over an external calendar provider."""

import asyncio
import logging
from datetime import date, datetime
from typing import Callable

from .core.calendar import (
    CalendarEvent,
    events_in_range,
    events_on_day,
    fetch_window,
    sort_events_by_start,
)
from .errors import AuthorizationError, CalendarError
from .observers import Observable
from .ports.calendar_provider import AuthorizationStatus, CalendarProvider

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30


class CalendarBridge(Observable["CalendarBridge"]):
    """
    Mediates access to a platform-owned calendar. Never writes to it.

    Provider calls run in a worker thread. The event cache is an immutable
    tuple replaced in a single assignment once a fetch completes, so readers
    see either the previous or the new result in full. Overlapping
    fetch_events() calls share one in-flight fetch.
    """

    def __init__(
        self,
        provider: CalendarProvider,
        window_days: int = DEFAULT_WINDOW_DAYS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__()
        self.provider = provider
        self.window_days = window_days
        self._clock = clock
        self.status = provider.authorization_status()
        self.is_loading = False
        self.error_message: str | None = None
        self._events: tuple[CalendarEvent, ...] = ()
        self._inflight: asyncio.Task | None = None

    @property
    def events(self) -> list[CalendarEvent]:
        return list(self._events)

    def check_authorization_status(self) -> AuthorizationStatus:
        self.status = self.provider.authorization_status()
        return self.status

    async def request_access(self) -> AuthorizationStatus:
        """
        Ask the provider for consent, suspending only the awaiting coroutine.

        Provider failures set error_message and keep the previous status.
        """
        try:
            granted = await asyncio.to_thread(self.provider.request_access)
        except AuthorizationError as e:
            self.error_message = f"Failed to request calendar access: {e}"
            logger.warning(self.error_message)
            self._publish(self)
            return self.status

        self.status = AuthorizationStatus.GRANTED if granted else AuthorizationStatus.DENIED
        logger.info(f"Calendar authorization: {self.status.value}")
        self._publish(self)
        if granted:
            await self.fetch_events()
        return self.status

    async def fetch_events(self) -> None:
        """Refresh the cache with the rolling window. No-op unless granted."""
        if self.status != AuthorizationStatus.GRANTED:
            logger.debug(f"Skipping calendar fetch, status is {self.status.value}")
            return

        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._fetch())
        await asyncio.shield(self._inflight)

    refresh_events = fetch_events

    async def _fetch(self) -> None:
        start, end = fetch_window(self._clock(), self.window_days)
        self.is_loading = True
        self.error_message = None
        self._publish(self)
        try:
            fetched = await asyncio.to_thread(self.provider.fetch_events, start, end)
        except CalendarError as e:
            # Keep the previous cache; stale data beats no data
            self.error_message = f"Failed to fetch calendar events: {e}"
            logger.warning(self.error_message)
        else:
            self._events = tuple(sort_events_by_start(fetched))
            logger.info(f"Fetched {len(self._events)} calendar events")
        finally:
            self.is_loading = False
        self._publish(self)

    def events_for_date(self, day: date | datetime) -> list[CalendarEvent]:
        """Events intersecting the given calendar day."""
        return events_on_day(list(self._events), day)

    def events_for_range(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """Events intersecting [start, end)."""
        return events_in_range(list(self._events), start, end)
