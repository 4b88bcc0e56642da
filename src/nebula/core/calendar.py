"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


@dataclass(frozen=True)
class CalendarEvent:
    """A read-only copy of an event owned by an external calendar."""

    title: str
    start: datetime
    end: datetime
    calendar: str
    all_day: bool = False
    location: str | None = None
    notes: str | None = None
    color: str | None = None
    source: str = ""

    def format_time(self) -> str:
        """Format the event time range for display."""
        if self.all_day:
            return "All day"
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Half-open overlap with [start, end)."""
        return self.start < end and self.end > start


def start_of_day(day: date | datetime) -> datetime:
    """Midnight at the beginning of the given day."""
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day, time.min)


def day_bounds(day: date | datetime) -> tuple[datetime, datetime]:
    """[start, end) of the given day."""
    start = start_of_day(day)
    return start, start + timedelta(days=1)


def fetch_window(now: datetime | None = None, days: int = 30) -> tuple[datetime, datetime]:
    """The rolling fetch window: [start of today, start of today + days)."""
    start = start_of_day(now or datetime.now())
    return start, start + timedelta(days=days)


def events_in_range(
    events: list[CalendarEvent],
    start: datetime,
    end: datetime,
) -> list[CalendarEvent]:
    """
    Filter events that intersect [start, end).

    Multi-day and all-day events that merely touch the window are included.
    Pure function - no I/O.
    """
    return [e for e in events if e.overlaps(start, end)]


def events_on_day(events: list[CalendarEvent], day: date | datetime) -> list[CalendarEvent]:
    """Filter events that intersect the given calendar day."""
    start, end = day_bounds(day)
    return events_in_range(events, start, end)


def sort_events_by_start(events: list[CalendarEvent]) -> list[CalendarEvent]:
    """Sort events by start time."""
    return sorted(events, key=lambda e: e.start)
