"""icalPal adapter - subprocess wrapper for macOS Calendar."""

import json
import logging
import subprocess
from datetime import datetime

from nebula.core.calendar import CalendarEvent
from nebula.errors import AuthorizationError, CalendarError
from nebula.ports.calendar_provider import AuthorizationStatus

logger = logging.getLogger(__name__)


class IcalPalProvider:
    """
    icalPal subprocess adapter.

    Implements CalendarProvider protocol. Reads events from macOS Calendar via
    the icalPal CLI tool. Access is granted once icalPal can read the calendar
    database; macOS refuses it until the terminal has Full Disk Access.
    """

    def __init__(
        self,
        include_calendars: list[str] | None = None,
        exclude_calendars: list[str] | None = None,
        timeout: int = 30,
    ):
        self.include_calendars = include_calendars
        self.exclude_calendars = exclude_calendars
        self.timeout = timeout
        self._status = AuthorizationStatus.NOT_DETERMINED

    def authorization_status(self) -> AuthorizationStatus:
        return self._status

    def request_access(self) -> bool:
        """Probe the calendar database by listing calendars."""
        try:
            subprocess.run(
                ["icalPal", "calendars", "-o", "json"],
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            logger.warning(f"icalPal cannot read the calendar database: {e.stderr or e}")
            self._status = AuthorizationStatus.DENIED
            return False
        except FileNotFoundError as e:
            raise AuthorizationError("icalPal not found - install with 'brew install icalpal'") from e
        except subprocess.TimeoutExpired as e:
            raise AuthorizationError(f"icalPal timed out after {self.timeout}s") from e

        self._status = AuthorizationStatus.GRANTED
        return True

    def fetch_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """Fetch events intersecting [start, end)."""
        cmd = [
            "icalPal",
            "events",
            "--from",
            start.date().isoformat(),
            "--to",
            end.date().isoformat(),
            "-o",
            "json",
        ]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
            data = json.loads(result.stdout) if result.stdout else []
        except subprocess.CalledProcessError as e:
            raise CalendarError(f"icalPal command failed: {e}") from e
        except FileNotFoundError as e:
            raise CalendarError("icalPal not found - install with 'brew install icalpal'") from e
        except subprocess.TimeoutExpired as e:
            raise CalendarError(f"icalPal timed out after {self.timeout}s") from e
        except json.JSONDecodeError as e:
            raise CalendarError(f"Failed to parse icalPal output: {e}") from e

        events = self._parse_events(data)
        return [e for e in events if e.overlaps(start, end)]

    def _parse_events(self, data: list[dict]) -> list[CalendarEvent]:
        """Parse icalPal JSON output into CalendarEvent objects."""
        events = []

        for item in data:
            cal_name = item.get("calendar", "")

            if self.include_calendars and cal_name not in self.include_calendars:
                continue
            if self.exclude_calendars and cal_name in self.exclude_calendars:
                continue

            try:
                event = self._parse_event(item)
                if event:
                    events.append(event)
            except (ValueError, KeyError, TypeError) as e:
                logger.debug(f"Skipping malformed event: {e}")
                continue

        return events

    def _parse_event(self, item: dict) -> CalendarEvent | None:
        """Build a CalendarEvent from one icalPal record, None if malformed."""
        is_all_day = item.get("all_day") == 1

        # sseconds is the series start for recurring events, sctime is the occurrence
        sctime = item.get("sctime", "")
        ectime = item.get("ectime", "")

        if sctime:
            start = datetime.strptime(sctime[:19], "%Y-%m-%d %H:%M:%S")
        elif item.get("sseconds"):
            start = datetime.fromtimestamp(item["sseconds"])
        else:
            return None

        if ectime:
            end = datetime.strptime(ectime[:19], "%Y-%m-%d %H:%M:%S")
        elif item.get("eseconds"):
            end = datetime.fromtimestamp(item["eseconds"])
        else:
            end = start

        return CalendarEvent(
            title=item.get("title") or "Untitled",
            start=start,
            end=end,
            calendar=item.get("calendar", ""),
            all_day=is_all_day,
            location=item.get("location") or item.get("address") or None,
            notes=item.get("notes") or None,
            color=item.get("color") or None,
            source="icalpal",
        )
