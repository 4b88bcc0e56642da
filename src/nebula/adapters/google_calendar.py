"""Google Calendar API adapter."""

import logging
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from nebula.core.calendar import CalendarEvent
from nebula.errors import AuthorizationError, CalendarError
from nebula.ports.calendar_provider import AuthorizationStatus

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]


class GoogleCalendarProvider:
    """
    Reads events from Google Calendar via the API.

    Implements CalendarProvider protocol. Each account keeps its OAuth token in
    its own config folder; a stored token counts as granted access.
    """

    def __init__(
        self,
        config_folder: str,
        label: str | None = None,
        calendars: list[str] | None = None,
        client_secret_file: str = "",
        timezone: str = "America/Toronto",
    ):
        self.config_folder = config_folder
        self.label = label or Path(config_folder).name
        self.calendars = calendars
        self.client_secret_file = client_secret_file
        self.timezone = timezone
        self._token_path = Path(config_folder).expanduser() / "token.json"
        self._denied = False

    def authorization_status(self) -> AuthorizationStatus:
        if self._token_path.exists():
            return AuthorizationStatus.GRANTED
        if self._denied:
            return AuthorizationStatus.DENIED
        return AuthorizationStatus.NOT_DETERMINED

    def request_access(self) -> bool:
        """Run the OAuth consent flow for this account."""
        from google_auth_oauthlib.flow import InstalledAppFlow
        from oauthlib.oauth2.rfc6749.errors import AccessDeniedError

        if not self.client_secret_file:
            raise AuthorizationError("No client secret file configured")

        secret_path = Path(self.client_secret_file).expanduser()
        if not secret_path.exists():
            raise AuthorizationError(f"Client secret file not found: {secret_path}")

        try:
            flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), SCOPES)
            creds = flow.run_local_server(port=0)
        except AccessDeniedError:
            logger.info(f"Calendar access denied for {self.label}")
            self._denied = True
            return False
        except (OSError, ValueError) as e:
            raise AuthorizationError(f"OAuth flow failed for {self.label}: {e}") from e

        self._token_path.parent.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        self._token_path.chmod(0o600)
        self._denied = False
        return True

    def _get_credentials(self):
        """Load credentials from token.json, refreshing if needed."""
        from google.auth.exceptions import RefreshError
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self._token_path.exists():
            logger.warning(f"No token.json for {self.label} - run 'nebula calendar auth'")
            return None

        creds = Credentials.from_authorized_user_file(str(self._token_path), SCOPES)

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
                self._token_path.write_text(creds.to_json())
                self._token_path.chmod(0o600)
            except RefreshError as e:
                logger.warning(f"Failed to refresh token for {self.label}: {e}")
                return None

        return creds

    def _build_service(self):
        """Build a Google Calendar API service."""
        from googleapiclient.discovery import build

        creds = self._get_credentials()
        if not creds:
            return None
        return build("calendar", "v3", credentials=creds)

    def _resolve_calendars(self, service) -> list[tuple[str, str, str | None]]:
        """Resolve the configured calendars to (id, title, colour) tuples."""
        result = service.calendarList().list().execute()
        entries = result.get("items", [])

        if not self.calendars:
            selected = [e for e in entries if e.get("primary")]
        else:
            by_name = {e.get("summary"): e for e in entries}
            selected = []
            for name in self.calendars:
                if name in by_name:
                    selected.append(by_name[name])
                else:
                    logger.warning(f"Calendar '{name}' not found for {self.label}")

        if not selected:
            return [("primary", self.label, None)]
        return [
            (e["id"], e.get("summary") or self.label, e.get("backgroundColor"))
            for e in selected
        ]

    def fetch_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """Fetch events intersecting [start, end)."""
        from google.auth.exceptions import GoogleAuthError
        from googleapiclient.errors import HttpError

        try:
            return self._fetch_range_api(start, end)
        except (HttpError, GoogleAuthError, OSError, ValueError) as e:
            raise CalendarError(f"Google Calendar API error for {self.label}: {e}") from e

    def _fetch_range_api(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        service = self._build_service()
        if not service:
            raise CalendarError(f"No valid credentials for {self.label}")

        tz = ZoneInfo(self.timezone)
        time_min = start.astimezone(tz).isoformat()
        time_max = end.astimezone(tz).isoformat()

        events = []
        for cal_id, cal_title, color in self._resolve_calendars(service):
            page_token = None
            while True:
                result = (
                    service.events()
                    .list(
                        calendarId=cal_id,
                        timeMin=time_min,
                        timeMax=time_max,
                        singleEvents=True,
                        orderBy="startTime",
                        timeZone=self.timezone,
                        pageToken=page_token,
                    )
                    .execute()
                )

                for item in result.get("items", []):
                    event = self._parse_event(item, cal_title, color, tz)
                    if event:
                        events.append(event)

                page_token = result.get("nextPageToken")
                if not page_token:
                    break

        return events

    def _parse_event(
        self, item: dict, cal_title: str, color: str | None, tz: ZoneInfo
    ) -> CalendarEvent | None:
        """Parse a single API event into local wall-clock time."""
        start_raw = item.get("start", {})
        end_raw = item.get("end", {})

        try:
            if "date" in start_raw:
                # All-day: end date is already exclusive
                start_dt = datetime.combine(date.fromisoformat(start_raw["date"]), datetime.min.time())
                end_dt = (
                    datetime.combine(date.fromisoformat(end_raw["date"]), datetime.min.time())
                    if "date" in end_raw
                    else start_dt
                )
                all_day = True
            elif "dateTime" in start_raw:
                start_dt = datetime.fromisoformat(start_raw["dateTime"]).astimezone(tz).replace(tzinfo=None)
                end_dt = (
                    datetime.fromisoformat(end_raw["dateTime"]).astimezone(tz).replace(tzinfo=None)
                    if "dateTime" in end_raw
                    else start_dt
                )
                all_day = False
            else:
                return None
        except ValueError as e:
            logger.debug(f"Skipping malformed event: {e}")
            return None

        return CalendarEvent(
            title=item.get("summary") or "Untitled",
            start=start_dt,
            end=end_dt,
            calendar=cal_title,
            all_day=all_day,
            location=item.get("location") or None,
            notes=item.get("description") or None,
            color=color,
            source="google_calendar",
        )
