"""Configuration management for Nebula."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

NEBULA_HOME = Path(os.environ.get("NEBULA_HOME", Path.home() / "nebula"))
CONFIG_FILE = NEBULA_HOME / "config" / "nebula.conf"
DATA_DIR = NEBULA_HOME / "data"

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


@dataclass
class GoogleAccount:
    """A Google Calendar account configuration."""

    config_folder: str
    label: str | None = None
    calendars: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Nebula configuration."""

    timezone: str = "America/Toronto"
    first_weekday: str = "Sunday"
    calendar_window_days: int = 30
    calendar_sources: list[str] = field(default_factory=list)
    google_accounts: list[GoogleAccount] = field(default_factory=list)
    google_client_secret_file: str = ""
    icalpal_include_calendars: list[str] = field(default_factory=list)
    icalpal_exclude_calendars: list[str] = field(default_factory=list)
    tasks_file: str = ""

    @property
    def first_weekday_number(self) -> int:
        """first_weekday as datetime.weekday() numbering (Monday is 0)."""
        name = self.first_weekday.strip().lower()
        if name in WEEKDAYS:
            return WEEKDAYS.index(name)
        logger.warning(f"Unknown FIRST_WEEKDAY {self.first_weekday!r}, using Sunday")
        return WEEKDAYS.index("sunday")

    @property
    def tasks_path(self) -> Path:
        if self.tasks_file:
            return Path(self.tasks_file).expanduser()
        return DATA_DIR / "tasks.json"


def _split_list(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def _parse_google_accounts(value: str) -> list[GoogleAccount]:
    # JSON format: [{"config_folder": "...", "label": "...", "calendars": [...]}]
    # Simple format: "path1:label1,path2:label2"
    accounts = []
    if value.startswith("["):
        try:
            data = json.loads(value)
            for item in data:
                accounts.append(
                    GoogleAccount(
                        config_folder=item["config_folder"],
                        label=item.get("label"),
                        calendars=item.get("calendars", []),
                    )
                )
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Failed to parse GOOGLE_ACCOUNTS JSON: {e}")
    else:
        for entry in _split_list(value):
            if ":" in entry:
                folder, label = entry.split(":", 1)
                accounts.append(GoogleAccount(folder.strip(), label.strip()))
            else:
                accounts.append(GoogleAccount(entry))
    return accounts


def _strip_value(value: str) -> str:
    """Remove quotes and inline comments from a raw config value."""
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from nebula.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _strip_value(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "first_weekday":
                config.first_weekday = value
            case "calendar_window_days":
                try:
                    config.calendar_window_days = int(value)
                except ValueError:
                    logger.warning(f"Invalid CALENDAR_WINDOW_DAYS {value!r}, keeping default")
            case "calendar_sources":
                config.calendar_sources = [s.lower() for s in _split_list(value)]
            case "google_accounts":
                config.google_accounts = _parse_google_accounts(value)
            case "google_client_secret_file":
                config.google_client_secret_file = value
            case "icalpal_include_calendars":
                config.icalpal_include_calendars = _split_list(value)
            case "icalpal_exclude_calendars":
                config.icalpal_exclude_calendars = _split_list(value)
            case "tasks_file":
                config.tasks_file = value
            case _:
                logger.debug(f"Ignoring unknown config key: {key}")

    return config
