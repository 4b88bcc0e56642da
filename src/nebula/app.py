"""Wiring - builds the store, bridge and coordinator from configuration."""

import logging

from .adapters.composite_calendar import CompositeCalendarProvider
from .adapters.google_calendar import GoogleCalendarProvider
from .adapters.icalpal import IcalPalProvider
from .adapters.json_store import JsonTaskRepository
from .bridge import CalendarBridge
from .config import Config, load_config
from .coordinator import Coordinator
from .ports.calendar_provider import CalendarProvider
from .store import TaskStore

logger = logging.getLogger(__name__)


def get_task_store(config: Config) -> TaskStore:
    """Task store backed by the configured JSON file."""
    return TaskStore(JsonTaskRepository(config.tasks_path))


def get_calendar_providers(config: Config) -> list[CalendarProvider]:
    """Calendar providers for every configured source."""
    providers: list[CalendarProvider] = []
    for source in config.calendar_sources:
        match source:
            case "google":
                for account in config.google_accounts:
                    providers.append(
                        GoogleCalendarProvider(
                            config_folder=account.config_folder,
                            label=account.label,
                            calendars=account.calendars or None,
                            client_secret_file=config.google_client_secret_file,
                            timezone=config.timezone,
                        )
                    )
            case "icalpal":
                providers.append(
                    IcalPalProvider(
                        include_calendars=config.icalpal_include_calendars or None,
                        exclude_calendars=config.icalpal_exclude_calendars or None,
                    )
                )
            case _:
                logger.warning(f"Unknown calendar source: {source}")
    return providers


def get_calendar_bridge(config: Config) -> CalendarBridge:
    provider = CompositeCalendarProvider(get_calendar_providers(config))
    return CalendarBridge(provider, window_days=config.calendar_window_days)


def build_coordinator(config: Config | None = None) -> Coordinator:
    """Coordinator wired to the configured store and calendar sources."""
    config = config or load_config()
    return Coordinator(
        store=get_task_store(config),
        bridge=get_calendar_bridge(config),
        first_weekday=config.first_weekday_number,
    )
