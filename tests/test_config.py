"""Tests for configuration loading and wiring."""

from pathlib import Path

import pytest

from nebula.adapters.composite_calendar import CompositeCalendarProvider
from nebula.adapters.google_calendar import GoogleCalendarProvider
from nebula.adapters.icalpal import IcalPalProvider
from nebula.app import build_coordinator, get_calendar_providers
from nebula.config import DATA_DIR, Config, GoogleAccount, load_config
from nebula.core.views import MONDAY, SUNDAY


@pytest.fixture
def write_config(tmp_path):
    def _write(text: str) -> Path:
        path = tmp_path / "nebula.conf"
        path.write_text(text)
        return path
    return _write


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.conf")
        assert config == Config()
        assert config.calendar_window_days == 30

    def test_basic_keys(self, write_config):
        path = write_config(
            "# Nebula settings\n"
            "TIMEZONE = Europe/Berlin\n"
            "FIRST_WEEKDAY = Monday\n"
            "CALENDAR_WINDOW_DAYS = 14\n"
            "CALENDAR_SOURCES = google, icalpal\n"
            "TASKS_FILE = ~/tasks.json\n"
        )
        config = load_config(path)
        assert config.timezone == "Europe/Berlin"
        assert config.first_weekday_number == MONDAY
        assert config.calendar_window_days == 14
        assert config.calendar_sources == ["google", "icalpal"]
        assert config.tasks_path == Path.home() / "tasks.json"

    def test_quoted_values_and_inline_comments(self, write_config):
        path = write_config(
            'GOOGLE_CLIENT_SECRET_FILE = "/path/with # hash.json" # comment\n'
            "TIMEZONE = UTC # trailing\n"
        )
        config = load_config(path)
        assert config.google_client_secret_file == "/path/with # hash.json"
        assert config.timezone == "UTC"

    def test_google_accounts_json(self, write_config):
        path = write_config(
            'GOOGLE_ACCOUNTS = [{"config_folder": "~/.gcal/work", "label": "Work", "calendars": ["Team"]}]\n'
        )
        [account] = load_config(path).google_accounts
        assert account == GoogleAccount("~/.gcal/work", "Work", ["Team"])

    def test_google_accounts_simple(self, write_config):
        path = write_config("GOOGLE_ACCOUNTS = ~/.gcal/work:Work, ~/.gcal/home\n")
        accounts = load_config(path).google_accounts
        assert accounts == [GoogleAccount("~/.gcal/work", "Work"), GoogleAccount("~/.gcal/home")]

    def test_bad_json_is_ignored(self, write_config):
        path = write_config("GOOGLE_ACCOUNTS = [{broken\n")
        assert load_config(path).google_accounts == []

    def test_bad_window_keeps_default(self, write_config):
        path = write_config("CALENDAR_WINDOW_DAYS = soon\n")
        assert load_config(path).calendar_window_days == 30

    def test_icalpal_filters(self, write_config):
        path = write_config("ICALPAL_INCLUDE_CALENDARS = Home, Work\nICALPAL_EXCLUDE_CALENDARS = Birthdays\n")
        config = load_config(path)
        assert config.icalpal_include_calendars == ["Home", "Work"]
        assert config.icalpal_exclude_calendars == ["Birthdays"]


class TestConfigProperties:
    def test_unknown_weekday_falls_back_to_sunday(self):
        assert Config(first_weekday="Funday").first_weekday_number == SUNDAY

    def test_default_tasks_path(self):
        assert Config().tasks_path == DATA_DIR / "tasks.json"


class TestWiring:
    def test_no_sources(self):
        assert get_calendar_providers(Config()) == []

    def test_sources(self):
        config = Config(
            calendar_sources=["google", "icalpal", "outlook"],
            google_accounts=[GoogleAccount("/tmp/a", "A"), GoogleAccount("/tmp/b", "B")],
            timezone="UTC",
        )
        providers = get_calendar_providers(config)
        assert [type(p) for p in providers] == [GoogleCalendarProvider, GoogleCalendarProvider, IcalPalProvider]
        assert providers[0].timezone == "UTC"

    def test_build_coordinator(self, tmp_path):
        config = Config(tasks_file=str(tmp_path / "tasks.json"), first_weekday="Monday", calendar_window_days=7)
        coordinator = build_coordinator(config)

        assert coordinator.first_weekday == MONDAY
        assert coordinator.tasks == []
        assert isinstance(coordinator.bridge.provider, CompositeCalendarProvider)
        assert coordinator.bridge.window_days == 7
