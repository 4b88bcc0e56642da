from datetime import datetime, timedelta

import pytest

from nebula.bridge import CalendarBridge
from nebula.coordinator import Coordinator
from nebula.core.views import SUNDAY
from nebula.ports.calendar_provider import AuthorizationStatus
from nebula.store import TaskStore

from .fakes import FakeCalendarProvider, FakeTaskRepository


class SteppingClock:
    """Clock that advances one minute per call."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 9, 30)


@pytest.fixture
def clock(now):
    return SteppingClock(now)


@pytest.fixture
def repo():
    return FakeTaskRepository()


@pytest.fixture
def store(repo, clock):
    return TaskStore(repo, clock=clock)


@pytest.fixture
def provider():
    return FakeCalendarProvider(status=AuthorizationStatus.GRANTED)


@pytest.fixture
def bridge(provider, now):
    return CalendarBridge(provider, clock=lambda: now)


@pytest.fixture
def coordinator(store, bridge, now):
    return Coordinator(store, bridge, first_weekday=SUNDAY, clock=lambda: now)
