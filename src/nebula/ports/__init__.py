"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskRepository
from .calendar_provider import AuthorizationStatus, CalendarProvider

__all__ = [
    "TaskRepository",
    "AuthorizationStatus",
    "CalendarProvider",
]
