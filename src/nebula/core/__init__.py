"""Functional core - pure business logic with no I/O."""

from .tasks import Task, Priority, Category, sort_tasks, validate_title
from .calendar import CalendarEvent, events_in_range, events_on_day, sort_events_by_start
from .views import (
    ViewMode,
    DensityLevel,
    tasks_for_day,
    tasks_for_week,
    today_tasks,
    density,
    density_level,
    month_grid,
)

__all__ = [
    # Tasks
    "Task",
    "Priority",
    "Category",
    "sort_tasks",
    "validate_title",
    # Calendar
    "CalendarEvent",
    "events_in_range",
    "events_on_day",
    "sort_events_by_start",
    # Views
    "ViewMode",
    "DensityLevel",
    "tasks_for_day",
    "tasks_for_week",
    "today_tasks",
    "density",
    "density_level",
    "month_grid",
]
