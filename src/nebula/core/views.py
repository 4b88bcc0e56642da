"""Date-bucketed projections over tasks - pure functions, no I/O."""

from datetime import date, datetime, timedelta
from enum import Enum

from .calendar import day_bounds
from .tasks import Task

# Weekday numbers follow datetime.weekday(): Monday is 0, Sunday is 6
MONDAY = 0
SUNDAY = 6

HIGH_DENSITY = 0.3
MEDIUM_DENSITY = 0.1


class ViewMode(Enum):
    """Which projection the presentation layer is showing."""

    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    FOCUS = "Focus"


class DensityLevel(Enum):
    """Bucketed task density for a day."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _as_date(day: date | datetime) -> date:
    return day.date() if isinstance(day, datetime) else day


def tasks_for_day(tasks: list[Task], day: date | datetime) -> list[Task]:
    """Tasks due within [start of day, start of next day)."""
    start, end = day_bounds(day)
    return [t for t in tasks if t.is_due_on(start, end)]


def today_tasks(tasks: list[Task], now: datetime | None = None) -> list[Task]:
    """Tasks due today."""
    return tasks_for_day(tasks, now or datetime.now())


def week_start(day: date | datetime, first_weekday: int = SUNDAY) -> date:
    """First day of the week containing day."""
    d = _as_date(day)
    return d - timedelta(days=(d.weekday() - first_weekday) % 7)


def week_days(day: date | datetime, first_weekday: int = SUNDAY) -> list[date]:
    """The seven days of the week containing day, in week order."""
    start = week_start(day, first_weekday)
    return [start + timedelta(days=i) for i in range(7)]


def tasks_for_week(
    tasks: list[Task],
    day: date | datetime,
    first_weekday: int = SUNDAY,
) -> list[tuple[date, list[Task]]]:
    """Tasks grouped by each day of the week containing day."""
    return [(d, tasks_for_day(tasks, d)) for d in week_days(day, first_weekday)]


def density(tasks: list[Task], day: date | datetime) -> float:
    """Fraction of all tasks due on day; 0 when there are no tasks."""
    if not tasks:
        return 0.0
    return len(tasks_for_day(tasks, day)) / len(tasks)


def density_level(value: float) -> DensityLevel:
    """Bucket a density value using the fixed display thresholds."""
    if value > HIGH_DENSITY:
        return DensityLevel.HIGH
    elif value > MEDIUM_DENSITY:
        return DensityLevel.MEDIUM
    elif value > 0:
        return DensityLevel.LOW
    else:
        return DensityLevel.NONE


def month_grid(year: int, month: int, first_weekday: int = SUNDAY) -> list[date]:
    """
    Every day of the complete weeks that cover a month.

    Includes the trailing days of the neighbouring months needed to fill the
    first and last week, so the result always splits into rows of seven.
    """
    first = date(year, month, 1)
    next_month = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    last = next_month - timedelta(days=1)

    start = week_start(first, first_weekday)
    end = week_start(last, first_weekday) + timedelta(days=7)
    return [start + timedelta(days=i) for i in range((end - start).days)]


def month_density(
    tasks: list[Task],
    year: int,
    month: int,
    first_weekday: int = SUNDAY,
) -> list[tuple[date, float]]:
    """Density for every day of the month grid."""
    return [(d, density(tasks, d)) for d in month_grid(year, month, first_weekday)]
