"""Pure task domain logic - no I/O dependencies."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from nebula.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Task"


class Priority(Enum):
    """Task priority. Values are what gets persisted."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"

    @property
    def order(self) -> int:
        """Sort rank: 0 is most urgent."""
        return _PRIORITY_ORDER[self]

    @classmethod
    def parse(cls, value: str | None) -> "Priority":
        """Parse a persisted or user-supplied value, falling back to LOW."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower() if value else ""
        for member in cls:
            if text in (member.value.lower(), member.name.lower()):
                return member
        if value:
            logger.warning(f"Unknown priority {value!r}, using {cls.LOW.value}")
        return cls.LOW


_PRIORITY_ORDER = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}


class Category(Enum):
    """Task category. Values are what gets persisted."""

    WORK = "Work"
    PERSONAL = "Personal"
    HEALTH = "Health"
    FINANCE = "Finance"
    LEARNING = "Learning"
    SOCIAL = "Social"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str | None) -> "Category":
        """Parse a persisted or user-supplied value, falling back to OTHER."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower() if value else ""
        for member in cls:
            if text in (member.value.lower(), member.name.lower()):
                return member
        if value:
            logger.warning(f"Unknown category {value!r}, using {cls.OTHER.value}")
        return cls.OTHER


@dataclass
class Task:
    """A single actionable item."""

    id: str
    title: str
    due_date: datetime
    creation_date: datetime
    description: str = ""
    priority: Priority = Priority.LOW
    category: Category = Category.OTHER
    is_completed: bool = False

    def is_due_on(self, start: datetime, end: datetime) -> bool:
        """Check if the due date falls within [start, end)."""
        return start <= self.due_date < end

    def is_overdue(self, as_of: datetime | None = None) -> bool:
        """Incomplete and due before as_of."""
        as_of = as_of or datetime.now()
        return not self.is_completed and self.due_date < as_of

    def to_dict(self) -> dict:
        """Serialize to plain JSON-compatible data."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date.isoformat(),
            "priority": self.priority.value,
            "category": self.category.value,
            "is_completed": self.is_completed,
            "creation_date": self.creation_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """
        Create Task from persisted data.

        Damaged optional fields load with defaults instead of failing:
        missing title -> DEFAULT_TITLE, unknown priority -> LOW,
        unknown category -> OTHER, missing due date -> creation date.
        """
        created = _parse_datetime(data.get("creation_date")) or datetime.now()
        due = _parse_datetime(data.get("due_date")) or created
        return cls(
            id=data["id"],
            title=data.get("title") or DEFAULT_TITLE,
            description=data.get("description") or "",
            due_date=due,
            priority=Priority.parse(data.get("priority")),
            category=Category.parse(data.get("category")),
            is_completed=data.get("is_completed") is True,
            creation_date=created,
        )


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.debug(f"Ignoring malformed timestamp: {value!r}")
        return None
    # Core works in naive local time
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def validate_title(title: str | None) -> str:
    """Strip a title and reject it if nothing is left."""
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Task title must not be empty")
    return cleaned


def sort_tasks(tasks: list[Task]) -> list[Task]:
    """
    Sort for display: open tasks first, then priority, due date, creation.

    Pure function - no I/O.
    """
    return sorted(
        tasks,
        key=lambda t: (t.is_completed, t.priority.order, t.due_date, t.creation_date),
    )


def filter_open(tasks: list[Task]) -> list[Task]:
    """Filter to tasks that are not completed."""
    return [t for t in tasks if not t.is_completed]


def filter_by_category(tasks: list[Task], category: Category) -> list[Task]:
    """Filter tasks to a single category."""
    return [t for t in tasks if t.category is category]
