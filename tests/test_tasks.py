"""Tests for core task logic."""

from datetime import datetime, timedelta

import pytest

from nebula.core.tasks import (
    DEFAULT_TITLE,
    Category,
    Priority,
    Task,
    filter_by_category,
    filter_open,
    sort_tasks,
    validate_title,
)
from nebula.errors import ValidationError


@pytest.fixture
def created():
    return datetime(2025, 1, 15, 9, 0)


def make_task(task_id: str, created: datetime, **kwargs) -> Task:
    fields = dict(
        id=task_id,
        title=f"Task {task_id}",
        due_date=created,
        creation_date=created,
    )
    fields.update(kwargs)
    return Task(**fields)


class TestPriority:
    def test_order_urgent_first(self):
        ordered = sorted(Priority, key=lambda p: p.order)
        assert ordered == [Priority.URGENT, Priority.HIGH, Priority.MEDIUM, Priority.LOW]

    def test_parse_persisted_value(self):
        assert Priority.parse("High") is Priority.HIGH

    def test_parse_is_case_insensitive(self):
        assert Priority.parse("urgent") is Priority.URGENT
        assert Priority.parse("MEDIUM") is Priority.MEDIUM

    def test_parse_unknown_falls_back_to_low(self):
        assert Priority.parse("Critical") is Priority.LOW

    def test_parse_missing_falls_back_to_low(self):
        assert Priority.parse(None) is Priority.LOW
        assert Priority.parse("") is Priority.LOW


class TestCategory:
    def test_parse_persisted_value(self):
        assert Category.parse("Finance") is Category.FINANCE

    def test_parse_unknown_falls_back_to_other(self):
        assert Category.parse("Hobbies") is Category.OTHER
        assert Category.parse(None) is Category.OTHER


class TestTask:
    def test_is_due_on_half_open(self, created):
        task = make_task("1", created, due_date=datetime(2025, 1, 16))
        assert task.is_due_on(datetime(2025, 1, 16), datetime(2025, 1, 17)) is True
        assert task.is_due_on(datetime(2025, 1, 15), datetime(2025, 1, 16)) is False

    def test_is_overdue(self, created):
        task = make_task("1", created, due_date=created)
        assert task.is_overdue(as_of=created + timedelta(hours=1)) is True
        assert task.is_overdue(as_of=created - timedelta(hours=1)) is False

    def test_completed_task_is_never_overdue(self, created):
        task = make_task("1", created, is_completed=True)
        assert task.is_overdue(as_of=created + timedelta(days=3)) is False

    def test_to_dict(self, created):
        task = make_task(
            "abc",
            created,
            title="Pay rent",
            priority=Priority.HIGH,
            category=Category.FINANCE,
        )
        data = task.to_dict()
        assert data["id"] == "abc"
        assert data["priority"] == "High"
        assert data["category"] == "Finance"
        assert data["due_date"] == "2025-01-15T09:00:00"
        assert data["is_completed"] is False

    def test_from_dict(self):
        task = Task.from_dict(
            {
                "id": "abc",
                "title": "Pay rent",
                "description": "Landlord",
                "due_date": "2024-01-05T00:00:00",
                "priority": "High",
                "category": "Finance",
                "is_completed": True,
                "creation_date": "2024-01-01T12:00:00",
            }
        )
        assert task.title == "Pay rent"
        assert task.description == "Landlord"
        assert task.due_date == datetime(2024, 1, 5)
        assert task.priority is Priority.HIGH
        assert task.category is Category.FINANCE
        assert task.is_completed is True
        assert task.creation_date == datetime(2024, 1, 1, 12)

    def test_from_dict_unknown_enums_fall_back(self):
        task = Task.from_dict(
            {
                "id": "abc",
                "title": "Legacy",
                "priority": "Someday",
                "category": "Garden",
                "creation_date": "2024-01-01T12:00:00",
            }
        )
        assert task.priority is Priority.LOW
        assert task.category is Category.OTHER

    def test_from_dict_missing_title_and_due_date(self):
        task = Task.from_dict({"id": "abc", "creation_date": "2024-01-01T12:00:00"})
        assert task.title == DEFAULT_TITLE
        assert task.due_date == datetime(2024, 1, 1, 12)
        assert task.description == ""

    @pytest.mark.parametrize("value", ["false", "true", 1, None])
    def test_from_dict_completion_must_be_bool(self, value):
        task = Task.from_dict({"id": "abc", "is_completed": value})
        assert task.is_completed is False

    def test_from_dict_completed(self):
        assert Task.from_dict({"id": "abc", "is_completed": True}).is_completed is True

    def test_from_dict_requires_id(self):
        with pytest.raises(KeyError):
            Task.from_dict({"title": "No id"})


class TestValidateTitle:
    def test_strips_whitespace(self):
        assert validate_title("  Pay rent ") == "Pay rent"

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_rejects_blank(self, title):
        with pytest.raises(ValidationError):
            validate_title(title)


class TestSortTasks:
    def test_open_before_completed(self, created):
        done = make_task("1", created, priority=Priority.URGENT, is_completed=True)
        open_task = make_task("2", created, priority=Priority.LOW)
        assert [t.id for t in sort_tasks([done, open_task])] == ["2", "1"]

    def test_priority_then_due_date(self, created):
        low = make_task("low", created, priority=Priority.LOW)
        urgent_late = make_task("urgent-late", created, priority=Priority.URGENT, due_date=created + timedelta(days=2))
        urgent_soon = make_task("urgent-soon", created, priority=Priority.URGENT)
        high = make_task("high", created, priority=Priority.HIGH)

        result = sort_tasks([low, urgent_late, high, urgent_soon])

        assert [t.id for t in result] == ["urgent-soon", "urgent-late", "high", "low"]

    def test_does_not_mutate_input(self, created):
        tasks = [make_task("1", created, priority=Priority.LOW), make_task("2", created, priority=Priority.HIGH)]
        sort_tasks(tasks)
        assert [t.id for t in tasks] == ["1", "2"]


class TestFilters:
    def test_filter_open(self, created):
        tasks = [make_task("1", created, is_completed=True), make_task("2", created)]
        assert [t.id for t in filter_open(tasks)] == ["2"]

    def test_filter_by_category(self, created):
        tasks = [
            make_task("1", created, category=Category.WORK),
            make_task("2", created, category=Category.HEALTH),
        ]
        assert [t.id for t in filter_by_category(tasks, Category.HEALTH)] == ["2"]
