"""Task store - the single owner of the task collection."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import datetime
from typing import Callable

from .core.tasks import Category, Priority, Task, validate_title
from .errors import NotFoundError, PersistenceError
from .observers import Observable
from .ports.task_repo import TaskRepository

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class TaskStore(Observable[list[Task]]):
    """
    Durable CRUD over tasks.

    Writes go through the repository first; the in-memory list is only
    replaced by re-listing the repository after a successful save, so a failed
    write leaves the current snapshot untouched. If that re-listing fails the
    saved list is used instead. Subscribers receive the new snapshot after
    every successful mutation.
    """

    def __init__(
        self,
        repository: TaskRepository,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = _new_id,
    ):
        super().__init__()
        self._repo = repository
        self._clock = clock
        self._id_factory = id_factory
        self._tasks: list[Task] = self._repo.load()
        self._last_created = max((t.creation_date for t in self._tasks), default=None)
        logger.debug(f"TaskStore ready with {len(self._tasks)} tasks")

    def list(self) -> list[Task]:
        """Every task in storage order."""
        return list(self._tasks)

    def get(self, task_id: str) -> Task:
        return self._tasks[self._index_of(task_id)]

    def refresh(self) -> list[Task]:
        """Re-read the repository and publish the result."""
        self._tasks = self._repo.load()
        self._publish(self.list())
        return self.list()

    def create(
        self,
        title: str,
        description: str = "",
        due_date: datetime | None = None,
        priority: Priority = Priority.LOW,
        category: Category = Category.OTHER,
    ) -> Task:
        """Create, persist and return a new task."""
        title = validate_title(title)
        created = self._next_creation_time()
        task = Task(
            id=self._id_factory(),
            title=title,
            description=description or "",
            due_date=due_date or created,
            priority=priority,
            category=category,
            is_completed=False,
            creation_date=created,
        )
        self._commit(self._tasks + [task])
        self._last_created = created
        logger.info(f"Created task {task.id}: {task.title}")
        return self._find(task.id) or task

    def update(
        self,
        task_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        due_date: datetime | None = None,
        priority: Priority | None = None,
        category: Category | None = None,
        is_completed: bool | None = None,
    ) -> Task:
        """Apply the given field changes; fields left as None are untouched."""
        index = self._index_of(task_id)

        changes = {}
        if title is not None:
            changes["title"] = validate_title(title)
        if description is not None:
            changes["description"] = description
        if due_date is not None:
            changes["due_date"] = due_date
        if priority is not None:
            changes["priority"] = priority
        if category is not None:
            changes["category"] = category
        if is_completed is not None:
            changes["is_completed"] = is_completed

        updated = dataclasses.replace(self._tasks[index], **changes)
        tasks = list(self._tasks)
        tasks[index] = updated
        self._commit(tasks)
        logger.info(f"Updated task {task_id}: {', '.join(changes) or 'no changes'}")
        return self._find(task_id) or updated

    def toggle_completion(self, task_id: str) -> Task:
        task = self.get(task_id)
        return self.update(task_id, is_completed=not task.is_completed)

    def delete(self, task_id: str) -> None:
        """Remove a task. Deleting an absent task raises NotFoundError."""
        index = self._index_of(task_id)
        tasks = list(self._tasks)
        del tasks[index]
        self._commit(tasks)
        logger.info(f"Deleted task {task_id}")

    def _commit(self, tasks: list[Task]) -> None:
        self._repo.save(tasks)
        try:
            self.refresh()
        except PersistenceError as e:
            # The save went through, so the saved list is what storage holds
            logger.warning(f"Reload after save failed, using saved tasks: {e}")
            self._tasks = list(tasks)
            self._publish(self.list())

    def _next_creation_time(self) -> datetime:
        now = self._clock()
        if self._last_created and now < self._last_created:
            return self._last_created
        return now

    def _find(self, task_id: str) -> Task | None:
        return next((t for t in self._tasks if t.id == task_id), None)

    def _index_of(self, task_id: str) -> int:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        raise NotFoundError(task_id)
