"""Task repository interface."""

from typing import Protocol

from nebula.core.tasks import Task


class TaskRepository(Protocol):
    """Interface for durable task storage on any backend."""

    def load(self) -> list[Task]:
        """Load every stored task in storage order. Raises PersistenceError."""
        ...

    def save(self, tasks: list[Task]) -> None:
        """Replace the stored collection. Raises PersistenceError."""
        ...
