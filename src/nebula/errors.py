"""Error taxonomy shared by the store, the calendar bridge and the CLI."""


class NebulaError(Exception):
    """Base class for errors the application reports to the user."""

    pass


class NotFoundError(NebulaError):
    """Raised when a mutation targets a task that does not exist."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class PersistenceError(NebulaError):
    """Raised when the task repository cannot be read or written."""

    pass


class ValidationError(NebulaError):
    """Raised when task fields are rejected before reaching the store."""

    pass


class AuthorizationError(NebulaError):
    """Raised when the calendar provider fails while requesting consent."""

    pass


class CalendarError(NebulaError):
    """Raised when the calendar provider fails to return events."""

    pass
