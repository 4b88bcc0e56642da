"""JSON file task repository adapter."""

import json
import logging
import os
import tempfile
from pathlib import Path

from nebula.core.tasks import Task
from nebula.errors import PersistenceError

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class JsonTaskRepository:
    """
    File-based task storage.

    Implements TaskRepository protocol. The whole collection lives in one JSON
    document that is rewritten atomically on every save.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> list[Task]:
        """Load every stored task in storage order."""
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Corrupt task file {self.path}: {e}") from e

        if isinstance(data, list):
            records = data
        elif isinstance(data, dict):
            records = data.get("tasks", [])
        else:
            raise PersistenceError(f"Corrupt task file {self.path}: unexpected {type(data).__name__}")
        if not isinstance(records, list):
            raise PersistenceError(f"Corrupt task file {self.path}: tasks is not a list")

        tasks = []
        for item in records:
            try:
                tasks.append(Task.from_dict(item))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed task record: {e}")
                continue
        return tasks

    def save(self, tasks: list[Task]) -> None:
        """Replace the stored collection."""
        payload = json.dumps(
            {"version": FORMAT_VERSION, "tasks": [t.to_dict() for t in tasks]},
            indent=2,
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e
        logger.debug(f"Saved {len(tasks)} tasks to {self.path}")
