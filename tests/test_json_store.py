"""Tests for the JSON file task repository."""

import json
from datetime import datetime
from unittest.mock import patch

import pytest

from nebula.adapters.json_store import JsonTaskRepository
from nebula.core.tasks import Category, Priority, Task
from nebula.errors import PersistenceError
from nebula.store import TaskStore


@pytest.fixture
def path(tmp_path):
    return tmp_path / "data" / "tasks.json"


@pytest.fixture
def task():
    return Task(
        id="abc",
        title="Pay rent",
        due_date=datetime(2024, 1, 5),
        creation_date=datetime(2024, 1, 1, 12),
        priority=Priority.HIGH,
        category=Category.FINANCE,
    )


class TestJsonTaskRepository:
    def test_missing_file_is_empty(self, path):
        assert JsonTaskRepository(path).load() == []

    def test_save_creates_parent_dirs(self, path, task):
        JsonTaskRepository(path).save([task])
        assert path.exists()

    def test_document_format(self, path, task):
        JsonTaskRepository(path).save([task])
        data = json.loads(path.read_text())
        assert data["version"] == 1
        assert data["tasks"][0]["id"] == "abc"
        assert data["tasks"][0]["priority"] == "High"

    def test_load_saved(self, path, task):
        repo = JsonTaskRepository(path)
        repo.save([task])
        assert repo.load() == [task]

    def test_no_temp_files_left_behind(self, path, task):
        JsonTaskRepository(path).save([task])
        assert [p.name for p in path.parent.iterdir()] == ["tasks.json"]

    def test_accepts_bare_list(self, path):
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps([{"id": "x", "title": "Bare"}]))
        [loaded] = JsonTaskRepository(path).load()
        assert loaded.title == "Bare"

    def test_skips_records_without_id(self, path):
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"tasks": [{"title": "No id"}, {"id": "ok", "title": "Fine"}]}))
        assert [t.id for t in JsonTaskRepository(path).load()] == ["ok"]

    def test_unknown_enum_values_load_with_defaults(self, path):
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"tasks": [{"id": "x", "title": "Old", "priority": "Eventually", "category": "Misc"}]}))
        [loaded] = JsonTaskRepository(path).load()
        assert loaded.priority is Priority.LOW
        assert loaded.category is Category.OTHER

    def test_corrupt_file_raises(self, path):
        path.parent.mkdir(parents=True)
        path.write_text("{not json")
        with pytest.raises(PersistenceError):
            JsonTaskRepository(path).load()

    def test_invalid_utf8_raises(self, path):
        path.parent.mkdir(parents=True)
        path.write_bytes(b"\xff\xfe{bad")
        with pytest.raises(PersistenceError, match="Corrupt task file"):
            JsonTaskRepository(path).load()

    @pytest.mark.parametrize("document", ["42", '"tasks"', '{"tasks": 7}'])
    def test_unexpected_document_shape_raises(self, path, document):
        path.parent.mkdir(parents=True)
        path.write_text(document)
        with pytest.raises(PersistenceError, match="Corrupt task file"):
            JsonTaskRepository(path).load()

    def test_non_ascii_titles_survive(self, path, task):
        task.title = "Café ☕"
        repo = JsonTaskRepository(path)
        repo.save([task])
        assert repo.load()[0].title == "Café ☕"

    def test_write_failure_raises(self, path, task):
        with patch("nebula.adapters.json_store.os.replace", side_effect=OSError("read-only")):
            with pytest.raises(PersistenceError):
                JsonTaskRepository(path).save([task])
        assert not path.exists()

    def test_expands_user(self):
        repo = JsonTaskRepository("~/tasks.json")
        assert "~" not in str(repo.path)


def test_store_survives_restart(path):
    store = TaskStore(JsonTaskRepository(path))
    created = store.create("Persisted", priority=Priority.URGENT)
    store.toggle_completion(created.id)

    reopened = TaskStore(JsonTaskRepository(path))

    [task] = reopened.list()
    assert task.id == created.id
    assert task.priority is Priority.URGENT
    assert task.is_completed is True
