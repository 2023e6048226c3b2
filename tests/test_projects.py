import json
from datetime import UTC, datetime

import pytest

from agentkit.projects import PROJECTS_FILE_NAME, Project, ProjectStore


@pytest.fixture
def store(tmp_path):
    return ProjectStore(tmp_path / "config" / PROJECTS_FILE_NAME)


def test_load_missing_file_returns_empty(store):
    assert store.load() == []
    assert store.list() == []


def test_register_adds_project(store):
    store.register("/work/a", "/data/a")
    projects = store.list()
    assert [(p.path, p.data_dir) for p in projects] == [("/work/a", "/data/a")]


def test_register_existing_updates_without_duplicate(store):
    store.register("/work/a", "/data/a")
    store.register("/work/a", "/data/other")
    projects = store.list()
    assert len(projects) == 1
    assert projects[0].data_dir == "/data/other"


def test_register_sorts_most_recent_first(store):
    old = Project("/old", "/d/old", datetime(2020, 1, 1, tzinfo=UTC))
    mid = Project("/mid", "/d/mid", datetime(2021, 1, 1, tzinfo=UTC))
    store.save([old, mid])
    store.register("/new", "/d/new")
    assert [p.path for p in store.list()] == ["/new", "/mid", "/old"]


def test_save_and_load_round_trip(store):
    projects = [
        Project("/p", "/d", datetime(2023, 5, 6, 7, 8, 9, 123400, tzinfo=UTC)),
        Project("/q", "/e", datetime(2022, 1, 2, 3, 4, 5, tzinfo=UTC)),
    ]
    store.save(projects)
    assert store.load() == projects


def test_saved_file_layout(store):
    store.save([Project("/p", "/d", datetime(2022, 1, 2, 3, 4, 5, tzinfo=UTC))])
    with open(store.path, encoding="utf-8") as handle:
        data = json.load(handle)
    assert set(data) == {"projects"}
    assert set(data["projects"][0]) == {"path", "data_dir", "last_accessed"}
    assert data["projects"][0]["last_accessed"].endswith("Z")


def test_load_accepts_nanosecond_timestamps(store, tmp_path):
    store.save([])
    with open(store.path, "w", encoding="utf-8") as handle:
        json.dump(
            {"projects": [{"path": "/p", "data_dir": "/d",
                           "last_accessed": "2025-12-31T23:59:59.123456789Z"}]},
            handle,
        )
    (project,) = store.load()
    assert project.last_accessed == datetime(2025, 12, 31, 23, 59, 59, 123456, tzinfo=UTC)


def test_load_invalid_json_raises(store):
    store.save([])
    with open(store.path, "w", encoding="utf-8") as handle:
        handle.write("{broken")
    with pytest.raises(ValueError):
        store.load()


def test_in_directory_uses_projects_file_name(tmp_path):
    store = ProjectStore.in_directory(tmp_path)
    assert store.path == str(tmp_path / "projects.json")