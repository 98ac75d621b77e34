"""
Tests for the SQLite timeline repository.
"""

from roadmap_timeline.db.timeline_repo import (
    ensure_tables,
    get_project,
    get_project_tasks,
    get_projects,
    upsert_projects,
    upsert_tasks,
)
from roadmap_timeline.services.sample_data import get_sample_projects, get_sample_tasks


class TestReadsWithoutTables:
    def test_get_projects_returns_empty(self, fresh_db) -> None:
        assert get_projects() == []

    def test_get_project_returns_none(self, fresh_db) -> None:
        assert get_project("proj-alpha") is None

    def test_get_project_tasks_returns_empty(self, fresh_db) -> None:
        assert get_project_tasks("proj-alpha") == []


class TestUpsertProjects:
    def test_roundtrip_ordered_by_start(self, fresh_db) -> None:
        projects = list(reversed(get_sample_projects()))
        assert upsert_projects(projects) == 3
        stored = get_projects()
        assert [p["id"] for p in stored] == ["proj-alpha", "proj-beta", "proj-gamma"]
        alpha = stored[0]
        assert alpha["name"] == "Customer Portal Relaunch"
        assert alpha["ragStatus"] == "GREEN"
        assert alpha["startDate"] == "2024-01-10"

    def test_upsert_updates_existing(self, fresh_db) -> None:
        upsert_projects(get_sample_projects())
        changed = dict(get_sample_projects()[0], status="COMPLETED", progress=100)
        upsert_projects([changed])
        alpha = get_project("proj-alpha")
        assert alpha["status"] == "COMPLETED"
        assert alpha["progress"] == 100
        assert len(get_projects()) == 3

    def test_empty_list_is_noop(self, fresh_db) -> None:
        assert upsert_projects([]) == 0


class TestUpsertTasks:
    def test_roundtrip_keeps_order_tags_and_parent(self, fresh_db) -> None:
        tasks = get_sample_tasks("proj-beta")
        assert upsert_tasks("proj-beta", tasks) == 4
        stored = get_project_tasks("proj-beta")
        assert [t["id"] for t in stored] == ["beta-1", "beta-1a", "beta-1m", "beta-2"]
        milestone = stored[2]
        assert milestone["tags"] == ["milestone"]
        assert milestone["parentId"] == "beta-1"
        assert milestone["dueDate"] == "2024-03-01"

    def test_tasks_scoped_by_project(self, fresh_db) -> None:
        ensure_tables()
        upsert_tasks("proj-alpha", get_sample_tasks("proj-alpha"))
        assert get_project_tasks("proj-beta") == []
        assert len(get_project_tasks("proj-alpha")) == 7
