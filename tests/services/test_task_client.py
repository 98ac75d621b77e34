"""
Tests for the project task listing client.
"""

import asyncio
import logging

import pytest
import requests

from roadmap_timeline.config import reset_settings
from roadmap_timeline.errors import ProjectNotFoundError
from roadmap_timeline.services import task_client
from roadmap_timeline.services.expansion_cache import ExpansionCache
from roadmap_timeline.services.task_client import (
    fetch_project_tasks,
    is_remote_configured,
    make_task_fetcher,
    normalize_task,
)


class FakeResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self._payload


@pytest.fixture
def remote(monkeypatch):
    monkeypatch.setenv("TASKS_API_BASE_URL", "https://pm.example.com/")
    monkeypatch.setenv("TASKS_API_TOKEN", "secret")
    reset_settings()
    calls: list[dict] = []

    def install(response: FakeResponse) -> list[dict]:
        def fake_get(url, headers=None, timeout=None):
            calls.append({"url": url, "headers": headers, "timeout": timeout})
            return response

        monkeypatch.setattr(task_client.requests, "get", fake_get)
        return calls

    return install


class TestIsRemoteConfigured:
    def test_returns_false_without_env(self) -> None:
        assert is_remote_configured() is False

    def test_returns_true_with_base_url(self, remote) -> None:
        assert is_remote_configured() is True


class TestNormalizeTask:
    def test_maps_listing_row(self) -> None:
        out = normalize_task({
            "id": "t-1",
            "title": "Wireframes",
            "status": "IN_PROGRESS",
            "startDate": "2024-02-01T00:00:00.000Z",
            "dueDate": None,
            "progress": 40,
            "parentId": None,
            "tags": ["Milestone"],
            "assignee": {"firstName": "Ada", "name": "Ada Lovelace"},
        })
        assert out.id == "t-1"
        assert out.end_date is None
        assert out.is_milestone
        assert out.assignee == "Ada"


class TestFetchProjectTasks:
    def test_fetches_and_normalizes(self, remote) -> None:
        calls = remote(FakeResponse({"tasks": [
            {"id": "a", "title": "A", "startDate": "2024-01-01", "dueDate": "2024-01-05", "tags": []},
            {"id": "b", "title": "B", "parentId": "a", "startDate": None, "dueDate": None, "tags": []},
        ]}))
        tasks = fetch_project_tasks("proj-9")
        assert [t.id for t in tasks] == ["a", "b"]
        assert tasks[1].parent_id == "a"
        assert calls[0]["url"] == "https://pm.example.com/api/projects/proj-9/tasks"
        assert calls[0]["headers"]["Authorization"] == "Bearer secret"
        assert calls[0]["timeout"] == 30.0

    def test_missing_tasks_key_is_empty(self, remote) -> None:
        remote(FakeResponse({}))
        assert fetch_project_tasks("proj-9") == []

    def test_http_error_raises(self, remote) -> None:
        remote(FakeResponse({"error": "nope"}, status_code=503))
        with pytest.raises(requests.HTTPError):
            fetch_project_tasks("proj-9")


class TestMakeTaskFetcher:
    def test_local_fetcher_reads_portfolio(self) -> None:
        fetch = make_task_fetcher()
        tasks = asyncio.run(fetch("proj-alpha"))
        assert len(tasks) == 7
        assert tasks[0].id == "alpha-1"

    def test_local_fetcher_unknown_project_raises(self) -> None:
        fetch = make_task_fetcher()
        with pytest.raises(ProjectNotFoundError):
            asyncio.run(fetch("proj-missing"))

    def test_remote_fetcher_uses_api(self, remote) -> None:
        remote(FakeResponse({"tasks": [{"id": "r1", "title": "Remote"}]}))
        fetch = make_task_fetcher()
        tasks = asyncio.run(fetch("proj-alpha"))
        assert [t.id for t in tasks] == ["r1"]


class TestBadListingRows:
    def test_out_of_range_progress_is_clamped(self, remote) -> None:
        remote(FakeResponse({"tasks": [
            {"id": "a", "title": "A", "progress": 10},
            {"id": "b", "title": "B", "progress": 120},
            {"id": "c", "title": "C", "progress": -5},
        ]}))
        tasks = fetch_project_tasks("proj-9")
        assert [(t.id, t.progress) for t in tasks] == [("a", 10), ("b", 100), ("c", 0)]

    def test_invalid_row_skipped_rest_load(self, remote, caplog) -> None:
        remote(FakeResponse({"tasks": [
            {"id": "a", "title": "A", "startDate": "2024-01-01", "dueDate": "2024-01-05"},
            {"id": "b", "title": "B", "startDate": "not-a-date"},
            "garbage",
            {"id": "c", "title": "C", "progress": "lots"},
        ]}))
        with caplog.at_level(logging.WARNING, logger="roadmap_timeline"):
            tasks = fetch_project_tasks("proj-9")
        assert [t.id for t in tasks] == ["a"]
        assert "Skipping invalid task row b" in caplog.text

    def test_expanded_project_loads_despite_bad_row(self, remote) -> None:
        remote(FakeResponse({"tasks": [
            {"id": "a", "title": "A", "progress": 10},
            {"id": "b", "title": "B", "progress": 120},
            {"id": "c", "title": "C", "startDate": "31/01/2024"},
        ]}))
        cache = ExpansionCache(make_task_fetcher())

        async def run() -> None:
            cache.toggle_expand("proj-9")
            await cache.wait("proj-9")

        asyncio.run(run())
        assert cache.state("proj-9") == "loaded"
        assert cache.error("proj-9") is None
        assert [t.id for t in cache.tasks("proj-9")] == ["a", "b"]
