"""
Pytest fixtures for Roadmap Timeline.

Tests mirror src/roadmap_timeline structure. The DB points at a temp file per session.
"""

import os
import tempfile
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

os.environ["SQLITE_DB_PATH"] = os.path.join(tempfile.mkdtemp(prefix="roadmap-timeline-"), "test.db")
os.environ.pop("TASKS_API_BASE_URL", None)

from roadmap_timeline.config import reset_settings  # noqa: E402
from roadmap_timeline.db.timeline_repo import reset_engine  # noqa: E402
from roadmap_timeline.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def fresh_db(tmp_path, monkeypatch):
    """Point the repository at an empty SQLite file for one test."""
    monkeypatch.setenv("SQLITE_DB_PATH", str(tmp_path / "timeline.db"))
    reset_settings()
    reset_engine()
    yield
    reset_engine()


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c
