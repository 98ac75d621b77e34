"""
Portfolio service: projects and project tasks for the timeline.

Uses SQLite for persistence; sample data fallback when the DB holds nothing.
"""

import logging
from typing import Any

from roadmap_timeline.db.timeline_repo import (
    ensure_tables,
    get_project as repo_get_project,
    get_project_tasks as repo_get_project_tasks,
    get_projects as repo_get_projects,
    upsert_projects,
    upsert_tasks,
)
from roadmap_timeline.errors import ProjectNotFoundError
from roadmap_timeline.models import TimelineEntity, entities_from_rows
from roadmap_timeline.services.sample_data import (
    get_sample_project_ids,
    get_sample_projects,
    get_sample_tasks,
)

logger = logging.getLogger(__name__)


def get_projects() -> list[dict[str, Any]]:
    """Projects from DB if seeded, else the sample portfolio."""
    return repo_get_projects() or get_sample_projects()


def get_project_entities() -> list[TimelineEntity]:
    return [TimelineEntity.model_validate(p) for p in get_projects()]


def get_tasks_for_project(project_id: str) -> list[dict[str, Any]]:
    """
    Tasks for a project: from DB if the project is stored, else sample tasks.
    Raises ProjectNotFoundError for an id known to neither.
    """
    if repo_get_project(project_id) is not None:
        return repo_get_project_tasks(project_id)
    if project_id in get_sample_project_ids():
        return get_sample_tasks(project_id)
    raise ProjectNotFoundError(project_id)


def get_task_entities(project_id: str) -> list[TimelineEntity]:
    return entities_from_rows(get_tasks_for_project(project_id))


def seed_sample_portfolio() -> dict[str, Any]:
    """Seed DB with the sample portfolio. Ensures tables, upserts projects and tasks."""
    ensure_tables()
    projects = get_sample_projects()
    upsert_projects(projects)
    tasks_seeded = 0
    for p in projects:
        tasks_seeded += upsert_tasks(p["id"], get_sample_tasks(p["id"]))
    logger.info("Seeded %d projects, %d tasks", len(projects), tasks_seeded)
    return {
        "status": "ok",
        "projects_seeded": len(projects),
        "tasks_seeded": tasks_seeded,
        "message": "Sample portfolio loaded. APIs will use DB for these projects.",
    }
