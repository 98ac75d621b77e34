"""DB access for Roadmap Timeline."""

from roadmap_timeline.db.timeline_repo import (
    get_project_tasks,
    get_projects,
    upsert_projects,
    upsert_tasks,
)

__all__ = ["get_project_tasks", "get_projects", "upsert_projects", "upsert_tasks"]
