"""
Timeline API v1: projects, task listing, Gantt layout, views with lazy task expansion.

Resource-centric URIs; version in path.
"""

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from roadmap_timeline.errors import EmptyTimelineError, ProjectNotFoundError, ViewNotFoundError
from roadmap_timeline.models import TimelineEntity
from roadmap_timeline.services.portfolio_service import (
    get_project_entities,
    get_projects,
    get_task_entities,
    get_tasks_for_project,
    seed_sample_portfolio,
)
from roadmap_timeline.services.task_filters import filter_tasks, unique_people
from roadmap_timeline.services.timeline_service import build_layout
from roadmap_timeline.services.view_registry import TimelineView, get_view_registry

router = APIRouter()


class ProjectsBody(BaseModel):
    projects: list[TimelineEntity] = Field(default_factory=list, description="Projects to lay out")


def _layout_or_422(projects: list[TimelineEntity]) -> dict[str, Any]:
    try:
        return build_layout(projects)
    except EmptyTimelineError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _get_view(view_id: str) -> TimelineView:
    try:
        return get_view_registry().get_view(view_id)
    except ViewNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _view_layout(view: TimelineView) -> dict[str, Any]:
    try:
        return view.layout()
    except EmptyTimelineError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/projects")
async def list_projects() -> dict:
    """Projects in the portfolio (from DB if seeded, else sample data)."""
    projects = get_projects()
    return {"projects": projects, "count": len(projects)}


@router.get("/projects/{project_id}/tasks")
async def get_project_tasks(project_id: str) -> dict:
    """
    Task listing for one project: {id, title, status, startDate, dueDate, progress, parentId, tags}.
    This is the endpoint views fetch from when expanding a project.
    """
    try:
        tasks = get_tasks_for_project(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"project_id": project_id, "tasks": tasks, "count": len(tasks)}


@router.get("/projects/{project_id}/tasks/filtered")
async def get_filtered_tasks(
    project_id: str,
    search: Optional[str] = Query(None, description="Case-insensitive substring"),
    search_type: str = Query("all", description="all, task, subtask, people, date"),
    status: Optional[list[str]] = Query(None, description="Keep only these statuses"),
    person: Optional[list[str]] = Query(None, description="Keep only these assignees"),
    hide_completed: bool = Query(False),
    sort_by: Optional[str] = Query(None, description="name, date, status"),
) -> dict:
    """Top-level tasks with their subtasks after search, status/person filters and sort."""
    try:
        entities = get_task_entities(project_id)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    try:
        pairs = filter_tasks(
            entities,
            search=search,
            search_type=search_type,
            statuses=status,
            people=person,
            hide_completed=hide_completed,
            sort_by=sort_by,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    tasks = [{**t.to_api(), "subtasks": [s.to_api() for s in subs]} for t, subs in pairs]
    return {
        "project_id": project_id,
        "tasks": tasks,
        "count": len(tasks),
        "people": unique_people(entities),
    }


@router.post("/layout")
async def post_layout(body: ProjectsBody) -> dict:
    """Stateless Gantt layout for the posted projects (no expansion)."""
    return _layout_or_422(body.projects)


@router.post("/views")
async def create_view(body: Optional[ProjectsBody] = None) -> dict:
    """
    Open a timeline view over the posted projects (or the whole portfolio when
    no body is sent). Returns the view id and its initial layout.
    """
    projects = body.projects if body is not None else get_project_entities()
    registry = get_view_registry()
    view = registry.create_view(projects)
    try:
        return view.layout()
    except EmptyTimelineError as e:
        # No view id reaches the client, so nothing could close it later
        await registry.close_view(view.view_id)
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/views/{view_id}")
async def get_view(view_id: str) -> dict:
    """Current layout of a view, including expanded projects' tasks."""
    return _view_layout(_get_view(view_id))


@router.post("/views/{view_id}/toggle/{project_id}")
async def toggle_project(
    view_id: str,
    project_id: str,
    wait: bool = Query(False, description="Wait for the task fetch before responding"),
) -> dict:
    """Expand or collapse a project row; the first expand fetches its tasks."""
    view = _get_view(view_id)
    if not view.has_project(project_id):
        raise HTTPException(status_code=404, detail="Project not in view")
    expanded = view.cache.toggle_expand(project_id)
    if wait and expanded:
        await view.cache.wait(project_id)
    return {"project_id": project_id, "expanded": expanded, **_view_layout(view)}


@router.post("/views/{view_id}/retry/{project_id}")
async def retry_project(
    view_id: str,
    project_id: str,
    wait: bool = Query(False, description="Wait for the task fetch before responding"),
) -> dict:
    """Re-issue a failed task fetch for a project row."""
    view = _get_view(view_id)
    if not view.has_project(project_id):
        raise HTTPException(status_code=404, detail="Project not in view")
    view.cache.retry(project_id)
    if wait:
        await view.cache.wait(project_id)
    return {"project_id": project_id, "expanded": True, **_view_layout(view)}


@router.delete("/views/{view_id}")
async def close_view(view_id: str) -> dict:
    """Close a view; cancels task fetches still in flight."""
    try:
        await get_view_registry().close_view(view_id)
    except ViewNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"view_id": view_id, "closed": True}


@router.post("/seed")
async def seed_portfolio() -> dict:
    """Seed DB with the sample portfolio (dev/bootstrap)."""
    return seed_sample_portfolio()
