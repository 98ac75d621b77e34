"""
Sample roadmap portfolio for DB seed and fallback when nothing is stored.

Three projects across Jan-Jun 2024. proj-alpha has top-level tasks, subtasks,
a milestone and an undated task; proj-beta has a milestone that is also a
subtask; proj-gamma has no tasks.
"""

from typing import Any


def get_sample_projects() -> list[dict[str, Any]]:
    return [
        {
            "id": "proj-alpha",
            "name": "Customer Portal Relaunch",
            "code": "CPR",
            "status": "IN_PROGRESS",
            "ragStatus": "GREEN",
            "startDate": "2024-01-10",
            "endDate": "2024-03-20",
            "progress": 45,
            "programId": "prog-digital",
        },
        {
            "id": "proj-beta",
            "name": "Billing Migration",
            "code": "BLM",
            "status": "PLANNED",
            "ragStatus": "AMBER",
            "startDate": "2024-02-05",
            "endDate": "2024-05-15",
            "progress": 10,
            "programId": "prog-digital",
        },
        {
            "id": "proj-gamma",
            "name": "Data Warehouse Audit",
            "code": "DWA",
            "status": "ON_HOLD",
            "ragStatus": "RED",
            "startDate": "2024-04-01",
            "endDate": "2024-06-28",
            "progress": 0,
            "programId": None,
        },
    ]


_SAMPLE_TASKS: dict[str, list[dict[str, Any]]] = {
    "proj-alpha": [
        {"id": "alpha-1", "title": "Discovery workshops", "status": "DONE", "startDate": "2024-01-10", "dueDate": "2024-01-24", "progress": 100, "parentId": None, "tags": [], "assigneeName": "Alex"},
        {"id": "alpha-1a", "title": "Stakeholder interviews", "status": "DONE", "startDate": "2024-01-10", "dueDate": "2024-01-17", "progress": 100, "parentId": "alpha-1", "tags": [], "assigneeName": "Jordan"},
        {"id": "alpha-1b", "title": "Journey mapping", "status": "DONE", "startDate": "2024-01-18", "dueDate": "2024-01-19", "progress": 100, "parentId": "alpha-1", "tags": [], "assigneeName": "Alex"},
        {"id": "alpha-2", "title": "Design system refresh", "status": "IN_PROGRESS", "startDate": "2024-01-25", "dueDate": "2024-02-29", "progress": 60, "parentId": None, "tags": ["design"], "assigneeName": "Sam"},
        {"id": "alpha-3", "title": "Portal build", "status": "TODO", "startDate": "2024-02-12", "dueDate": "2024-03-15", "progress": 0, "parentId": None, "tags": [], "assigneeName": "Casey"},
        {"id": "alpha-m1", "title": "Beta launch", "status": "TODO", "startDate": "2024-03-18", "dueDate": "2024-03-18", "progress": 0, "parentId": None, "tags": ["MILESTONE"], "assigneeName": None},
        {"id": "alpha-4", "title": "Content migration (unscheduled)", "status": "TODO", "startDate": None, "dueDate": None, "progress": 0, "parentId": None, "tags": [], "assigneeName": "Jordan"},
    ],
    "proj-beta": [
        {"id": "beta-1", "title": "Ledger mapping", "status": "IN_REVIEW", "startDate": "2024-02-05", "dueDate": "2024-03-01", "progress": 30, "parentId": None, "tags": [], "assigneeName": "Sam"},
        {"id": "beta-1a", "title": "Chart of accounts export", "status": "BLOCKED", "startDate": "2024-02-05", "dueDate": "2024-02-16", "progress": 20, "parentId": "beta-1", "tags": [], "assigneeName": "Casey"},
        {"id": "beta-1m", "title": "Mapping sign-off", "status": "TODO", "startDate": "2024-03-01", "dueDate": "2024-03-01", "progress": 0, "parentId": "beta-1", "tags": ["milestone"], "assigneeName": "Alex"},
        {"id": "beta-2", "title": "Parallel run", "status": "TODO", "startDate": "2024-03-04", "dueDate": "2024-05-10", "progress": 0, "parentId": None, "tags": [], "assigneeName": "Jordan"},
    ],
    "proj-gamma": [],
}


def get_sample_tasks(project_id: str) -> list[dict[str, Any]]:
    """Tasks for a sample project (empty list for unknown ids)."""
    return [dict(t) for t in _SAMPLE_TASKS.get(project_id, [])]


def get_sample_project_ids() -> list[str]:
    return [p["id"] for p in get_sample_projects()]
