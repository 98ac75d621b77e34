"""
Task list filtering and sorting for the timeline's task grid.

Filters apply to top-level tasks; a task's subtasks count toward search
matches for the subtask, people and date search types (and "all").
"""

from datetime import date
from typing import Iterable, Optional

from roadmap_timeline.models import TimelineEntity

SEARCH_TYPES = ("all", "task", "subtask", "people", "date")
SORT_KEYS = ("name", "date", "status")
COMPLETED_STATUSES = frozenset({"DONE", "COMPLETED"})

STATUS_ORDER: dict[str, int] = {
    "TODO": 0,
    "IN_PROGRESS": 1,
    "IN_REVIEW": 2,
    "BLOCKED": 3,
    "DONE": 4,
    "COMPLETED": 4,
    "CANCELLED": 5,
}


def _task_date(t: TimelineEntity) -> Optional[date]:
    return t.end_date or t.start_date


def _contains(value: Optional[str], query: str) -> bool:
    return bool(value) and query in value.lower()


def _date_matches(t: TimelineEntity, query: str) -> bool:
    d = _task_date(t)
    return d is not None and query in d.isoformat()


def _matches(task: TimelineEntity, subtasks: list[TimelineEntity], query: str, search_type: str) -> bool:
    if search_type == "task":
        return _contains(task.title, query)
    if search_type == "subtask":
        return any(_contains(s.title, query) for s in subtasks)
    if search_type == "people":
        return _contains(task.assignee, query) or any(_contains(s.assignee, query) for s in subtasks)
    if search_type == "date":
        return _date_matches(task, query) or any(_date_matches(s, query) for s in subtasks)
    parent = _contains(task.title, query) or _contains(task.assignee, query) or _date_matches(task, query)
    return parent or any(
        _contains(s.title, query) or _contains(s.assignee, query) or _date_matches(s, query)
        for s in subtasks
    )


def filter_tasks(
    tasks: Iterable[TimelineEntity],
    search: Optional[str] = None,
    search_type: str = "all",
    statuses: Optional[Iterable[str]] = None,
    people: Optional[Iterable[str]] = None,
    hide_completed: bool = False,
    sort_by: Optional[str] = None,
) -> list[tuple[TimelineEntity, list[TimelineEntity]]]:
    """
    Return (task, subtasks) pairs for top-level tasks that pass every filter,
    in stored order unless sort_by is name, date (undated last) or status.
    """
    if search_type not in SEARCH_TYPES:
        raise ValueError(f"Unknown search_type: {search_type}")
    if sort_by is not None and sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort_by: {sort_by}")

    tasks = list(tasks)
    children: dict[str, list[TimelineEntity]] = {}
    for t in tasks:
        if t.parent_id is not None:
            children.setdefault(t.parent_id, []).append(t)
    top = [t for t in tasks if t.parent_id is None]

    query = (search or "").strip().lower()
    if query:
        top = [t for t in top if _matches(t, children.get(t.id, []), query, search_type)]
    status_set = {s.upper() for s in statuses} if statuses else None
    if status_set:
        top = [t for t in top if (t.status or "").upper() in status_set]
    people_set = set(people) if people else None
    if people_set:
        top = [t for t in top if t.assignee in people_set]
    if hide_completed:
        top = [t for t in top if (t.status or "").upper() not in COMPLETED_STATUSES]

    if sort_by == "name":
        top.sort(key=lambda t: t.title.lower())
    elif sort_by == "date":
        top.sort(key=lambda t: (_task_date(t) is None, _task_date(t) or date.min))
    elif sort_by == "status":
        top.sort(key=lambda t: STATUS_ORDER.get((t.status or "").upper(), len(STATUS_ORDER)))

    return [(t, children.get(t.id, [])) for t in top]


def unique_people(tasks: Iterable[TimelineEntity]) -> list[str]:
    """Sorted distinct assignee names across tasks and subtasks (for the people filter)."""
    return sorted({t.assignee for t in tasks if t.assignee})
