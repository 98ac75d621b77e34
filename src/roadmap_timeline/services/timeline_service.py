"""
Timeline service: Gantt layout for a set of projects.

Range, month/day headers, project bars and, for expanded projects, task,
subtask and milestone bars. Everything here is recomputed per call from the
projects passed in and the view's expansion cache.
"""

from typing import Any, Iterable, Optional

from roadmap_timeline.models import Position, TimelineEntity, TimelineRange
from roadmap_timeline.services.expansion_cache import LOADED, ExpansionCache, partition_tasks
from roadmap_timeline.services.position_mapper import project_position, task_position
from roadmap_timeline.services.timeline_range import compute_range, day_cells, month_headers

STATUS_TONES: dict[str, str] = {
    "PLANNED": "slate",
    "IN_PROGRESS": "blue",
    "ON_HOLD": "amber",
    "COMPLETED": "green",
    "CANCELLED": "red",
}

TASK_STATUS_TONES: dict[str, str] = {
    "TODO": "slate",
    "IN_PROGRESS": "blue",
    "IN_REVIEW": "purple",
    "BLOCKED": "red",
    "DONE": "green",
    "CANCELLED": "gray",
}

RAG_TONES: dict[str, str] = {
    "GREEN": "green",
    "AMBER": "amber",
    "RED": "red",
}


def _pos(p: Optional[Position]) -> Optional[dict[str, Any]]:
    return p.to_api() if p is not None else None


def _task_row(task: TimelineEntity, rng: TimelineRange, min_width: Optional[float]) -> dict[str, Any]:
    return {
        **task.to_api(),
        "tone": TASK_STATUS_TONES.get((task.status or "").upper(), "slate"),
        "is_milestone": task.is_milestone,
        "position": _pos(task_position(task, rng, min_width)),
    }


def _project_tasks(
    tasks: list[TimelineEntity],
    rng: TimelineRange,
    min_width: Optional[float],
) -> dict[str, Any]:
    part = partition_tasks(tasks)
    return {
        "tasks": [
            {
                **_task_row(t, rng, min_width),
                "subtasks": [_task_row(s, rng, min_width) for s in part.subtasks_of(t.id)],
            }
            for t in part.top_level
        ],
        "milestones": [_task_row(m, rng, min_width) for m in part.milestones],
    }


def build_layout(
    projects: Iterable[TimelineEntity],
    cache: Optional[ExpansionCache] = None,
    min_width: Optional[float] = None,
) -> dict[str, Any]:
    """
    Layout for the Gantt view. An empty project list short-circuits to
    {"empty": True} before any date math. Projects without both dates keep
    their row with position None.
    """
    projects = list(projects)
    if not projects:
        return {"empty": True, "range": None, "months": [], "days": [], "rows": []}

    rng = compute_range(projects)
    rows: list[dict[str, Any]] = []
    for p in projects:
        row: dict[str, Any] = {
            **p.to_api(),
            "tone": STATUS_TONES.get((p.status or "").upper(), "gray"),
            "rag_tone": RAG_TONES.get((p.rag_status or "").upper(), "slate"),
            "position": _pos(project_position(p, rng)),
            "expanded": False,
            "state": "collapsed",
            "error": None,
        }
        if cache is not None:
            row["expanded"] = p.id in cache.expanded
            row["state"] = cache.state(p.id)
            row["error"] = cache.error(p.id)
            if row["expanded"] and row["state"] == LOADED:
                row.update(_project_tasks(cache.tasks(p.id), rng, min_width))
        rows.append(row)

    return {
        "empty": False,
        "range": rng.to_api(),
        "months": month_headers(rng),
        "days": day_cells(rng),
        "rows": rows,
    }
