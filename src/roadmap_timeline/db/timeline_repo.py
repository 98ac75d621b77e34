"""
Timeline repository: read/write projects and their tasks to SQLite (embedded database).
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from roadmap_timeline.config import get_settings

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        # check_same_thread=False: fetches run in worker threads
        conn_str = get_settings().sqlite_conn
        _engine = create_engine(conn_str, connect_args={"check_same_thread": False})
    return _engine


def reset_engine() -> None:
    """Dispose the cached engine (tests point the settings at a new DB file)."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None


def ensure_tables() -> None:
    """Create timeline_projects and timeline_tasks tables and indexes if they do not exist."""
    engine = get_engine()
    with engine.connect() as conn:
        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS timeline_projects (
                project_id VARCHAR(255) PRIMARY KEY,
                name TEXT NOT NULL,
                code VARCHAR(100),
                status VARCHAR(50) NOT NULL DEFAULT 'PLANNED',
                rag_status VARCHAR(20),
                start_date TEXT,
                end_date TEXT,
                progress INTEGER DEFAULT 0 CHECK (progress >= 0 AND progress <= 100),
                program_id VARCHAR(255)
            )
        """))
        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS timeline_tasks (
                task_id VARCHAR(255) NOT NULL,
                project_id VARCHAR(255) NOT NULL,
                title TEXT NOT NULL,
                status VARCHAR(50) NOT NULL DEFAULT 'TODO',
                start_date TEXT,
                due_date TEXT,
                progress INTEGER DEFAULT 0 CHECK (progress >= 0 AND progress <= 100),
                parent_id VARCHAR(255),
                tags TEXT DEFAULT '[]',
                assignee_name VARCHAR(255),
                sort_order INTEGER DEFAULT 0,
                PRIMARY KEY (project_id, task_id)
            )
        """))
        conn.execute(text("CREATE INDEX IF NOT EXISTS idx_timeline_tasks_project ON timeline_tasks(project_id)"))
        conn.execute(text("CREATE INDEX IF NOT EXISTS idx_timeline_tasks_parent ON timeline_tasks(parent_id)"))
        conn.commit()


def _project_row_to_dict(row: Any) -> dict[str, Any]:
    return {
        "id": getattr(row, "project_id", ""),
        "name": getattr(row, "name", "") or "",
        "code": getattr(row, "code", None),
        "status": getattr(row, "status", "PLANNED") or "PLANNED",
        "ragStatus": getattr(row, "rag_status", None),
        "startDate": getattr(row, "start_date", None),
        "endDate": getattr(row, "end_date", None),
        "progress": getattr(row, "progress", 0) or 0,
        "programId": getattr(row, "program_id", None),
    }


def _task_row_to_dict(row: Any) -> dict[str, Any]:
    raw_tags = getattr(row, "tags", None)
    tags = raw_tags if isinstance(raw_tags, list) else (json.loads(raw_tags) if raw_tags else [])
    return {
        "id": getattr(row, "task_id", ""),
        "title": getattr(row, "title", "") or "",
        "status": getattr(row, "status", "TODO") or "TODO",
        "startDate": getattr(row, "start_date", None),
        "dueDate": getattr(row, "due_date", None),
        "progress": getattr(row, "progress", 0) or 0,
        "parentId": getattr(row, "parent_id", None),
        "tags": tags,
        "assigneeName": getattr(row, "assignee_name", None),
    }


def get_projects() -> list[dict[str, Any]]:
    """Load all projects ordered by start date. Returns empty list if table missing or no rows."""
    try:
        with get_engine().connect() as conn:
            rows = conn.execute(text("""
                SELECT project_id, name, code, status, rag_status, start_date, end_date, progress, program_id
                FROM timeline_projects
                ORDER BY start_date IS NULL, start_date, project_id
            """)).fetchall()
    except Exception as e:
        logger.warning("get_projects failed: %s", e)
        return []
    return [_project_row_to_dict(row) for row in rows]


def get_project(project_id: str) -> Optional[dict[str, Any]]:
    try:
        with get_engine().connect() as conn:
            row = conn.execute(
                text("""
                    SELECT project_id, name, code, status, rag_status, start_date, end_date, progress, program_id
                    FROM timeline_projects WHERE project_id = :project_id
                """),
                {"project_id": project_id},
            ).fetchone()
    except Exception as e:
        logger.warning("get_project failed: %s", e)
        return None
    return _project_row_to_dict(row) if row else None


def get_project_tasks(project_id: str) -> list[dict[str, Any]]:
    """Load a project's tasks in stored order. Returns empty list if table missing or no rows."""
    try:
        with get_engine().connect() as conn:
            rows = conn.execute(
                text("""
                    SELECT task_id, title, status, start_date, due_date, progress, parent_id, tags, assignee_name
                    FROM timeline_tasks
                    WHERE project_id = :project_id
                    ORDER BY sort_order, task_id
                """),
                {"project_id": project_id},
            ).fetchall()
    except Exception as e:
        logger.warning("get_project_tasks failed: %s", e)
        return []
    return [_task_row_to_dict(row) for row in rows]


def upsert_projects(projects: list[dict[str, Any]]) -> int:
    """Upsert projects keyed by project_id. Returns number of rows upserted."""
    if not projects:
        return 0
    ensure_tables()
    count = 0
    try:
        with get_engine().connect() as conn:
            for p in projects:
                conn.execute(
                    text("""
                        INSERT INTO timeline_projects (
                            project_id, name, code, status, rag_status, start_date, end_date, progress, program_id
                        ) VALUES (
                            :project_id, :name, :code, :status, :rag_status, :start_date, :end_date, :progress, :program_id
                        )
                        ON CONFLICT (project_id) DO UPDATE SET
                            name = EXCLUDED.name,
                            code = EXCLUDED.code,
                            status = EXCLUDED.status,
                            rag_status = EXCLUDED.rag_status,
                            start_date = EXCLUDED.start_date,
                            end_date = EXCLUDED.end_date,
                            progress = EXCLUDED.progress,
                            program_id = EXCLUDED.program_id
                    """),
                    {
                        "project_id": p.get("id", ""),
                        "name": p.get("name") or p.get("title", ""),
                        "code": p.get("code"),
                        "status": p.get("status") or "PLANNED",
                        "rag_status": p.get("ragStatus"),
                        "start_date": p.get("startDate"),
                        "end_date": p.get("endDate"),
                        "progress": p.get("progress", 0),
                        "program_id": p.get("programId"),
                    },
                )
                count += 1
            conn.commit()
    except Exception as e:
        logger.warning("upsert_projects failed: %s", e)
        raise
    return count


def upsert_tasks(project_id: str, tasks: list[dict[str, Any]]) -> int:
    """Upsert a project's tasks keyed by (project_id, task_id); list order becomes sort order."""
    if not tasks:
        return 0
    ensure_tables()
    count = 0
    try:
        with get_engine().connect() as conn:
            for i, t in enumerate(tasks):
                conn.execute(
                    text("""
                        INSERT INTO timeline_tasks (
                            task_id, project_id, title, status, start_date, due_date,
                            progress, parent_id, tags, assignee_name, sort_order
                        ) VALUES (
                            :task_id, :project_id, :title, :status, :start_date, :due_date,
                            :progress, :parent_id, :tags, :assignee_name, :sort_order
                        )
                        ON CONFLICT (project_id, task_id) DO UPDATE SET
                            title = EXCLUDED.title,
                            status = EXCLUDED.status,
                            start_date = EXCLUDED.start_date,
                            due_date = EXCLUDED.due_date,
                            progress = EXCLUDED.progress,
                            parent_id = EXCLUDED.parent_id,
                            tags = EXCLUDED.tags,
                            assignee_name = EXCLUDED.assignee_name,
                            sort_order = EXCLUDED.sort_order
                    """),
                    {
                        "task_id": t.get("id", ""),
                        "project_id": project_id,
                        "title": t.get("title", ""),
                        "status": t.get("status") or "TODO",
                        "start_date": t.get("startDate"),
                        "due_date": t.get("dueDate"),
                        "progress": t.get("progress", 0),
                        "parent_id": t.get("parentId"),
                        "tags": json.dumps(t.get("tags") or []),
                        "assignee_name": t.get("assigneeName"),
                        "sort_order": i,
                    },
                )
                count += 1
            conn.commit()
    except Exception as e:
        logger.warning("upsert_tasks failed: %s", e)
        raise
    return count
