"""
Project task listing client.

When TASKS_API_BASE_URL is set, child tasks are fetched from
{base}/api/projects/{project_id}/tasks; otherwise they come from the local
portfolio (DB or sample data). Either way the expansion cache gets an async
fetcher returning TimelineEntity lists.
"""

import asyncio
import logging
from typing import Any

import requests

from roadmap_timeline.config import get_settings
from roadmap_timeline.models import TimelineEntity, entities_from_rows, listing_row
from roadmap_timeline.services.expansion_cache import TaskFetcher
from roadmap_timeline.services.portfolio_service import get_task_entities

logger = logging.getLogger(__name__)


def is_remote_configured() -> bool:
    """True if a task listing API base URL is set."""
    return bool(get_settings().tasks_api_base_url)


def _headers() -> dict[str, str]:
    headers = {"Accept": "application/json"}
    token = get_settings().tasks_api_token
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def normalize_task(raw: dict[str, Any]) -> TimelineEntity:
    """Map a listing row ({id, title, status, startDate, dueDate, progress, parentId, tags}) to an entity."""
    return TimelineEntity.model_validate(listing_row(raw))


def fetch_project_tasks(project_id: str) -> list[TimelineEntity]:
    """
    GET the project's tasks from the listing API.
    Raises requests.HTTPError on non-2xx response. Rows that fail validation are skipped.
    """
    s = get_settings()
    base = (s.tasks_api_base_url or "").rstrip("/")
    url = f"{base}/api/projects/{project_id}/tasks"
    resp = requests.get(url, headers=_headers(), timeout=s.tasks_api_timeout)
    resp.raise_for_status()
    data = resp.json()
    rows = (data.get("tasks") or []) if isinstance(data, dict) else data
    return entities_from_rows(rows)


def make_task_fetcher() -> TaskFetcher:
    """Async fetcher for an ExpansionCache: remote API when configured, else local portfolio."""
    remote = is_remote_configured()
    load = fetch_project_tasks if remote else get_task_entities
    logger.debug("Task fetcher source: %s", "remote" if remote else "local")

    async def fetch(project_id: str) -> list[TimelineEntity]:
        return await asyncio.to_thread(load, project_id)

    return fetch
