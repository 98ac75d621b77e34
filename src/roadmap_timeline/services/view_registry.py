"""
Timeline views: one expansion cache per open Gantt view.

A view is created with its project list, owns its cache until closed, and
closing cancels any fetch still in flight.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from roadmap_timeline.errors import ViewNotFoundError
from roadmap_timeline.models import TimelineEntity
from roadmap_timeline.services.expansion_cache import ExpansionCache, TaskFetcher
from roadmap_timeline.services.task_client import make_task_fetcher
from roadmap_timeline.services.timeline_service import build_layout

logger = logging.getLogger(__name__)


class TimelineView:
    def __init__(self, view_id: str, projects: list[TimelineEntity], cache: ExpansionCache) -> None:
        self.view_id = view_id
        self.projects = projects
        self.cache = cache
        self.created_at = datetime.now(timezone.utc)

    def has_project(self, project_id: str) -> bool:
        return any(p.id == project_id for p in self.projects)

    def layout(self) -> dict[str, Any]:
        return {"view_id": self.view_id, **build_layout(self.projects, self.cache)}


class ViewRegistry:
    def __init__(self) -> None:
        self._views: dict[str, TimelineView] = {}

    def __len__(self) -> int:
        return len(self._views)

    def create_view(
        self,
        projects: Iterable[TimelineEntity],
        fetch_tasks: Optional[TaskFetcher] = None,
    ) -> TimelineView:
        view_id = uuid.uuid4().hex
        cache = ExpansionCache(fetch_tasks or make_task_fetcher())
        view = TimelineView(view_id, list(projects), cache)
        self._views[view_id] = view
        logger.info("Opened timeline view %s with %d projects", view_id, len(view.projects))
        return view

    def get_view(self, view_id: str) -> TimelineView:
        view = self._views.get(view_id)
        if view is None:
            raise ViewNotFoundError(view_id)
        return view

    async def close_view(self, view_id: str) -> None:
        view = self._views.pop(view_id, None)
        if view is None:
            raise ViewNotFoundError(view_id)
        await view.cache.close()
        logger.info("Closed timeline view %s", view_id)

    async def close_all(self) -> None:
        for view_id in list(self._views):
            await self.close_view(view_id)


_registry: Optional[ViewRegistry] = None


def get_view_registry() -> ViewRegistry:
    global _registry
    if _registry is None:
        _registry = ViewRegistry()
    return _registry
