"""
Lazy expansion cache: fetch a project's child tasks once, on first expand.

One cache per timeline view. Entries are append-only for the life of the view:
collapsing keeps the cached list and re-expanding reuses it. In-flight fetches
are keyed by project id, so repeated toggles while a fetch is pending never
start a second one. A failed fetch leaves the entry unset (the next expand
retries) and records the error so the view can tell "no tasks" from "failed".
"""

import asyncio
import logging
from collections import Counter
from typing import Awaitable, Callable, Iterable, Optional

from roadmap_timeline.models import TaskPartition, TimelineEntity

logger = logging.getLogger(__name__)

TaskFetcher = Callable[[str], Awaitable[list[TimelineEntity]]]

# Row states exposed to the view
COLLAPSED = "collapsed"
LOADING = "loading"
LOADED = "loaded"
EMPTY = "empty"
FAILED = "failed"


class ExpansionCache:
    def __init__(self, fetch_tasks: TaskFetcher) -> None:
        self._fetch_tasks = fetch_tasks
        self.expanded: set[str] = set()
        self._entries: dict[str, list[TimelineEntity]] = {}
        self._errors: dict[str, str] = {}
        self._in_flight: dict[str, asyncio.Task] = {}
        self.fetch_count: Counter[str] = Counter()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def toggle_expand(self, project_id: str) -> bool:
        """
        Collapse an expanded project, or expand a collapsed one (starting the fetch
        if nothing is cached). Returns the new expanded state. Must be called from
        a running event loop.
        """
        if project_id in self.expanded:
            self.collapse(project_id)
            return False
        self.expand(project_id)
        return True

    def expand(self, project_id: str) -> None:
        self.expanded.add(project_id)
        self._ensure_loaded(project_id)

    def collapse(self, project_id: str) -> None:
        self.expanded.discard(project_id)

    def retry(self, project_id: str) -> None:
        """Expand and re-issue a fetch that previously failed."""
        self.expanded.add(project_id)
        self._ensure_loaded(project_id)

    def is_loading(self, project_id: str) -> bool:
        return project_id in self._in_flight

    def is_cached(self, project_id: str) -> bool:
        return project_id in self._entries

    def error(self, project_id: str) -> Optional[str]:
        return self._errors.get(project_id)

    def tasks(self, project_id: str) -> list[TimelineEntity]:
        return list(self._entries.get(project_id, []))

    def state(self, project_id: str) -> str:
        if project_id not in self.expanded:
            return COLLAPSED
        if project_id in self._in_flight:
            return LOADING
        if project_id in self._errors:
            return FAILED
        if project_id in self._entries:
            return LOADED if self._entries[project_id] else EMPTY
        return COLLAPSED

    async def wait(self, project_id: str) -> None:
        """Wait for a pending fetch of project_id, if any, to settle."""
        task = self._in_flight.get(project_id)
        if task is not None:
            await asyncio.wait({task})

    async def close(self) -> None:
        """Cancel in-flight fetches; results arriving afterwards are dropped."""
        self._closed = True
        pending = list(self._in_flight.values())
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._in_flight.clear()

    def _ensure_loaded(self, project_id: str) -> None:
        if self._closed or project_id in self._entries or project_id in self._in_flight:
            return
        self._errors.pop(project_id, None)
        self.fetch_count[project_id] += 1
        loop = asyncio.get_running_loop()
        self._in_flight[project_id] = loop.create_task(self._load(project_id))

    async def _load(self, project_id: str) -> None:
        logger.info("Fetching tasks for project %s", project_id)
        try:
            tasks = await self._fetch_tasks(project_id)
        except asyncio.CancelledError:
            logger.debug("Fetch for project %s cancelled", project_id)
            self._in_flight.pop(project_id, None)
            raise
        except Exception as e:
            logger.warning("Fetching tasks for project %s failed: %s", project_id, e)
            self._in_flight.pop(project_id, None)
            self._errors[project_id] = str(e) or type(e).__name__
            return
        self._in_flight.pop(project_id, None)
        if self._closed:
            return
        self._entries.setdefault(project_id, list(tasks))
        logger.debug("Cached %d tasks for project %s", len(self._entries[project_id]), project_id)


def partition_tasks(tasks: Iterable[TimelineEntity]) -> TaskPartition:
    """
    Top-level tasks (no parent, not milestones), subtasks (any parent) and
    milestones (milestone tag, any parent). A milestone with a parent sits in
    both of the last two groups.
    """
    tasks = list(tasks)
    return TaskPartition(
        top_level=tuple(t for t in tasks if t.parent_id is None and not t.is_milestone),
        subtasks=tuple(t for t in tasks if t.parent_id is not None),
        milestones=tuple(t for t in tasks if t.is_milestone),
    )
