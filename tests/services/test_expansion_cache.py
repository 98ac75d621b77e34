"""
Tests for the lazy expansion cache and task partitioning.
"""

import asyncio
from collections import Counter
from typing import Optional

from roadmap_timeline.models import TimelineEntity
from roadmap_timeline.services.expansion_cache import ExpansionCache, partition_tasks
from roadmap_timeline.services.sample_data import get_sample_tasks


class FakeFetcher:
    """Counts calls; optionally blocks on a gate or fails a number of times."""

    def __init__(self, tasks: Optional[list[TimelineEntity]] = None, failures: int = 0) -> None:
        self.tasks = tasks if tasks is not None else [TimelineEntity(id="t1", title="Task")]
        self.failures = failures
        self.calls: Counter[str] = Counter()
        self.gate: Optional[asyncio.Event] = None

    async def __call__(self, project_id: str) -> list[TimelineEntity]:
        self.calls[project_id] += 1
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)
        if self.failures:
            self.failures -= 1
            raise RuntimeError("listing unavailable")
        return list(self.tasks)


def _sample(project_id: str) -> list[TimelineEntity]:
    return [TimelineEntity.model_validate(t) for t in get_sample_tasks(project_id)]


class TestToggleExpand:
    def test_expand_collapse_expand_fetches_once(self) -> None:
        fetcher = FakeFetcher()

        async def scenario() -> ExpansionCache:
            cache = ExpansionCache(fetcher)
            assert cache.toggle_expand("p1") is True
            await cache.wait("p1")
            assert cache.toggle_expand("p1") is False
            assert cache.toggle_expand("p1") is True
            await cache.wait("p1")
            return cache

        cache = asyncio.run(scenario())
        assert fetcher.calls["p1"] == 1
        assert cache.fetch_count["p1"] == 1
        assert cache.state("p1") == "loaded"
        assert [t.id for t in cache.tasks("p1")] == ["t1"]

    def test_rapid_toggles_while_loading_fetch_once(self) -> None:
        fetcher = FakeFetcher()

        async def scenario() -> ExpansionCache:
            fetcher.gate = asyncio.Event()
            cache = ExpansionCache(fetcher)
            cache.toggle_expand("p1")
            await asyncio.sleep(0)
            assert cache.is_loading("p1")
            assert cache.state("p1") == "loading"
            cache.toggle_expand("p1")
            cache.toggle_expand("p1")
            cache.toggle_expand("p1")
            cache.toggle_expand("p1")
            fetcher.gate.set()
            await cache.wait("p1")
            return cache

        cache = asyncio.run(scenario())
        assert fetcher.calls["p1"] == 1
        assert not cache.is_loading("p1")
        # four toggles after the first: back to expanded
        assert "p1" in cache.expanded

    def test_collapse_keeps_cached_tasks(self) -> None:
        fetcher = FakeFetcher()

        async def scenario() -> ExpansionCache:
            cache = ExpansionCache(fetcher)
            cache.toggle_expand("p1")
            await cache.wait("p1")
            cache.toggle_expand("p1")
            return cache

        cache = asyncio.run(scenario())
        assert cache.state("p1") == "collapsed"
        assert cache.is_cached("p1")
        assert len(cache.tasks("p1")) == 1

    def test_projects_are_independent(self) -> None:
        fetcher = FakeFetcher()

        async def scenario() -> ExpansionCache:
            cache = ExpansionCache(fetcher)
            cache.toggle_expand("p1")
            cache.toggle_expand("p2")
            await cache.wait("p1")
            await cache.wait("p2")
            return cache

        cache = asyncio.run(scenario())
        assert fetcher.calls == Counter({"p1": 1, "p2": 1})

    def test_empty_result_is_empty_state(self) -> None:
        fetcher = FakeFetcher(tasks=[])

        async def scenario() -> ExpansionCache:
            cache = ExpansionCache(fetcher)
            cache.toggle_expand("p1")
            await cache.wait("p1")
            return cache

        cache = asyncio.run(scenario())
        assert cache.state("p1") == "empty"
        assert cache.error("p1") is None


class TestFetchFailure:
    def test_failure_leaves_entry_unset_and_records_error(self) -> None:
        fetcher = FakeFetcher(failures=1)

        async def scenario() -> ExpansionCache:
            cache = ExpansionCache(fetcher)
            cache.toggle_expand("p1")
            await cache.wait("p1")
            return cache

        cache = asyncio.run(scenario())
        assert cache.state("p1") == "failed"
        assert cache.error("p1") == "listing unavailable"
        assert not cache.is_cached("p1")
        assert not cache.is_loading("p1")

    def test_reexpand_after_failure_retries(self) -> None:
        fetcher = FakeFetcher(failures=1)

        async def scenario() -> ExpansionCache:
            cache = ExpansionCache(fetcher)
            cache.toggle_expand("p1")
            await cache.wait("p1")
            cache.toggle_expand("p1")
            cache.toggle_expand("p1")
            await cache.wait("p1")
            return cache

        cache = asyncio.run(scenario())
        assert fetcher.calls["p1"] == 2
        assert cache.state("p1") == "loaded"
        assert cache.error("p1") is None

    def test_retry_refetches_without_collapse(self) -> None:
        fetcher = FakeFetcher(failures=1)

        async def scenario() -> ExpansionCache:
            cache = ExpansionCache(fetcher)
            cache.toggle_expand("p1")
            await cache.wait("p1")
            cache.retry("p1")
            await cache.wait("p1")
            return cache

        cache = asyncio.run(scenario())
        assert fetcher.calls["p1"] == 2
        assert cache.state("p1") == "loaded"

    def test_retry_on_loaded_project_does_not_refetch(self) -> None:
        fetcher = FakeFetcher()

        async def scenario() -> ExpansionCache:
            cache = ExpansionCache(fetcher)
            cache.toggle_expand("p1")
            await cache.wait("p1")
            cache.retry("p1")
            await cache.wait("p1")
            return cache

        asyncio.run(scenario())
        assert fetcher.calls["p1"] == 1


class TestClose:
    def test_close_cancels_in_flight_fetch(self) -> None:
        fetcher = FakeFetcher()

        async def scenario() -> ExpansionCache:
            fetcher.gate = asyncio.Event()
            cache = ExpansionCache(fetcher)
            cache.toggle_expand("p1")
            await asyncio.sleep(0)
            await cache.close()
            return cache

        cache = asyncio.run(scenario())
        assert cache.closed
        assert not cache.is_loading("p1")
        assert not cache.is_cached("p1")

    def test_no_fetch_after_close(self) -> None:
        fetcher = FakeFetcher()

        async def scenario() -> ExpansionCache:
            cache = ExpansionCache(fetcher)
            await cache.close()
            cache.toggle_expand("p1")
            await cache.wait("p1")
            return cache

        asyncio.run(scenario())
        assert fetcher.calls["p1"] == 0


class TestPartitionTasks:
    def test_groups_alpha_sample(self) -> None:
        part = partition_tasks(_sample("proj-alpha"))
        assert [t.id for t in part.top_level] == ["alpha-1", "alpha-2", "alpha-3", "alpha-4"]
        assert [t.id for t in part.subtasks] == ["alpha-1a", "alpha-1b"]
        assert [t.id for t in part.milestones] == ["alpha-m1"]

    def test_subtask_milestone_in_both_groups(self) -> None:
        part = partition_tasks(_sample("proj-beta"))
        assert [t.id for t in part.top_level] == ["beta-1", "beta-2"]
        assert [t.id for t in part.subtasks] == ["beta-1a", "beta-1m"]
        assert [t.id for t in part.milestones] == ["beta-1m"]

    def test_subtasks_of_derived_by_parent_id(self) -> None:
        part = partition_tasks(_sample("proj-alpha"))
        assert [s.id for s in part.subtasks_of("alpha-1")] == ["alpha-1a", "alpha-1b"]
        assert part.subtasks_of("alpha-2") == []

    def test_empty(self) -> None:
        part = partition_tasks([])
        assert part.top_level == () and part.subtasks == () and part.milestones == ()
