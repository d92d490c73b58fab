"""Tests for the indexing queue and the periodic sync task."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from pagevault.exceptions import SyncInProgressError
from pagevault.indexing_queue import IndexingQueue
from pagevault.sync_task import SyncTask
from pagevault.types import ReconcileReport


class TestIndexingQueue:
    @pytest.mark.asyncio
    async def test_drain_waits_for_tasks(self):
        queue = IndexingQueue()
        done = []

        async def work(n):
            await asyncio.sleep(0.01)
            done.append(n)

        queue.enqueue(work(1), "one")
        queue.enqueue(work(2), "two")
        assert queue.pending == 2

        await queue.drain()

        assert sorted(done) == [1, 2]
        assert queue.pending == 0

    @pytest.mark.asyncio
    async def test_failures_are_contained(self):
        queue = IndexingQueue()

        async def boom():
            raise RuntimeError("embedding exploded")

        task = queue.enqueue(boom(), "boom")
        await queue.drain()

        assert task.done()
        assert queue.pending == 0


class TestSyncTask:
    @pytest.mark.asyncio
    async def test_run_sweep_returns_report(self):
        reconciler = MagicMock()
        reconciler.reconcile = AsyncMock(return_value=ReconcileReport(listed=3, known=3))
        task = SyncTask(interval_seconds=3600, reconciler=reconciler, index_service=MagicMock())

        report = await task.run_sweep()

        assert report.listed == 3
        assert not task.sweep_running

    @pytest.mark.asyncio
    async def test_overlapping_sweep_is_rejected(self):
        release = asyncio.Event()

        async def slow_reconcile():
            await release.wait()
            return ReconcileReport()

        reconciler = MagicMock()
        reconciler.reconcile = slow_reconcile
        task = SyncTask(interval_seconds=3600, reconciler=reconciler, index_service=MagicMock())

        first = asyncio.create_task(task.run_sweep())
        await asyncio.sleep(0)
        assert task.sweep_running

        with pytest.raises(SyncInProgressError):
            await task.run_sweep()

        release.set()
        await first
        assert not task.sweep_running

    @pytest.mark.asyncio
    async def test_cycle_runs_sweep_then_reindex(self):
        order = []
        reconciler = MagicMock()
        reconciler.reconcile = AsyncMock(side_effect=lambda: order.append("sweep") or ReconcileReport())
        index_service = MagicMock()
        index_service.reindex_batch = AsyncMock(side_effect=lambda limit: order.append("reindex") or 0)
        task = SyncTask(interval_seconds=3600, reconciler=reconciler, index_service=index_service)

        await task._sync_cycle()

        assert order == ["sweep", "reindex"]

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        task = SyncTask(interval_seconds=3600, reconciler=MagicMock(), index_service=MagicMock())

        await task.start()
        assert task._task is not None
        await task.stop()

        assert task._task.done()
