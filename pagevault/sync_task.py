"""Background task for periodic reconciliation and backlog reindexing."""

import asyncio
from typing import Optional

from common.logging_config import get_logger
from pagevault import config
from pagevault.exceptions import SyncInProgressError
from pagevault.reconciler import Reconciler
from pagevault.services.index_service import IndexService
from pagevault.types import ReconcileReport

logger = get_logger(__name__)


class SyncTask:
    """
    Background task that periodically reconciles the bucket and drains one
    reindex batch.
    """

    def __init__(
        self,
        interval_seconds: int = None,
        reconciler: Optional[Reconciler] = None,
        index_service: Optional[IndexService] = None,
    ):
        """
        Initialize sync task.

        Args:
            interval_seconds: Time between cycles (default SYNC_INTERVAL_SECONDS, 6 hours)
            reconciler: Reconciler to run; built from the service locator if omitted
            index_service: Index service for the reindex batch
        """
        self.interval_seconds = interval_seconds or config.SYNC_INTERVAL_SECONDS
        self._reconciler = reconciler
        self._index_service = index_service
        self._sweep_lock = asyncio.Lock()
        self._running = False
        self._task = None

    @property
    def reconciler(self) -> Reconciler:
        if self._reconciler is None:
            self._reconciler = Reconciler()
        return self._reconciler

    @property
    def index_service(self) -> IndexService:
        if self._index_service is None:
            self._index_service = IndexService()
        return self._index_service

    @property
    def sweep_running(self) -> bool:
        return self._sweep_lock.locked()

    async def start(self) -> None:
        """Start the background sync task."""
        if self._running:
            logger.warning("Sync task already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"Started sync task (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the background sync task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info("Stopped sync task")

    async def _run(self) -> None:
        """Main loop for sync task."""
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await self._sync_cycle()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in sync task: {e}", exc_info=True)

    async def _sync_cycle(self) -> None:
        """Execute one scheduled cycle: a sweep, then one reindex batch."""
        if self.sweep_running:
            logger.warning("Previous reconciliation still running, skipping this cycle")
            return

        await self.run_sweep()
        processed = await self.index_service.reindex_batch(config.REINDEX_BATCH_SIZE)
        logger.info(f"Sync cycle complete: {processed} backlog files reindexed")

    async def run_sweep(self) -> ReconcileReport:
        """
        Run one reconciliation sweep now.

        Raises:
            SyncInProgressError: A sweep is already running
            StorageError: Listing failed
        """
        if self._sweep_lock.locked():
            raise SyncInProgressError("A reconciliation sweep is already running")

        async with self._sweep_lock:
            return await self.reconciler.reconcile()
