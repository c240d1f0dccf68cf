"""Fire-and-forget launching of reconciliation sweeps."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .polling import PollingSynchronizer, SyncResult

log = getLogger(__name__)


class SyncTrigger:
    """Run at most one ``sync_all`` sweep in the background at a time."""

    def __init__(self, synchronizer: PollingSynchronizer) -> None:
        self._synchronizer = synchronizer
        self._task: asyncio.Task[list[SyncResult]] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Schedule a sweep on the running loop; ``False`` if one is in flight."""

        if self.running:
            log.info("Sync already in progress, not starting another")
            return False
        self._task = asyncio.get_running_loop().create_task(
            self._synchronizer.sync_all(), name="catalog-ingest-sync"
        )
        self._task.add_done_callback(self._report)
        return True

    def cancel(self) -> bool:
        task = self._task
        if task is None or task.done():
            return False
        log.info("Cancelling in-flight sync")
        return task.cancel()

    async def wait(self) -> list[SyncResult] | None:
        if self._task is None:
            return None
        try:
            return await self._task
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise
            return None

    @staticmethod
    def _report(task: asyncio.Task[list[SyncResult]]) -> None:
        if task.cancelled():
            log.warning("Sync was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            log.error("Sync failed", exc_info=exc)
