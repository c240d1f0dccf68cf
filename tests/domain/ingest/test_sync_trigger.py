from __future__ import annotations

import asyncio

from catalog_ingest.domain.ingest import SyncResult, SyncTrigger


class BlockingSynchronizer:
    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.runs = 0

    async def sync_all(self) -> list[SyncResult]:
        self.runs += 1
        await self.release.wait()
        return [SyncResult(installation_id="42", organization_id="org-1", persisted=3)]


def test_start_refuses_second_concurrent_sweep() -> None:
    async def scenario() -> None:
        synchronizer = BlockingSynchronizer()
        trigger = SyncTrigger(synchronizer)  # type: ignore[arg-type]

        assert trigger.start()
        assert not trigger.start()
        await asyncio.sleep(0)
        assert trigger.running

        synchronizer.release.set()
        results = await trigger.wait()

        assert results is not None
        assert results[0].persisted == 3
        assert not trigger.running
        assert synchronizer.runs == 1
        assert trigger.start()
        await trigger.wait()
        assert not trigger.cancel()

    asyncio.run(scenario())


def test_cancel_stops_in_flight_sweep() -> None:
    async def scenario() -> None:
        trigger = SyncTrigger(BlockingSynchronizer())  # type: ignore[arg-type]

        assert not trigger.cancel()
        trigger.start()
        await asyncio.sleep(0)

        assert trigger.cancel()
        assert await trigger.wait() is None
        assert not trigger.running

    asyncio.run(scenario())


def test_wait_without_start_returns_none() -> None:
    trigger = SyncTrigger(BlockingSynchronizer())  # type: ignore[arg-type]

    assert asyncio.run(trigger.wait()) is None
