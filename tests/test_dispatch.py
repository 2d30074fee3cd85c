import asyncio

import pytest

from pulse_relay.dispatch import SinkWorker


@pytest.mark.asyncio
async def test_sink_handles_items_in_order():
    handled: list[int] = []

    async def handler(item: int) -> None:
        handled.append(item)

    worker = SinkWorker("test", handler, maxsize=8)
    worker.start()
    for item in range(5):
        worker.offer(item)

    await asyncio.wait_for(worker.join(), timeout=1.0)
    await worker.stop()

    assert handled == [0, 1, 2, 3, 4]
    assert worker.dropped == 0


@pytest.mark.asyncio
async def test_full_sink_drops_oldest_pending():
    release = asyncio.Event()
    handled: list[int] = []

    async def handler(item: int) -> None:
        await release.wait()
        handled.append(item)

    worker = SinkWorker("slow", handler, maxsize=2)
    worker.start()
    worker.offer(0)
    await asyncio.sleep(0)  # worker picks up item 0 and blocks

    for item in (1, 2, 3, 4):
        worker.offer(item)

    assert worker.pending == 2
    release.set()
    await asyncio.wait_for(worker.join(), timeout=1.0)
    await worker.stop()

    assert handled == [0, 3, 4]
    assert worker.dropped == 2


@pytest.mark.asyncio
async def test_handler_failure_does_not_stop_worker():
    handled: list[int] = []

    async def handler(item: int) -> None:
        if item == 1:
            raise RuntimeError("boom")
        handled.append(item)

    worker = SinkWorker("flaky", handler)
    worker.start()
    for item in range(3):
        worker.offer(item)

    await asyncio.wait_for(worker.join(), timeout=1.0)
    await worker.stop()

    assert handled == [0, 2]


@pytest.mark.asyncio
async def test_start_twice_raises():
    async def handler(item: int) -> None:
        return None

    worker = SinkWorker("twice", handler)
    worker.start()
    with pytest.raises(RuntimeError):
        worker.start()
    await worker.stop()
