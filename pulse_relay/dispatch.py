"""Bounded per-sink work queues."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class SinkWorker(Generic[T]):
    """Runs a downstream handler off the caller's path, one item at a time.

    ``offer`` never blocks. When the queue is full the oldest pending item is
    dropped so the sink catches up with the most recent data. Items are
    handled in the order they were offered.
    """

    def __init__(
        self,
        name: str,
        handler: Callable[[T], Awaitable[Any]],
        *,
        maxsize: int = 16,
    ) -> None:
        self.name = name
        self._handler = handler
        self._queue: asyncio.Queue[T] = asyncio.Queue(maxsize=max(maxsize, 1))
        self._worker: Optional[asyncio.Task[None]] = None
        self._dropped = 0

    @property
    def dropped(self) -> int:
        return self._dropped

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self._worker is not None:
            raise RuntimeError(f"Sink worker {self.name} already started")
        self._worker = asyncio.create_task(self._run(), name=f"sink-{self.name}")

    async def stop(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None

        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._queue.task_done()

    def offer(self, item: T) -> None:
        if self._queue.full():
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            else:
                self._queue.task_done()
                self._dropped += 1
                LOGGER.debug("Sink %s full; dropped oldest pending item", self.name)

        self._queue.put_nowait(item)

    async def join(self) -> None:
        """Wait until every offered item has been handled."""

        await self._queue.join()

    async def _run(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                await self._handler(item)
            except asyncio.CancelledError:
                raise
            except Exception:
                LOGGER.exception("Sink %s handler failed", self.name)
            finally:
                self._queue.task_done()
