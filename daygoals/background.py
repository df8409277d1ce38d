"""Background tasks - periodic sweeps and queue consumers.

Both kinds own one asyncio task started with start() and cancelled with
stop(). The work itself is exposed as a single-iteration coroutine so it can
be driven directly.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")


class PeriodicTask:
    """
    Run run_once() forever, sleeping a fixed interval between iterations.

    An iteration that raises is logged; the loop carries on with the next
    tick. There is no jitter, backoff or overlap guard.
    """

    name = "periodic"

    def __init__(self, interval: float):
        self._interval = interval
        self._task: Optional[asyncio.Task] = None

    async def run_once(self) -> None:
        raise NotImplementedError

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _loop(self) -> None:
        logger.info(f"{self.name} started (interval: {self._interval}s)")
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception(f"{self.name} iteration failed")

            await asyncio.sleep(self._interval)

    def start(self) -> asyncio.Task:
        """Start the loop as a background task."""
        if not self.running:
            self._task = asyncio.create_task(self._loop(), name=self.name)
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info(f"{self.name} stopped")


class QueueConsumer(Generic[ItemT]):
    """
    Drain a queue with a single handler.

    Handler failures are logged and never reach the producer.
    """

    def __init__(
        self,
        name: str,
        queue: "asyncio.Queue[ItemT]",
        handler: Callable[[ItemT], Awaitable[None]],
    ):
        self.name = name
        self.queue = queue
        self._handler = handler
        self._task: Optional[asyncio.Task] = None

    async def consume_one(self) -> None:
        """Wait for one item and handle it."""
        item = await self.queue.get()
        try:
            await self._handler(item)
        except Exception:
            logger.exception(f"{self.name} failed to handle {item!r}")
        finally:
            self.queue.task_done()

    async def _loop(self) -> None:
        while True:
            await self.consume_one()

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop(), name=self.name)
        return self._task

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info(f"{self.name} stopped")
