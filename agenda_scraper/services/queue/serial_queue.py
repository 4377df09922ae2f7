"""FIFO queue that runs browser jobs strictly one at a time."""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from loguru import logger

from agenda_scraper.constants import Delays, LogEmoji
from agenda_scraper.core.exceptions import QueueClosedError

T = TypeVar("T")
Delay = Callable[[float], Awaitable[Any]]


@dataclass
class QueuedJob:
    """A workflow closure waiting for the worker, and the future its caller awaits."""

    fn: Callable[[], Awaitable[Any]]
    future: "asyncio.Future[Any]"
    label: str = "job"
    enqueued_at: float = field(default_factory=time.monotonic)


class SerialExecutionQueue:
    """
    Serializes access to the shared browser.

    A single worker task drains jobs in submission order. After every job
    settles, successfully or not, the worker waits ``cooldown_seconds`` before
    taking the next one. A failing job rejects only its own caller.
    """

    def __init__(
        self,
        cooldown_seconds: float = Delays.QUEUE_COOLDOWN_SECONDS,
        delay: Optional[Delay] = None,
    ):
        """
        Initialize serial execution queue.

        Args:
            cooldown_seconds: Pause after each job before the next one starts
            delay: Awaitable sleep used for the cooldown (asyncio.sleep by default)
        """
        self.cooldown_seconds = cooldown_seconds
        self._delay: Delay = delay or asyncio.sleep
        self._queue: Optional["asyncio.Queue[QueuedJob]"] = None
        self._worker: Optional[asyncio.Task] = None
        self._busy = False
        self._closed = False
        self._processed = 0
        self._failed = 0

    @property
    def depth(self) -> int:
        """Number of jobs waiting (not counting the one running)."""
        return self._queue.qsize() if self._queue is not None else 0

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_worker(self) -> "asyncio.Queue[QueuedJob]":
        if self._queue is None:
            self._queue = asyncio.Queue()
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="serial-execution-queue")
        return self._queue

    async def submit(self, fn: Callable[[], Awaitable[T]], label: str = "job") -> T:
        """
        Enqueue ``fn`` and wait for its result.

        Args:
            fn: Zero-argument coroutine function to run on the worker
            label: Name used in logs

        Returns:
            Whatever ``fn`` returns

        Raises:
            QueueClosedError: If the queue is shut down before the job runs
            Exception: Whatever ``fn`` raised
        """
        if self._closed:
            raise QueueClosedError()

        queue = self._ensure_worker()
        future: "asyncio.Future[T]" = asyncio.get_running_loop().create_future()
        queue.put_nowait(QueuedJob(fn=fn, future=future, label=label))
        logger.debug(f"{LogEmoji.QUEUE} Queued {label} (waiting: {queue.qsize()})")
        return await future

    async def _run(self) -> None:
        assert self._queue is not None
        while True:
            job = await self._queue.get()
            try:
                if job.future.done():
                    # Caller gave up while the job was waiting
                    logger.debug(f"Skipping abandoned {job.label}")
                    continue

                waited = time.monotonic() - job.enqueued_at
                logger.debug(f"{LogEmoji.PROCESSING} Running {job.label} (waited {waited:.1f}s)")
                self._busy = True
                try:
                    result = await job.fn()
                except asyncio.CancelledError:
                    if not job.future.done():
                        job.future.cancel()
                    raise
                except Exception as e:
                    self._failed += 1
                    logger.warning(f"{LogEmoji.ERROR} {job.label} failed: {e}")
                    if not job.future.done():
                        job.future.set_exception(e)
                else:
                    if not job.future.done():
                        job.future.set_result(result)
                finally:
                    self._busy = False
                    self._processed += 1

                await self._delay(self.cooldown_seconds)
            finally:
                self._queue.task_done()

    async def close(self) -> None:
        """Stop the worker and fail every job still waiting."""
        self._closed = True
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None

        pending = 0
        while self._queue is not None and not self._queue.empty():
            job = self._queue.get_nowait()
            self._queue.task_done()
            if not job.future.done():
                job.future.set_exception(QueueClosedError())
                pending += 1
        if pending:
            logger.warning(f"{LogEmoji.STOP} Execution queue closed with {pending} pending jobs")

    def stats(self) -> Dict[str, Any]:
        return {
            "waiting": self.depth,
            "busy": self._busy,
            "processed": self._processed,
            "failed": self._failed,
            "cooldown_seconds": self.cooldown_seconds,
        }
