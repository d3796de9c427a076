"""
Click Recorder

Decouples usage recording from the redirect response. The redirect path
hands the short code over with submit(), which never blocks and never
raises; a pool of worker tasks drains the queue and applies the clicks.

Delivery is best effort (at most once):
- a full queue drops the click and logs a warning
- a failed recording is logged with its traceback and counted, never retried
- pending clicks still queued after the shutdown drain timeout are lost
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)

RecordClick = Callable[[str], Awaitable[None]]


class ClickRecorder:
    """
    Bounded in-memory queue of clicks plus the workers consuming it.

    Workers run independently, so recordings for the same code may overlap
    and complete in any order; only the total number of increments matters.
    """

    def __init__(
        self,
        record_click: Optional[RecordClick] = None,
        max_queue_size: int = 10000,
        workers: int = 4
    ):
        """
        Initialize the click recorder.

        Args:
            record_click: Coroutine applying one click (default: record_click_background)
            max_queue_size: Pending clicks kept before new ones are dropped
            workers: Number of concurrent worker tasks
        """
        if record_click is None:
            from shortener.services.background_tasks import record_click_background
            record_click = record_click_background
        if workers < 1:
            raise ValueError("ClickRecorder needs at least one worker")

        self._record_click = record_click
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=max_queue_size)
        self._worker_count = workers
        self._workers: List[asyncio.Task] = []

        self._total_submitted = 0
        self._total_recorded = 0
        self._total_failed = 0
        self._total_dropped = 0

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self._workers)

    async def start(self) -> None:
        """Spawn the worker tasks on the running event loop."""
        if self.is_running:
            logger.warning("Click recorder already running")
            return

        self._workers = [
            asyncio.create_task(self._worker(index), name=f"click-recorder-{index}")
            for index in range(self._worker_count)
        ]
        logger.info(f"Click recorder started with {self._worker_count} workers")

    def submit(self, short_code: str) -> bool:
        """
        Queue a click for recording without waiting for it.

        Returns:
            True if queued, False if dropped because the queue is full
        """
        try:
            self._queue.put_nowait(short_code)
        except asyncio.QueueFull:
            self._total_dropped += 1
            logger.warning(
                f"Click queue full ({self._queue.maxsize}), dropping click for {short_code}"
            )
            return False

        self._total_submitted += 1
        return True

    async def join(self) -> None:
        """Wait until every click queued so far has been processed."""
        await self._queue.join()

    async def stop(self, timeout: float = 5.0) -> None:
        """
        Drain pending clicks for up to timeout seconds, then cancel the workers.

        Args:
            timeout: Seconds to wait for the queue to empty
        """
        if self._workers:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Click recorder stopped with {self._queue.qsize()} clicks still pending"
                )

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Click recorder stopped")

    async def _worker(self, index: int) -> None:
        while True:
            short_code = await self._queue.get()
            try:
                await self._record_click(short_code)
                self._total_recorded += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._total_failed += 1
                logger.error(
                    f"Failed to record click for {short_code} (worker {index}): {e}",
                    exc_info=True
                )
            finally:
                self._queue.task_done()

    def get_stats(self) -> dict:
        """
        Get recorder statistics for monitoring.

        Returns:
            Dictionary with queue and outcome counters
        """
        return {
            "workers": self._worker_count,
            "running": self.is_running,
            "queue_size": self._queue.qsize(),
            "max_queue_size": self._queue.maxsize,
            "total_submitted": self._total_submitted,
            "total_recorded": self._total_recorded,
            "total_failed": self._total_failed,
            "total_dropped": self._total_dropped,
        }
