"""Bounded thread pool for CPU-bound image work."""
import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

from photomarket.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ImageWorkerPool:
    """
    Runs decode/encode work off the event loop.

    At most ``max_workers`` images are processed at once no matter how many
    uploads arrive concurrently; the rest wait in the executor queue.
    """

    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers or settings.max_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="image-worker"
            )
        return self._executor

    async def run(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``func`` on a worker thread and await its result."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.executor,
            functools.partial(func, *args, **kwargs)
        )

    def shutdown(self, wait: bool = True):
        """Stop the workers; a later run() starts a fresh executor."""
        if self._executor is not None:
            logger.info("Shutting down image worker pool")
            self._executor.shutdown(wait=wait)
            self._executor = None
