"""Background execution for async alerts."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

LOGGER = logging.getLogger("AlertScheduler")


class ThreadPoolScheduler:
    """Runs alert tasks on a thread pool; task failures are logged, never raised."""

    def __init__(self, max_workers: int = 4, thread_name_prefix: str = "alerts") -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=thread_name_prefix
        )

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        future = self._executor.submit(fn, *args)
        future.add_done_callback(self._log_failure)
        return future

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            LOGGER.error(f"Background alert task failed: {type(exc).__name__}: {exc}", exc_info=exc)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=not wait)
