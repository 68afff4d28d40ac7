"""
Bounded worker pool for import jobs.
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from django.db import close_old_connections, connection

from pacs.exceptions import ImportRejected

logger = logging.getLogger('pacs.importing.executor')


class BoundedExecutor:
    """
    Thread pool with a fixed number of workers and a bounded backlog.

    Submissions beyond max_workers + backlog block for submit_timeout seconds
    (forever when None) and are then rejected with ImportRejected.
    Each task runs with fresh database connections for its thread.
    """

    def __init__(
        self,
        max_workers: int = 4,
        backlog: int = 16,
        submit_timeout: Optional[float] = None,
        thread_name_prefix: str = 'pacs-import'
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if backlog < 0:
            raise ValueError("backlog cannot be negative")

        self.max_workers = max_workers
        self.backlog = backlog
        self.submit_timeout = submit_timeout

        self._slots = threading.BoundedSemaphore(max_workers + backlog)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix
        )

        logger.info(f"Import pool started: {max_workers} workers, backlog {backlog}")

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """
        Schedule fn(*args, **kwargs) on the pool.

        Raises:
            ImportRejected: If no slot frees up in time or the pool is shut down
        """
        if not self._slots.acquire(timeout=self.submit_timeout):
            raise ImportRejected(
                f"Import backlog full ({self.max_workers} running, {self.backlog} queued)"
            )

        try:
            future = self._executor.submit(self._call, fn, *args, **kwargs)
        except RuntimeError as e:
            self._slots.release()
            raise ImportRejected(f"Import pool unavailable: {e}") from e

        future.add_done_callback(self._release_slot)
        return future

    def _release_slot(self, future: Future) -> None:
        self._slots.release()

    @staticmethod
    def _call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        close_old_connections()
        try:
            return fn(*args, **kwargs)
        finally:
            connection.close()

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting jobs and optionally wait for running ones."""
        self._executor.shutdown(wait=wait)
        logger.info("Import pool shut down")
