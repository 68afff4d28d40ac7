"""
Import Registry Module

Single job table for folder imports, keyed by canonical path. Prevents two
concurrent imports of the same root and reports running/done status.
"""
import logging
import os
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pacs.exceptions import ImportRejected, InvalidPath

from .import_info import ImportInformation
from .import_worker import ImportWorker

logger = logging.getLogger('pacs.importing.registry')


@dataclass
class ImportJob:
    """A tracked import; future is set once the job has been scheduled."""
    path: str
    info: ImportInformation
    future: Optional[Future] = None

    @property
    def done(self) -> bool:
        return self.future is not None and self.future.done()


class ImportRegistry:
    """
    Thread-safe front door for folder imports.

    Usage:
        registry = ImportRegistry(worker, executor)
        registry.add_import('/data/dicom')
        registry.list_imports()   # ['running: /data/dicom']
    """

    def __init__(self, worker: ImportWorker, executor: Any) -> None:
        """
        Initialize the registry.

        Args:
            worker: ImportWorker that performs each job
            executor: Pool with a submit(fn, *args) -> Future method
        """
        self.worker = worker
        self.executor = executor
        self._imports: Dict[str, ImportJob] = {}
        self._lock = threading.Lock()

    @staticmethod
    def canonicalize(path: Union[str, os.PathLike, None]) -> str:
        """
        Resolve path to its absolute, normalized form.

        Raises:
            InvalidPath: If path is blank, missing or unreadable
        """
        if path is None or not str(path).strip():
            raise InvalidPath(path, 'empty path')

        try:
            resolved = Path(path).expanduser().resolve(strict=True)
        except (OSError, RuntimeError, ValueError) as e:
            raise InvalidPath(path, str(e)) from e

        if not os.access(resolved, os.R_OK):
            raise InvalidPath(path, 'not readable')

        return str(resolved)

    def add_import(self, path: Union[str, os.PathLike]) -> bool:
        """
        Start an import of path unless one is already tracked.

        Args:
            path: File or directory to import

        Returns:
            True if a new job was started, False if the path was already tracked

        Raises:
            InvalidPath: If the path cannot be canonicalized
            ImportRejected: If the pool backlog is full
        """
        key = self.canonicalize(path)

        with self._lock:
            if key in self._imports:
                logger.info(f"Import of [{key}] already tracked, ignoring request")
                return False

            job = ImportJob(path=key, info=ImportInformation(Path(key)))
            self._imports[key] = job

        try:
            job.future = self.executor.submit(self._run_job, job.info)
        except ImportRejected:
            with self._lock:
                self._imports.pop(key, None)
            logger.warning(f"Import of [{key}] rejected, backlog full")
            raise

        logger.info(f"Import of [{key}] scheduled")
        return True

    def _run_job(self, info: ImportInformation) -> ImportInformation:
        try:
            return self.worker.run(info)
        except Exception as e:
            logger.error(f"Import of [{info.root_path}] failed: {e}", exc_info=True)
            info.mark_finished()
            return info

    def list_imports(self) -> List[str]:
        """
        Snapshot of tracked imports.

        Returns:
            One 'running: <path>' or 'done: <path>' entry per tracked path
        """
        with self._lock:
            jobs = list(self._imports.values())

        return [f"{'done' if job.done else 'running'}: {job.path}" for job in jobs]

    def import_status(self) -> List[Dict[str, Any]]:
        """Structured snapshot of tracked imports, with counters."""
        with self._lock:
            jobs = list(self._imports.values())

        status = []
        for job in jobs:
            entry = {'path': job.path, 'state': 'done' if job.done else 'running'}
            entry.update(job.info.to_dict())
            status.append(entry)
        return status

    def get_import(self, path: Union[str, os.PathLike]) -> Optional[Future]:
        """Get the future of a tracked import, or None."""
        try:
            key = self.canonicalize(path)
        except InvalidPath:
            return None

        with self._lock:
            job = self._imports.get(key)
        return job.future if job else None

    def cleanup_completed(self) -> int:
        """
        Drop finished jobs from the table.

        Returns:
            Number of entries removed
        """
        with self._lock:
            finished = [key for key, job in self._imports.items() if job.done]
            for key in finished:
                del self._imports[key]

        if finished:
            logger.info(f"Removed {len(finished)} completed import(s)")
        return len(finished)

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
