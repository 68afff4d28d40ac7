"""
Import job bookkeeping.
"""
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from django.utils import timezone


class ImportInformation:
    """
    Accumulates the outcome of one folder import.

    Messages hold the SOP Instance UIDs of newly imported instances.
    Thread-safe; the worker writes while the registry reads snapshots.
    """

    def __init__(self, root_path: Path) -> None:
        if root_path is None:
            raise ValueError("Root path cannot be None")

        self.root_path: Path = Path(root_path)
        self.started_at: datetime = timezone.now()
        self.finished_at: Optional[datetime] = None

        self._lock = threading.Lock()
        self._messages: List[str] = []
        self._error_count = 0
        self._duplicate_count = 0
        self._files_seen = 0

    def add_info(self, message: str) -> None:
        """
        Record an imported instance.

        Args:
            message: SOP Instance UID of the imported instance

        Raises:
            ValueError: If message is blank
        """
        if message is None or not str(message).strip():
            raise ValueError("Message cannot be empty")

        with self._lock:
            self._messages.append(str(message))

    def add_error(self) -> None:
        with self._lock:
            self._error_count += 1

    def add_duplicate(self) -> None:
        with self._lock:
            self._duplicate_count += 1

    def add_file_seen(self) -> int:
        """Count a visited file and return the running total."""
        with self._lock:
            self._files_seen += 1
            return self._files_seen

    def mark_finished(self) -> None:
        with self._lock:
            self.finished_at = timezone.now()

    @property
    def messages(self) -> List[str]:
        """Snapshot of the recorded messages."""
        with self._lock:
            return list(self._messages)

    @property
    def message_count(self) -> int:
        with self._lock:
            return len(self._messages)

    @property
    def has_messages(self) -> bool:
        return self.message_count > 0

    @property
    def error_count(self) -> int:
        with self._lock:
            return self._error_count

    @property
    def duplicate_count(self) -> int:
        with self._lock:
            return self._duplicate_count

    @property
    def files_seen(self) -> int:
        with self._lock:
            return self._files_seen

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'root_path': str(self.root_path),
                'started_at': self.started_at.isoformat(),
                'finished_at': self.finished_at.isoformat() if self.finished_at else None,
                'imported': len(self._messages),
                'duplicates': self._duplicate_count,
                'errors': self._error_count,
                'files_seen': self._files_seen,
            }

    def __repr__(self) -> str:
        return (
            f"ImportInformation(root_path={self.root_path}, "
            f"imported={self.message_count}, errors={self.error_count})"
        )
