"""
Logging filters.
"""
import logging
import re
import threading
import time


class DicomOperationFilter(logging.Filter):
    """Pass only records that mention a DICOM operation."""

    OPERATIONS = ['C-STORE', 'C-FIND', 'C-ECHO']

    def __init__(self, operations=None):
        super().__init__()
        self.operations = operations or self.OPERATIONS

    def filter(self, record):
        message = record.getMessage()
        return any(op in message for op in self.operations)


class SensitiveDataFilter(logging.Filter):
    """Redact credentials from log messages."""

    SENSITIVE_PATTERNS = [
        (re.compile(r'password["\']?\s*[:=]\s*["\']?([^"\'\s]+)', re.IGNORECASE), 'password=***'),
        (re.compile(r'secret_key["\']?\s*[:=]\s*["\']?([^"\'\s]+)', re.IGNORECASE), 'secret_key=***'),
        (re.compile(r'token["\']?\s*[:=]\s*["\']?([^"\'\s]+)', re.IGNORECASE), 'token=***'),
    ]

    def filter(self, record):
        message = record.getMessage()

        for pattern, replacement in self.SENSITIVE_PATTERNS:
            message = pattern.sub(replacement, message)

        record.msg = message
        record.args = None
        return True


class ThrottleFilter(logging.Filter):
    """
    Throttle repeated log messages.

    Records are counted per call site (logger, level, source line), so
    per-file messages such as "Skipping <path>" share one budget. After
    rate_limit records from one call site within time_window seconds,
    further ones are dropped until the window expires. Expired windows are
    evicted, so memory is bounded by the number of active call sites.
    """

    def __init__(self, rate_limit=10, time_window=60):
        super().__init__()
        self.rate_limit = rate_limit
        self.time_window = time_window
        self.message_counts = {}
        self.last_reset = {}
        self._last_sweep = 0.0
        self._lock = threading.Lock()

    def filter(self, record):
        message_key = (record.name, record.levelno, record.pathname, record.lineno)
        current_time = time.time()

        with self._lock:
            if current_time - self._last_sweep > self.time_window:
                self._sweep(current_time)

            if current_time - self.last_reset.get(message_key, 0) > self.time_window:
                self.message_counts[message_key] = 0
                self.last_reset[message_key] = current_time

            self.message_counts[message_key] += 1
            count = self.message_counts[message_key]

        if count <= self.rate_limit:
            return True
        if count == self.rate_limit + 1:
            record.msg = f"{record.getMessage()} (throttled - max {self.rate_limit} in {self.time_window}s)"
            record.args = None
            return True
        return False

    def _sweep(self, current_time):
        expired = [
            key for key, started in self.last_reset.items()
            if current_time - started > self.time_window
        ]
        for key in expired:
            del self.last_reset[key]
            del self.message_counts[key]
        self._last_sweep = current_time
