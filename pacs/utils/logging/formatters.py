"""
Logging formatters for console and log files.
"""
import logging
from datetime import datetime


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        levelname_orig = record.levelname

        if levelname_orig in self.COLORS:
            record.levelname = f"{self.COLORS[levelname_orig]}{self.BOLD}{levelname_orig}{self.RESET}"

        try:
            result = super().format(record)
        except (TypeError, ValueError):
            result = f"{record.levelname} [{record.name}] {record.msg}"
        finally:
            record.levelname = levelname_orig

        return result


class DetailedFormatter(logging.Formatter):
    """File formatter with timestamp, thread and call site."""

    def format(self, record):
        record.timestamp = datetime.now().isoformat()
        record.module_path = f"{record.module}.{record.funcName}"

        try:
            return super().format(record)
        except (TypeError, ValueError):
            return (
                f"{record.timestamp} [{record.levelname}] {record.threadName} "
                f"{record.module_path}:{record.lineno} - {record.msg}"
            )


class SafeFormatter(logging.Formatter):
    """Standard formatter that survives malformed log records."""

    def format(self, record):
        try:
            return super().format(record)
        except (TypeError, ValueError):
            return f"{self.formatTime(record)} [{record.levelname}] {record.name}: {record.msg}"
