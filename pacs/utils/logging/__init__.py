"""
Logging Utilities - Logging Configuration, Formatters and Filters
"""
from .config import get_logging_config, setup_logging
from .formatters import ColoredFormatter, DetailedFormatter, SafeFormatter
from .filters import DicomOperationFilter, SensitiveDataFilter, ThrottleFilter

__all__ = [
    # Config
    'setup_logging',
    'get_logging_config',

    # Formatters
    'ColoredFormatter',
    'DetailedFormatter',
    'SafeFormatter',

    # Filters
    'DicomOperationFilter',
    'SensitiveDataFilter',
    'ThrottleFilter',
]
