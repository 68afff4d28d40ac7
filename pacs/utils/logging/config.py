"""
Logging configuration.
Centralized logging setup for the archive.
"""
import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, List

from django.conf import settings

from .filters import DicomOperationFilter, SensitiveDataFilter, ThrottleFilter
from .formatters import ColoredFormatter, DetailedFormatter, SafeFormatter

LOG_FILES = ('main', 'error', 'dicom', 'operations', 'import', 'api', 'django')


def get_log_level() -> int:
    """Get log level from settings."""
    level_name = getattr(settings, 'DICOM_LOG_LEVEL', 'INFO')
    return getattr(logging, str(level_name).upper(), logging.INFO)


def get_log_dir() -> Path:
    return Path(getattr(settings, 'DICOM_LOG_DIR', settings.BASE_DIR / 'data' / 'logs'))


def _file_handler(filename: Path, level: int, formatter: str, filters: List[str]) -> Dict[str, Any]:
    return {
        'class': 'logging.handlers.TimedRotatingFileHandler',
        'level': level,
        'formatter': formatter,
        'filters': filters,
        'filename': str(filename),
        'when': 'midnight',
        'interval': 1,
        'backupCount': 10,
        'encoding': 'utf-8',
    }


def get_logging_config() -> Dict[str, Any]:
    """
    Get logging configuration dictionary.

    Console output is only attached when DEBUG is on.

    Returns:
        dict: Logging configuration for logging.config.dictConfig
    """
    log_level = get_log_level()
    log_dir = get_log_dir()
    debug_mode = getattr(settings, 'DEBUG', True)

    log_dir.mkdir(parents=True, exist_ok=True)
    log_paths = {name: log_dir / f'{name}.log' for name in LOG_FILES}

    def handlers_for(*names: str) -> List[str]:
        return (['console'] if debug_mode else []) + list(names)

    def app_logger(*names: str) -> Dict[str, Any]:
        return {
            'level': log_level,
            'handlers': handlers_for(*names, 'error_file'),
            'propagate': False,
        }

    return {
        'version': 1,
        'disable_existing_loggers': False,

        'formatters': {
            'colored': {
                '()': ColoredFormatter,
                'format': '%(levelname)s [%(name)s] %(message)s'
            },
            'detailed': {
                '()': DetailedFormatter,
                'format': '%(timestamp)s [%(levelname)s] %(threadName)s %(module_path)s:%(lineno)d - %(message)s'
            },
            'standard': {
                '()': SafeFormatter,
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
        },

        'filters': {
            'sensitive_data': {
                '()': SensitiveDataFilter,
            },
            'dicom_operations': {
                '()': DicomOperationFilter,
            },
            'throttle': {
                '()': ThrottleFilter,
                'rate_limit': 100,
                'time_window': 60,
            },
        },

        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'level': log_level,
                'formatter': 'colored',
                'filters': ['sensitive_data', 'throttle'],
                'stream': 'ext://sys.stdout',
            },
            'main_file': _file_handler(log_paths['main'], logging.DEBUG, 'detailed', ['sensitive_data']),
            'error_file': _file_handler(log_paths['error'], logging.ERROR, 'detailed', ['sensitive_data']),
            'dicom_file': _file_handler(log_paths['dicom'], logging.INFO, 'standard', ['sensitive_data']),
            'operations_file': _file_handler(
                log_paths['operations'], logging.INFO, 'standard', ['dicom_operations', 'sensitive_data']
            ),
            'import_file': _file_handler(log_paths['import'], logging.INFO, 'detailed', ['throttle']),
            'api_file': _file_handler(log_paths['api'], logging.INFO, 'detailed', ['sensitive_data']),
            'django_file': _file_handler(log_paths['django'], logging.INFO, 'standard', []),
        },

        'loggers': {
            'pacs.handlers': app_logger('dicom_file', 'operations_file'),
            'pacs.dicom_scp': app_logger('dicom_file', 'operations_file'),
            'pacs.query': app_logger('dicom_file'),
            'pynetdicom': {
                'level': logging.WARNING,
                'handlers': ['dicom_file'],
                'propagate': False,
            },

            'pacs.importing': app_logger('import_file'),
            'pacs.storage': app_logger('import_file'),

            'pacs.views': app_logger('api_file'),
            'pacs.commands': app_logger('main_file'),

            'django': {
                'level': logging.INFO,
                'handlers': handlers_for('django_file'),
                'propagate': False,
            },
            'django.request': {
                'level': logging.WARNING,
                'handlers': handlers_for('django_file', 'error_file'),
                'propagate': False,
            },

            'pacs': app_logger('main_file'),
        },

        'root': {
            'level': log_level,
            'handlers': handlers_for('main_file'),
        },
    }


def setup_logging() -> None:
    """Setup logging for the entire application."""
    logging.config.dictConfig(get_logging_config())

    logger = logging.getLogger('pacs')
    debug_mode = getattr(settings, 'DEBUG', True)

    logger.info("=" * 60)
    logger.info("Logging system initialized")
    logger.info(f"Log level: {logging.getLevelName(get_log_level())}")
    logger.info(f"Log directory: {get_log_dir()}")
    logger.info(f"Console logging: {'Enabled' if debug_mode else 'Disabled (DEBUG=False)'}")
    logger.info("Log rotation: Daily at midnight, 10 backups")
    logger.info("=" * 60)
