"""
Folder import pipeline.

- ImportRegistry: deduplicating job table
- ImportWorker: walks a root and merges each DICOM file
- BoundedExecutor: fixed-size worker pool with a bounded backlog
"""
from .import_info import ImportInformation
from .import_worker import ImportWorker
from .import_registry import ImportJob, ImportRegistry
from .executor import BoundedExecutor

__all__ = [
    'ImportInformation',
    'ImportWorker',
    'ImportJob',
    'ImportRegistry',
    'BoundedExecutor',
]
