"""
Storage module for the archive hierarchy.

This module provides:
- DICOM file recognition and header extraction (metadata_reader)
- Find-or-create merge into Patient/Study/Series/Instance (HierarchySync)
"""
from .metadata_reader import FileAttributes, is_dicom_file, read_attributes, sniff_dicom_file
from .hierarchy_sync import HierarchySync, SyncResult

__all__ = [
    'FileAttributes',
    'is_dicom_file',
    'read_attributes',
    'sniff_dicom_file',
    'HierarchySync',
    'SyncResult',
]
