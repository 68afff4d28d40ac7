"""
Base classes and constants for controllers.
"""
from .dicom_constants import DICOMStatus, QueryRetrieveLevel
from .handler_base import HandlerBase

__all__ = [
    'DICOMStatus',
    'QueryRetrieveLevel',
    'HandlerBase',
]
