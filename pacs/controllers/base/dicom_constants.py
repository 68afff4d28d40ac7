"""
DICOM constants for status codes and query levels.
"""
from enum import IntEnum


class DICOMStatus(IntEnum):
    """
    DICOM status codes used by the archive services.

    References:
    - DICOM PS3.4: Service Class Specifications
    - DICOM PS3.7: Message Exchange
    """
    SUCCESS = 0x0000

    PENDING = 0xFF00

    CANCEL = 0xFE00

    FAILURE = 0xC000
    UNABLE_TO_PROCESS = 0xC000
    REFUSED_OUT_OF_RESOURCES = 0xA700
    IDENTIFIER_DOES_NOT_MATCH_SOP_CLASS = 0xA900


class QueryRetrieveLevel:
    """Query/Retrieve hierarchy levels."""
    PATIENT = 'PATIENT'
    STUDY = 'STUDY'
    SERIES = 'SERIES'
    IMAGE = 'IMAGE'

    ALL = (PATIENT, STUDY, SERIES, IMAGE)
