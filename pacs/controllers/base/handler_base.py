"""
Base handler class for DICOM operations.

Provides common functionality for the archive's DICOM handlers:
- Logging setup
- Calling AE extraction
- Query parameter extraction
"""
import logging
from abc import ABC, abstractmethod
from io import BytesIO
from typing import Any, Dict

from pydicom import Dataset, dcmread


class HandlerBase(ABC):
    """Base class for the C-FIND and C-STORE handlers."""

    def __init__(self, handler_name: str):
        """
        Initialize base handler.

        Args:
            handler_name: Name for logging (e.g., 'store', 'find')
        """
        self.handler_name = handler_name
        self.logger = logging.getLogger(f'pacs.handlers.{handler_name}')

    def extract_calling_info(self, event: Any) -> Dict[str, Any]:
        """
        Extract calling AE information from event.

        Args:
            event: pynetdicom event

        Returns:
            Dict with calling_ae and requester_ip
        """
        try:
            requestor = event.assoc.requestor
            calling_ae = requestor.ae_title
            if isinstance(calling_ae, bytes):
                calling_ae = calling_ae.decode('ascii', errors='replace')
            return {
                'calling_ae': str(calling_ae).strip() or 'UNKNOWN',
                'requester_ip': getattr(requestor, 'address', None),
            }
        except AttributeError:
            return {'calling_ae': 'UNKNOWN', 'requester_ip': None}

    def decode_identifier(self, identifier: Any) -> Dataset:
        """
        Decode identifier if it's a BytesIO object.

        Args:
            identifier: Query identifier (BytesIO or Dataset)

        Returns:
            Decoded Dataset
        """
        if isinstance(identifier, BytesIO):
            self.logger.debug("Identifier is BytesIO, decoding to Dataset...")
            identifier.seek(0)
            identifier = dcmread(identifier, force=True)
        return identifier

    def get_query_level(self, identifier: Dataset, default: str = 'STUDY') -> str:
        """
        Get query/retrieve level from identifier.

        Args:
            identifier: DICOM identifier Dataset
            default: Default level if not specified

        Returns:
            Query level string as sent by the peer
        """
        query_level = str(getattr(identifier, 'QueryRetrieveLevel', '') or default).strip().upper()
        self.logger.debug(f"Query Level: {query_level}")
        return query_level

    def log_operation_start(self, operation: str, calling_info: Dict[str, Any]) -> None:
        self.logger.info("=" * 60)
        self.logger.info(f"{operation} REQUEST RECEIVED")
        self.logger.info(f"From: {calling_info.get('calling_ae', 'UNKNOWN')}")
        if calling_info.get('requester_ip'):
            self.logger.info(f"IP: {calling_info['requester_ip']}")

    def log_operation_complete(self, operation: str, success: bool, details: str = "") -> None:
        status = "COMPLETED" if success else "FAILED"
        self.logger.info(f"{operation} {status}")
        if details:
            self.logger.info(details)
        self.logger.info("=" * 60)

    @abstractmethod
    def handle(self, event: Any):
        """
        Main handler method to be implemented by subclasses.

        Args:
            event: pynetdicom event
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement handle()")
