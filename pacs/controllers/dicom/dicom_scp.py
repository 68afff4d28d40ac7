"""
DICOM SCP (Service Class Provider) Server
Serves C-ECHO, C-FIND and C-STORE on top of the archive.
"""
import logging
import threading
from typing import Any, Dict, Optional

from django.conf import settings
from pynetdicom import AE, StoragePresentationContexts, evt
from pynetdicom.sop_class import (
    PatientRootQueryRetrieveInformationModelFind,
    StudyRootQueryRetrieveInformationModelFind,
    Verification,
)
from pydicom.uid import ExplicitVRLittleEndian, ImplicitVRLittleEndian

from .handlers import FindHandler, StoreHandler

logger = logging.getLogger('pacs.dicom_scp')


class DicomServiceProvider:
    """
    DICOM Service Class Provider for the archive.

    Handlers are registered with pynetdicom; the server runs in pynetdicom's
    own thread and stop() blocks until it has shut down.
    """

    def __init__(
        self,
        find_handler: FindHandler,
        store_handler: StoreHandler,
        port: Optional[int] = None,
        ae_title: Optional[str] = None,
        bind_address: Optional[str] = None
    ) -> None:
        """
        Initialize the DICOM SCP.

        Args:
            find_handler: FindHandler instance
            store_handler: StoreHandler instance
            port: Port to listen on
            ae_title: AE title for this SCP
            bind_address: IP address to bind to
        """
        self.find_handler = find_handler
        self.store_handler = store_handler

        self.port = port or getattr(settings, 'DICOM_PORT', 11112)
        self.ae_title = ae_title or getattr(settings, 'DICOM_AE_TITLE', 'MUPACS')
        bind_addr = (bind_address or getattr(settings, 'DICOM_BIND_ADDRESS', '')).strip()
        self.bind_address = bind_addr if bind_addr else ''

        self.is_running: bool = False
        self.ae: Optional[AE] = None
        self.server = None
        self.shutdown_event: threading.Event = threading.Event()

    def _build_ae(self) -> AE:
        ae = AE(ae_title=self.ae_title)

        ae.maximum_pdu_size = getattr(settings, 'DICOM_MAX_PDU_SIZE', 16384)
        ae.acse_timeout = getattr(settings, 'DICOM_ACSE_TIMEOUT', 30)
        ae.dimse_timeout = getattr(settings, 'DICOM_DIMSE_TIMEOUT', 60)
        ae.network_timeout = getattr(settings, 'DICOM_NETWORK_TIMEOUT', 60)

        for context in StoragePresentationContexts:
            ae.add_supported_context(
                context.abstract_syntax,
                transfer_syntax=[ImplicitVRLittleEndian, ExplicitVRLittleEndian]
            )

        ae.add_supported_context(StudyRootQueryRetrieveInformationModelFind)
        ae.add_supported_context(PatientRootQueryRetrieveInformationModelFind)
        ae.add_supported_context(Verification)
        return ae

    def _handle_echo(self, event: Any) -> int:
        logger.info("Received C-ECHO request")
        return 0x0000

    def start(self) -> None:
        """Start the DICOM server in non-blocking mode."""
        if self.is_running:
            logger.warning("DICOM server is already running")
            return

        self.ae = self._build_ae()
        handlers = [
            (evt.EVT_C_ECHO, self._handle_echo),
            (evt.EVT_C_FIND, self.find_handler.handle_find),
            (evt.EVT_C_STORE, self.store_handler.handle_store),
        ]

        bind_addr = self.bind_address or '0.0.0.0'
        self.server = self.ae.start_server(
            (bind_addr, self.port),
            block=False,
            evt_handlers=handlers
        )
        self.shutdown_event.clear()
        self.is_running = True

        logger.info("=" * 60)
        logger.info(f" DICOM server running on {bind_addr}:{self.port}")
        logger.info(f" AE Title: {self.ae_title}")
        logger.info(" C-STORE: Enabled (archive DICOM images)")
        logger.info(" C-FIND: Enabled (PATIENT/STUDY/SERIES/IMAGE)")
        logger.info(" C-ECHO: Enabled (verification)")
        logger.info(f" Network settings: PDU={self.ae.maximum_pdu_size}B, ACSE={self.ae.acse_timeout}s, DIMSE={self.ae.dimse_timeout}s")
        logger.info("=" * 60)

    def wait(self, poll_interval: float = 0.5) -> None:
        """Block until stop() is called."""
        while not self.shutdown_event.wait(poll_interval):
            pass

    def stop(self) -> None:
        """Stop the DICOM server."""
        if not self.is_running:
            logger.warning("DICOM server is not running")
            return

        logger.info("Stopping DICOM server...")
        if self.ae:
            self.ae.shutdown()
        self.server = None
        self.is_running = False
        self.shutdown_event.set()
        logger.info("DICOM server stopped")

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'ae_title': self.ae_title,
            'port': self.port,
            'bind_address': self.bind_address or '0.0.0.0',
            'is_running': self.is_running,
        }
