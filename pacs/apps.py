import logging
import os

from django.apps import AppConfig

logger = logging.getLogger('pacs.apps')


class PacsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'pacs'
    verbose_name = 'Mini PACS'

    dicom_server = None

    def ready(self):
        """
        Called when Django starts.
        Auto-starts the DICOM server under runserver if DICOM_AUTO_START is True.
        """
        if os.environ.get('RUN_MAIN') != 'true':
            return

        from django.conf import settings
        from pacs.signals import register_shutdown_handlers

        register_shutdown_handlers()

        if getattr(settings, 'DICOM_AUTO_START', False):
            logger.info("DICOM auto-start enabled, starting DICOM server...")
            self.start_dicom_server()

    @classmethod
    def start_dicom_server(cls):
        """Start the DICOM server; pynetdicom serves from its own thread."""
        try:
            from pacs.containers import container

            cls.dicom_server = container.dicom_service_provider()
            cls.dicom_server.start()

        except OSError as e:
            logger.error(f"Failed to start DICOM server: {e}", exc_info=True)

    @classmethod
    def shutdown_dicom_server(cls):
        """Gracefully shutdown DICOM server."""
        if cls.dicom_server and cls.dicom_server.is_running:
            logger.info("Shutting down DICOM server gracefully...")
            cls.dicom_server.stop()
            logger.info("DICOM server shutdown complete")
