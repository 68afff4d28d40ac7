"""
Django management command to run the DICOM archive service.
Usage: python manage.py rundicom
"""
from django.core.management.base import BaseCommand, CommandError

from pacs.containers import container
from pacs.utils.logging import setup_logging


class Command(BaseCommand):
    help = 'Start the DICOM archive service (C-ECHO, C-FIND, C-STORE SCP)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--port',
            type=int,
            default=None,
            help='Port to listen on (overrides settings)',
        )
        parser.add_argument(
            '--ae-title',
            type=str,
            default=None,
            help='AE Title for the DICOM server (overrides settings)',
        )
        parser.add_argument(
            '--bind',
            type=str,
            default=None,
            help='IP address to bind to (overrides settings)',
        )

    def handle(self, *args, **options):
        """Start the DICOM service and block until interrupted."""
        setup_logging()
        self.stdout.write(self.style.SUCCESS('Starting DICOM archive service...'))

        dicom_scp = container.dicom_service_provider()

        if options['port']:
            dicom_scp.port = options['port']
        if options['ae_title']:
            dicom_scp.ae_title = options['ae_title']
        if options['bind']:
            dicom_scp.bind_address = options['bind']

        try:
            dicom_scp.start()
        except OSError as e:
            raise CommandError(f'Error running DICOM server: {e}') from e

        try:
            dicom_scp.wait()
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nShutting down DICOM server...'))
        finally:
            if dicom_scp.is_running:
                dicom_scp.stop()
            container.import_registry().shutdown(wait=True)
            self.stdout.write(self.style.SUCCESS('DICOM server stopped'))
