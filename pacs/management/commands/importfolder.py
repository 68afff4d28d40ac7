"""
Django management command to import a folder of DICOM files.
Usage: python manage.py importfolder /data/dicom [--wait]
"""
from django.core.management.base import BaseCommand, CommandError

from pacs.containers import get_import_registry
from pacs.exceptions import ImportRejected, InvalidPath
from pacs.utils.logging import setup_logging


class Command(BaseCommand):
    help = 'Import a DICOM file or directory into the archive'

    def add_arguments(self, parser):
        parser.add_argument('path', type=str, help='File or directory to import')
        parser.add_argument(
            '--wait',
            action='store_true',
            help='Block until the import has finished and print its counters',
        )

    def handle(self, *args, **options):
        setup_logging()
        registry = get_import_registry()

        try:
            path = registry.canonicalize(options['path'])
            started = registry.add_import(path)
        except (InvalidPath, ImportRejected) as e:
            raise CommandError(str(e)) from e

        if not started:
            self.stdout.write(self.style.WARNING(f'Import of {path} is already running'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Started import of {path}'))

        if not options['wait']:
            return

        future = registry.get_import(path)
        if future is None:
            raise CommandError(f'Import of {path} is not tracked')

        info = future.result()
        self.stdout.write(
            f"imported={info.message_count} duplicates={info.duplicate_count} "
            f"errors={info.error_count} files_seen={info.files_seen}"
        )
        registry.shutdown(wait=True)
