"""
Import Worker Module

Walks an import root, recognizes DICOM files and merges each one into the
archive. Per-file failures are logged and counted; they never stop the walk.
"""
import logging
import os
from pathlib import Path
from typing import Callable, Iterator, Optional

from django.db import DatabaseError

from pacs.exceptions import DuplicateKeyRace, MissingRequiredField, UnreadableFile, WalkAborted
from pacs.controllers.storage import FileAttributes, HierarchySync, read_attributes, sniff_dicom_file

from .import_info import ImportInformation

logger = logging.getLogger('pacs.importing.worker')

DEFAULT_PROGRESS_EVERY = 100


class ImportWorker:
    """Performs one import job: walk, filter, merge, tally."""

    def __init__(
        self,
        hierarchy_sync: HierarchySync,
        reader: Callable[[Path], FileAttributes] = read_attributes,
        sniffer: Callable[[Path], bool] = sniff_dicom_file,
        progress_every: Optional[int] = None
    ) -> None:
        """
        Initialize the import worker.

        Args:
            hierarchy_sync: HierarchySync used to merge each file
            reader: Extracts attributes from a file
            sniffer: Predicate recognizing DICOM files, raising UnreadableFile on I/O failure
            progress_every: Log progress after this many processed files
        """
        self.hierarchy_sync = hierarchy_sync
        self.reader = reader
        self.sniffer = sniffer
        self.progress_every = progress_every or DEFAULT_PROGRESS_EVERY

    def run(self, info: ImportInformation) -> ImportInformation:
        """
        Import everything below info.root_path.

        Never raises; a root that cannot be walked completes with an empty result.

        Args:
            info: Job record to accumulate into

        Returns:
            The same ImportInformation, finished
        """
        root = info.root_path
        logger.info(f"Importing from [{root}]")

        try:
            if root.is_file():
                info.add_file_seen()
                self._import_file(root, info)
            elif root.is_dir():
                self._import_directory(root, info)
            else:
                logger.error(f"Import root is neither a file nor a directory: {root}")
        finally:
            info.mark_finished()

        logger.info(
            f"Import of [{root}] finished: {info.message_count} imported, "
            f"{info.duplicate_count} duplicates, {info.error_count} errors"
        )
        return info

    def _import_directory(self, root: Path, info: ImportInformation) -> None:
        try:
            for path in self.walk(root):
                info.add_file_seen()
                try:
                    recognized = self.sniffer(path)
                except UnreadableFile as e:
                    logger.warning(f"Skipping {path}: {e}")
                    info.add_error()
                    continue
                if not recognized:
                    logger.debug(f"Skipping non-DICOM file: {path}")
                    continue
                self._import_file(path, info)
        except WalkAborted as e:
            logger.error(f"Walk of [{root}] aborted, keeping partial result: {e}")

    def walk(self, root: Path) -> Iterator[Path]:
        """
        Yield every regular file below root, each exactly once.

        Raises:
            WalkAborted: If a directory cannot be listed
        """
        def on_error(error: OSError) -> None:
            raise WalkAborted(f"{error.filename}: {error.strerror}") from error

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            dirnames.sort()
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if path.is_file():
                    yield path

    def _import_file(self, path: Path, info: ImportInformation) -> None:
        try:
            attributes = self.reader(path)
            result = self.hierarchy_sync.sync(attributes, path)
        except (MissingRequiredField, UnreadableFile, DuplicateKeyRace) as e:
            logger.warning(f"Skipping {path}: {e}")
            info.add_error()
        except DatabaseError as e:
            logger.error(f"Database error importing {path}: {e}", exc_info=True)
            info.add_error()
        except Exception as e:
            logger.error(f"Unexpected error importing {path}: {e}", exc_info=True)
            info.add_error()
        else:
            if result.duplicate:
                info.add_duplicate()
            else:
                info.add_info(result.sop_instance_uid)

        processed = info.message_count + info.duplicate_count + info.error_count
        if processed % self.progress_every == 0:
            logger.info(f"[{info.root_path}] processed {processed} files so far")
