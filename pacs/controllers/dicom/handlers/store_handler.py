"""
C-STORE Handler for receiving DICOM files.
Writes each received instance under the storage directory and merges it into
the archive hierarchy.
"""
from pathlib import Path
from typing import Any, Optional, Union

from django.conf import settings
from django.db import DatabaseError
from pydicom.uid import UID

from pacs.controllers.base import DICOMStatus, HandlerBase
from pacs.controllers.storage import FileAttributes, HierarchySync
from pacs.exceptions import DuplicateKeyRace, MissingRequiredField


class StoreHandler(HandlerBase):
    """Handler for C-STORE operations - receives and archives DICOM files."""

    def __init__(
        self,
        hierarchy_sync: HierarchySync,
        storage_dir: Optional[Union[str, Path]] = None
    ) -> None:
        """
        Initialize the store handler.

        Args:
            hierarchy_sync: HierarchySync used to merge received instances
            storage_dir: Directory received files are written to
        """
        super().__init__('store')
        self.hierarchy_sync = hierarchy_sync
        self.storage_dir = Path(storage_dir or settings.PACS_STORAGE_DIR)

    def handle_store(self, event: Any) -> int:
        """
        Handle incoming C-STORE request.

        Args:
            event: pynetdicom event object

        Returns:
            int: DICOM status code (0x0000 = success, 0xC000 = failure)
        """
        dataset = event.dataset
        dataset.file_meta = event.file_meta

        attributes = FileAttributes.from_dataset(dataset)
        try:
            attributes.validate()
        except MissingRequiredField as e:
            self.logger.error(f"Rejecting C-STORE: {e}")
            return DICOMStatus.FAILURE

        sop_uid = attributes.sop_instance_uid
        if not UID(sop_uid).is_valid:
            self.logger.error(f"Rejecting C-STORE: invalid SOP Instance UID {sop_uid!r}")
            return DICOMStatus.FAILURE

        calling_info = self.extract_calling_info(event)
        self.logger.info(
            f"C-STORE from {calling_info['calling_ae']}: {sop_uid} "
            f"(patient {attributes.patient_name}, study {attributes.study_instance_uid})"
        )

        path = self.storage_dir / f"{sop_uid}.dcm"
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            dataset.save_as(path, enforce_file_format=True)
        except (OSError, ValueError) as e:
            self.logger.error(f"Error writing {path}: {e}", exc_info=True)
            return DICOMStatus.FAILURE

        try:
            result = self.hierarchy_sync.sync(attributes, path)
        except (DuplicateKeyRace, DatabaseError) as e:
            self.logger.error(f"Error archiving {sop_uid}: {e}", exc_info=True)
            path.unlink(missing_ok=True)
            return DICOMStatus.FAILURE

        if result.duplicate:
            existing = self.hierarchy_sync.find_instance_by_uid(sop_uid)
            if existing is not None and existing.path != str(path.absolute()):
                path.unlink(missing_ok=True)
            self.logger.info(f"Instance {sop_uid} already archived")
        else:
            self.logger.info(f"Stored {sop_uid} to {path}, created: {', '.join(result.created)}")

        return DICOMStatus.SUCCESS

    def handle(self, event: Any) -> int:
        return self.handle_store(event)
