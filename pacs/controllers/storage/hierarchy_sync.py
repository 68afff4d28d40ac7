"""
Hierarchy Sync Module

Merges one file's attributes into the Patient -> Study -> Series -> Instance
hierarchy. Each merge runs as a single transaction; entities are looked up by
natural key and created on first encounter.
"""
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from django.db import IntegrityError, OperationalError, models, transaction

from pacs.exceptions import DuplicateKeyRace
from pacs.models import Instance, Patient, Series, Study

from .metadata_reader import FileAttributes

logger = logging.getLogger('pacs.storage.sync')

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 0.05


def is_lock_error(error: OperationalError) -> bool:
    """True if error is SQLite's "database is locked" or "table is locked"."""
    return 'locked' in str(error).lower()


@dataclass
class SyncResult:
    """
    Outcome of merging one file.

    Attributes:
        sop_instance_uid: SOP Instance UID of the merged file
        created: Levels that were newly created, in hierarchy order
        duplicate: True if the instance already existed and nothing was written
    """
    sop_instance_uid: str
    created: Tuple[str, ...] = field(default_factory=tuple)
    duplicate: bool = False


class HierarchySync:
    """
    Find-or-create merge of decoded file attributes into the archive.

    A uniqueness conflict means another importer created the same entity
    between lookup and insert. The whole merge is then re-run, which finds
    the competing row, up to max_retries additional attempts. A database
    lock timeout is retried the same way, with a growing pause.
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY
    ) -> None:
        """
        Initialize hierarchy sync.

        Args:
            max_retries: Re-runs allowed after a uniqueness conflict or lock timeout
            retry_delay: Base pause in seconds before re-running after a lock timeout
        """
        self.max_retries = max(0, int(max_retries))
        self.retry_delay = max(0.0, float(retry_delay))

    def sync(self, attributes: FileAttributes, path: Union[str, Path]) -> SyncResult:
        """
        Merge one file into the hierarchy.

        Args:
            attributes: Attributes decoded from the file
            path: Source file path, stored on a new instance as an absolute path

        Returns:
            SyncResult describing what was created

        Raises:
            MissingRequiredField: If an identifying attribute is blank
            DuplicateKeyRace: If uniqueness conflicts persist after all retries
            OperationalError: If the database stays locked after all retries
        """
        attributes.validate(str(path))
        absolute_path = str(Path(path).absolute())

        attempts = self.max_retries + 1
        conflict: Optional[DuplicateKeyRace] = None

        for attempt in range(1, attempts + 1):
            try:
                with transaction.atomic():
                    return self._merge(attributes, absolute_path)
            except DuplicateKeyRace as e:
                conflict = e
                logger.warning(
                    f"Uniqueness conflict on {e.level} {e.key} "
                    f"(attempt {attempt}/{attempts}), re-running merge"
                )
            except OperationalError as e:
                if not is_lock_error(e) or attempt == attempts:
                    raise
                logger.warning(
                    f"Database busy merging {attributes.sop_instance_uid} "
                    f"(attempt {attempt}/{attempts}), retrying"
                )
                time.sleep(self.retry_delay * attempt)

        raise DuplicateKeyRace(conflict.level, conflict.key, attempts) from conflict

    def _merge(self, attributes: FileAttributes, path: str) -> SyncResult:
        created: List[str] = []

        patient = self._find_or_create(
            Patient, 'patient_name', attributes.patient, {}, created
        )
        study = self._find_or_create(
            Study, 'study_instance_uid', attributes.study, {'patient': patient}, created
        )
        if study.patient_id != patient.pk:
            logger.warning(
                f"Study {study.study_instance_uid} belongs to another patient, "
                f"keeping existing link (file patient: {patient.patient_name})"
            )

        series = self._find_or_create(
            Series, 'series_instance_uid', attributes.series, {'study': study}, created
        )
        if series.study_id != study.pk:
            logger.warning(
                f"Series {series.series_instance_uid} belongs to another study, keeping existing link"
            )

        sop_uid = attributes.sop_instance_uid
        if self._lookup(Instance, 'sop_instance_uid', sop_uid) is not None:
            logger.info(f"Ignoring already imported instance {sop_uid} ({path})")
            return SyncResult(sop_instance_uid=sop_uid, created=tuple(created), duplicate=True)

        self._create(Instance, 'sop_instance_uid', attributes.instance, {'series': series, 'path': path})
        created.append(Instance.__name__)
        logger.debug(f"Created instance {sop_uid} in series {series.series_instance_uid}")

        return SyncResult(sop_instance_uid=sop_uid, created=tuple(created))

    def _find_or_create(
        self,
        model: Type[models.Model],
        key_field: str,
        values: Dict[str, Any],
        links: Dict[str, Any],
        created: List[str]
    ) -> models.Model:
        key = values[key_field]
        entity = self._lookup(model, key_field, key)
        if entity is not None:
            return entity

        entity = self._create(model, key_field, values, links)
        created.append(model.__name__)
        logger.info(f"Created {model.__name__.lower()} [{key}]")
        return entity

    def _lookup(self, model: Type[models.Model], key_field: str, key: str) -> Optional[models.Model]:
        return model.objects.filter(**{key_field: key}).first()

    def _create(
        self,
        model: Type[models.Model],
        key_field: str,
        values: Dict[str, Any],
        links: Dict[str, Any]
    ) -> models.Model:
        try:
            return model.objects.create(**values, **links)
        except IntegrityError as e:
            raise DuplicateKeyRace(model.__name__, values[key_field]) from e

    def find_patient_by_name(self, patient_name: str) -> Optional[Patient]:
        """Get a patient by name."""
        return Patient.objects.filter(patient_name=patient_name).first()

    def find_study_by_uid(self, study_instance_uid: str) -> Optional[Study]:
        """Get a study by Study Instance UID."""
        return Study.objects.filter(study_instance_uid=study_instance_uid).first()

    def find_series_by_uid(self, series_instance_uid: str) -> Optional[Series]:
        """Get a series by Series Instance UID."""
        return Series.objects.filter(series_instance_uid=series_instance_uid).first()

    def find_instance_by_uid(self, sop_instance_uid: str) -> Optional[Instance]:
        """Get an instance by SOP Instance UID."""
        return Instance.objects.filter(sop_instance_uid=sop_instance_uid).first()
