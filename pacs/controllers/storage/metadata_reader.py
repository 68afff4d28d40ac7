"""
Metadata Reader Module

Recognizes DICOM Part 10 files and extracts the flat attribute set that the
hierarchy sync merges into the archive.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union

from django.db import models
from pydicom import Dataset, dcmread
from pydicom.errors import InvalidDicomError
from pydicom.multival import MultiValue

from pacs.exceptions import MissingRequiredField, UnreadableFile
from pacs.models import Instance, Patient, Series, Study

logger = logging.getLogger('pacs.storage.reader')

PREAMBLE_LENGTH = 128
DICOM_PREFIX = b'DICM'

REQUIRED_FIELDS = (
    ('PatientName', 'patient', 'patient_name'),
    ('StudyInstanceUID', 'study', 'study_instance_uid'),
    ('SeriesInstanceUID', 'series', 'series_instance_uid'),
    ('SOPInstanceUID', 'instance', 'sop_instance_uid'),
)


def sniff_dicom_file(path: Union[str, Path]) -> bool:
    """
    Check for the 'DICM' marker that follows the 128-byte preamble.

    Args:
        path: File to inspect

    Returns:
        True if the file carries the DICOM Part 10 marker

    Raises:
        UnreadableFile: If the file cannot be opened or read
    """
    try:
        with open(path, 'rb') as fh:
            fh.seek(PREAMBLE_LENGTH)
            return fh.read(len(DICOM_PREFIX)) == DICOM_PREFIX
    except OSError as e:
        raise UnreadableFile(path, str(e)) from e


def is_dicom_file(path: Union[str, Path]) -> bool:
    """Like sniff_dicom_file, but an unreadable file is reported as not DICOM."""
    try:
        return sniff_dicom_file(path)
    except UnreadableFile as e:
        logger.warning(f"Cannot sniff {path}: {e.reason}")
        return False


def _convert(value: Any, model_field: models.Field) -> Any:
    if value is None:
        return None

    if isinstance(value, MultiValue):
        if len(value) == 0:
            return None
        if isinstance(model_field, (models.IntegerField, models.FloatField)):
            value = value[0]
        else:
            return '\\'.join(str(v) for v in value)

    if isinstance(model_field, models.IntegerField):
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    if isinstance(model_field, models.FloatField):
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    text = str(value).strip()
    return text or None


def _extract(dataset: Dataset, model: Type[models.Model]) -> Dict[str, Any]:
    values = {}
    for keyword, field_name in model.DICOM_ATTRIBUTES.items():
        elem = dataset.get(keyword)
        value = _convert(elem, model._meta.get_field(field_name))
        if value is not None:
            values[field_name] = value
    return values


@dataclass
class FileAttributes:
    """
    Decoded attributes of one file, grouped by hierarchy level.

    Each level dict is keyed by model field name and holds only the values present in the file.
    """
    patient: Dict[str, Any] = field(default_factory=dict)
    study: Dict[str, Any] = field(default_factory=dict)
    series: Dict[str, Any] = field(default_factory=dict)
    instance: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dataset(cls, dataset: Dataset) -> 'FileAttributes':
        """Extract the archive attributes from a pydicom Dataset."""
        return cls(
            patient=_extract(dataset, Patient),
            study=_extract(dataset, Study),
            series=_extract(dataset, Series),
            instance=_extract(dataset, Instance),
        )

    @property
    def patient_name(self) -> Optional[str]:
        return self.patient.get('patient_name')

    @property
    def study_instance_uid(self) -> Optional[str]:
        return self.study.get('study_instance_uid')

    @property
    def series_instance_uid(self) -> Optional[str]:
        return self.series.get('series_instance_uid')

    @property
    def sop_instance_uid(self) -> Optional[str]:
        return self.instance.get('sop_instance_uid')

    def validate(self, path: Optional[str] = None) -> None:
        """
        Raise MissingRequiredField for the first blank identifying attribute.

        Args:
            path: Source file, used in the error message only
        """
        for keyword, level, field_name in REQUIRED_FIELDS:
            value = getattr(self, level).get(field_name)
            if not value or not str(value).strip():
                raise MissingRequiredField(keyword, path)


def read_attributes(path: Union[str, Path]) -> FileAttributes:
    """
    Read a DICOM file header and extract its archive attributes.

    Pixel data is never loaded.

    Args:
        path: DICOM file path

    Returns:
        FileAttributes for the file

    Raises:
        UnreadableFile: If the file cannot be opened or parsed
    """
    logger.debug(f"Reading DICOM header: {path}")
    try:
        dataset = dcmread(str(path), stop_before_pixels=True)
    except (OSError, InvalidDicomError) as e:
        raise UnreadableFile(path, str(e)) from e
    except Exception as e:
        raise UnreadableFile(path, f"parse error: {e}") from e

    return FileAttributes.from_dataset(dataset)
