"""
Query Matcher Module

Resolves C-FIND search keys to the archive entities of one hierarchy level.

Matching rules (DICOM PS3.4 C.2.2.2):
- empty value: universal matching, the key is a return key only
- '*' and '?': wildcard matching, translated to an anchored regular expression
- backslash-separated UIDs: list of UID matching
- 'A-B', 'A-', '-B' on dates: range matching
- anything else: single value matching, case-sensitive
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from django.db import DatabaseError
from django.db.models import Model, QuerySet
from pydicom import Dataset
from pydicom.multival import MultiValue

from pacs.controllers.base import QueryRetrieveLevel
from pacs.exceptions import ResolutionFailure, UnsupportedQueryLevel
from pacs.models import Instance, Patient, Series, Study

logger = logging.getLogger('pacs.query.matcher')

IGNORED_KEYS = {'QueryRetrieveLevel', 'SpecificCharacterSet', 'TimezoneOffsetFromUTC'}

PATIENT_SUMMARY_KEYS = ('PatientName', 'PatientID', 'PatientBirthDate', 'PatientSex')

QueryKeys = Union[Dataset, Mapping[str, Any]]


def has_wildcard(value: str) -> bool:
    return '*' in value or '?' in value


def dicom_wildcard_to_regex(value: str) -> str:
    """
    Convert a DICOM wildcard pattern to an anchored regular expression.

    Regex metacharacters in the value are escaped before '*' and '?' are translated.

    Args:
        value: DICOM query value with wildcards

    Returns:
        Regular expression matching the whole field
    """
    parts = []
    for char in value:
        if char == '*':
            parts.append('.*')
        elif char == '?':
            parts.append('.')
        else:
            parts.append(re.escape(char))
    return '^' + ''.join(parts) + '$'


def is_universal(value: str) -> bool:
    return not value or set(value) == {'*'}


def normalize_keys(keys: Optional[QueryKeys]) -> Dict[str, str]:
    """
    Flatten a query identifier to {keyword: string value}.

    Sequences are dropped; missing values become ''.
    """
    if keys is None:
        return {}

    normalized = {}
    if isinstance(keys, Dataset):
        items = [(elem.keyword, elem.value) for elem in keys if elem.keyword and elem.VR != 'SQ']
    else:
        items = list(keys.items())

    for keyword, value in items:
        if keyword in IGNORED_KEYS:
            continue
        if value is None:
            normalized[keyword] = ''
        elif isinstance(value, (MultiValue, list, tuple)):
            normalized[keyword] = '\\'.join(str(v) for v in value)
        else:
            normalized[keyword] = str(value).strip()
    return normalized


def _value_matches(expected: str, actual: Any) -> bool:
    if actual is None or actual == '':
        return False
    actual = str(actual)
    if has_wildcard(expected):
        return re.match(dicom_wildcard_to_regex(expected), actual) is not None
    return actual == expected


@dataclass
class LevelSpec:
    """
    How one query level maps onto the database.

    Attributes:
        model: Model queried at this level
        related: select_related path for the parent chain
        lookups: Keywords resolved in the database, mapped to ORM field paths
        uid_keys: Keywords that accept a backslash-separated UID list
        range_keys: Keywords that accept date range matching
        attributes: Builds the response attributes for an entity
    """
    model: type
    related: Tuple[str, ...]
    lookups: Dict[str, str]
    attributes: Callable[[Model], Dict[str, Any]]
    uid_keys: Tuple[str, ...] = ()
    range_keys: Tuple[str, ...] = ()
    known_keys: frozenset = field(default_factory=frozenset)


def _pick(attributes: Dict[str, Any], keys: Tuple[str, ...]) -> Dict[str, Any]:
    return {key: attributes[key] for key in keys if key in attributes}


def patient_attributes(patient: Patient) -> Dict[str, Any]:
    return patient.as_attributes()


def study_attributes(study: Study) -> Dict[str, Any]:
    attributes = _pick(study.patient.as_attributes(), PATIENT_SUMMARY_KEYS)
    attributes.update(study.as_attributes())
    return attributes


def series_attributes(series: Series) -> Dict[str, Any]:
    attributes = _pick(series.study.patient.as_attributes(), ('PatientName', 'PatientID'))
    attributes['StudyInstanceUID'] = series.study.study_instance_uid
    attributes.update(series.as_attributes())
    return attributes


def instance_attributes(instance: Instance) -> Dict[str, Any]:
    series = instance.series
    attributes = _pick(series.study.patient.as_attributes(), ('PatientName', 'PatientID'))
    attributes['StudyInstanceUID'] = series.study.study_instance_uid
    attributes['SeriesInstanceUID'] = series.series_instance_uid
    attributes.update(instance.as_attributes())
    return attributes


LEVEL_SPECS: Dict[str, LevelSpec] = {
    QueryRetrieveLevel.PATIENT: LevelSpec(
        model=Patient,
        related=(),
        lookups={
            'PatientName': 'patient_name',
            'PatientID': 'patient_id',
            'PatientBirthDate': 'patient_birth_date',
        },
        range_keys=('PatientBirthDate',),
        attributes=patient_attributes,
        known_keys=frozenset(Patient.DICOM_ATTRIBUTES),
    ),
    QueryRetrieveLevel.STUDY: LevelSpec(
        model=Study,
        related=('patient',),
        lookups={
            'StudyInstanceUID': 'study_instance_uid',
            'PatientName': 'patient__patient_name',
            'PatientID': 'patient__patient_id',
            'AccessionNumber': 'accession_number',
            'StudyDate': 'study_date',
            'PatientBirthDate': 'patient__patient_birth_date',
        },
        uid_keys=('StudyInstanceUID',),
        range_keys=('StudyDate', 'PatientBirthDate'),
        attributes=study_attributes,
        known_keys=frozenset(PATIENT_SUMMARY_KEYS) | frozenset(Study.DICOM_ATTRIBUTES),
    ),
    QueryRetrieveLevel.SERIES: LevelSpec(
        model=Series,
        related=('study', 'study__patient'),
        lookups={
            'SeriesInstanceUID': 'series_instance_uid',
            'StudyInstanceUID': 'study__study_instance_uid',
            'PatientName': 'study__patient__patient_name',
            'PatientID': 'study__patient__patient_id',
            'SeriesDate': 'series_date',
        },
        uid_keys=('SeriesInstanceUID', 'StudyInstanceUID'),
        range_keys=('SeriesDate',),
        attributes=series_attributes,
        known_keys=(
            frozenset({'PatientName', 'PatientID', 'StudyInstanceUID'})
            | frozenset(Series.DICOM_ATTRIBUTES)
        ),
    ),
    QueryRetrieveLevel.IMAGE: LevelSpec(
        model=Instance,
        related=('series', 'series__study', 'series__study__patient'),
        lookups={
            'SOPInstanceUID': 'sop_instance_uid',
            'SeriesInstanceUID': 'series__series_instance_uid',
            'StudyInstanceUID': 'series__study__study_instance_uid',
            'PatientName': 'series__study__patient__patient_name',
            'PatientID': 'series__study__patient__patient_id',
        },
        uid_keys=('SOPInstanceUID', 'SeriesInstanceUID', 'StudyInstanceUID'),
        attributes=instance_attributes,
        known_keys=(
            frozenset({'PatientName', 'PatientID', 'StudyInstanceUID', 'SeriesInstanceUID'})
            | frozenset(Instance.DICOM_ATTRIBUTES)
        ),
    ),
}


class QueryMatcher:
    """
    Translates search keys into the list of matching entities at one level.

    Identifying keys are resolved in the database (exact lookups on the unique
    indexes, regex lookups for wildcards); every other non-empty key is checked
    in memory against the entity's attributes.
    """

    def get_spec(self, level: str) -> LevelSpec:
        spec = LEVEL_SPECS.get(str(level).strip().upper()) if level else None
        if spec is None:
            raise UnsupportedQueryLevel(level)
        return spec

    def find(self, level: str, keys: Optional[QueryKeys]) -> List[Model]:
        """
        Resolve the candidate list for a query.

        Args:
            level: PATIENT, STUDY, SERIES or IMAGE
            keys: C-FIND identifier or {keyword: value} mapping

        Returns:
            Matching entities, one per entity

        Raises:
            UnsupportedQueryLevel: If level is unknown
            ResolutionFailure: If the database query fails
        """
        spec = self.get_spec(level)
        normalized = normalize_keys(keys)

        try:
            queryset, consumed = self._build_queryset(spec, normalized)
            candidates = list(queryset)
        except DatabaseError as e:
            logger.error(f"{level} query failed: {e}", exc_info=True)
            raise ResolutionFailure(f"{level} query failed: {e}") from e

        remaining = {
            key: value for key, value in normalized.items()
            if key not in consumed and key in spec.known_keys and not is_universal(value)
        }

        if remaining:
            candidates = [
                entity for entity in candidates
                if self._matches_remaining(spec.attributes(entity), remaining)
            ]

        logger.info(f"Found {len(candidates)} {str(level).upper()} match(es)")
        return candidates

    def find_patients(self, keys: Optional[QueryKeys]) -> List[Patient]:
        return self.find(QueryRetrieveLevel.PATIENT, keys)

    def find_studies(self, keys: Optional[QueryKeys]) -> List[Study]:
        return self.find(QueryRetrieveLevel.STUDY, keys)

    def find_series(self, keys: Optional[QueryKeys]) -> List[Series]:
        return self.find(QueryRetrieveLevel.SERIES, keys)

    def find_instances(self, keys: Optional[QueryKeys]) -> List[Instance]:
        return self.find(QueryRetrieveLevel.IMAGE, keys)

    def response_attributes(self, level: str, entity: Model) -> Dict[str, Any]:
        """Attributes of entity as returned at level, parents included."""
        return self.get_spec(level).attributes(entity)

    def _build_queryset(self, spec: LevelSpec, keys: Dict[str, str]) -> Tuple[QuerySet, set]:
        queryset = spec.model.objects.all()
        if spec.related:
            queryset = queryset.select_related(*spec.related)

        consumed = set()
        for keyword, lookup in spec.lookups.items():
            value = keys.get(keyword, '')
            if is_universal(value):
                continue

            if keyword in spec.uid_keys and '\\' in value:
                uids = [uid.strip() for uid in value.split('\\') if uid.strip()]
                queryset = queryset.filter(**{f'{lookup}__in': uids})
                logger.debug(f"Filtering {keyword} by UID list ({len(uids)} UIDs)")
            elif keyword in spec.range_keys and '-' in value:
                start, _, end = value.partition('-')
                if start:
                    queryset = queryset.filter(**{f'{lookup}__gte': start})
                if end:
                    queryset = queryset.filter(**{f'{lookup}__lte': end})
                logger.debug(f"Filtering {keyword} by range: {value}")
            elif has_wildcard(value):
                queryset = queryset.filter(**{f'{lookup}__regex': dicom_wildcard_to_regex(value)})
                logger.debug(f"Filtering {keyword} by pattern: {value}")
            else:
                queryset = queryset.filter(**{lookup: value})
                logger.debug(f"Filtering {keyword}: {value}")

            consumed.add(keyword)

        return queryset, consumed

    def _matches_remaining(self, attributes: Dict[str, Any], remaining: Dict[str, str]) -> bool:
        for keyword, expected in remaining.items():
            if not _value_matches(expected, attributes.get(keyword)):
                return False
        return True
