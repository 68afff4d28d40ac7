# Query Handlers package
from .query_matcher import QueryMatcher, dicom_wildcard_to_regex
from .match_cursor import MatchCursor
from .patient_query import PatientCursor
from .study_query import StudyCursor
from .series_query import SeriesCursor
from .image_query import InstanceCursor
from .factory import (
    new_cursor,
    new_instance_cursor,
    new_patient_cursor,
    new_series_cursor,
    new_study_cursor,
)

__all__ = [
    'QueryMatcher',
    'dicom_wildcard_to_regex',
    'MatchCursor',
    'PatientCursor',
    'StudyCursor',
    'SeriesCursor',
    'InstanceCursor',
    'new_cursor',
    'new_patient_cursor',
    'new_study_cursor',
    'new_series_cursor',
    'new_instance_cursor',
]
