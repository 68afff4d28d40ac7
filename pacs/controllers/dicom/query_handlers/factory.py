"""
Cursor factories.

Each factory returns a resolved cursor: resolution failures surface here, as
the failure of the query itself.
"""
from typing import Any, Dict, Mapping, Optional, Type, Union

from pydicom import Dataset

from pacs.controllers.base import QueryRetrieveLevel
from pacs.exceptions import UnsupportedQueryLevel

from .image_query import InstanceCursor
from .match_cursor import MatchCursor
from .patient_query import PatientCursor
from .query_matcher import QueryMatcher
from .series_query import SeriesCursor
from .study_query import StudyCursor

QueryKeys = Union[Dataset, Mapping[str, Any], None]

CURSOR_CLASSES: Dict[str, Type[MatchCursor]] = {
    QueryRetrieveLevel.PATIENT: PatientCursor,
    QueryRetrieveLevel.STUDY: StudyCursor,
    QueryRetrieveLevel.SERIES: SeriesCursor,
    QueryRetrieveLevel.IMAGE: InstanceCursor,
}


def new_patient_cursor(keys: QueryKeys, matcher: Optional[QueryMatcher] = None) -> PatientCursor:
    return PatientCursor(keys, matcher).resolve()


def new_study_cursor(keys: QueryKeys, matcher: Optional[QueryMatcher] = None) -> StudyCursor:
    return StudyCursor(keys, matcher).resolve()


def new_series_cursor(keys: QueryKeys, matcher: Optional[QueryMatcher] = None) -> SeriesCursor:
    return SeriesCursor(keys, matcher).resolve()


def new_instance_cursor(keys: QueryKeys, matcher: Optional[QueryMatcher] = None) -> InstanceCursor:
    return InstanceCursor(keys, matcher).resolve()


def new_cursor(level: str, keys: QueryKeys, matcher: Optional[QueryMatcher] = None) -> MatchCursor:
    """
    Create the cursor for a QueryRetrieveLevel.

    Args:
        level: PATIENT, STUDY, SERIES or IMAGE (case-insensitive)
        keys: Query identifier
        matcher: QueryMatcher to use (a new one by default)

    Returns:
        Resolved cursor for the level

    Raises:
        UnsupportedQueryLevel: If level is not one of the four levels
        ResolutionFailure: If the candidate list cannot be built
    """
    cursor_class = CURSOR_CLASSES.get(str(level or '').strip().upper())
    if cursor_class is None:
        raise UnsupportedQueryLevel(level)
    return cursor_class(keys, matcher).resolve()
