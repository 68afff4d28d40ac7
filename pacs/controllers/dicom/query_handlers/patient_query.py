"""
Patient-level C-FIND matches.
"""
from typing import List

from pacs.controllers.base import QueryRetrieveLevel
from pacs.models import Patient

from .match_cursor import MatchCursor


class PatientCursor(MatchCursor):
    """Matches Patients; PatientName is the natural key."""
    level = QueryRetrieveLevel.PATIENT

    def _resolve(self) -> List[Patient]:
        return self.matcher.find_patients(self.template)
