"""
Study-level C-FIND matches.

Responses carry the parent patient's name, ID, birth date and sex next to the
study attributes.
"""
from typing import List

from pacs.controllers.base import QueryRetrieveLevel
from pacs.models import Study

from .match_cursor import MatchCursor


class StudyCursor(MatchCursor):
    level = QueryRetrieveLevel.STUDY

    def _resolve(self) -> List[Study]:
        return self.matcher.find_studies(self.template)
