"""
Series-level C-FIND matches.
"""
from typing import List

from pacs.controllers.base import QueryRetrieveLevel
from pacs.models import Series

from .match_cursor import MatchCursor


class SeriesCursor(MatchCursor):
    """Matches Series; responses include the parent StudyInstanceUID."""
    level = QueryRetrieveLevel.SERIES

    def _resolve(self) -> List[Series]:
        return self.matcher.find_series(self.template)
