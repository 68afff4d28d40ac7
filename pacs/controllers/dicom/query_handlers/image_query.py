"""
Image-level C-FIND matches.
"""
from typing import List

from pacs.controllers.base import QueryRetrieveLevel
from pacs.models import Instance

from .match_cursor import MatchCursor


class InstanceCursor(MatchCursor):
    """Matches Instances; responses include the parent series and study UIDs."""
    level = QueryRetrieveLevel.IMAGE

    def _resolve(self) -> List[Instance]:
        return self.matcher.find_instances(self.template)
