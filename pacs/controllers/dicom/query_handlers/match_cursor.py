"""
Match cursor for C-FIND responses.

A cursor resolves its candidate list once, then produces one response dataset
per matching entity. Each response starts as a copy of the query identifier so
that every requested key is echoed back, with the entity's stored values laid
over it.
"""
import copy
import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from django.db.models import Model
from pydicom import Dataset

from pacs.exceptions import CursorExhausted, ResolutionFailure

from .query_matcher import QueryMatcher

logger = logging.getLogger('pacs.query.cursor')

CREATED = 'created'
ITERATING = 'iterating'
EXHAUSTED = 'exhausted'


def as_dataset(keys: Union[Dataset, Mapping[str, Any], None]) -> Dataset:
    """Build a query identifier from a Dataset or a {keyword: value} mapping."""
    if isinstance(keys, Dataset):
        return copy.deepcopy(keys)

    dataset = Dataset()
    for keyword, value in (keys or {}).items():
        setattr(dataset, keyword, value)
    return dataset


def _to_element_value(value: Any) -> Any:
    if isinstance(value, float):
        return f"{value:.6g}"
    return value


class MatchCursor:
    """
    Iterates the matches of one query at one level.

    Subclasses set level and implement _resolve().
    """
    level: str = ''

    def __init__(self, keys: Union[Dataset, Mapping[str, Any], None], matcher: Optional[QueryMatcher] = None):
        self.template = as_dataset(keys)
        self.matcher = matcher or QueryMatcher()
        self._matches: Optional[List[Model]] = None
        self._position = 0

    @property
    def state(self) -> str:
        if self._matches is None:
            return CREATED
        if self._position < len(self._matches):
            return ITERATING
        return EXHAUSTED

    @property
    def match_count(self) -> int:
        self.resolve()
        return len(self._matches)

    def resolve(self) -> 'MatchCursor':
        """
        Resolve the candidate list if not done yet.

        Raises:
            ResolutionFailure: If the candidate list cannot be built
        """
        if self._matches is not None:
            return self

        try:
            self._matches = list(self._resolve())
        except ResolutionFailure:
            raise
        except Exception as e:
            logger.error(f"Failed to resolve {self.level} query: {e}", exc_info=True)
            raise ResolutionFailure(f"Failed to resolve {self.level} query: {e}") from e

        logger.debug(f"{self.level} cursor resolved {len(self._matches)} match(es)")
        return self

    def has_more_matches(self) -> bool:
        self.resolve()
        return self._position < len(self._matches)

    def next_match(self) -> Dataset:
        """
        Produce the response for the next match.

        Returns:
            Copy of the query identifier with the entity's non-null fields set

        Raises:
            CursorExhausted: If every match has been returned
        """
        if not self.has_more_matches():
            raise CursorExhausted(
                f"{self.level} cursor exhausted after {len(self._matches)} match(es)"
            )

        entity = self._matches[self._position]
        self._position += 1
        return self._compose(entity)

    def __iter__(self) -> Iterator[Dataset]:
        while self.has_more_matches():
            yield self.next_match()

    def _compose(self, entity: Model) -> Dataset:
        response = copy.deepcopy(self.template)
        response.QueryRetrieveLevel = self.level
        for keyword, value in self._attributes(entity).items():
            setattr(response, keyword, _to_element_value(value))
        return response

    def _attributes(self, entity: Model) -> Dict[str, Any]:
        return self.matcher.response_attributes(self.level, entity)

    def _resolve(self) -> List[Model]:
        raise NotImplementedError(f"{self.__class__.__name__} must implement _resolve()")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} state={self.state} position={self._position}>"
