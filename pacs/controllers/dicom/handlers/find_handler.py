"""
C-FIND Handler for DICOM query operations.
Drives a match cursor for the requested level (PATIENT, STUDY, SERIES, IMAGE).
"""
from typing import Any, Generator, Optional, Tuple

from pydicom import Dataset

from pacs.controllers.base import DICOMStatus, HandlerBase
from pacs.controllers.dicom.query_handlers import QueryMatcher, new_cursor
from pacs.exceptions import ResolutionFailure, UnsupportedQueryLevel


class FindHandler(HandlerBase):
    """Handler for C-FIND operations - answers queries from the archive."""

    def __init__(self, matcher: Optional[QueryMatcher] = None) -> None:
        """
        Initialize the find handler.

        Args:
            matcher: QueryMatcher shared by all cursors
        """
        super().__init__('find')
        self.matcher = matcher or QueryMatcher()

    def handle_find(self, event: Any) -> Generator[Tuple[int, Optional[Dataset]], None, None]:
        """
        Handle incoming C-FIND request.

        Args:
            event: pynetdicom event object

        Yields:
            tuple: (status_code, response_dataset)
        """
        calling_info = self.extract_calling_info(event)
        self.log_operation_start("C-FIND", calling_info)

        query_ds = self.decode_identifier(event.identifier)
        query_level = self.get_query_level(query_ds)
        self._log_query_tags(query_ds)

        try:
            cursor = new_cursor(query_level, query_ds, self.matcher)
        except UnsupportedQueryLevel as e:
            self.logger.warning(str(e))
            self.log_operation_complete("C-FIND", False)
            yield DICOMStatus.UNABLE_TO_PROCESS, None
            return
        except ResolutionFailure as e:
            self.logger.error(f"Error resolving C-FIND request: {e}")
            self.log_operation_complete("C-FIND", False)
            yield DICOMStatus.UNABLE_TO_PROCESS, None
            return

        response_count = 0
        try:
            while cursor.has_more_matches():
                if getattr(event, 'is_cancelled', False):
                    self.logger.info(f"C-FIND cancelled after {response_count} response(s)")
                    yield DICOMStatus.CANCEL, None
                    return

                response_ds = cursor.next_match()
                response_count += 1
                yield DICOMStatus.PENDING, response_ds

        except Exception as e:
            self.logger.error(f"Error processing C-FIND request: {e}", exc_info=True)
            yield DICOMStatus.UNABLE_TO_PROCESS, None
            return

        self.log_operation_complete(
            "C-FIND", True, f"{query_level} query returned {response_count} match(es)"
        )
        yield DICOMStatus.SUCCESS, None

    def _log_query_tags(self, query_ds: Dataset) -> None:
        self.logger.info("Query Parameters:")
        for elem in query_ds:
            if not elem.keyword:
                continue
            if elem.value:
                self.logger.info(f"  {elem.keyword}: {elem.value}")
            else:
                self.logger.info(f"  {elem.keyword}: <empty> (requesting this field)")

    def handle(self, event: Any):
        """Main handler method (delegates to handle_find for C-FIND operations)."""
        return self.handle_find(event)
