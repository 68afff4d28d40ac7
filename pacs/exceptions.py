"""
Archive error taxonomy.

Ingestion errors are recovered per file by the import worker; query errors
propagate to the protocol layer as a failed C-FIND.
"""
from typing import Optional


class PacsError(Exception):
    """Base class for all archive errors."""


class InvalidPath(PacsError):
    """Import root is blank, missing or cannot be canonicalized."""

    def __init__(self, path, reason: str = '') -> None:
        self.path = path
        self.reason = reason
        message = f"Invalid import path: {path!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class MissingRequiredField(PacsError):
    """A decoded file lacks one of the identifying attributes."""

    def __init__(self, field_name: str, path: Optional[str] = None) -> None:
        self.field_name = field_name
        self.path = path
        message = f"Missing required field {field_name}"
        if path:
            message = f"{message} in {path}"
        super().__init__(message)


class DuplicateKeyRace(PacsError):
    """A concurrent importer created the same entity between lookup and insert."""

    def __init__(self, level: str, key: str, attempts: int = 1) -> None:
        self.level = level
        self.key = key
        self.attempts = attempts
        super().__init__(f"Uniqueness conflict on {level} {key} after {attempts} attempt(s)")


class UnreadableFile(PacsError):
    """A candidate file could not be read or parsed."""

    def __init__(self, path, reason: str = '') -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}" if reason else f"Cannot read {path}")


class WalkAborted(PacsError):
    """The directory walk failed partway through."""


class ImportRejected(PacsError):
    """The import pool backlog is full."""


class ResolutionFailure(PacsError):
    """Resolving the candidate list for a query failed."""


class CursorExhausted(PacsError):
    """next_match() was called on a cursor with no remaining matches."""


class UnsupportedQueryLevel(PacsError):
    """The query names a level other than PATIENT, STUDY, SERIES or IMAGE."""

    def __init__(self, level) -> None:
        self.level = level
        super().__init__(f"Unsupported QueryRetrieveLevel: {level!r}")
