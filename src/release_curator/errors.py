"""Exception hierarchy for release curation."""

from __future__ import annotations


class CurationError(Exception):
    """Base class for all release-curator errors."""


class MalformedRecordError(CurationError, ValueError):
    """A single feed record cannot be used (missing field, bad date, unknown type).

    Recoverable: the resolver drops the record and keeps going.
    """

    def __init__(self, reason: str, record_id: object = None):
        self.reason = reason
        self.record_id = record_id
        if record_id is None:
            super().__init__(reason)
        else:
            super().__init__(f"{reason} (id={record_id!r})")


class FeedShapeError(CurationError, TypeError):
    """The feed payload itself is not a list of records."""


class InvalidReferenceDateError(CurationError, ValueError):
    """The reference date is not a date or a YYYY-MM-DD string."""
