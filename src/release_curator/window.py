"""Retention window filter.

Dates are compared as YYYY-MM-DD strings so that no timezone conversion can
move a release across a day boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from release_curator.models import ReleaseCandidate, coerce_reference_date, is_iso_date, shift_date

logger = logging.getLogger(__name__)

DEFAULT_DAYS_BEFORE = 7
DEFAULT_DAYS_AFTER = 90


@dataclass(frozen=True)
class RetentionWindow:
    """Inclusive [start, end] date range, both as YYYY-MM-DD strings."""

    start: str
    end: str

    @classmethod
    def around(
        cls,
        today: str,
        days_before: int = DEFAULT_DAYS_BEFORE,
        days_after: int = DEFAULT_DAYS_AFTER,
    ) -> RetentionWindow:
        return cls(start=shift_date(today, -days_before), end=shift_date(today, days_after))

    def contains(self, release_date: str) -> bool:
        return self.start <= release_date <= self.end


def filter_window(
    candidates: Iterable[ReleaseCandidate],
    today: str,
    days_before: int = DEFAULT_DAYS_BEFORE,
    days_after: int = DEFAULT_DAYS_AFTER,
) -> list[ReleaseCandidate]:
    """
    Keep candidates released within [today - days_before, today + days_after].

    Candidates whose release date is not a valid YYYY-MM-DD string are dropped
    with a warning rather than failing the whole call.
    """
    today = coerce_reference_date(today)
    window = RetentionWindow.around(today, days_before, days_after)
    logger.debug(f"Retention window: {window.start} .. {window.end}")

    kept: list[ReleaseCandidate] = []
    for candidate in candidates:
        if not is_iso_date(candidate.release_date):
            logger.warning(
                f"Dropping {candidate.title!r} (id={candidate.id!r}): "
                f"unparseable releaseDate {candidate.release_date!r}"
            )
            continue
        if window.contains(candidate.release_date):
            kept.append(candidate)
    return kept
