"""Temporal bucketing relative to a reference date."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from release_curator.models import ReleaseCandidate, coerce_reference_date, shift_date


class Bucket(StrEnum):
    """Time slot of a release relative to today, in display order."""

    RECENTLY_RELEASED = "recentlyReleased"
    RELEASING_TODAY = "releasingToday"
    NEXT_SEVEN_DAYS = "nextSevenDays"
    NEXT_THIRTY_DAYS = "nextThirtyDays"
    LATER_RELEASING = "laterReleasing"


BUCKET_ORDER: tuple[Bucket, ...] = tuple(Bucket)


@dataclass(frozen=True)
class BucketBoundaries:
    """Boundary dates (YYYY-MM-DD) used to classify a release."""

    today: str
    seven_days_later: str
    thirty_days_later: str

    @classmethod
    def for_today(
        cls, today: str, near_days: int = 7, far_days: int = 30
    ) -> BucketBoundaries:
        today = coerce_reference_date(today)
        return cls(
            today=today,
            seven_days_later=shift_date(today, near_days),
            thirty_days_later=shift_date(today, far_days),
        )

    def classify(self, release_date: str) -> Bucket:
        if release_date < self.today:
            return Bucket.RECENTLY_RELEASED
        if release_date == self.today:
            return Bucket.RELEASING_TODAY
        if release_date <= self.seven_days_later:
            return Bucket.NEXT_SEVEN_DAYS
        if release_date <= self.thirty_days_later:
            return Bucket.NEXT_THIRTY_DAYS
        return Bucket.LATER_RELEASING


def classify(release_date: str, today: str) -> Bucket:
    """Return the bucket of a single release date."""
    return BucketBoundaries.for_today(today).classify(release_date)


def bucketize(
    candidates: Iterable[ReleaseCandidate],
    today: str,
    near_days: int = 7,
    far_days: int = 30,
) -> dict[Bucket, list[ReleaseCandidate]]:
    """
    Partition candidates into buckets.

    Every bucket is present in the result (possibly empty), keys are in
    display order, and each bucket keeps the input order.
    """
    boundaries = BucketBoundaries.for_today(today, near_days, far_days)
    buckets: dict[Bucket, list[ReleaseCandidate]] = {bucket: [] for bucket in BUCKET_ORDER}
    for candidate in candidates:
        buckets[boundaries.classify(candidate.release_date)].append(candidate)
    return buckets
