"""Quota-based selection across time buckets.

Draws a bounded, temporally diverse selection: a primary quota per bucket,
then surplus from other buckets in a fixed fallback order when some bucket
came up short. ``releasingToday`` is drawn last and is hard-capped so that a
single announcement-heavy day cannot crowd out the rest of the calendar.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from release_curator.buckets import BUCKET_ORDER, Bucket
from release_curator.config import CurationPolicy
from release_curator.models import ReleaseCandidate

logger = logging.getLogger(__name__)

FALLBACK_ORDER: tuple[Bucket, ...] = (
    Bucket.NEXT_SEVEN_DAYS,
    Bucket.NEXT_THIRTY_DAYS,
    Bucket.LATER_RELEASING,
    Bucket.RECENTLY_RELEASED,
    Bucket.RELEASING_TODAY,
)


def primary_quotas(policy: CurationPolicy) -> dict[Bucket, int]:
    quotas = policy.quotas
    return {
        Bucket.RECENTLY_RELEASED: quotas.recently_released,
        Bucket.RELEASING_TODAY: quotas.releasing_today,
        Bucket.NEXT_SEVEN_DAYS: quotas.next_seven_days,
        Bucket.NEXT_THIRTY_DAYS: quotas.next_thirty_days,
        Bucket.LATER_RELEASING: quotas.later_releasing,
    }


def plan_allocation(
    bucket_sizes: Mapping[Bucket, int], policy: CurationPolicy | None = None
) -> dict[Bucket, int]:
    """
    Compute how many items to take from each bucket.

    Args:
        bucket_sizes: Number of available candidates per bucket
        policy: Quotas, total size and today cap (defaults if omitted)

    Returns:
        Count per bucket, in display order. Counts never exceed bucket sizes,
        their sum never exceeds ``policy.max_total``, and the releasingToday
        count never exceeds ``policy.releasing_today_cap``.
    """
    policy = policy or CurationPolicy()
    sizes = {bucket: max(0, bucket_sizes.get(bucket, 0)) for bucket in BUCKET_ORDER}
    quotas = primary_quotas(policy)

    today_cap = max(0, policy.releasing_today_cap)
    max_total = max(0, policy.max_total)

    taken = {bucket: max(0, min(quotas[bucket], sizes[bucket])) for bucket in BUCKET_ORDER}
    taken[Bucket.RELEASING_TODAY] = min(taken[Bucket.RELEASING_TODAY], today_cap)

    # Primary quotas can add up to more than max_total when it is configured low
    overflow = sum(taken.values()) - max_total
    for bucket in reversed(BUCKET_ORDER):
        if overflow <= 0:
            break
        trimmed = min(overflow, taken[bucket])
        taken[bucket] -= trimmed
        overflow -= trimmed

    for bucket in FALLBACK_ORDER:
        remaining = max_total - sum(taken.values())
        if remaining <= 0:
            break
        surplus = sizes[bucket] - taken[bucket]
        if bucket == Bucket.RELEASING_TODAY:
            surplus = min(surplus, today_cap - taken[bucket])
        extra = max(0, min(surplus, remaining))
        taken[bucket] += extra

    return taken


def allocate(
    buckets: Mapping[Bucket, Sequence[ReleaseCandidate]],
    policy: CurationPolicy | None = None,
) -> list[ReleaseCandidate]:
    """
    Select up to ``policy.max_total`` candidates from the buckets.

    The result is concatenated in bucket display order; within a bucket the
    incoming order is kept. Never pads, never raises on empty input.
    """
    plan = plan_allocation({bucket: len(buckets.get(bucket, ())) for bucket in BUCKET_ORDER}, policy)

    selected: list[ReleaseCandidate] = []
    seen_ids: set[str | int] = set()
    for bucket in BUCKET_ORDER:
        for candidate in list(buckets.get(bucket, ()))[: plan[bucket]]:
            if candidate.id in seen_ids:
                logger.warning(f"Skipping repeated id {candidate.id!r} in bucket {bucket}")
                continue
            seen_ids.add(candidate.id)
            selected.append(candidate)

    plan_summary = ", ".join(f"{bucket}={count}" for bucket, count in plan.items())
    logger.debug(f"Allocation plan: {plan_summary}")
    return selected
