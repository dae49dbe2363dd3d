"""Tests for quota allocation with ordered fallback."""

from __future__ import annotations

from feed_helpers import make_candidate

from release_curator.allocator import FALLBACK_ORDER, allocate, plan_allocation
from release_curator.buckets import Bucket
from release_curator.config import CurationPolicy, QuotaConfig

R, T, N7, N30, L = (
    Bucket.RECENTLY_RELEASED,
    Bucket.RELEASING_TODAY,
    Bucket.NEXT_SEVEN_DAYS,
    Bucket.NEXT_THIRTY_DAYS,
    Bucket.LATER_RELEASING,
)


def sizes(recent: int, today: int, seven: int, thirty: int, later: int) -> dict[Bucket, int]:
    return {R: recent, T: today, N7: seven, N30: thirty, L: later}


def test_primary_quotas_fill_exactly():
    plan = plan_allocation(sizes(2, 5, 6, 3, 2))
    assert plan == sizes(2, 1, 4, 2, 1)
    assert sum(plan.values()) == 10


def test_fallback_prefers_next_seven_days():
    plan = plan_allocation(sizes(5, 0, 10, 0, 0))
    assert plan == sizes(2, 0, 8, 0, 0)


def test_fallback_order_walks_all_buckets():
    plan = plan_allocation(sizes(4, 0, 1, 1, 3))
    # next7 and next30 have no surplus; later then recent make up the rest
    assert plan == sizes(4, 0, 1, 1, 3)


def test_fallback_stops_when_full():
    plan = plan_allocation(sizes(6, 0, 2, 6, 6))
    # primary 2+0+2+2+1 = 7, then 3 more from next30 surplus
    assert plan == sizes(2, 0, 2, 5, 1)


def test_releasing_today_hard_cap():
    plan = plan_allocation(sizes(2, 5, 2, 0, 0))
    assert plan[T] == 3
    assert sum(plan.values()) == 7


def test_releasing_today_only():
    assert plan_allocation(sizes(0, 8, 0, 0, 0)) == sizes(0, 3, 0, 0, 0)


def test_empty_buckets():
    assert plan_allocation(sizes(0, 0, 0, 0, 0)) == sizes(0, 0, 0, 0, 0)
    assert allocate({}) == []


def test_fallback_order_constant():
    assert FALLBACK_ORDER == (N7, N30, L, R, T)


def test_custom_policy_total_and_cap():
    policy = CurationPolicy(max_total=6, releasing_today_cap=1)
    plan = plan_allocation(sizes(0, 5, 1, 0, 0), policy)
    assert plan == sizes(0, 1, 1, 0, 0)


def test_low_total_trims_primary_quotas_from_the_far_end():
    policy = CurationPolicy(max_total=5)
    plan = plan_allocation(sizes(3, 3, 5, 3, 3), policy)
    assert plan == sizes(2, 1, 2, 0, 0)


def test_custom_quotas():
    policy = CurationPolicy(quotas=QuotaConfig(recently_released=0, next_seven_days=9))
    plan = plan_allocation(sizes(3, 0, 9, 0, 0), policy)
    assert plan == sizes(1, 0, 9, 0, 0)


def test_allocate_concatenates_in_bucket_order():
    buckets = {
        R: [make_candidate("Past A", "2025-01-10"), make_candidate("Past B", "2025-01-11")],
        T: [make_candidate("Now A", "2025-01-15")],
        N7: [make_candidate(f"Soon {c}", "2025-01-17") for c in "ABCDEF"],
        N30: [],
        L: [make_candidate("Far A", "2025-03-01")],
    }

    selected = allocate(buckets)

    assert [c.title for c in selected] == [
        "Past A",
        "Past B",
        "Now A",
        "Soon A",
        "Soon B",
        "Soon C",
        "Soon D",
        "Soon E",
        "Soon F",
        "Far A",
    ]


def test_allocate_skips_repeated_ids():
    same = make_candidate("Soon A", "2025-01-17", record_id="dup")
    buckets = {N7: [same, same]}
    assert allocate(buckets) == [same]


def test_unvalidated_negative_limits_clamp_to_zero():
    policy = CurationPolicy.model_construct(max_total=10, releasing_today_cap=-1)
    plan = plan_allocation(sizes(0, 6, 0, 0, 0), policy)
    assert plan == sizes(0, 0, 0, 0, 0)

    policy = CurationPolicy.model_construct(max_total=-4)
    assert plan_allocation(sizes(2, 1, 4, 2, 1), policy) == sizes(0, 0, 0, 0, 0)


def test_allocate_never_exceeds_today_cap_with_unvalidated_policy():
    today = [make_candidate(f"Now {c}", "2025-01-15") for c in "ABCDEF"]
    policy = CurationPolicy.model_construct(releasing_today_cap=-1)
    assert allocate({T: today}, policy) == []
