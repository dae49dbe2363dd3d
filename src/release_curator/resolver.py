"""Release curation resolver.

Pipeline over one feed snapshot and an explicit reference date:

1. window filter (today - 7d .. today + 90d)
2. series-aware deduplication, then one record per id
3. temporal bucketing
4. quota allocation with ordered fallback

The resolver keeps no state between calls; the same feed and the same
``today`` always produce the same result.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from release_curator.allocator import allocate
from release_curator.buckets import BUCKET_ORDER, Bucket, bucketize
from release_curator.config import CurationPolicy
from release_curator.dedupe import DedupeDecision, Deduplicator
from release_curator.models import ReleaseCandidate, coerce_reference_date, parse_records
from release_curator.normalize import TitleNormalizer
from release_curator.window import RetentionWindow, filter_window

logger = logging.getLogger(__name__)


@dataclass
class CurationStats:
    """Counts collected at each pipeline stage."""

    input_count: int = 0
    dropped_malformed: int = 0
    windowed_count: int = 0
    repeated_ids: int = 0
    deduplicated_count: int = 0
    bucket_sizes: dict[Bucket, int] = field(default_factory=dict)
    selected_per_bucket: dict[Bucket, int] = field(default_factory=dict)
    selected_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "input_count": self.input_count,
            "dropped_malformed": self.dropped_malformed,
            "windowed_count": self.windowed_count,
            "repeated_ids": self.repeated_ids,
            "deduplicated_count": self.deduplicated_count,
            "bucket_sizes": {str(bucket): count for bucket, count in self.bucket_sizes.items()},
            "selected_per_bucket": {
                str(bucket): count for bucket, count in self.selected_per_bucket.items()
            },
            "selected_count": self.selected_count,
        }


@dataclass
class CurationTrace:
    """Structured record of how a result was produced."""

    today: str
    window_start: str = ""
    window_end: str = ""
    malformed: list[str] = field(default_factory=list)
    dedupe_decisions: list[DedupeDecision] = field(default_factory=list)
    stats: CurationStats = field(default_factory=CurationStats)

    def to_dict(self) -> dict[str, Any]:
        return {
            "today": self.today,
            "window": [self.window_start, self.window_end],
            "malformed": list(self.malformed),
            "dedupe_decisions": [decision.to_dict() for decision in self.dedupe_decisions],
            "stats": self.stats.to_dict(),
        }

    def to_human_readable(self) -> str:
        """
        Explain the result for CLI ``--explain`` output.
        """
        lines = []
        lines.append("Curation Trace")
        lines.append("=" * 50)
        lines.append(f"Today: {self.today}")
        lines.append(f"Window: {self.window_start} .. {self.window_end}")

        stats = self.stats
        lines.append(
            f"\nRecords: {stats.input_count} in, {stats.dropped_malformed} malformed, "
            f"{stats.windowed_count} in window, {stats.deduplicated_count} after dedupe"
        )
        if stats.repeated_ids:
            lines.append(f"Repeated ids dropped: {stats.repeated_ids}")

        if self.malformed:
            lines.append("\nDropped Records:")
            for reason in self.malformed:
                lines.append(f"  - {reason}")

        if self.dedupe_decisions:
            lines.append(f"\nDuplicates Collapsed: {len(self.dedupe_decisions)}")
            for decision in self.dedupe_decisions:
                lines.append(
                    f"  {decision.rationale.value.replace('DEDUPE:', '')}: "
                    f"{decision.kept.title} ({decision.kept.release_date}) "
                    f"over {decision.dropped.title} ({decision.dropped.release_date})"
                )

        lines.append("\nBuckets (available -> selected):")
        for bucket in BUCKET_ORDER:
            available = stats.bucket_sizes.get(bucket, 0)
            selected = stats.selected_per_bucket.get(bucket, 0)
            lines.append(f"  {bucket.value}: {available} -> {selected}")

        lines.append(f"\nSelected: {stats.selected_count}")
        return "\n".join(lines)


@dataclass
class CurationResult:
    """Ordered selection plus the trace that explains it."""

    items: list[ReleaseCandidate]
    trace: CurationTrace

    @property
    def stats(self) -> CurationStats:
        return self.trace.stats

    def to_records(self) -> list[dict[str, Any]]:
        """Selected items in feed shape, ready for the display layer."""
        return [item.to_dict() for item in self.items]

    def __len__(self) -> int:
        return len(self.items)


def drop_repeated_ids(
    candidates: Sequence[ReleaseCandidate],
) -> tuple[list[ReleaseCandidate], int]:
    """
    Keep the first record per id.

    Merged provider feeds can reuse an id for two different works. Returns
    the remaining records and the number dropped.
    """
    seen: set[str | int] = set()
    unique: list[ReleaseCandidate] = []
    for candidate in candidates:
        if candidate.id in seen:
            logger.warning(f"Dropping {candidate.title!r}: id {candidate.id!r} is already used by another record")
            continue
        seen.add(candidate.id)
        unique.append(candidate)
    return unique, len(candidates) - len(unique)


class CurationResolver:
    """
    Release curation resolver.

    Turns a raw release feed into a short, deduplicated, temporally
    diversified list.
    """

    def __init__(
        self,
        policy: CurationPolicy | None = None,
        normalizer: TitleNormalizer | None = None,
    ):
        self.policy = policy or CurationPolicy()
        self.deduplicator = Deduplicator(normalizer)

    def resolve(self, feed: Sequence[Any], today: date | str) -> CurationResult:
        """
        Curate a feed snapshot.

        Args:
            feed: List of raw feed mappings or ReleaseCandidate objects
            today: Reference date, as a date or YYYY-MM-DD string

        Returns:
            CurationResult with at most ``policy.max_total`` items

        Raises:
            FeedShapeError: if feed is not a list or tuple
            InvalidReferenceDateError: if today is not a valid date
        """
        candidates, problems = parse_records(feed)
        today_str = coerce_reference_date(today)
        policy = self.policy

        trace = CurationTrace(today=today_str, malformed=problems)
        trace.stats.input_count = len(feed)
        trace.stats.dropped_malformed = len(problems)
        for problem in problems:
            logger.warning(f"Dropping feed record {problem}")

        windowed = filter_window(
            candidates, today_str, policy.window_days_before, policy.window_days_after
        )
        trace.stats.windowed_count = len(windowed)
        window = RetentionWindow.around(today_str, policy.window_days_before, policy.window_days_after)
        trace.window_start, trace.window_end = window.start, window.end
        logger.info(f"Window {window.start}..{window.end}: {len(windowed)}/{len(candidates)} candidates")

        canonical, decisions = self.deduplicator.run(windowed)
        trace.dedupe_decisions = decisions
        canonical, repeated = drop_repeated_ids(canonical)
        trace.stats.repeated_ids = repeated
        trace.stats.deduplicated_count = len(canonical)
        logger.info(f"Deduplicated: {len(canonical)} unique of {len(windowed)}")

        buckets = bucketize(canonical, today_str, policy.next_seven_days, policy.next_thirty_days)
        trace.stats.bucket_sizes = {bucket: len(items) for bucket, items in buckets.items()}

        selected = allocate(buckets, policy)
        bucket_of = {id(item): bucket for bucket, items in buckets.items() for item in items}
        selected_counts = Counter(bucket_of[id(item)] for item in selected)
        trace.stats.selected_per_bucket = {bucket: selected_counts[bucket] for bucket in BUCKET_ORDER}
        trace.stats.selected_count = len(selected)
        logger.info(f"Selected {len(selected)} releases: {trace.stats.to_dict()['selected_per_bucket']}")

        return CurationResult(items=selected, trace=trace)


def curate(
    feed: Sequence[Any],
    today: date | str,
    policy: CurationPolicy | None = None,
) -> CurationResult:
    """Run the curation pipeline once with the given (or default) policy."""
    return CurationResolver(policy).resolve(feed, today)
