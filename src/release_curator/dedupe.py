"""Series-aware deduplication of release candidates.

Collapses reposts and series variants ("X" / "X 第二季" / "前传:X") into one
canonical record per work. Candidates are processed in input order against an
accumulator; a replacement takes over the slot of the record it replaces, so
the output order follows first appearance of each work.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from release_curator.models import ReleaseCandidate
from release_curator.normalize import TitleNormalizer

logger = logging.getLogger(__name__)


class DedupeRationale(StrEnum):
    """Why one record was kept over another."""

    EXACT_TITLE_EARLIER = "DEDUPE:EXACT_TITLE_EARLIER"
    EXACT_TITLE_KEPT = "DEDUPE:EXACT_TITLE_KEPT"
    MARKER_FREE_PREFERRED = "DEDUPE:MARKER_FREE_PREFERRED"
    MARKER_FREE_KEPT = "DEDUPE:MARKER_FREE_KEPT"
    SERIES_EARLIER = "DEDUPE:SERIES_EARLIER"
    SERIES_KEPT = "DEDUPE:SERIES_KEPT"


@dataclass(frozen=True)
class DedupeDecision:
    """One collapse of a duplicate into a canonical record."""

    kept: ReleaseCandidate
    dropped: ReleaseCandidate
    key: str
    rationale: DedupeRationale

    def to_dict(self) -> dict[str, object]:
        return {
            "kept_id": self.kept.id,
            "kept_title": self.kept.title,
            "dropped_id": self.dropped.id,
            "dropped_title": self.dropped.title,
            "key": self.key,
            "rationale": self.rationale.value,
        }


class Deduplicator:
    """Reduce a candidate list to one canonical record per normalized title."""

    def __init__(self, normalizer: TitleNormalizer | None = None):
        self.normalizer = normalizer or TitleNormalizer()

    def run(
        self, candidates: Iterable[ReleaseCandidate]
    ) -> tuple[list[ReleaseCandidate], list[DedupeDecision]]:
        accumulated: list[ReleaseCandidate] = []
        keys: list[str] = []
        decisions: list[DedupeDecision] = []

        for current in candidates:
            current_key = self.normalizer.normalize(current.title).key

            exact_index = self._find_exact(accumulated, current.title)
            if exact_index is not None:
                decision = self._resolve_exact(accumulated[exact_index], current, current_key)
                if decision.kept is current:
                    accumulated[exact_index] = current
                    keys[exact_index] = current_key
                decisions.append(decision)
                continue

            similar_index = self._find_similar(keys, current_key)
            if similar_index is not None:
                decision = self._resolve_series(accumulated[similar_index], current, current_key)
                if decision.kept is current:
                    accumulated[similar_index] = current
                    keys[similar_index] = current_key
                decisions.append(decision)
                continue

            accumulated.append(current)
            keys.append(current_key)

        for decision in decisions:
            logger.debug(
                f"{decision.rationale}: kept {decision.kept.title!r} ({decision.kept.release_date}), "
                f"dropped {decision.dropped.title!r} ({decision.dropped.release_date})"
            )
        return accumulated, decisions

    def _find_exact(self, accumulated: list[ReleaseCandidate], title: str) -> int | None:
        for index, item in enumerate(accumulated):
            if item.title == title:
                return index
        return None

    def _find_similar(self, keys: list[str], key: str) -> int | None:
        for index, existing_key in enumerate(keys):
            if existing_key == key:
                return index
        return None

    def _resolve_exact(
        self, existing: ReleaseCandidate, current: ReleaseCandidate, key: str
    ) -> DedupeDecision:
        if current.release_date < existing.release_date:
            return DedupeDecision(current, existing, key, DedupeRationale.EXACT_TITLE_EARLIER)
        return DedupeDecision(existing, current, key, DedupeRationale.EXACT_TITLE_KEPT)

    def _resolve_series(
        self, existing: ReleaseCandidate, current: ReleaseCandidate, key: str
    ) -> DedupeDecision:
        current_marked = self.normalizer.has_season_marker(current.title)
        existing_marked = self.normalizer.has_season_marker(existing.title)

        if existing_marked and not current_marked:
            return DedupeDecision(current, existing, key, DedupeRationale.MARKER_FREE_PREFERRED)
        if current_marked and not existing_marked:
            return DedupeDecision(existing, current, key, DedupeRationale.MARKER_FREE_KEPT)
        if current.release_date < existing.release_date:
            return DedupeDecision(current, existing, key, DedupeRationale.SERIES_EARLIER)
        return DedupeDecision(existing, current, key, DedupeRationale.SERIES_KEPT)


def deduplicate_with_trace(
    candidates: Iterable[ReleaseCandidate],
) -> tuple[list[ReleaseCandidate], list[DedupeDecision]]:
    """Deduplicate and return the canonical records plus every collapse decision."""
    return Deduplicator().run(candidates)


def deduplicate(candidates: Iterable[ReleaseCandidate]) -> list[ReleaseCandidate]:
    """Deduplicate and return the canonical records in first-appearance order."""
    canonical, _ = deduplicate_with_trace(candidates)
    return canonical
