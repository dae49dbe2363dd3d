"""Release calendar browsing over an already-fetched feed.

Filtering, pagination and facet counts for the full calendar view. Like the
resolver, everything here is a pure function of its arguments.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from release_curator.models import MediaType, ReleaseCandidate, coerce_reference_date

logger = logging.getLogger(__name__)

ALL_VALUES = "全部"
UNKNOWN_VALUE = "未知"
TYPE_LABELS = {MediaType.MOVIE: "电影", MediaType.TV: "电视剧"}

DEFAULT_REGION_FACETS = 10
DEFAULT_GENRE_FACETS = 15


@dataclass
class CalendarQuery:
    """Filters and paging for the calendar view."""

    type: MediaType | None = None
    region: str | None = None
    genre: str | None = None
    date_from: str | None = None
    date_to: str | None = None
    limit: int | None = None
    offset: int = 0


@dataclass
class CalendarPage:
    items: list[ReleaseCandidate]
    total: int
    has_more: bool


@dataclass
class Facet:
    value: str
    label: str
    count: int

    def to_dict(self) -> dict[str, object]:
        return {"value": self.value, "label": self.label, "count": self.count}


@dataclass
class CalendarFilters:
    """Facet counts offered as filter options."""

    types: list[Facet] = field(default_factory=list)
    regions: list[Facet] = field(default_factory=list)
    genres: list[Facet] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[dict[str, object]]]:
        return {
            "types": [facet.to_dict() for facet in self.types],
            "regions": [facet.to_dict() for facet in self.regions],
            "genres": [facet.to_dict() for facet in self.genres],
        }


def merge_feeds(*feeds: Iterable[ReleaseCandidate]) -> list[ReleaseCandidate]:
    """
    Concatenate provider feeds, keeping the first record per (title, releaseDate).

    Provider pages overlap (schedule page vs. homepage); only literal reposts
    are removed here, series variants are left for the resolver.
    """
    seen: set[tuple[str, str]] = set()
    merged: list[ReleaseCandidate] = []
    total = 0
    for feed in feeds:
        for candidate in feed:
            total += 1
            key = (candidate.title, candidate.release_date)
            if key in seen:
                continue
            seen.add(key)
            merged.append(candidate)
    logger.info(f"Merged {len(feeds)} feeds: {total} records, {len(merged)} unique")
    return merged


def _matches(candidate: ReleaseCandidate, query: CalendarQuery) -> bool:
    if query.type is not None and candidate.type != query.type:
        return False
    if query.region and query.region != ALL_VALUES and query.region not in candidate.region:
        return False
    if query.genre and query.genre != ALL_VALUES and query.genre not in candidate.genre:
        return False
    if query.date_from and candidate.release_date < query.date_from:
        return False
    if query.date_to and candidate.release_date > query.date_to:
        return False
    return True


def query_calendar(
    candidates: Iterable[ReleaseCandidate], query: CalendarQuery | None = None
) -> CalendarPage:
    """Filter, sort by release date (stable) and paginate."""
    query = query or CalendarQuery()
    filtered = sorted(
        (candidate for candidate in candidates if _matches(candidate, query)),
        key=lambda candidate: candidate.release_date,
    )

    total = len(filtered)
    offset = max(0, query.offset)
    if query.limit:
        items = filtered[offset : offset + query.limit]
        has_more = offset + query.limit < total
    else:
        items = filtered[offset:]
        has_more = False
    return CalendarPage(items=items, total=total, has_more=has_more)


def _top_facets(counts: Counter[str], limit: int) -> list[Facet]:
    # Counter keeps insertion order and sorted() is stable, so ties stay first-seen
    ranked = sorted(counts.items(), key=lambda entry: entry[1], reverse=True)[:limit]
    return [Facet(value=value, label=value, count=count) for value, count in ranked]


def build_filters(
    candidates: Iterable[ReleaseCandidate],
    region_limit: int = DEFAULT_REGION_FACETS,
    genre_limit: int = DEFAULT_GENRE_FACETS,
) -> CalendarFilters:
    """Count types, regions and genres across the feed."""
    type_counts: Counter[MediaType] = Counter({MediaType.MOVIE: 0, MediaType.TV: 0})
    region_counts: Counter[str] = Counter()
    genre_counts: Counter[str] = Counter()

    for candidate in candidates:
        type_counts[candidate.type] += 1
        region_counts[candidate.region or UNKNOWN_VALUE] += 1
        genre_counts[candidate.genre or UNKNOWN_VALUE] += 1

    return CalendarFilters(
        types=[
            Facet(value=media_type.value, label=TYPE_LABELS[media_type], count=type_counts[media_type])
            for media_type in MediaType
        ],
        regions=_top_facets(region_counts, region_limit),
        genres=_top_facets(genre_counts, genre_limit),
    )


def days_until(release_date: str, today: date | str) -> int:
    """Signed number of days from today to the release (negative if released)."""
    today_str = coerce_reference_date(today)
    return (date.fromisoformat(release_date) - date.fromisoformat(today_str)).days


def release_label(release_date: str, today: date | str) -> str:
    """
    Display label for a release relative to today.

    >>> release_label("2025-01-18", "2025-01-15")
    '3天后上映'
    """
    delta = days_until(release_date, today)
    if delta < 0:
        return f"已上映{-delta}天"
    if delta == 0:
        return "今日上映"
    return f"{delta}天后上映"
